"""Video stabiliser parameters, their binary serialisation and JSON form."""

from __future__ import annotations

import json
import struct
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any, Mapping, NamedTuple

MAJOR_VERSION = 2
MINOR_VERSION = 6
PATCH_VERSION = 0
VERSION = f"{MAJOR_VERSION}.{MINOR_VERSION}.{PATCH_VERSION}"

PARAMS_HEADER = 0x02
_PAYLOAD_START = 6


class ParamsDecodeError(ValueError):
    """Raised when serialised parameters cannot be decoded."""


class VStabiliserParam(IntEnum):
    """Identifiers of video stabiliser parameters."""

    SCALE_FACTOR = 1
    X_OFFSET_LIMIT = 2
    Y_OFFSET_LIMIT = 3
    A_OFFSET_LIMIT = 4
    X_FILTER_COEFF = 5
    Y_FILTER_COEFF = 6
    A_FILTER_COEFF = 7
    MODE = 8
    TRANSPARENT_BORDER = 9
    CONST_X_OFFSET = 10
    CONST_Y_OFFSET = 11
    CONST_A_OFFSET = 12
    INSTANT_X_OFFSET = 13
    INSTANT_Y_OFFSET = 14
    INSTANT_A_OFFSET = 15
    TYPE = 16
    CUT_FREQUENCY_HZ = 17
    FPS = 18
    PROCESSING_TIME_MKS = 19
    LOG_MODE = 20
    BACKEND = 21
    CUSTOM_1 = 22
    CUSTOM_2 = 23
    CUSTOM_3 = 24


class VStabiliserCommand(IntEnum):
    """Identifiers of video stabiliser commands."""

    RESET = 1
    ON = 2
    OFF = 3
    HOLD_MSEC = 4


class _Field(NamedTuple):
    name: str
    json_key: str
    fmt: str
    in_json: bool

    @property
    def size(self) -> int:
        return struct.calcsize(self.fmt)

    @property
    def zero(self) -> Any:
        return {"<i": 0, "<f": 0.0, "<?": False}[self.fmt]


# Serialisation order; also the order of mask bits, most significant first.
_FIELDS: tuple[_Field, ...] = (
    _Field("scale_factor", "scaleFactor", "<i", True),
    _Field("x_offset_limit", "xOffsetLimit", "<i", True),
    _Field("y_offset_limit", "yOffsetLimit", "<i", True),
    _Field("a_offset_limit", "aOffsetLimit", "<f", True),
    _Field("x_filter_coeff", "xFilterCoeff", "<f", True),
    _Field("y_filter_coeff", "yFilterCoeff", "<f", True),
    _Field("a_filter_coeff", "aFilterCoeff", "<f", True),
    _Field("enable", "enable", "<?", True),
    _Field("transparent_border", "transparentBorder", "<?", True),
    _Field("const_x_offset", "constXOffset", "<i", True),
    _Field("const_y_offset", "constYOffset", "<i", True),
    _Field("const_a_offset", "constAOffset", "<f", True),
    _Field("instant_x_offset", "instantXOffset", "<i", False),
    _Field("instant_y_offset", "instantYOffset", "<i", False),
    _Field("instant_a_offset", "instantAOffset", "<f", False),
    _Field("type", "type", "<i", True),
    _Field("cut_frequency_hz", "cutFrequencyHz", "<f", True),
    _Field("fps", "fps", "<f", True),
    _Field("processing_time_mks", "processingTimeMks", "<i", False),
    _Field("log_mod", "logMod", "<i", True),
    _Field("backend", "backend", "<i", True),
    _Field("custom1", "custom1", "<f", True),
    _Field("custom2", "custom2", "<f", True),
    _Field("custom3", "custom3", "<f", True),
)


@dataclass
class VStabiliserParamsMask:
    """Selects which parameters are included when encoding."""

    scale_factor: bool = True
    x_offset_limit: bool = True
    y_offset_limit: bool = True
    a_offset_limit: bool = True
    x_filter_coeff: bool = True
    y_filter_coeff: bool = True
    a_filter_coeff: bool = True
    enable: bool = True
    transparent_border: bool = True
    const_x_offset: bool = True
    const_y_offset: bool = True
    const_a_offset: bool = True
    instant_x_offset: bool = False
    instant_y_offset: bool = False
    instant_a_offset: bool = False
    type: bool = True
    cut_frequency_hz: bool = True
    fps: bool = True
    processing_time_mks: bool = True
    log_mod: bool = True
    backend: bool = True
    custom1: bool = True
    custom2: bool = True
    custom3: bool = True


@dataclass
class VStabiliserParams:
    """Video stabiliser parameters."""

    scale_factor: int = 1
    x_offset_limit: int = 150
    y_offset_limit: int = 150
    a_offset_limit: float = 10.0
    x_filter_coeff: float = 0.9
    y_filter_coeff: float = 0.9
    a_filter_coeff: float = 0.9
    enable: bool = True
    transparent_border: bool = True
    const_x_offset: int = 0
    const_y_offset: int = 0
    const_a_offset: float = 0.0
    instant_x_offset: int = 0
    instant_y_offset: int = 0
    instant_a_offset: float = 0.0
    type: int = 2
    cut_frequency_hz: float = 2.0
    fps: float = 30.0
    processing_time_mks: int = 0
    log_mod: int = 0
    backend: int = 0
    custom1: float = 0.0
    custom2: float = 0.0
    custom3: float = 0.0

    def encode(self, mask: VStabiliserParamsMask | None = None) -> bytes:
        """Serialise the parameters; without a mask every parameter is included."""
        if mask is None:
            included = [True] * len(_FIELDS)
        else:
            included = [bool(getattr(mask, spec.name)) for spec in _FIELDS]

        bits = 0
        for flag in included:
            bits = (bits << 1) | int(flag)

        payload = bytearray((PARAMS_HEADER, MAJOR_VERSION, MINOR_VERSION))
        payload += bits.to_bytes(3, "big")
        for spec, flag in zip(_FIELDS, included):
            if not flag:
                continue
            value = getattr(self, spec.name)
            try:
                payload += struct.pack(spec.fmt, value)
            except (struct.error, OverflowError) as exc:
                raise ValueError(f"cannot encode {spec.name}={value!r}") from exc
        return bytes(payload)

    @classmethod
    def decode(cls, data: bytes | bytearray | memoryview) -> VStabiliserParams:
        """Build parameters from serialised data; absent ones are zero."""
        data = bytes(data)
        if len(data) < _PAYLOAD_START:
            raise ParamsDecodeError("data too short")
        if data[0] != PARAMS_HEADER:
            raise ParamsDecodeError(f"unexpected header byte 0x{data[0]:02x}")
        if data[1] != MAJOR_VERSION or data[2] != MINOR_VERSION:
            raise ParamsDecodeError(f"unsupported version {data[1]}.{data[2]}")

        bits = int.from_bytes(data[3:_PAYLOAD_START], "big")
        values = {spec.name: spec.zero for spec in _FIELDS}
        pos = _PAYLOAD_START
        for index, spec in enumerate(_FIELDS):
            if not bits & (1 << (len(_FIELDS) - 1 - index)):
                continue
            end = pos + spec.size
            if len(data) < end:
                raise ParamsDecodeError(f"data truncated at {spec.name}")
            (values[spec.name],) = struct.unpack(spec.fmt, data[pos:end])
            pos = end
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Return the configurable parameters keyed by their JSON names."""
        return {
            spec.json_key: getattr(self, spec.name) for spec in _FIELDS if spec.in_json
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VStabiliserParams:
        """Build parameters from a mapping; missing keys keep their defaults."""
        if not isinstance(data, Mapping):
            raise ParamsDecodeError("parameters must be a JSON object")
        values: dict[str, Any] = {}
        for spec in _FIELDS:
            if not spec.in_json or spec.json_key not in data:
                continue
            raw = data[spec.json_key]
            values[spec.name] = _coerce(spec, raw)
        return cls(**values)

    def to_json(self) -> str:
        """Serialise the configurable parameters as a JSON object."""
        return json.dumps(self.to_dict(), indent=4)

    @classmethod
    def from_json(cls, text: str) -> VStabiliserParams:
        """Parse parameters from JSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParamsDecodeError(f"invalid JSON: {exc}") from exc
        return cls.from_dict(data)


def _coerce(spec: _Field, raw: Any) -> Any:
    if spec.fmt == "<?":
        if isinstance(raw, bool):
            return raw
    elif spec.fmt == "<i":
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    raise ParamsDecodeError(f"invalid value for {spec.json_key}: {raw!r}")


assert [f.name for f in fields(VStabiliserParams)] == [s.name for s in _FIELDS]
assert [f.name for f in fields(VStabiliserParamsMask)] == [s.name for s in _FIELDS]