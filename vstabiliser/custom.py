"""A minimal video stabiliser that stores parameters and copies frames."""

from __future__ import annotations

import copy
import dataclasses
from typing import Any

from vstabiliser.params import VStabiliserCommand, VStabiliserParam, VStabiliserParams
from vstabiliser.stabiliser import (
    CommandDecodeError,
    CommandKind,
    VStabiliser,
    decode_command,
)

CUSTOM_MAJOR_VERSION = 1
CUSTOM_MINOR_VERSION = 0
CUSTOM_PATCH_VERSION = 0
CUSTOM_VERSION = (
    f"{CUSTOM_MAJOR_VERSION}.{CUSTOM_MINOR_VERSION}.{CUSTOM_PATCH_VERSION}"
)

# Parameter id -> (attribute name, value kind).
_SETTABLE: dict[VStabiliserParam, tuple[str, type]] = {
    VStabiliserParam.SCALE_FACTOR: ("scale_factor", int),
    VStabiliserParam.X_OFFSET_LIMIT: ("x_offset_limit", int),
    VStabiliserParam.Y_OFFSET_LIMIT: ("y_offset_limit", int),
    VStabiliserParam.A_OFFSET_LIMIT: ("a_offset_limit", float),
    VStabiliserParam.X_FILTER_COEFF: ("x_filter_coeff", float),
    VStabiliserParam.Y_FILTER_COEFF: ("y_filter_coeff", float),
    VStabiliserParam.A_FILTER_COEFF: ("a_filter_coeff", float),
    VStabiliserParam.MODE: ("enable", bool),
    VStabiliserParam.TRANSPARENT_BORDER: ("transparent_border", bool),
    VStabiliserParam.CONST_X_OFFSET: ("const_x_offset", int),
    VStabiliserParam.CONST_Y_OFFSET: ("const_y_offset", int),
    VStabiliserParam.CONST_A_OFFSET: ("const_a_offset", float),
    VStabiliserParam.INSTANT_X_OFFSET: ("instant_x_offset", int),
    VStabiliserParam.INSTANT_Y_OFFSET: ("instant_y_offset", int),
    VStabiliserParam.INSTANT_A_OFFSET: ("instant_a_offset", float),
    VStabiliserParam.TYPE: ("type", int),
    VStabiliserParam.CUT_FREQUENCY_HZ: ("cut_frequency_hz", float),
    VStabiliserParam.FPS: ("fps", float),
    VStabiliserParam.LOG_MODE: ("log_mod", int),
}

_READ_ONLY: dict[VStabiliserParam, str] = {
    VStabiliserParam.PROCESSING_TIME_MKS: "processing_time_mks",
}


def _as_param(param_id: Any) -> VStabiliserParam | None:
    try:
        return VStabiliserParam(param_id)
    except ValueError:
        return None


class CustomVStabiliser(VStabiliser):
    """Stabiliser that keeps parameters and passes frames through unchanged."""

    def __init__(self) -> None:
        self._params = VStabiliserParams()

    @staticmethod
    def get_version() -> str:
        """Return the version string of this implementation."""
        return CUSTOM_VERSION

    def init_vstabiliser(self, params: VStabiliserParams) -> bool:
        """Take a copy of the given parameters."""
        self._params = dataclasses.replace(params)
        return True

    def set_param(self, param_id: VStabiliserParam, value: float) -> bool:
        """Set a supported, writable parameter; return whether it was accepted."""
        param = _as_param(param_id)
        if param is None or param not in _SETTABLE:
            return False
        name, kind = _SETTABLE[param]
        if kind is bool:
            converted: Any = int(value) != 0
        elif kind is int:
            converted = int(value)
        else:
            converted = float(value)
        setattr(self._params, name, converted)
        return True

    def get_param(self, param_id: VStabiliserParam) -> float:
        """Return a parameter value, or -1.0 if it is not supported."""
        param = _as_param(param_id)
        if param is None:
            return -1.0
        if param in _SETTABLE:
            name = _SETTABLE[param][0]
        elif param in _READ_ONLY:
            name = _READ_ONLY[param]
        else:
            return -1.0
        return float(getattr(self._params, name))

    def get_params(self) -> VStabiliserParams:
        """Return a copy of the current parameters."""
        return dataclasses.replace(self._params)

    def execute_command(
        self, command_id: VStabiliserCommand, value: float = 0.0
    ) -> bool:
        """Accept every known command."""
        try:
            VStabiliserCommand(command_id)
        except ValueError:
            return False
        return True

    def stabilise(self, src: Any) -> Any:
        """Return a copy of the source frame."""
        return copy.deepcopy(src)

    def get_offsets(self) -> tuple[float, float, float]:
        """Return the instant offsets held in the parameters."""
        return (
            float(self._params.instant_x_offset),
            float(self._params.instant_y_offset),
            float(self._params.instant_a_offset),
        )

    def decode_and_execute_command(self, data: bytes | bytearray | memoryview) -> bool:
        """Decode a message and apply it; commands run without their argument."""
        try:
            command = decode_command(data)
        except CommandDecodeError:
            return False
        if command.kind is CommandKind.COMMAND:
            return self.execute_command(command.id)
        return self.set_param(command.id, command.value)