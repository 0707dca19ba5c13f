import copy
import math
import random

import pytest

from vstabiliser.params import (
    ParamsDecodeError,
    VStabiliserParams,
    VStabiliserParamsMask,
)


def _random_params(seed=1):
    rng = random.Random(seed)

    def r():
        return rng.randrange(255)

    return VStabiliserParams(
        scale_factor=r(),
        x_offset_limit=r(),
        y_offset_limit=r(),
        a_offset_limit=float(r()),
        x_filter_coeff=float(r()),
        y_filter_coeff=float(r()),
        a_filter_coeff=float(r()),
        enable=False,
        transparent_border=True,
        const_x_offset=r(),
        const_y_offset=r(),
        const_a_offset=float(r()),
        instant_x_offset=r(),
        instant_y_offset=r(),
        instant_a_offset=float(r()),
        type=r(),
        cut_frequency_hz=float(r()),
        fps=float(r()),
        processing_time_mks=r(),
        log_mod=r(),
        backend=r(),
        custom1=float(r()),
        custom2=float(r()),
        custom3=float(r()),
    )


def _source_mask():
    return VStabiliserParamsMask(
        scale_factor=True,
        x_offset_limit=False,
        y_offset_limit=True,
        a_offset_limit=False,
        x_filter_coeff=True,
        y_filter_coeff=False,
        a_filter_coeff=True,
        enable=False,
        transparent_border=True,
        const_x_offset=False,
        const_y_offset=True,
        const_a_offset=False,
        instant_x_offset=True,
        instant_y_offset=False,
        instant_a_offset=True,
        type=False,
        cut_frequency_hz=True,
        fps=False,
        processing_time_mks=True,
        log_mod=False,
        backend=True,
        custom1=False,
        custom2=True,
        custom3=False,
    )


def test_copy_equals_original_and_is_independent():
    original = _random_params()
    duplicate = copy.copy(original)
    assert duplicate == original
    duplicate.scale_factor += 1
    assert duplicate.scale_factor == original.scale_factor + 1


def test_full_encode_header_and_size():
    data = _random_params().encode()
    assert len(data) == 96
    assert data[:6] == bytes([0x02, 2, 6, 0xFF, 0xFF, 0xFF])


def test_encode_decode_roundtrip():
    original = _random_params(7)
    decoded = VStabiliserParams.decode(original.encode())
    assert decoded == original


def test_encode_decode_with_mask():
    original = _random_params(3)
    data = original.encode(_source_mask())
    assert data[3:6] == bytes([0xAA, 0xAA, 0xAA])
    assert len(data) == 51

    out = VStabiliserParams.decode(data)
    assert out.scale_factor == original.scale_factor
    assert out.x_offset_limit == 0
    assert out.y_offset_limit == original.y_offset_limit
    assert out.a_offset_limit == 0
    assert out.x_filter_coeff == original.x_filter_coeff
    assert out.y_filter_coeff == 0
    assert out.a_filter_coeff == original.a_filter_coeff
    assert out.enable is False
    assert out.transparent_border == original.transparent_border
    assert out.const_x_offset == 0
    assert out.const_y_offset == original.const_y_offset
    assert out.const_a_offset == 0
    assert out.instant_x_offset == original.instant_x_offset
    assert out.instant_y_offset == 0
    assert out.instant_a_offset == original.instant_a_offset
    assert out.type == 0
    assert out.cut_frequency_hz == original.cut_frequency_hz
    assert out.fps == 0
    assert out.processing_time_mks == original.processing_time_mks
    assert out.log_mod == 0
    assert out.backend == original.backend
    assert out.custom1 == 0
    assert out.custom2 == original.custom2
    assert out.custom3 == 0


def test_default_mask_skips_instant_offsets():
    params = _random_params(5)
    data = params.encode(VStabiliserParamsMask())
    assert data[3:6] == bytes([0xFF, 0xF1, 0xFF])
    assert len(data) == 84
    out = VStabiliserParams.decode(data)
    assert (out.instant_x_offset, out.instant_y_offset, out.instant_a_offset) == (0, 0, 0.0)
    assert out.fps == params.fps


def test_bool_encoding_bytes():
    mask = VStabiliserParamsMask(**{name: False for name in vars(VStabiliserParamsMask())})
    mask.enable = True
    mask.transparent_border = True
    data = VStabiliserParams(enable=True, transparent_border=False).encode(mask)
    assert data[6:] == bytes([0x01, 0x00])


def test_decode_nonzero_byte_is_true():
    data = bytes([0x02, 2, 6, 0x01, 0x00, 0x00, 0x07])
    assert VStabiliserParams.decode(data).enable is True


def test_decode_rounds_floats_to_single_precision():
    decoded = VStabiliserParams.decode(VStabiliserParams().encode())
    assert decoded.x_filter_coeff != 0.9
    assert math.isclose(decoded.x_filter_coeff, 0.9, rel_tol=1e-6)


def test_decode_too_short():
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.decode(bytes([0x02, 2, 6, 0xFF, 0xFF]))


def test_decode_bad_header():
    data = bytearray(VStabiliserParams().encode())
    data[0] = 0x01
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.decode(data)


@pytest.mark.parametrize("index", [1, 2])
def test_decode_bad_version(index):
    data = bytearray(VStabiliserParams().encode())
    data[index] += 1
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.decode(data)


def test_decode_truncated_payload():
    data = VStabiliserParams().encode()
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.decode(data[:-1])


def test_encode_out_of_range_int():
    with pytest.raises(ValueError):
        VStabiliserParams(scale_factor=2**40).encode()


def test_json_roundtrip():
    original = _random_params(11)
    out = VStabiliserParams.from_json(original.to_json())
    for key in (
        "scale_factor", "x_offset_limit", "y_offset_limit", "a_offset_limit",
        "x_filter_coeff", "y_filter_coeff", "a_filter_coeff", "enable",
        "transparent_border", "const_x_offset", "const_y_offset",
        "const_a_offset", "type", "cut_frequency_hz", "fps",
    ):
        assert getattr(out, key) == getattr(original, key)


def test_to_dict_excludes_runtime_fields():
    data = VStabiliserParams().to_dict()
    assert "instantXOffset" not in data
    assert "processingTimeMks" not in data
    assert data["xOffsetLimit"] == 150
    assert data["type"] == 2
    assert len(data) == 20


def test_from_dict_missing_keys_keep_defaults():
    out = VStabiliserParams.from_dict({"fps": 25})
    assert out.fps == 25.0
    assert out.x_offset_limit == 150


def test_from_dict_rejects_wrong_type():
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.from_dict({"enable": "yes"})


def test_from_json_invalid_text():
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.from_json("{not json")


def test_from_json_rejects_non_object():
    with pytest.raises(ParamsDecodeError):
        VStabiliserParams.from_json("[1, 2]")