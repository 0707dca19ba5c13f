# vstabiliser

This package defines a common interface for video stabilisers. It also covers
the wire formats used to configure a stabiliser and to send it commands.

The package provides:

- `vstabiliser.params`
  - `VStabiliserParams`: a dataclass that holds every stabiliser setting, with
    defaults. It has a compact binary encoding in which a mask chooses the
    fields to include, and it has a JSON form.
  - `VStabiliserParamsMask`: a dataclass that chooses which fields go into a
    binary encoding.
  - `VStabiliserParam` and `VStabiliserCommand`: integer enumerations of the
    parameter and command identifiers.
  - `ParamsDecodeError`: raised when parameters cannot be decoded.
- `vstabiliser.stabiliser`
  - `encode_set_param_command`, `encode_command` and `decode_command`: build
    and parse the 11-byte control messages.
  - `DecodedCommand`, `CommandKind` and `CommandDecodeError`: the decoded
    message, its kind, and the error raised for malformed messages.
  - `get_version()`: returns the version string, `"2.6.0"`.
  - `VStabiliser`: the abstract base class for stabiliser implementations.
- `vstabiliser.custom`
  - `CustomVStabiliser`: a reference implementation. It stores parameters,
    accepts commands and returns each frame unchanged.

## Installation

```
pip install .
```

To run the tests, install the `test` extra:

```
pip install ".[test]"
pytest
```

## Parameters

```python
from vstabiliser.params import VStabiliserParams, VStabiliserParamsMask

params = VStabiliserParams(x_offset_limit=100, fps=25.0)

# Encode every field.
data = params.encode()
restored = VStabiliserParams.decode(data)

# Encode only some fields. Fields left out decode as zero or False.
mask = VStabiliserParamsMask(fps=False, custom1=False)
partial = VStabiliserParams.decode(params.encode(mask))

# JSON
text = params.to_json()
same = VStabiliserParams.from_json(text)
```

### Binary encoding

A binary encoding has four parts, in this order:

1. A header byte, `0x02`.
2. The major and minor version bytes, `2` and `6`.
3. Three mask bytes.
4. The selected fields, little-endian. Integer and float fields take 4 bytes
   each, and boolean fields take 1 byte.

`encode()` with no mask includes every field. A default `VStabiliserParamsMask`
includes every field except the three instant offsets. `encode()` raises
`ValueError` if a value does not fit its field.

`VStabiliserParams.decode` raises `ParamsDecodeError` in any of these cases:

- the data is shorter than 6 bytes;
- the header byte is wrong;
- the version does not match;
- the data is too short for the fields its mask declares.

### JSON form

`to_dict()` and `to_json()` use camel-case keys such as `scaleFactor` and
`xOffsetLimit`. They leave out the instant offsets and `processingTimeMks`.

`from_dict()` and `from_json()` keep the default value for any key that is
missing. They raise `ParamsDecodeError` in any of these cases:

- the JSON is invalid;
- the top level is not an object;
- a value has the wrong type.

## Commands

```python
from vstabiliser.params import VStabiliserCommand, VStabiliserParam
from vstabiliser.stabiliser import (
    CommandKind,
    decode_command,
    encode_command,
    encode_set_param_command,
)

message = encode_command(VStabiliserCommand.HOLD_MSEC, 1000)
decoded = decode_command(message)
assert decoded.kind is CommandKind.COMMAND
assert decoded.id is VStabiliserCommand.HOLD_MSEC
assert decoded.value == 1000.0

message = encode_set_param_command(VStabiliserParam.X_OFFSET_LIMIT, 12)
decoded = decode_command(message)
assert decoded.kind is CommandKind.SET_PARAM
assert decoded.id is VStabiliserParam.X_OFFSET_LIMIT
assert decoded.value == 12.0
```

`decode_command` raises `CommandDecodeError` in any of these cases:

- the message is shorter than 11 bytes;
- the version does not match;
- the type byte is unknown;
- the identifier is unknown;
- a set-param message is not exactly 11 bytes long.

## Implementing a stabiliser

To write a stabiliser, subclass `VStabiliser` and implement these methods:

- `init_vstabiliser`
- `set_param`
- `get_param`
- `get_params`
- `execute_command`
- `stabilise`
- `get_offsets`

The base class already provides `decode_and_execute_command`. It decodes a
message and passes it to `execute_command` or to `set_param`. It returns
`False` if the message cannot be decoded.

`CustomVStabiliser` is a complete example:

```python
from vstabiliser.custom import CustomVStabiliser
from vstabiliser.params import VStabiliserParam, VStabiliserParams

stab = CustomVStabiliser()
stab.init_vstabiliser(VStabiliserParams())
stab.set_param(VStabiliserParam.FPS, 60)
print(stab.get_param(VStabiliserParam.FPS))   # 60.0
print(stab.get_offsets())                     # (0.0, 0.0, 0.0)
```

`CustomVStabiliser` handles parameters and commands as follows:

- `get_param` returns `-1.0` for a parameter it does not support.
- `processing_time_mks` is read-only.
- The backend and custom parameters cannot be set.

## What this package does not do

No image processing is included. The package has no motion estimation and
applies no frame transform, so it does not actually stabilise video.
`CustomVStabiliser.stabilise` returns a copy of the frame it is given. There
is no command-line tool.