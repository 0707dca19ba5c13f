"""Video stabiliser interface and its command wire format."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

from vstabiliser.params import (
    MAJOR_VERSION,
    MINOR_VERSION,
    VERSION,
    VStabiliserCommand,
    VStabiliserParam,
    VStabiliserParams,
)

COMMAND_SIZE = 11
_BODY = struct.Struct("<if")


class CommandDecodeError(ValueError):
    """Raised when a command message cannot be decoded."""


class CommandKind(IntEnum):
    """Kind of a command message, as given by its first byte."""

    COMMAND = 0x00
    SET_PARAM = 0x01


@dataclass(frozen=True)
class DecodedCommand:
    """A decoded command or set-param message."""

    kind: CommandKind
    id: Union[VStabiliserCommand, VStabiliserParam]
    value: float


def get_version() -> str:
    """Return the library version string."""
    return VERSION


def _encode(kind: CommandKind, identifier: int, value: float) -> bytes:
    try:
        body = _BODY.pack(identifier, value)
    except (struct.error, OverflowError) as exc:
        raise ValueError(f"cannot encode value {value!r}") from exc
    return bytes((kind, MAJOR_VERSION, MINOR_VERSION)) + body


def encode_set_param_command(param_id: VStabiliserParam, value: float) -> bytes:
    """Encode a command that sets a parameter to a value."""
    return _encode(CommandKind.SET_PARAM, VStabiliserParam(param_id), value)


def encode_command(command_id: VStabiliserCommand, value: float = 0.0) -> bytes:
    """Encode an action command with an optional argument."""
    return _encode(CommandKind.COMMAND, VStabiliserCommand(command_id), value)


def decode_command(data: bytes | bytearray | memoryview) -> DecodedCommand:
    """Decode a command or set-param message."""
    data = bytes(data)
    if len(data) < COMMAND_SIZE:
        raise CommandDecodeError("data too short")
    if data[1] != MAJOR_VERSION or data[2] != MINOR_VERSION:
        raise CommandDecodeError(f"unsupported version {data[1]}.{data[2]}")

    identifier, value = _BODY.unpack(data[3:COMMAND_SIZE])

    if data[0] == CommandKind.COMMAND:
        try:
            command = VStabiliserCommand(identifier)
        except ValueError as exc:
            raise CommandDecodeError(f"unknown command id {identifier}") from exc
        return DecodedCommand(CommandKind.COMMAND, command, value)

    if data[0] == CommandKind.SET_PARAM:
        if len(data) != COMMAND_SIZE:
            raise CommandDecodeError("set-param message has wrong size")
        try:
            param = VStabiliserParam(identifier)
        except ValueError as exc:
            raise CommandDecodeError(f"unknown parameter id {identifier}") from exc
        return DecodedCommand(CommandKind.SET_PARAM, param, value)

    raise CommandDecodeError(f"unknown message type 0x{data[0]:02x}")


class VStabiliser(ABC):
    """Interface that every video stabiliser implementation provides."""

    @abstractmethod
    def init_vstabiliser(self, params: VStabiliserParams) -> bool:
        """Apply a full parameter set; return whether it was accepted."""

    @abstractmethod
    def set_param(self, param_id: VStabiliserParam, value: float) -> bool:
        """Set one parameter; return whether it was accepted."""

    @abstractmethod
    def get_param(self, param_id: VStabiliserParam) -> float:
        """Return a parameter value, or -1 if it is not supported."""

    @abstractmethod
    def get_params(self) -> VStabiliserParams:
        """Return a copy of the current parameters."""

    @abstractmethod
    def execute_command(
        self, command_id: VStabiliserCommand, value: float = 0.0
    ) -> bool:
        """Execute a command; return whether it was executed."""

    @abstractmethod
    def stabilise(self, src: Any) -> Any:
        """Stabilise a video frame and return the result."""

    @abstractmethod
    def get_offsets(self) -> tuple[float, float, float]:
        """Return horizontal, vertical and rotational offsets of the last frame."""

    def decode_and_execute_command(self, data: bytes | bytearray | memoryview) -> bool:
        """Decode a message and apply it; return False if it fails either step."""
        try:
            command = decode_command(data)
        except CommandDecodeError:
            return False
        if command.kind is CommandKind.COMMAND:
            return self.execute_command(command.id, command.value)
        return self.set_param(command.id, command.value)