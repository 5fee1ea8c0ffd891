"""Fixed-layout control packets exchanged between clipbird peers.

Every packet starts with a big-endian 32-bit length followed by a
big-endian 32-bit packet type. The length counts the whole packet,
header included.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

_HEADER = struct.Struct(">III")


class AuthStatus(IntEnum):
    """Outcome of a client authentication attempt."""

    AUTH_FAIL = 0x00
    AUTH_OKAY = 0x01


class ErrorCode(IntEnum):
    """Reason a request was rejected."""

    CODING_ERROR = 0x00
    INVALID_PACKET = 0x01


class PingType(IntEnum):
    """Direction of a keep-alive packet."""

    PING = 0x00
    PONG = 0x01


class PacketError(Exception):
    """Base class for errors raised while decoding packets."""


class MalformedPacket(PacketError):
    """The bytes could not be decoded into a well-formed packet."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message


class NotThisPacket(PacketError):
    """The bytes hold a packet of a different type."""


def _read_header(data: bytes, name: str) -> tuple[int, int, int]:
    if len(data) < _HEADER.size:
        raise MalformedPacket(ErrorCode.CODING_ERROR, name)
    return _HEADER.unpack_from(data)


@dataclass(frozen=True)
class Authentication:
    """Tells a client whether it was accepted by the server."""

    TYPE = 0x01

    packet_length: int
    auth_status: AuthStatus
    packet_type: int = TYPE

    def __post_init__(self) -> None:
        if self.packet_type != self.TYPE:
            raise ValueError("Invalid Packet Type")
        if self.auth_status not in set(AuthStatus):
            raise ValueError("Invalid Auth Status")
        object.__setattr__(self, "auth_status", AuthStatus(self.auth_status))

    @classmethod
    def build(cls, auth_status: AuthStatus) -> Authentication:
        """Create a packet whose length field matches its encoded size."""
        return cls(packet_length=_HEADER.size, auth_status=auth_status)

    def size(self) -> int:
        return _HEADER.size

    def to_bytes(self) -> bytes:
        return _HEADER.pack(self.packet_length, self.packet_type, self.auth_status)

    @classmethod
    def from_bytes(cls, data: bytes) -> Authentication:
        length, packet_type, status = _read_header(data, "Invalid Packet")
        if packet_type != cls.TYPE:
            raise NotThisPacket("Not Authentication Packet")
        if status not in set(AuthStatus):
            raise MalformedPacket(ErrorCode.CODING_ERROR, "Invalid Auth Status")
        return cls(packet_length=length, auth_status=AuthStatus(status))


@dataclass(frozen=True)
class InvalidRequest:
    """Reports that a peer sent something that could not be handled."""

    TYPE = 0x00

    packet_length: int
    error_code: ErrorCode
    error_message: bytes = field(default=b"")
    packet_type: int = TYPE

    def __post_init__(self) -> None:
        if self.packet_type != self.TYPE:
            raise ValueError("Invalid Packet Type")
        if self.error_code not in set(ErrorCode):
            raise ValueError("Invalid Error Code")
        object.__setattr__(self, "error_code", ErrorCode(self.error_code))
        object.__setattr__(self, "error_message", bytes(self.error_message))

    @classmethod
    def build(cls, error_code: ErrorCode, error_message: bytes) -> InvalidRequest:
        """Create a packet whose length field matches its encoded size."""
        message = bytes(error_message)
        return cls(
            packet_length=_HEADER.size + len(message),
            error_code=error_code,
            error_message=message,
        )

    def size(self) -> int:
        return _HEADER.size + len(self.error_message)

    def to_bytes(self) -> bytes:
        header = _HEADER.pack(self.packet_length, self.packet_type, self.error_code)
        return header + self.error_message

    @classmethod
    def from_bytes(cls, data: bytes) -> InvalidRequest:
        length, packet_type, code = _read_header(data, "InvalidRequest")
        message_length = max(0, length - _HEADER.size)
        message = bytes(data[_HEADER.size:_HEADER.size + message_length])
        if len(message) != message_length:
            raise MalformedPacket(ErrorCode.CODING_ERROR, "InvalidRequest")
        if packet_type != cls.TYPE:
            raise NotThisPacket("Not InvalidRequest Packet")
        if code not in set(ErrorCode):
            raise ValueError("Invalid Error Code")
        return cls(packet_length=length, error_code=ErrorCode(code), error_message=message)


@dataclass(frozen=True)
class PingPacket:
    """Keep-alive probe and its reply."""

    TYPE = 0x03

    packet_length: int
    ping_type: PingType
    packet_type: int = TYPE

    def __post_init__(self) -> None:
        if self.ping_type not in set(PingType):
            raise ValueError("Invalid Type")
        object.__setattr__(self, "ping_type", PingType(self.ping_type))

    @classmethod
    def build(cls, ping_type: PingType) -> PingPacket:
        """Create a packet whose length field matches its encoded size."""
        return cls(packet_length=_HEADER.size, ping_type=ping_type)

    def size(self) -> int:
        return _HEADER.size

    def to_bytes(self) -> bytes:
        return _HEADER.pack(self.packet_length, self.packet_type, self.ping_type)

    @classmethod
    def from_bytes(cls, data: bytes) -> PingPacket:
        length, packet_type, ping_type = _read_header(data, "PingPacket")
        if packet_type != cls.TYPE:
            raise NotThisPacket("Not PingPacket")
        if ping_type not in set(PingType):
            raise ValueError("Invalid Ping Type")
        return cls(packet_length=length, ping_type=PingType(ping_type))