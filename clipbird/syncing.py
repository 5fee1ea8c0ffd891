"""Clipboard synchronisation packet and the items it carries.

A syncing packet is a big-endian header of packet length, packet type
and item count, followed by the items. Each item is a length-prefixed
MIME type followed by a length-prefixed payload.
"""

from __future__ import annotations

import io
import struct
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import BinaryIO

from clipbird.packets import ErrorCode, MalformedPacket, NotThisPacket

_HEADER = struct.Struct(">III")
_LENGTH = struct.Struct(">I")


def _read_exact(stream: BinaryIO, count: int, name: str) -> bytes:
    chunk = stream.read(count)
    if chunk is None or len(chunk) != count:
        raise MalformedPacket(ErrorCode.CODING_ERROR, name)
    return bytes(chunk)


def _read_length(stream: BinaryIO, name: str) -> int:
    (value,) = _LENGTH.unpack(_read_exact(stream, _LENGTH.size, name))
    return value


@dataclass(frozen=True)
class SyncingItem:
    """One clipboard representation: a MIME type and its data."""

    mime_type: bytes
    payload: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "mime_type", bytes(self.mime_type))
        object.__setattr__(self, "payload", bytes(self.payload))

    @property
    def mime_length(self) -> int:
        return len(self.mime_type)

    @property
    def payload_length(self) -> int:
        return len(self.payload)

    def size(self) -> int:
        return 2 * _LENGTH.size + self.mime_length + self.payload_length

    def write_to(self, stream: BinaryIO) -> None:
        """Write the encoded item to a binary stream."""
        stream.write(_LENGTH.pack(self.mime_length))
        stream.write(self.mime_type)
        stream.write(_LENGTH.pack(self.payload_length))
        stream.write(self.payload)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write_to(buffer)
        return buffer.getvalue()

    @classmethod
    def read_from(cls, stream: BinaryIO) -> SyncingItem:
        """Read one encoded item from a binary stream."""
        name = "SyncingItem"
        mime_type = _read_exact(stream, _read_length(stream, name), name)
        payload = _read_exact(stream, _read_length(stream, name), name)
        return cls(mime_type=mime_type, payload=payload)

    @classmethod
    def from_bytes(cls, data: bytes) -> SyncingItem:
        return cls.read_from(io.BytesIO(data))


@dataclass(frozen=True)
class SyncingPacket:
    """Carries the full clipboard contents to the other peers."""

    TYPE = 0x02

    packet_length: int
    items: tuple[SyncingItem, ...] = field(default=())
    packet_type: int = TYPE

    def __post_init__(self) -> None:
        if self.packet_type != self.TYPE:
            raise ValueError("Invalid Packet Type")
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def item_count(self) -> int:
        return len(self.items)

    @classmethod
    def build(cls, items: Iterable[tuple[str | bytes, bytes]]) -> SyncingPacket:
        """Create a packet from (mime type, data) pairs with a matching length."""
        built = tuple(
            SyncingItem(
                mime_type=mime.encode("utf-8") if isinstance(mime, str) else mime,
                payload=payload,
            )
            for mime, payload in items
        )
        length = _HEADER.size + sum(item.size() for item in built)
        return cls(packet_length=length, items=built)

    def size(self) -> int:
        return _HEADER.size + sum(item.size() for item in self.items)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        buffer.write(_HEADER.pack(self.packet_length, self.packet_type, self.item_count))
        for item in self.items:
            item.write_to(buffer)
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> SyncingPacket:
        stream = io.BytesIO(data)
        header = _read_exact(stream, _HEADER.size, "SyncingPacket")
        length, packet_type, count = _HEADER.unpack(header)
        if packet_type != cls.TYPE:
            raise NotThisPacket("Not SyncingPacket")
        items = []
        for _ in range(count):
            items.append(SyncingItem.read_from(stream))
        return cls(packet_length=length, items=tuple(items))