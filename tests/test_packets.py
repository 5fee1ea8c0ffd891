import struct

import pytest

from clipbird.packets import (
    Authentication,
    AuthStatus,
    ErrorCode,
    InvalidRequest,
    MalformedPacket,
    NotThisPacket,
    PacketError,
    PingPacket,
    PingType,
)


def test_authentication_round_trip():
    sent = Authentication.build(AuthStatus.AUTH_OKAY)
    received = Authentication.from_bytes(sent.to_bytes())
    assert received.packet_type == Authentication.TYPE
    assert received.packet_length == sent.size()
    assert received.auth_status == AuthStatus.AUTH_OKAY


def test_authentication_layout_is_big_endian():
    packet = Authentication.build(AuthStatus.AUTH_FAIL)
    data = packet.to_bytes()
    assert len(data) == 12
    assert struct.unpack(">III", data) == (12, 0x01, int(AuthStatus.AUTH_FAIL))


def test_authentication_rejects_wrong_type():
    data = struct.pack(">III", 12, 0x03, int(AuthStatus.AUTH_OKAY))
    with pytest.raises(NotThisPacket):
        Authentication.from_bytes(data)


def test_authentication_rejects_unknown_status():
    data = struct.pack(">III", 12, 0x01, 99)
    with pytest.raises(MalformedPacket) as info:
        Authentication.from_bytes(data)
    assert info.value.code == ErrorCode.CODING_ERROR


def test_authentication_rejects_short_input():
    with pytest.raises(MalformedPacket):
        Authentication.from_bytes(b"\x00\x00\x00")


def test_authentication_constructor_validates():
    with pytest.raises(ValueError):
        Authentication(packet_length=12, auth_status=7)
    with pytest.raises(ValueError):
        Authentication(packet_length=12, auth_status=AuthStatus.AUTH_OKAY, packet_type=2)


def test_invalid_request_round_trip():
    message = b"Hello"
    sent = InvalidRequest.build(ErrorCode.CODING_ERROR, message)
    received = InvalidRequest.from_bytes(sent.to_bytes())
    assert received.packet_type == InvalidRequest.TYPE
    assert received.packet_length == sent.size()
    assert received.error_code == ErrorCode.CODING_ERROR
    assert received.error_message == message


def test_invalid_request_size_counts_message():
    packet = InvalidRequest.build(ErrorCode.INVALID_PACKET, b"Hello")
    assert packet.size() == 17
    assert len(packet.to_bytes()) == 17


def test_invalid_request_truncated_message_is_malformed():
    data = InvalidRequest.build(ErrorCode.CODING_ERROR, b"Hello").to_bytes()[:-2]
    with pytest.raises(MalformedPacket):
        InvalidRequest.from_bytes(data)


def test_invalid_request_wrong_type():
    data = struct.pack(">III", 12, 0x01, int(ErrorCode.CODING_ERROR))
    with pytest.raises(NotThisPacket):
        InvalidRequest.from_bytes(data)


def test_invalid_request_unknown_code():
    data = struct.pack(">III", 12, 0x00, 42)
    with pytest.raises(ValueError):
        InvalidRequest.from_bytes(data)


def test_ping_packet_round_trip():
    sent = PingPacket.build(PingType.PING)
    received = PingPacket.from_bytes(sent.to_bytes())
    assert received.packet_length == sent.size()
    assert received.ping_type == PingType.PING
    assert received.packet_type == PingPacket.TYPE


def test_pong_round_trip():
    received = PingPacket.from_bytes(PingPacket.build(PingType.PONG).to_bytes())
    assert received.ping_type == PingType.PONG


def test_ping_packet_wrong_type():
    data = struct.pack(">III", 12, 0x02, int(PingType.PING))
    with pytest.raises(NotThisPacket):
        PingPacket.from_bytes(data)


def test_ping_packet_unknown_ping_type():
    data = struct.pack(">III", 12, 0x03, 5)
    with pytest.raises(ValueError):
        PingPacket.from_bytes(data)


def test_ping_packet_short_input():
    with pytest.raises(MalformedPacket):
        PingPacket.from_bytes(b"")


def test_errors_share_base_class():
    with pytest.raises(PacketError):
        PingPacket.from_bytes(struct.pack(">III", 12, 0x01, 0))