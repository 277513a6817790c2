"""Tests for gate framing and the JSON payload codec."""

from __future__ import annotations

import pytest

from farmbot.errors import DecodeError
from farmbot.protocol.codec import JsonPayloadCodec
from farmbot.protocol.frame import HEADER, GateMeta, MessageKind, decode_frame, encode_frame
from farmbot.protocol.messages import AllLandsReply, EventMessage, LandInfo


def test_encode_decode_frame() -> None:
    meta = GateMeta(
        service_name="gamepb.plantpb.PlantService",
        method_name="AllLands",
        message_type=MessageKind.REPLY,
        client_seq=7,
        server_seq=3,
    )
    frame = decode_frame(encode_frame(meta, b"\x00\x01payload"))

    assert frame.meta == meta
    assert frame.body == b"\x00\x01payload"
    assert frame.meta.call_name == "gamepb.plantpb.PlantService.AllLands"


def test_decode_rejects_short_frame() -> None:
    with pytest.raises(DecodeError, match="too short"):
        decode_frame(b"\x00\x00")


def test_decode_rejects_length_mismatch() -> None:
    data = encode_frame(GateMeta(), b"abc")
    with pytest.raises(DecodeError, match="mismatch"):
        decode_frame(data[:-1])


def test_decode_rejects_bad_metadata() -> None:
    meta = b'{"client_seq": "not a number"}'
    data = HEADER.pack(len(meta), 0) + meta
    with pytest.raises(DecodeError):
        decode_frame(data)


def test_codec_empty_body_is_defaults() -> None:
    reply = JsonPayloadCodec().decode(b"", AllLandsReply)
    assert reply.lands == []
    assert reply.operation_limits == []


def test_codec_roundtrip_and_bad_payload() -> None:
    codec = JsonPayloadCodec()
    reply = AllLandsReply(lands=[LandInfo(id=3, unlocked=True)])
    assert codec.decode(codec.encode(reply), AllLandsReply) == reply

    with pytest.raises(DecodeError, match="AllLandsReply"):
        codec.decode(b'{"lands": 5}', AllLandsReply)


def test_event_message_carries_binary_body() -> None:
    codec = JsonPayloadCodec()
    event = EventMessage(message_type="gamepb.userpb.KickoutNotify", body=b"\xff\x00{}")
    assert codec.decode(codec.encode(event), EventMessage).body == b"\xff\x00{}"
