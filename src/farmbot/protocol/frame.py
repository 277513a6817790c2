# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Length-framed gate messages.

Layout::

    +----------------+----------------+---------------+-----------------+
    | meta_len (u32) | body_len (u32) | meta (JSON)   | body (opaque)   |
    +----------------+----------------+---------------+-----------------+

Integers are big-endian. The body is produced by a payload codec and is
never interpreted here.
"""

from __future__ import annotations

import struct
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, ValidationError

from farmbot.errors import DecodeError

HEADER = struct.Struct(">II")


class MessageKind(IntEnum):
    REQUEST = 1
    REPLY = 2
    PUSH = 3


class GateMeta(BaseModel):
    """Metadata block carried by every frame."""

    service_name: str = ""
    method_name: str = ""
    message_type: int = MessageKind.REQUEST
    client_seq: int = 0
    server_seq: int = 0
    error_code: int = 0
    error_message: str = ""

    model_config = ConfigDict(extra="ignore")

    @property
    def call_name(self) -> str:
        return f"{self.service_name}.{self.method_name}"


class GateFrame(BaseModel):
    meta: GateMeta
    body: bytes = b""


def encode_frame(meta: GateMeta, body: bytes = b"") -> bytes:
    """Serialize metadata and payload into one frame."""
    meta_bytes = meta.model_dump_json().encode("utf-8")
    return HEADER.pack(len(meta_bytes), len(body)) + meta_bytes + body


def decode_frame(data: bytes) -> GateFrame:
    """Parse one frame.

    Raises:
        DecodeError: If the lengths do not match or metadata is malformed
    """
    if len(data) < HEADER.size:
        raise DecodeError(f"frame too short: {len(data)} bytes")
    meta_len, body_len = HEADER.unpack_from(data)
    expected = HEADER.size + meta_len + body_len
    if len(data) != expected:
        raise DecodeError(f"frame length mismatch: got {len(data)}, header says {expected}")
    meta_end = HEADER.size + meta_len
    try:
        meta = GateMeta.model_validate_json(data[HEADER.size : meta_end])
    except ValidationError as e:
        raise DecodeError(f"bad frame metadata: {e.error_count()} error(s)") from e
    return GateFrame(meta=meta, body=bytes(data[meta_end:]))
