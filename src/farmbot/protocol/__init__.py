# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Gate wire protocol: framing, payload codec and typed messages."""

from __future__ import annotations

from farmbot.protocol.codec import JsonPayloadCodec, PayloadCodec
from farmbot.protocol.frame import GateFrame, GateMeta, MessageKind, decode_frame, encode_frame

__all__ = [
    "GateFrame",
    "GateMeta",
    "JsonPayloadCodec",
    "MessageKind",
    "PayloadCodec",
    "decode_frame",
    "encode_frame",
]
