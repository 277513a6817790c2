# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Message transports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from farmbot.transport.base import MessageTransport
from farmbot.transport.chaos import ChaosTransport
from farmbot.transport.websocket import WebSocketTransport

if TYPE_CHECKING:
    from farmbot.config import ChaosConfig


def build_transport(chaos: ChaosConfig | None = None) -> MessageTransport:
    """Websocket transport, wrapped in fault injection when configured."""
    transport: MessageTransport = WebSocketTransport()
    if chaos is not None:
        transport = ChaosTransport(transport, **chaos.model_dump())
    return transport


__all__ = ["ChaosTransport", "MessageTransport", "WebSocketTransport", "build_transport"]
