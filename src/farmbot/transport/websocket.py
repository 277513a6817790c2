# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""WebSocket transport implementation."""

from __future__ import annotations

from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from farmbot.constants import DEFAULT_CONNECT_TIMEOUT_S
from farmbot.logging import get_logger
from farmbot.transport.base import MessageTransport

log = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/132.0.0.0 Safari/537.36 MicroMessenger/7.0.20.1781(0x6700143B) NetType/WIFI "
    "MiniProgramEnv/Windows WindowsWechat/WMPF WindowsWechat(0x63090a13)"
)
MAX_MESSAGE_SIZE = 10 * 1024 * 1024


class WebSocketTransport(MessageTransport):
    """Binary websocket transport to the game gateway."""

    def __init__(self) -> None:
        """Initialize websocket transport."""
        self._ws: Any = None
        self.close_code: int | None = None

    async def connect(
        self,
        url: str,
        origin: str | None = None,
        timeout: float = DEFAULT_CONNECT_TIMEOUT_S,
        **kwargs: Any,
    ) -> None:
        """Open the websocket.

        Args:
            url: Gateway URL including the login query string
            origin: Origin header sent with the handshake
            timeout: Handshake timeout in seconds
            **kwargs: Unused, for compatibility

        Raises:
            ConnectionError: If connection fails
        """
        if self._ws is not None:
            await self.disconnect()

        headers = {"User-Agent": USER_AGENT}
        if origin:
            headers["Origin"] = origin
        try:
            self._ws = await websockets.connect(
                url,
                additional_headers=headers,
                max_size=MAX_MESSAGE_SIZE,
                open_timeout=timeout,
            )
        except (OSError, TimeoutError, WebSocketException) as e:
            raise ConnectionError(f"Failed to connect to {url.split('?', 1)[0]}") from e

        self.close_code = None
        log.info("ws_connected", url=url.split("?", 1)[0])

    async def disconnect(self) -> None:
        """Close connection and cleanup resources."""
        ws = self._ws
        if ws is None:
            return
        self._ws = None
        try:
            await ws.close()
        except (OSError, WebSocketException):
            pass
        log.info("ws_disconnected")

    async def send(self, data: bytes) -> None:
        if self._ws is None:
            raise ConnectionError("Not connected")
        try:
            await self._ws.send(data)
        except ConnectionClosed as e:
            self.close_code = e.rcvd.code if e.rcvd else None
            await self.disconnect()
            raise ConnectionError("Send failed") from e

    async def receive(self) -> bytes:
        if self._ws is None:
            raise ConnectionError("Not connected")
        try:
            message = await self._ws.recv()
        except ConnectionClosed as e:
            self.close_code = e.rcvd.code if e.rcvd else None
            await self.disconnect()
            raise ConnectionError(f"Connection closed by remote (code={self.close_code})") from e
        if isinstance(message, str):
            return message.encode("utf-8")
        return bytes(message)

    def is_connected(self) -> bool:
        return self._ws is not None
