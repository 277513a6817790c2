# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Abstract base class for message transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class MessageTransport(ABC):
    """Abstract base for message-oriented transports (websocket, in-memory, etc)."""

    @abstractmethod
    async def connect(self, url: str, **kwargs: Any) -> None:
        """Establish connection to the gateway.

        Args:
            url: Gateway URL including query parameters
            **kwargs: Transport-specific connection options

        Raises:
            ConnectionError: If connection fails
            asyncio.TimeoutError: If connection times out
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection and cleanup resources.

        Should be idempotent - safe to call multiple times.
        """

    @abstractmethod
    async def send(self, data: bytes) -> None:
        """Send one binary message.

        Args:
            data: Encoded frame

        Raises:
            ConnectionError: If not connected or send fails
        """

    @abstractmethod
    async def receive(self) -> bytes:
        """Wait for the next binary message.

        Returns:
            One encoded frame

        Raises:
            ConnectionError: If not connected or the connection closed
        """

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active.

        Returns:
            True if connected, False otherwise
        """
