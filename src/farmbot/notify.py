# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Best-effort notification sinks.

``notify`` never raises and never blocks the caller: delivery failures are
logged and dropped.
"""

from __future__ import annotations

import asyncio
import html
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from farmbot.logging import get_logger

if TYPE_CHECKING:
    from farmbot.settings import Settings

logger = get_logger(__name__)

TELEGRAM_API = "https://api.telegram.org"


class Notifier(Protocol):
    def notify(self, text: str) -> None: ...


class LogNotifier:
    """Writes notifications to the log only."""

    def notify(self, text: str) -> None:
        logger.info("notification", text=text)


class TelegramNotifier:
    """Sends notifications to one Telegram chat through the Bot API."""

    def __init__(
        self,
        token: str,
        chat_id: str,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        self.chat_id = chat_id
        self._token = token
        self._client = client or httpx.AsyncClient(base_url=TELEGRAM_API, timeout=httpx.Timeout(timeout_s))
        self._tasks: set[asyncio.Task[Any]] = set()
        self.sent = 0
        self.failed = 0

    def notify(self, text: str) -> None:
        logger.info("notification", text=text)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("telegram_no_loop")
            return
        task = loop.create_task(self.send(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def send(self, text: str) -> bool:
        payload = {"chat_id": self.chat_id, "text": html.escape(text), "parse_mode": "HTML"}
        try:
            response = await self._client.post(f"/bot{self._token}/sendMessage", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.failed += 1
            logger.warning("telegram_send_failed", error=str(e))
            return False
        self.sent += 1
        return True

    async def flush(self) -> None:
        """Wait for in-flight sends."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        await self.flush()
        await self._client.aclose()


def build_notifier(settings: Settings) -> Notifier:
    if settings.telegram_token and settings.telegram_chat_id:
        return TelegramNotifier(settings.telegram_token, settings.telegram_chat_id)
    return LogNotifier()
