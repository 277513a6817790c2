# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Periodic keep-alive beat for one connection."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from farmbot.constants import DEFAULT_HEARTBEAT_INTERVAL_S
from farmbot.errors import FarmbotError
from farmbot.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = get_logger(__name__)


class KeepaliveStatus(BaseModel):
    interval_s: float | None
    running: bool
    beats: int


class KeepaliveController:
    def __init__(
        self,
        send_cb: Callable[[], Awaitable[None]],
        is_active: Callable[[], bool],
        interval_s: float | None = DEFAULT_HEARTBEAT_INTERVAL_S,
    ) -> None:
        self._send_cb = send_cb
        self._is_active = is_active
        self._interval_s: float | None = interval_s if interval_s and interval_s > 0 else None
        self._task: asyncio.Task[None] | None = None
        self._beats = 0

    def on_connect(self) -> None:
        if self._interval_s:
            self._start()

    def cancel(self) -> None:
        """Stop beating without waiting; safe from synchronous teardown."""
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def status(self) -> dict[str, Any]:
        return KeepaliveStatus(interval_s=self._interval_s, running=self.is_running(), beats=self._beats).model_dump()

    def _start(self) -> None:
        self.cancel()
        if not self._interval_s:
            return
        self._task = asyncio.create_task(self._loop())

    async def _loop(self) -> None:
        try:
            while self._is_active() and self._interval_s:
                await asyncio.sleep(self._interval_s)
                if not self._is_active():
                    break
                self._beats += 1
                try:
                    await self._send_cb()
                except FarmbotError as e:
                    # A missed beat is not fatal; the next one may succeed.
                    logger.debug("keepalive_beat_failed", error=str(e))
        except asyncio.CancelledError:
            return
