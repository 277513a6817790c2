# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deterministic fault injection around another transport.

Drops or severs inbound messages at fixed receive counts so timeout and
teardown paths can be exercised repeatably.
"""

from __future__ import annotations

import asyncio
import contextlib
import random
from typing import Any

from farmbot.transport.base import MessageTransport


class ChaosTransport(MessageTransport):
    def __init__(
        self,
        inner: MessageTransport,
        *,
        seed: int = 1,
        disconnect_every_n_receives: int = 0,
        drop_every_n_receives: int = 0,
        max_jitter_ms: int = 0,
        label: str = "chaos",
    ) -> None:
        self._inner = inner
        self._rng = random.Random(int(seed))
        self._disconnect_n = int(disconnect_every_n_receives or 0)
        self._drop_n = int(drop_every_n_receives or 0)
        self._max_jitter_ms = int(max_jitter_ms or 0)
        self._label = str(label or "chaos")
        self._rx_count = 0

    async def connect(self, url: str, **kwargs: Any) -> None:
        await self._inner.connect(url, **kwargs)

    async def disconnect(self) -> None:
        await self._inner.disconnect()

    async def send(self, data: bytes) -> None:
        await self._inner.send(data)

    async def receive(self) -> bytes:
        while True:
            data = await self._inner.receive()
            self._rx_count += 1

            if self._max_jitter_ms > 0:
                await asyncio.sleep(self._rng.uniform(0.0, float(self._max_jitter_ms)) / 1000.0)

            if self._disconnect_n > 0 and (self._rx_count % self._disconnect_n) == 0:
                with contextlib.suppress(Exception):
                    await self._inner.disconnect()
                raise ConnectionError(f"{self._label}: injected disconnect on receive #{self._rx_count}")

            if self._drop_n > 0 and (self._rx_count % self._drop_n) == 0:
                # Lose the message; the caller waiting on it will time out.
                continue

            return data

    def is_connected(self) -> bool:
        return self._inner.is_connected()
