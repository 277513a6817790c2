# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server clock estimate from the latest observed time sample."""

from __future__ import annotations

import time
from collections.abc import Callable


class ClockOffset:
    """One (server-time, local-time) pair.

    Current server time is the last observed server time plus the local
    time elapsed since it was observed. Only a fresh observation replaces
    the pair.
    """

    def __init__(
        self,
        timer: Callable[[], float] = time.monotonic,
        wall: Callable[[], float] = time.time,
    ) -> None:
        self._timer = timer
        self._wall = wall
        self._server_ms: int | None = None
        self._local_at_sync: float = 0.0

    @property
    def synced(self) -> bool:
        return self._server_ms is not None

    def observe(self, server_ms: int) -> None:
        """Record a server time sample in milliseconds."""
        if server_ms <= 0:
            return
        self._server_ms = int(server_ms)
        self._local_at_sync = self._timer()

    def now_ms(self) -> int:
        if self._server_ms is None:
            # Before the first sample the local wall clock is the best guess.
            return int(self._wall() * 1000)
        elapsed_ms = (self._timer() - self._local_at_sync) * 1000
        return int(self._server_ms + elapsed_ms)

    def now_sec(self) -> int:
        return self.now_ms() // 1000
