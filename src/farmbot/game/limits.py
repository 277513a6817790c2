# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Day-scoped operation limits and experience-exhaustion inference.

The server reports per-kind usage counters with some replies. Whether an
operation still grants experience is never reported directly: it is
inferred by comparing a kind's experience counter before and after a call.
If the counter did not move, the kind is exhausted until the local date
changes. This cache is an optimization; the server remains the authority
and may still reject an operation the cache thinks is allowed.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Iterable

from farmbot.constants import OperationKind
from farmbot.protocol.messages import OperationLimit


class OperationLimits:
    def __init__(self, today: Callable[[], dt.date] = dt.date.today) -> None:
        self._today = today
        self._day = today()
        self._limits: dict[int, OperationLimit] = {}
        self._exp_exhausted: set[int] = set()

    @property
    def day(self) -> dt.date:
        return self._day

    def roll_day(self) -> bool:
        """Drop counters and exhaustion marks when the local date changed.

        Returns:
            True if a rollover happened
        """
        today = self._today()
        if today == self._day:
            return False
        self._day = today
        self._limits.clear()
        self._exp_exhausted.clear()
        return True

    def update(self, limits: Iterable[OperationLimit]) -> None:
        for limit in limits:
            self._limits[limit.id] = limit.model_copy()

    def get(self, kind: int) -> OperationLimit | None:
        return self._limits.get(kind)

    def remaining(self, kind: int) -> int | None:
        """Uses left today; None means unknown or unlimited (cap of 0)."""
        limit = self._limits.get(kind)
        if limit is None or limit.day_times_lt <= 0:
            return None
        return max(0, limit.day_times_lt - limit.day_times)

    def exp_counter(self, kind: int) -> int | None:
        limit = self._limits.get(kind)
        return None if limit is None else limit.day_exp_times

    def is_exp_exhausted(self, kind: int) -> bool:
        return kind in self._exp_exhausted

    def can_use(self, kind: int) -> bool:
        remaining = self.remaining(kind)
        if remaining is not None and remaining <= 0:
            return False
        return not self.is_exp_exhausted(kind)

    def record_use(self, kind: int, exp_before: int | None, reply_limits: Iterable[OperationLimit]) -> bool:
        """Fold a reply's limits in and infer exhaustion for ``kind``.

        Args:
            kind: Operation kind just performed
            exp_before: Experience counter snapshotted before the call
            reply_limits: Limits carried by the reply (may be empty)

        Returns:
            True if this call marked the kind exhausted
        """
        reply_limits = list(reply_limits)
        if reply_limits:
            self.update(reply_limits)
        if not any(limit.id == kind for limit in reply_limits):
            # No fresh snapshot for this kind: count the use locally.
            cached = self._limits.get(kind)
            if cached is not None:
                cached.day_times += 1
            return False

        after = self.exp_counter(kind)
        if exp_before is None or after is None or after > exp_before:
            return False
        self._exp_exhausted.add(kind)
        return True

    def snapshot(self) -> dict[str, dict[str, int | bool | None]]:
        out: dict[str, dict[str, int | bool | None]] = {}
        for kind in OperationKind:
            out[kind.name.lower()] = {
                "remaining": self.remaining(kind),
                "exp_exhausted": self.is_exp_exhausted(kind),
            }
        return out
