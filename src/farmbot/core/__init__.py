# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Core session infrastructure."""

from __future__ import annotations

from farmbot.core.clock import ClockOffset
from farmbot.core.correlator import CallCorrelator
from farmbot.core.session import Session, SessionEvent, SessionEventKind, SessionIdentity, SessionState
from farmbot.core.supervisor import SessionSupervisor

__all__ = [
    "CallCorrelator",
    "ClockOffset",
    "Session",
    "SessionEvent",
    "SessionEventKind",
    "SessionIdentity",
    "SessionState",
    "SessionSupervisor",
]
