# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Feature engines: one polling loop each, per session."""

from __future__ import annotations

from farmbot.engines.base import EngineContext, PollingEngine
from farmbot.engines.farm import FarmEngine
from farmbot.engines.friend import FriendEngine
from farmbot.engines.task import TaskEngine
from farmbot.engines.warehouse import WarehouseEngine

__all__ = [
    "EngineContext",
    "FarmEngine",
    "FriendEngine",
    "PollingEngine",
    "TaskEngine",
    "WarehouseEngine",
]
