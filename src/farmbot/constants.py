# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared constants for farmbot."""

from __future__ import annotations

from enum import IntEnum


class PlantPhase(IntEnum):
    """Growth phase kinds; ordinal order matters."""

    UNKNOWN = 0
    SEED = 1
    GERMINATION = 2
    SMALL_LEAVES = 3
    LARGE_LEAVES = 4
    BLOOMING = 5
    MATURE = 6
    DEAD = 7


class OperationKind(IntEnum):
    """Day-limited operations on a friend's farm."""

    PUT_WEED = 10003
    PUT_INSECT = 10004
    HELP_WEED = 10005
    HELP_INSECT = 10006
    HELP_WATER = 10007
    STEAL = 10008


# Remote services
USER_SERVICE = "gamepb.userpb.UserService"
PLANT_SERVICE = "gamepb.plantpb.PlantService"
SHOP_SERVICE = "gamepb.shoppb.ShopService"
FRIEND_SERVICE = "gamepb.friendpb.FriendService"
VISIT_SERVICE = "gamepb.visitpb.VisitService"
TASK_SERVICE = "gamepb.taskpb.TaskService"
ITEM_SERVICE = "gamepb.itempb.ItemService"

# Push event names
KICKOUT_EVENT = "gamepb.userpb.KickoutNotify"
TASK_INFO_EVENT = "gamepb.taskpb.TaskInfoNotify"

# Default timeouts
DEFAULT_CALL_TIMEOUT_S = 10.0
DEFAULT_CONNECT_TIMEOUT_S = 15.0
DEFAULT_HEARTBEAT_INTERVAL_S = 25.0

# Supervisor
DEFAULT_MAX_TIMEOUTS = 3
CODE_PREFIX_LEN = 8

# Game values
SEED_SHOP_ID = 2
LEVEL_CONDITION_TYPE = 1
ENTER_REASON_FRIEND = 2
LOGIN_SCENE_ID = "1256"
GOLD_ITEM_ID = 1
EXP_ITEM_ID = 2
FRUIT_ID_MIN = 3001
FRUIT_ID_MAX = 49999
SELL_BATCH_SIZE = 15
DEFAULT_FERTILIZER_ID = 1011

# Afflictions a peer plant may carry per kind before the server refuses more
MAX_AFFLICTION_OWNERS = 2

# Timestamps above this are milliseconds
MS_TIMESTAMP_THRESHOLD = 1_000_000_000_000
