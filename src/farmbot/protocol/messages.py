# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed request and reply payloads.

Field names follow the remote schema. Every field has a default so an
empty payload decodes to a valid message.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------- gate events


class EventMessage(Message):
    """Push payload: event name plus an inner payload."""

    message_type: str = ""
    body: bytes = b""

    model_config = ConfigDict(extra="ignore", ser_json_bytes="base64", val_json_bytes="base64")


class KickoutNotify(Message):
    reason: int = 0
    reason_message: str = ""


# ---------------------------------------------------------------- user


class DeviceInfo(Message):
    client_version: str = ""
    sys_software: str = "iOS 26.2.1"
    network: str = "wifi"
    memory: str = "7672"
    device_id: str = "iPhone X<iPhone18,3>"


class ReportData(Message):
    callback: str = ""
    cd_extend_info: str = ""
    click_id: str = ""
    clue_token: str = ""
    minigame_channel: str = "other"
    minigame_platid: int = 2
    req_id: str = ""
    trackid: str = ""


class LoginRequest(Message):
    sharer_id: int = 0
    sharer_open_id: str = ""
    device_info: DeviceInfo = Field(default_factory=DeviceInfo)
    share_cfg_id: int = 0
    scene_id: str = ""
    report_data: ReportData = Field(default_factory=ReportData)


class UserBasic(Message):
    gid: int = 0
    name: str = ""
    level: int = 0
    gold: int = 0
    exp: int = 0


class LoginReply(Message):
    basic: UserBasic | None = None
    time_now_millis: int = 0


class HeartbeatRequest(Message):
    gid: int = 0
    client_version: str = ""


class HeartbeatReply(Message):
    server_time: int = 0


# ---------------------------------------------------------------- lands


class PlantPhaseInfo(Message):
    phase: int = 0
    begin_time: int = 0
    dry_time: int = 0
    weeds_time: int = 0
    insect_time: int = 0


class PlantInfo(Message):
    id: int = 0
    name: str = ""
    phases: list[PlantPhaseInfo] = Field(default_factory=list)
    dry_num: int = 0
    weed_owners: list[int] = Field(default_factory=list)
    insect_owners: list[int] = Field(default_factory=list)
    stealable: bool = False
    left_fruit_num: int = 0


class LandInfo(Message):
    id: int = 0
    unlocked: bool = False
    level: int = 0
    plant: PlantInfo | None = None


class OperationLimit(Message):
    """Day-scoped usage counters for one operation kind."""

    id: int = 0
    day_times: int = 0
    day_times_lt: int = 0
    day_exp_times: int = 0
    day_ex_times_lt: int = 0


class AllLandsRequest(Message):
    host_gid: int = 0


class AllLandsReply(Message):
    lands: list[LandInfo] = Field(default_factory=list)
    operation_limits: list[OperationLimit] = Field(default_factory=list)


class LandOpRequest(Message):
    """Shared shape of harvest/water/weed/insecticide/put-weed/put-insect."""

    land_ids: list[int] = Field(default_factory=list)
    host_gid: int = 0
    is_all: bool = False


class LandOpReply(Message):
    land: list[LandInfo] = Field(default_factory=list)
    operation_limits: list[OperationLimit] = Field(default_factory=list)


class RemovePlantRequest(Message):
    land_ids: list[int] = Field(default_factory=list)


class PlantItem(Message):
    seed_id: int = 0
    land_ids: list[int] = Field(default_factory=list)


class PlantRequest(Message):
    items: list[PlantItem] = Field(default_factory=list)


class FertilizeRequest(Message):
    land_ids: list[int] = Field(default_factory=list)
    fertilizer_id: int = 0


# ---------------------------------------------------------------- shop / items


class ItemCount(Message):
    id: int = 0
    count: int = 0
    uid: int = 0


class GoodsCondition(Message):
    type: int = 0
    param: int = 0


class ShopGoods(Message):
    id: int = 0
    item_id: int = 0
    price: int = 0
    unlocked: bool = False
    conds: list[GoodsCondition] = Field(default_factory=list)
    limit_count: int = 0
    bought_num: int = 0


class ShopInfoRequest(Message):
    shop_id: int = 0


class ShopInfoReply(Message):
    goods_list: list[ShopGoods] = Field(default_factory=list)


class BuyGoodsRequest(Message):
    goods_id: int = 0
    num: int = 0
    price: int = 0


class BuyGoodsReply(Message):
    get_items: list[ItemCount] = Field(default_factory=list)
    cost_items: list[ItemCount] = Field(default_factory=list)


class ItemBag(Message):
    items: list[ItemCount] = Field(default_factory=list)


class BagRequest(Message):
    pass


class BagReply(Message):
    item_bag: ItemBag | None = None
    items: list[ItemCount] = Field(default_factory=list)

    def bag_items(self) -> list[ItemCount]:
        if self.item_bag and self.item_bag.items:
            return self.item_bag.items
        return self.items


class SellRequest(Message):
    items: list[ItemCount] = Field(default_factory=list)


class SellReply(Message):
    gold: int = 0


# ---------------------------------------------------------------- friends / visits


class FriendPlantSummary(Message):
    steal_plant_num: int = 0
    dry_num: int = 0
    weed_num: int = 0
    insect_num: int = 0


class GameFriend(Message):
    gid: int = 0
    name: str = ""
    remark: str = ""
    level: int = 0
    plant: FriendPlantSummary | None = None

    @property
    def display_name(self) -> str:
        return self.remark or self.name or f"GID:{self.gid}"


class GetAllFriendsRequest(Message):
    pass


class GetAllFriendsReply(Message):
    game_friends: list[GameFriend] = Field(default_factory=list)


class VisitEnterRequest(Message):
    host_gid: int = 0
    reason: int = 0


class VisitEnterReply(Message):
    basic: UserBasic | None = None
    lands: list[LandInfo] = Field(default_factory=list)
    operation_limits: list[OperationLimit] = Field(default_factory=list)


class VisitLeaveRequest(Message):
    host_gid: int = 0


class VisitLeaveReply(Message):
    pass


# ---------------------------------------------------------------- tasks


class TaskEntry(Message):
    id: int = 0
    desc: str = ""
    progress: int = 0
    total_progress: int = 0
    is_claimed: bool = False
    is_unlocked: bool = False
    share_multiple: int = 0
    rewards: list[ItemCount] = Field(default_factory=list)


class TaskInfo(Message):
    growth_tasks: list[TaskEntry] = Field(default_factory=list)
    daily_tasks: list[TaskEntry] = Field(default_factory=list)
    tasks: list[TaskEntry] = Field(default_factory=list)

    def all_tasks(self) -> list[TaskEntry]:
        return [*self.growth_tasks, *self.daily_tasks, *self.tasks]


class TaskInfoRequest(Message):
    pass


class TaskInfoReply(Message):
    task_info: TaskInfo | None = None


class TaskInfoNotify(Message):
    task_info: TaskInfo | None = None


class ClaimTaskRewardRequest(Message):
    id: int = 0
    do_shared: bool = False


class ClaimTaskRewardReply(Message):
    items: list[ItemCount] = Field(default_factory=list)
