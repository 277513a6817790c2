# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed remote calls used by the session and its engines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from farmbot.constants import (
    ENTER_REASON_FRIEND,
    FRIEND_SERVICE,
    ITEM_SERVICE,
    LOGIN_SCENE_ID,
    PLANT_SERVICE,
    SHOP_SERVICE,
    TASK_SERVICE,
    USER_SERVICE,
    VISIT_SERVICE,
)
from farmbot.protocol.messages import (
    AllLandsReply,
    AllLandsRequest,
    BagReply,
    BagRequest,
    BuyGoodsReply,
    BuyGoodsRequest,
    ClaimTaskRewardReply,
    ClaimTaskRewardRequest,
    DeviceInfo,
    FertilizeRequest,
    GetAllFriendsReply,
    GetAllFriendsRequest,
    HeartbeatReply,
    HeartbeatRequest,
    ItemCount,
    LandOpReply,
    LandOpRequest,
    LoginReply,
    LoginRequest,
    PlantItem,
    PlantRequest,
    RemovePlantRequest,
    SellReply,
    SellRequest,
    ShopInfoReply,
    ShopInfoRequest,
    TaskInfoReply,
    TaskInfoRequest,
    VisitEnterReply,
    VisitEnterRequest,
    VisitLeaveReply,
    VisitLeaveRequest,
)

if TYPE_CHECKING:
    from farmbot.core.correlator import CallCorrelator


class GameClient:
    """Thin typed layer over a session's correlator."""

    def __init__(self, correlator: CallCorrelator, client_version: str = "") -> None:
        self.correlator = correlator
        self.client_version = client_version

    # ------------------------------------------------------------ user

    async def login(self) -> LoginReply:
        request = LoginRequest(
            device_info=DeviceInfo(client_version=self.client_version),
            scene_id=LOGIN_SCENE_ID,
        )
        return await self.correlator.request(USER_SERVICE, "Login", request, LoginReply)

    async def heartbeat(self, gid: int) -> HeartbeatReply:
        request = HeartbeatRequest(gid=gid, client_version=self.client_version)
        return await self.correlator.request(USER_SERVICE, "Heartbeat", request, HeartbeatReply)

    # ------------------------------------------------------------ lands

    async def all_lands(self, host_gid: int = 0) -> AllLandsReply:
        return await self.correlator.request(PLANT_SERVICE, "AllLands", AllLandsRequest(host_gid=host_gid), AllLandsReply)

    async def _land_op(self, method: str, host_gid: int, land_ids: list[int], is_all: bool = False) -> LandOpReply:
        request = LandOpRequest(land_ids=list(land_ids), host_gid=host_gid, is_all=is_all)
        return await self.correlator.request(PLANT_SERVICE, method, request, LandOpReply)

    async def harvest(self, host_gid: int, land_ids: list[int]) -> LandOpReply:
        return await self._land_op("Harvest", host_gid, land_ids, is_all=True)

    async def water(self, host_gid: int, land_ids: list[int]) -> LandOpReply:
        return await self._land_op("WaterLand", host_gid, land_ids)

    async def weed_out(self, host_gid: int, land_ids: list[int]) -> LandOpReply:
        return await self._land_op("WeedOut", host_gid, land_ids)

    async def insecticide(self, host_gid: int, land_ids: list[int]) -> LandOpReply:
        return await self._land_op("Insecticide", host_gid, land_ids)

    async def put_weeds(self, host_gid: int, land_ids: list[int]) -> LandOpReply:
        return await self._land_op("PutWeeds", host_gid, land_ids)

    async def put_insects(self, host_gid: int, land_ids: list[int]) -> LandOpReply:
        return await self._land_op("PutInsects", host_gid, land_ids)

    async def remove_plant(self, land_ids: list[int]) -> LandOpReply:
        request = RemovePlantRequest(land_ids=list(land_ids))
        return await self.correlator.request(PLANT_SERVICE, "RemovePlant", request, LandOpReply)

    async def plant(self, seed_id: int, land_ids: list[int]) -> LandOpReply:
        request = PlantRequest(items=[PlantItem(seed_id=seed_id, land_ids=list(land_ids))])
        return await self.correlator.request(PLANT_SERVICE, "Plant", request, LandOpReply)

    async def fertilize(self, land_ids: list[int], fertilizer_id: int) -> LandOpReply:
        request = FertilizeRequest(land_ids=list(land_ids), fertilizer_id=fertilizer_id)
        return await self.correlator.request(PLANT_SERVICE, "Fertilize", request, LandOpReply)

    # ------------------------------------------------------------ shop / items

    async def shop_info(self, shop_id: int) -> ShopInfoReply:
        return await self.correlator.request(SHOP_SERVICE, "ShopInfo", ShopInfoRequest(shop_id=shop_id), ShopInfoReply)

    async def buy_goods(self, goods_id: int, num: int, price: int) -> BuyGoodsReply:
        request = BuyGoodsRequest(goods_id=goods_id, num=num, price=price)
        return await self.correlator.request(SHOP_SERVICE, "BuyGoods", request, BuyGoodsReply)

    async def bag(self) -> BagReply:
        return await self.correlator.request(ITEM_SERVICE, "Bag", BagRequest(), BagReply)

    async def sell(self, items: list[ItemCount]) -> SellReply:
        return await self.correlator.request(ITEM_SERVICE, "Sell", SellRequest(items=list(items)), SellReply)

    # ------------------------------------------------------------ friends

    async def all_friends(self) -> GetAllFriendsReply:
        return await self.correlator.request(FRIEND_SERVICE, "GetAll", GetAllFriendsRequest(), GetAllFriendsReply)

    async def enter_farm(self, host_gid: int) -> VisitEnterReply:
        request = VisitEnterRequest(host_gid=host_gid, reason=ENTER_REASON_FRIEND)
        return await self.correlator.request(VISIT_SERVICE, "Enter", request, VisitEnterReply)

    async def leave_farm(self, host_gid: int) -> VisitLeaveReply:
        return await self.correlator.request(VISIT_SERVICE, "Leave", VisitLeaveRequest(host_gid=host_gid), VisitLeaveReply)

    # ------------------------------------------------------------ tasks

    async def task_info(self) -> TaskInfoReply:
        return await self.correlator.request(TASK_SERVICE, "TaskInfo", TaskInfoRequest(), TaskInfoReply)

    async def claim_task(self, task_id: int, do_shared: bool = False) -> ClaimTaskRewardReply:
        request = ClaimTaskRewardRequest(id=task_id, do_shared=do_shared)
        return await self.correlator.request(TASK_SERVICE, "ClaimTaskReward", request, ClaimTaskRewardReply)
