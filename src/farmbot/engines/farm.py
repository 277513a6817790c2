# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Own-farm engine: tend, harvest, clear, replant, fertilize.

Each cycle works from one fresh lands snapshot and runs its steps in a
fixed order: weed, pest control, water, harvest, clear, plant, fertilize.
A failing step is logged and the next step still runs.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from farmbot.constants import GOLD_ITEM_ID, LEVEL_CONDITION_TYPE
from farmbot.engines.base import PollingEngine
from farmbot.errors import CallError, RemoteError
from farmbot.game.growth import analyze_lands

if TYPE_CHECKING:
    from farmbot.config import FarmConfig
    from farmbot.engines.base import EngineContext
    from farmbot.protocol.messages import LandOpReply, ShopGoods

LandOp = Callable[[int, list[int]], Awaitable["LandOpReply"]]

_INSUFFICIENT = re.compile(r"insufficient|not enough|不足", re.IGNORECASE)


def seed_level(goods: ShopGoods) -> int:
    """Level requirement of a shop entry (0 when unconditioned)."""
    for cond in goods.conds:
        if cond.type == LEVEL_CONDITION_TYPE:
            return cond.param
    return 0


def choose_seed(goods: Sequence[ShopGoods], level: int, lowest_tier: bool = False) -> ShopGoods | None:
    """Pick the seed to buy.

    Candidates must be unlocked, within ``level`` and not sold out. The best
    candidate has the highest level requirement, then the highest price;
    ``lowest_tier`` reverses both keys.
    """
    available = [
        g
        for g in goods
        if g.unlocked
        and seed_level(g) <= level
        and not (g.limit_count > 0 and g.bought_num >= g.limit_count)
    ]
    if not available:
        return None

    def rank(g: ShopGoods) -> tuple[int, int]:
        return seed_level(g), g.price

    return min(available, key=rank) if lowest_tier else max(available, key=rank)


def plan_purchase(gold: int, price: int, land_count: int) -> int:
    """Number of seeds affordable for ``land_count`` lands."""
    if land_count <= 0:
        return 0
    if price <= 0:
        return land_count
    return max(0, min(land_count, gold // price))


def is_insufficient(error: RemoteError) -> bool:
    return bool(_INSUFFICIENT.search(error.message or ""))


class FarmEngine(PollingEngine):
    name = "farm"

    def __init__(self, ctx: EngineContext, config: FarmConfig) -> None:
        super().__init__(ctx, config)
        self.config: FarmConfig = config
        self.fertilizer_depleted = False

    async def run_cycle(self) -> None:
        client = self.ctx.client
        reply = await client.all_lands()
        if not reply.lands:
            self.log.debug("farm_no_lands")
            return

        now = self.ctx.clock.now_sec()
        status = analyze_lands(reply.lands, now, log=self.log, verbose=self.first_cycle)
        if self.first_cycle or status.action_count():
            self.log.info("farm_status", **status.summary())

        await self._batch("weed", client.weed_out, status.need_weed)
        await self._batch("insecticide", client.insecticide, status.need_insect)
        await self._batch("water", client.water, status.need_water)
        harvested = await self._batch("harvest", client.harvest, status.harvestable)

        to_clear = [*status.dead, *(status.harvestable if harvested else [])]
        cleared = await self._clear(to_clear)
        candidates = [*status.empty, *cleared]
        if not candidates:
            return

        planted = await self._plant(candidates)
        if planted and self.config.fertilize:
            await self._fertilize(planted)

    async def _batch(self, action: str, op: LandOp, land_ids: list[int]) -> bool:
        if not land_ids:
            return False
        try:
            await op(self.ctx.identity.gid, land_ids)
        except CallError as e:
            self.log.warning("farm_action_failed", action=action, lands=land_ids, error=str(e))
            return False
        self.log.info("farm_action", action=action, lands=land_ids)
        await asyncio.sleep(self.config.step_delay_s)
        return True

    async def _clear(self, land_ids: list[int]) -> list[int]:
        """Remove dead plants; retry one by one if the batch fails."""
        if not land_ids:
            return []
        client = self.ctx.client
        try:
            await client.remove_plant(land_ids)
            self.log.info("farm_cleared", lands=land_ids)
            return list(land_ids)
        except CallError as e:
            self.log.warning("farm_clear_batch_failed", lands=land_ids, error=str(e))

        cleared: list[int] = []
        for land_id in land_ids:
            await asyncio.sleep(self.config.plant_delay_s)
            try:
                await client.remove_plant([land_id])
            except CallError as e:
                self.log.warning("farm_clear_failed", land=land_id, error=str(e))
                continue
            cleared.append(land_id)
        if cleared:
            self.log.info("farm_cleared", lands=cleared)
        return cleared

    async def _plant(self, land_ids: list[int]) -> list[int]:
        client = self.ctx.client
        identity = self.ctx.identity
        try:
            shop = await client.shop_info(self.config.seed_shop_id)
        except CallError as e:
            self.log.warning("farm_shop_failed", error=str(e))
            return []

        seed = choose_seed(shop.goods_list, identity.level, self.config.lowest_tier_seed)
        if seed is None:
            self.log.warning("farm_no_seed", level=identity.level)
            return []

        count = plan_purchase(identity.gold, seed.price, len(land_ids))
        if count <= 0:
            self.log.info("farm_insufficient_gold", gold=identity.gold, price=seed.price)
            return []
        if count < len(land_ids):
            self.log.info("farm_purchase_capped", lands=len(land_ids), affordable=count)
        targets = land_ids[:count]

        try:
            bought = await client.buy_goods(seed.id, count, seed.price)
        except CallError as e:
            self.log.warning("farm_buy_failed", goods=seed.id, count=count, error=str(e))
            return []

        seed_id = next((item.id for item in bought.get_items if item.id > 0), seed.item_id)
        spent = sum(item.count for item in bought.cost_items if item.id == GOLD_ITEM_ID)
        identity.gold = max(0, identity.gold - (spent or seed.price * count))
        self.log.info(
            "farm_seed_bought",
            seed=self.ctx.gamedata.seed_name(seed_id),
            count=count,
            gold_left=identity.gold,
        )

        planted: list[int] = []
        for i, land_id in enumerate(targets):
            if i:
                await asyncio.sleep(self.config.plant_delay_s)
            try:
                await client.plant(seed_id, [land_id])
            except CallError as e:
                self.log.warning("farm_plant_failed", land=land_id, error=str(e))
                continue
            planted.append(land_id)

        if planted:
            self.fertilizer_depleted = False
            self.log.info("farm_planted", lands=planted, seed=seed_id)
        return planted

    async def _fertilize(self, land_ids: list[int]) -> int:
        done = 0
        for i, land_id in enumerate(land_ids):
            if self.fertilizer_depleted:
                break
            if i:
                await asyncio.sleep(self.config.plant_delay_s)
            try:
                await self.ctx.client.fertilize([land_id], self.config.fertilizer_id)
            except RemoteError as e:
                if is_insufficient(e):
                    self.fertilizer_depleted = True
                    self.log.info("farm_fertilizer_depleted", land=land_id)
                else:
                    self.log.warning("farm_fertilize_failed", land=land_id, error=str(e))
                continue
            except CallError as e:
                self.log.warning("farm_fertilize_failed", land=land_id, error=str(e))
                continue
            done += 1
        if done:
            self.log.info("farm_fertilized", lands=done)
        return done
