# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Warehouse engine: sells harvested fruit from the bag."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from farmbot.constants import FRUIT_ID_MAX, FRUIT_ID_MIN
from farmbot.engines.base import PollingEngine
from farmbot.errors import CallError
from farmbot.protocol.messages import ItemCount

if TYPE_CHECKING:
    from farmbot.config import WarehouseConfig
    from farmbot.engines.base import EngineContext


def is_sellable_fruit(item: ItemCount) -> bool:
    return FRUIT_ID_MIN <= item.id <= FRUIT_ID_MAX and item.count > 0 and item.uid != 0


class WarehouseEngine(PollingEngine):
    name = "warehouse"

    def __init__(self, ctx: EngineContext, config: WarehouseConfig) -> None:
        super().__init__(ctx, config)
        self.config: WarehouseConfig = config

    async def run_cycle(self) -> None:
        bag = await self.ctx.client.bag()
        fruits = [item for item in bag.bag_items() if is_sellable_fruit(item)]
        if not fruits:
            self.log.debug("warehouse_nothing_to_sell")
            return

        size = max(1, self.config.batch_size)
        proceeds = 0
        sold: list[ItemCount] = []
        for start in range(0, len(fruits), size):
            if start:
                await asyncio.sleep(self.config.sell_delay_s)
            batch = fruits[start : start + size]
            try:
                reply = await self.ctx.client.sell([ItemCount(id=f.id, count=f.count, uid=f.uid) for f in batch])
            except CallError as e:
                self.log.warning("warehouse_sell_failed", items=len(batch), error=str(e))
                continue
            proceeds += reply.gold
            sold.extend(batch)

        if not sold:
            return
        self.ctx.identity.gold += proceeds
        names = ", ".join(f"{self.ctx.gamedata.fruit_name(f.id)}x{f.count}" for f in sold)
        self.log.info("warehouse_sold", items=len(sold), gold=proceeds, gold_total=self.ctx.identity.gold)
        self.ctx.notify(f"Sold {names} for {proceeds} gold")
