"""Tests for the warehouse engine."""

from __future__ import annotations

import pytest

from farmbot.config import WarehouseConfig
from farmbot.engines.warehouse import WarehouseEngine, is_sellable_fruit
from farmbot.game.gamedata import FruitConfig, GameData, PlantConfig
from farmbot.protocol.messages import BagReply, ItemBag, ItemCount, SellReply

from .fake_server import FakeRemoteError, Harness


def test_is_sellable_fruit() -> None:
    assert is_sellable_fruit(ItemCount(id=3001, count=1, uid=9))
    assert is_sellable_fruit(ItemCount(id=49999, count=1, uid=9))
    assert not is_sellable_fruit(ItemCount(id=3000, count=1, uid=9))
    assert not is_sellable_fruit(ItemCount(id=50000, count=1, uid=9))
    assert not is_sellable_fruit(ItemCount(id=3001, count=0, uid=9))
    assert not is_sellable_fruit(ItemCount(id=3001, count=1, uid=0))


@pytest.mark.asyncio
async def test_sells_fruit_in_batches_and_adds_proceeds() -> None:
    fruits = [ItemCount(id=3001 + i, count=2, uid=100 + i) for i in range(20)]
    other = [ItemCount(id=1, count=999, uid=1), ItemCount(id=80001, count=3, uid=5)]
    async with Harness(gold=100) as h:
        h.server.on("Bag", BagReply(item_bag=ItemBag(items=[*other, *fruits])))
        h.server.on("Sell", lambda request: SellReply(gold=10 * len(request["items"])))
        await WarehouseEngine(h.ctx, WarehouseConfig(sell_delay_s=0)).tick()

    batches = h.server.requests("Sell")
    assert [len(b["items"]) for b in batches] == [15, 5]
    assert batches[0]["items"][0] == {"id": 3001, "count": 2, "uid": 100}
    assert h.identity.gold == 300
    assert len(h.notifier.messages) == 1
    assert h.notifier.messages[0].startswith("[U1] Sold fruit#3001x2, fruit#3002x2")
    assert h.notifier.messages[0].endswith("for 200 gold")


@pytest.mark.asyncio
async def test_failed_batch_is_skipped_and_names_come_from_gamedata() -> None:
    fruits = [ItemCount(id=3001, count=4, uid=1), ItemCount(id=3002, count=1, uid=2)]
    async with Harness(gold=0) as h:
        h.ctx.gamedata = GameData(plants=[PlantConfig(id=1, name="Carrot", fruit=FruitConfig(id=3001))])
        h.server.on("Bag", BagReply(items=fruits))
        h.server.on("Sell", [FakeRemoteError(3, "busy"), SellReply(gold=12)])
        await WarehouseEngine(h.ctx, WarehouseConfig(sell_delay_s=0, batch_size=1)).tick()

    assert h.server.count("Sell") == 2
    assert h.identity.gold == 12
    assert h.notifier.messages == ["[U1] Sold fruit#3002x1 for 12 gold"]

    async with Harness() as h2:
        h2.ctx.gamedata = GameData(plants=[PlantConfig(id=1, name="Carrot", fruit=FruitConfig(id=3001))])
        h2.server.on("Bag", BagReply(items=[fruits[0]]))
        h2.server.on("Sell", SellReply(gold=4))
        await WarehouseEngine(h2.ctx, WarehouseConfig()).tick()

    assert h2.notifier.messages == ["[U1] Sold Carrotx4 for 4 gold"]


@pytest.mark.asyncio
async def test_empty_bag_sells_nothing() -> None:
    async with Harness() as h:
        await WarehouseEngine(h.ctx, WarehouseConfig()).tick()
    assert h.server.count("Sell") == 0
