# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Friend-farm engine: visit peers to help, steal and make mischief.

Every operation kind is gated by the day-scoped limit cache before each
use. A kind stops for the visit as soon as its uses run out, and for the
day once it stops granting experience.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from farmbot.constants import OperationKind
from farmbot.engines.base import PollingEngine
from farmbot.errors import CallError
from farmbot.game.growth import FriendLandStatus, analyze_friend_lands
from farmbot.game.limits import OperationLimits

if TYPE_CHECKING:
    from farmbot.config import FriendConfig
    from farmbot.engines.base import EngineContext
    from farmbot.protocol.messages import GameFriend, LandOpReply

LandOp = Callable[[int, list[int]], Awaitable["LandOpReply"]]

NUISANCE_KINDS = (OperationKind.PUT_WEED, OperationKind.PUT_INSECT)


class FriendEngine(PollingEngine):
    name = "friend"

    def __init__(self, ctx: EngineContext, config: FriendConfig, limits: OperationLimits | None = None) -> None:
        super().__init__(ctx, config)
        self.config: FriendConfig = config
        self.limits = limits or OperationLimits()

    async def run_cycle(self) -> None:
        if self.limits.roll_day():
            self.log.info("friend_day_rollover", day=self.limits.day.isoformat())

        reply = await self.ctx.client.all_friends()
        targets = self.select_friends(reply.game_friends)
        if not targets:
            self.log.debug("friend_none_to_visit", friends=len(reply.game_friends))
            return

        totals: Counter[str] = Counter()
        for i, friend in enumerate(targets):
            if i:
                await asyncio.sleep(self.config.visit_delay_s)
            try:
                totals.update(await self.visit(friend))
            except CallError as e:
                self.log.warning("friend_visit_failed", friend=friend.display_name, error=str(e))
        if totals:
            self.log.info("friend_cycle_done", visited=len(targets), **totals)

    def select_friends(self, friends: Sequence[GameFriend]) -> list[GameFriend]:
        """Friends worth entering this cycle, without self or duplicates."""
        self_gid = self.ctx.identity.gid
        nuisance = self.config.nuisance and any(self.limits.can_use(kind) for kind in NUISANCE_KINDS)
        seen: set[int] = set()
        targets: list[GameFriend] = []
        for friend in friends:
            if friend.gid == self_gid or friend.gid in seen or friend.plant is None:
                continue
            seen.add(friend.gid)
            summary = friend.plant
            wanted = (
                (self.config.steal and summary.steal_plant_num > 0)
                or (self.config.help and (summary.dry_num > 0 or summary.weed_num > 0 or summary.insect_num > 0))
                or nuisance
            )
            if wanted:
                targets.append(friend)
        return targets

    async def visit(self, friend: GameFriend) -> Counter[str]:
        """Enter one friend's farm, act on it, and always leave."""
        client = self.ctx.client
        enter = await client.enter_farm(friend.gid)
        done: Counter[str] = Counter()
        try:
            self.limits.update(enter.operation_limits)
            status = analyze_friend_lands(enter.lands, self.ctx.clock.now_sec(), self.ctx.identity.gid)
            emit = self.log.info if self.first_cycle else self.log.debug
            emit("friend_lands", friend=friend.display_name, **status.summary())

            for kind, op, land_ids in self._plan(status):
                count = await self._run_kind(friend, kind, op, land_ids)
                if count:
                    done[kind.name.lower()] += count
        finally:
            await self._leave(friend)

        if done:
            self.log.info("friend_visited", friend=friend.display_name, **done)
        put_weed = done.get("put_weed", 0)
        put_insect = done.get("put_insect", 0)
        if put_weed or put_insect:
            self.ctx.notify(f"Mischief at {friend.display_name}: weeds x{put_weed}, insects x{put_insect}")
        return done

    def _plan(self, status: FriendLandStatus) -> list[tuple[OperationKind, LandOp, list[int]]]:
        client = self.ctx.client
        plan: list[tuple[OperationKind, LandOp, list[int]]] = []
        if self.config.help:
            plan.append((OperationKind.HELP_WEED, client.weed_out, status.need_weed))
            plan.append((OperationKind.HELP_INSECT, client.insecticide, status.need_insect))
            plan.append((OperationKind.HELP_WATER, client.water, status.need_water))
        if self.config.steal:
            plan.append((OperationKind.STEAL, client.harvest, status.stealable))
        if self.config.nuisance:
            plan.append((OperationKind.PUT_WEED, client.put_weeds, status.can_put_weed))
            plan.append((OperationKind.PUT_INSECT, client.put_insects, status.can_put_insect))
        return [step for step in plan if step[2]]

    async def _run_kind(self, friend: GameFriend, kind: OperationKind, op: LandOp, land_ids: list[int]) -> int:
        done = 0
        for land_id in land_ids:
            if not self.limits.can_use(kind):
                self.log.debug(
                    "friend_kind_stopped",
                    kind=kind.name.lower(),
                    remaining=self.limits.remaining(kind),
                    exp_exhausted=self.limits.is_exp_exhausted(kind),
                )
                break
            exp_before = self.limits.exp_counter(kind)
            try:
                reply = await op(friend.gid, [land_id])
            except CallError as e:
                self.log.info("friend_op_failed", kind=kind.name.lower(), land=land_id, error=str(e))
            else:
                done += 1
                if self.limits.record_use(kind, exp_before, reply.operation_limits):
                    self.log.info("friend_exp_exhausted", kind=kind.name.lower())
            await asyncio.sleep(self.config.op_delay_s)
        return done

    async def _leave(self, friend: GameFriend) -> None:
        try:
            await self.ctx.client.leave_farm(friend.gid)
        except CallError as e:
            self.log.debug("friend_leave_failed", friend=friend.display_name, error=str(e))
