# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Task reward engine."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

from farmbot.constants import EXP_ITEM_ID, GOLD_ITEM_ID
from farmbot.engines.base import PollingEngine
from farmbot.errors import CallError

if TYPE_CHECKING:
    from farmbot.config import TaskConfig
    from farmbot.engines.base import EngineContext
    from farmbot.protocol.messages import EventMessage, ItemCount, TaskEntry


def is_claimable(task: TaskEntry) -> bool:
    return task.is_unlocked and not task.is_claimed and task.progress >= task.total_progress > 0


def summarize_rewards(items: Sequence[ItemCount]) -> str:
    parts = []
    for item in items:
        if item.id == GOLD_ITEM_ID:
            parts.append(f"gold {item.count}")
        elif item.id == EXP_ITEM_ID:
            parts.append(f"exp {item.count}")
        else:
            parts.append(f"item#{item.id}x{item.count}")
    return ", ".join(parts)


class TaskEngine(PollingEngine):
    name = "task"

    def __init__(self, ctx: EngineContext, config: TaskConfig) -> None:
        super().__init__(ctx, config)
        self.config: TaskConfig = config

    def on_task_notify(self, event: EventMessage) -> None:
        """Push handler: task progress changed server-side."""
        self.log.debug("task_notify")
        self.trigger_later(self.config.notify_delay_s)

    async def run_cycle(self) -> None:
        reply = await self.ctx.client.task_info()
        tasks = reply.task_info.all_tasks() if reply.task_info else []
        claimable = [t for t in tasks if is_claimable(t)]
        if not claimable:
            self.log.debug("task_none_claimable", tasks=len(tasks))
            return

        self.log.info("task_claimable", count=len(claimable))
        for i, task in enumerate(claimable):
            if i:
                await asyncio.sleep(self.config.claim_delay_s)
            await self._claim(task)

    async def _claim(self, task: TaskEntry) -> bool:
        shared = task.share_multiple > 1
        try:
            reply = await self.ctx.client.claim_task(task.id, do_shared=shared)
        except CallError as e:
            self.log.warning("task_claim_failed", task=task.id, error=str(e))
            return False

        identity = self.ctx.identity
        for item in reply.items:
            if item.id == GOLD_ITEM_ID:
                identity.gold += item.count

        rewards = summarize_rewards(reply.items)
        label = task.desc or f"task#{task.id}"
        multiplier = f" (x{task.share_multiple})" if shared else ""
        self.log.info("task_claimed", task=task.id, desc=task.desc, rewards=rewards, shared=shared)
        self.ctx.notify(f"Task claimed: {label}{multiplier} -> {rewards or 'no rewards'}")
        return True
