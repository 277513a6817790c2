# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Reentrancy-guarded polling loop shared by all engines."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from farmbot.errors import CallError, TransportClosedError
from farmbot.game.gamedata import GameData

if TYPE_CHECKING:
    from farmbot.config import LoopConfig
    from farmbot.core.clock import ClockOffset
    from farmbot.core.session import SessionIdentity
    from farmbot.game.client import GameClient
    from farmbot.notify import Notifier


@dataclass
class EngineContext:
    """Per-session collaborators every engine of that session shares."""

    label: str
    client: GameClient
    identity: SessionIdentity
    clock: ClockOffset
    log: Any
    notifier: Notifier | None = None
    gamedata: GameData = field(default_factory=GameData)

    def notify(self, text: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(f"[{self.label}] {text}")


class PollingEngine(ABC):
    """Timer-driven loop that never overlaps its own ticks.

    A tick that finds the previous tick still running is a no-op, not a
    queued retry. Stopping cancels future ticks; an in-flight tick is left
    to fail on its next call once the connection is closed.
    """

    name = "engine"

    def __init__(self, ctx: EngineContext, config: LoopConfig) -> None:
        self.ctx = ctx
        self.config = config
        self.log = ctx.log.bind(engine=self.name)
        self.first_cycle = True
        self.cycles = 0
        self._busy = False
        self._stopped = False
        self._loop_task: asyncio.Task[None] | None = None
        self._tick_tasks: set[asyncio.Task[Any]] = set()

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def stopped(self) -> bool:
        return self._stopped

    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        if self._stopped or self._loop_task is not None:
            return
        if not self.config.enabled:
            self.log.info("engine_disabled")
            return
        self._loop_task = asyncio.create_task(self._run())
        self.log.debug("engine_started", interval_s=self.config.interval_s)

    def stop(self) -> None:
        """Cancel future ticks. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        task, self._loop_task = self._loop_task, None
        if task is not None and not task.done():
            task.cancel()
        self.log.debug("engine_stopped", cycles=self.cycles)

    def trigger(self) -> bool:
        """Schedule one tick now unless stopped or already busy."""
        if self._stopped or self._busy:
            return False
        self._track(asyncio.create_task(self.tick()))
        return True

    def trigger_later(self, delay_s: float) -> None:
        if not self._stopped:
            self._track(asyncio.create_task(self._delayed_trigger(delay_s)))

    async def tick(self) -> bool:
        """Run one guarded cycle.

        Returns:
            False if skipped because the previous tick is still running
        """
        if self._busy:
            self.log.debug("tick_skipped")
            return False
        self._busy = True
        try:
            await self.run_cycle()
            self.cycles += 1
        except TransportClosedError as e:
            self.log.info("tick_aborted", reason=str(e))
        except CallError as e:
            self.log.warning("tick_failed", error=str(e))
        except Exception:
            self.log.exception("tick_crashed")
        finally:
            self._busy = False
            self.first_cycle = False
        return True

    @abstractmethod
    async def run_cycle(self) -> None:
        """One pass of the engine's work."""

    async def _run(self) -> None:
        try:
            if self.config.initial_delay_s > 0:
                await asyncio.sleep(self.config.initial_delay_s)
            while not self._stopped:
                self.trigger()
                await asyncio.sleep(self.config.interval_s)
        except asyncio.CancelledError:
            return

    async def _delayed_trigger(self, delay_s: float) -> None:
        await asyncio.sleep(delay_s)
        self.trigger()

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)
