# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""One game session: connection, identity, clock and engines."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from farmbot.config import BotConfig
from farmbot.constants import CODE_PREFIX_LEN, KICKOUT_EVENT, TASK_INFO_EVENT
from farmbot.core.clock import ClockOffset
from farmbot.core.correlator import CallCorrelator
from farmbot.engines import EngineContext, FarmEngine, FriendEngine, PollingEngine, TaskEngine, WarehouseEngine
from farmbot.errors import CallTimeoutError, DecodeError, FarmbotError, SessionStateError, TransportClosedError
from farmbot.game.client import GameClient
from farmbot.game.gamedata import GameData
from farmbot.logging import get_logger
from farmbot.notify import Notifier
from farmbot.protocol.codec import PayloadCodec
from farmbot.protocol.messages import EventMessage, KickoutNotify
from farmbot.transport.base import MessageTransport
from farmbot.transport.websocket import WebSocketTransport

logger = get_logger(__name__)


class SessionState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    ACTIVE = "active"
    CLOSED = "closed"


class SessionIdentity(BaseModel):
    """Authenticated player. ``gold`` is a local estimate between logins."""

    gid: int = 0
    name: str = ""
    level: int = 0
    gold: int = 0
    exp: int = 0


class SessionEventKind(StrEnum):
    LOGIN_SUCCESS = "login_success"
    CLOSED = "closed"
    KICKED = "kicked"
    TIMEOUT = "timeout"


class SessionEvent(BaseModel):
    kind: SessionEventKind
    code: str
    label: str
    identity: SessionIdentity | None = None
    reason: str = ""

    @property
    def terminal(self) -> bool:
        return self.kind in (SessionEventKind.CLOSED, SessionEventKind.KICKED)


class Session:
    """Binds one correlator, one clock, one logger and the four engines.

    ``idle -> connecting -> authenticating -> active -> closed``. A closed
    session never reconnects; build a new one instead.
    """

    def __init__(
        self,
        code: str,
        label: str,
        config: BotConfig | None = None,
        transport_factory: Callable[[], MessageTransport] = WebSocketTransport,
        *,
        codec: PayloadCodec | None = None,
        notifier: Notifier | None = None,
        on_event: Callable[[SessionEvent], None] | None = None,
        gamedata: GameData | None = None,
        clock: ClockOffset | None = None,
    ) -> None:
        self.code = code
        self.label = label
        self.config = config or BotConfig()
        self.state = SessionState.IDLE
        self.identity = SessionIdentity()
        self.clock = clock or ClockOffset()
        self.close_reason: str | None = None
        self.log = logger.bind(session=label)
        self._on_event = on_event
        self._terminal_emitted = False
        self._stopped = False
        self._tasks: set[asyncio.Task[Any]] = set()

        server = self.config.server
        self.correlator = CallCorrelator(
            transport_factory(),
            codec,
            default_timeout_s=server.call_timeout_s,
            logger=self.log,
            on_close=self._on_transport_closed,
            on_timeout=self._on_call_timeout,
        )
        self.client = GameClient(self.correlator, server.client_version)

        ctx = EngineContext(
            label=label,
            client=self.client,
            identity=self.identity,
            clock=self.clock,
            log=self.log,
            notifier=notifier,
            gamedata=gamedata or GameData(),
        )
        self.farm = FarmEngine(ctx, self.config.farm)
        self.friend = FriendEngine(ctx, self.config.friend)
        self.task = TaskEngine(ctx, self.config.task)
        self.warehouse = WarehouseEngine(ctx, self.config.warehouse)
        self.engines: list[PollingEngine] = [self.farm, self.friend, self.task, self.warehouse]

        self.correlator.on_push(KICKOUT_EVENT, self._on_kickout)
        self.correlator.on_push(TASK_INFO_EVENT, self.task.on_task_notify)

    @property
    def code_prefix(self) -> str:
        return f"{self.code[:CODE_PREFIX_LEN]}..."

    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    # ------------------------------------------------------------ lifecycle

    async def start(self) -> SessionIdentity:
        """Connect, authenticate and start the engines.

        Returns:
            The authenticated identity

        Raises:
            SessionStateError: Session was already started or closed
            TransportClosedError: Connection could not be opened or dropped
            CallError: Authentication failed
        """
        if self.state is SessionState.CLOSED:
            raise SessionStateError(f"{self.label}: session is closed, create a new one")
        if self.state is not SessionState.IDLE:
            raise SessionStateError(f"{self.label}: cannot start from {self.state}")

        server = self.config.server
        self.state = SessionState.CONNECTING
        self.log.info("session_connecting", url=server.url, code=self.code_prefix)
        try:
            await self.correlator.open(
                server.login_url(self.code),
                origin=server.origin,
                timeout=server.connect_timeout_s,
            )
            self.state = SessionState.AUTHENTICATING
            reply = await self.client.login()
            if self.correlator.closed:
                raise TransportClosedError(self.correlator.close_reason or "closed during login")
        except FarmbotError as e:
            self.log.warning("session_start_failed", state=str(self.state), error=str(e))
            await self.stop(f"start failed: {e}")
            raise

        basic = reply.basic
        if basic is not None:
            self.identity.gid = basic.gid
            self.identity.name = basic.name
            self.identity.level = basic.level
            self.identity.gold = basic.gold
            self.identity.exp = basic.exp
        self.clock.observe(reply.time_now_millis)

        self.correlator.start_beat(self._beat, server.heartbeat_interval_s)
        self.state = SessionState.ACTIVE
        for engine in self.engines:
            engine.start()

        self.log.info(
            "session_active",
            gid=self.identity.gid,
            name=self.identity.name,
            level=self.identity.level,
            gold=self.identity.gold,
        )
        self._emit(SessionEventKind.LOGIN_SUCCESS)
        return self.identity

    async def stop(self, reason: str = "stopped") -> None:
        """Stop the engines and close the connection. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        if self.close_reason is None:
            self.close_reason = reason
        self._stop_engines()
        await self.correlator.close(reason)
        self.state = SessionState.CLOSED

    def status(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "code": self.code_prefix,
            "state": str(self.state),
            "identity": self.identity.model_dump(),
            "clock_synced": self.clock.synced,
            "pending_calls": self.correlator.pending_count,
            "keepalive": self.correlator.beat_status(),
            "engines": {e.name: {"running": e.is_running(), "cycles": e.cycles} for e in self.engines},
            "friend_limits": self.friend.limits.snapshot(),
            "close_reason": self.close_reason,
        }

    # ------------------------------------------------------------ callbacks

    async def _beat(self) -> None:
        if self.identity.gid == 0:
            return
        reply = await self.client.heartbeat(self.identity.gid)
        self.clock.observe(reply.server_time)

    def _on_transport_closed(self, reason: str) -> None:
        was_active = self.state is SessionState.ACTIVE
        self._stop_engines()
        self.state = SessionState.CLOSED
        if self.close_reason is None:
            self.close_reason = reason
        if was_active:
            self.log.info("session_closed", reason=self.close_reason)
            self._emit(SessionEventKind.CLOSED, self.close_reason)

    def _on_call_timeout(self, error: CallTimeoutError) -> None:
        if self.state is SessionState.ACTIVE:
            self._emit(SessionEventKind.TIMEOUT, str(error))

    def _on_kickout(self, event: EventMessage) -> None:
        try:
            notice = self.correlator.codec.decode(event.body, KickoutNotify)
            reason = f"kicked: {notice.reason_message or notice.reason}"
        except DecodeError:
            reason = "kicked"
        self.log.warning("session_kicked", reason=reason)
        self.close_reason = reason
        self._emit(SessionEventKind.KICKED, reason)
        task = asyncio.create_task(self.stop(reason))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _stop_engines(self) -> None:
        for engine in self.engines:
            engine.stop()

    def _emit(self, kind: SessionEventKind, reason: str = "") -> None:
        event = SessionEvent(
            kind=kind,
            code=self.code,
            label=self.label,
            identity=self.identity.model_copy(),
            reason=reason,
        )
        if event.terminal:
            if self._terminal_emitted:
                return
            self._terminal_emitted = True
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            self.log.exception("session_event_handler_failed", kind=str(kind))

