"""Tests for the Session state machine."""

from __future__ import annotations

import asyncio

import pytest

from farmbot.config import BotConfig
from farmbot.constants import KICKOUT_EVENT, TASK_INFO_EVENT
from farmbot.core.session import Session, SessionEvent, SessionEventKind, SessionState
from farmbot.errors import RemoteError, SessionStateError, TransportClosedError
from farmbot.protocol.messages import HeartbeatReply, KickoutNotify

from .conftest import NOW_MS
from .fake_server import NO_REPLY, FakeGameServer, FakeRemoteError, FakeTransport, settle

CODE = "0123456789abcdef0123456789abcdef"


class Built:
    def __init__(self, server: FakeGameServer, config: BotConfig) -> None:
        self.transports: list[FakeTransport] = []
        self.events: list[SessionEvent] = []
        self.server = server
        self.session = Session(CODE, "U1", config, self._factory, on_event=self.events.append)

    def _factory(self) -> FakeTransport:
        transport = FakeTransport(self.server)
        self.transports.append(transport)
        return transport

    @property
    def transport(self) -> FakeTransport:
        return self.transports[0]

    def kinds(self) -> list[SessionEventKind]:
        return [e.kind for e in self.events]


@pytest.mark.asyncio
async def test_start_authenticates_and_goes_active(server: FakeGameServer, quiet_config: BotConfig) -> None:
    built = Built(server, quiet_config)
    session = built.session
    assert session.state is SessionState.IDLE

    identity = await session.start()

    assert session.state is SessionState.ACTIVE
    assert identity.gid == 42
    assert identity.name == "Farmer"
    assert session.clock.synced
    assert session.clock.now_ms() >= NOW_MS
    assert f"code={CODE}" in built.transport.url
    assert built.transport.connect_kwargs["timeout"] == quiet_config.server.connect_timeout_s
    assert built.kinds() == [SessionEventKind.LOGIN_SUCCESS]
    assert built.events[0].identity.gid == 42

    await session.stop()
    assert session.state is SessionState.CLOSED


@pytest.mark.asyncio
async def test_stop_is_idempotent_and_emits_one_closed_event(server: FakeGameServer, quiet_config: BotConfig) -> None:
    built = Built(server, quiet_config)
    await built.session.start()

    await built.session.stop("operator")
    await built.session.stop("operator again")

    assert built.kinds() == [SessionEventKind.LOGIN_SUCCESS, SessionEventKind.CLOSED]
    assert built.events[-1].reason == "operator"
    assert built.session.close_reason == "operator"


@pytest.mark.asyncio
async def test_closed_session_cannot_restart(server: FakeGameServer, quiet_config: BotConfig) -> None:
    built = Built(server, quiet_config)
    await built.session.start()
    with pytest.raises(SessionStateError):
        await built.session.start()

    await built.session.stop()
    with pytest.raises(SessionStateError, match="closed"):
        await built.session.start()
    assert len(built.transports) == 1


@pytest.mark.asyncio
async def test_login_failure_closes_without_events(quiet_config: BotConfig) -> None:
    server = FakeGameServer()
    server.on("Login", FakeRemoteError(1000, "code expired"))
    built = Built(server, quiet_config)

    with pytest.raises(RemoteError):
        await built.session.start()

    assert built.session.state is SessionState.CLOSED
    assert built.events == []
    assert not built.transport.connected


@pytest.mark.asyncio
async def test_connect_failure(quiet_config: BotConfig) -> None:
    server = FakeGameServer()
    server.refuse_connect = True
    built = Built(server, quiet_config)

    with pytest.raises(TransportClosedError):
        await built.session.start()
    assert built.session.state is SessionState.CLOSED


@pytest.mark.asyncio
async def test_remote_close_stops_engines(server: FakeGameServer) -> None:
    config = BotConfig()
    config.server.heartbeat_interval_s = 3600
    config.farm.initial_delay_s = 3600
    built = Built(server, config)
    await built.session.start()
    assert built.session.farm.is_running()

    built.transport.close_remote()
    await settle()

    assert built.session.state is SessionState.CLOSED
    assert all(engine.stopped for engine in built.session.engines)
    assert not built.session.farm.is_running()
    assert built.kinds() == [SessionEventKind.LOGIN_SUCCESS, SessionEventKind.CLOSED]
    assert built.events[-1].reason == "closed by remote"
    await built.session.stop()


@pytest.mark.asyncio
async def test_kickout_push_is_terminal_once(server: FakeGameServer, quiet_config: BotConfig) -> None:
    built = Built(server, quiet_config)
    await built.session.start()

    built.transport.push(KICKOUT_EVENT, KickoutNotify(reason=2, reason_message="logged in elsewhere"))
    await settle(20)

    assert built.kinds() == [SessionEventKind.LOGIN_SUCCESS, SessionEventKind.KICKED]
    assert built.events[-1].reason == "kicked: logged in elsewhere"
    assert built.session.state is SessionState.CLOSED


@pytest.mark.asyncio
async def test_call_timeouts_are_reported_while_active(server: FakeGameServer, quiet_config: BotConfig) -> None:
    server.on("TaskInfo", NO_REPLY)
    built = Built(server, quiet_config)
    await built.session.start()

    with pytest.raises(TimeoutError):
        await built.session.client.task_info()

    assert built.kinds() == [SessionEventKind.LOGIN_SUCCESS, SessionEventKind.TIMEOUT]
    assert built.session.is_active()
    await built.session.stop()


@pytest.mark.asyncio
async def test_heartbeat_refreshes_clock(server: FakeGameServer, quiet_config: BotConfig) -> None:
    quiet_config.server.heartbeat_interval_s = 0.01
    server.on("Heartbeat", HeartbeatReply(server_time=NOW_MS + 60_000))
    built = Built(server, quiet_config)
    await built.session.start()
    await asyncio.sleep(0.05)

    assert server.count("Heartbeat") >= 1
    assert server.requests("Heartbeat")[0]["gid"] == 42
    assert built.session.clock.now_ms() >= NOW_MS + 60_000
    await built.session.stop()


@pytest.mark.asyncio
async def test_task_notify_push_wakes_task_engine(server: FakeGameServer) -> None:
    config = BotConfig()
    config.server.heartbeat_interval_s = 3600
    for section in (config.farm, config.friend, config.warehouse):
        section.enabled = False
    config.task.initial_delay_s = 3600
    config.task.notify_delay_s = 0.01
    built = Built(server, config)
    await built.session.start()

    built.transport.push(TASK_INFO_EVENT)
    await asyncio.sleep(0.05)

    assert server.count("TaskInfo") == 1
    status = built.session.status()
    assert status["state"] == "active"
    assert status["engines"]["task"]["cycles"] == 1
    assert status["code"] == "01234567..."
    assert status["friend_limits"]["steal"] == {"remaining": None, "exp_exhausted": False}
    assert set(status["friend_limits"]) == {"put_weed", "put_insect", "help_weed", "help_insect", "help_water", "steal"}
    await built.session.stop()
