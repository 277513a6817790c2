# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory game gateway for tests.

``FakeTransport`` is a ``MessageTransport`` whose sends are answered by a
``FakeGameServer``. Handlers are keyed by method name and may be a reply
model, a list of replies (consumed in order, the last one repeats), a
callable taking the decoded request dict, or ``NO_REPLY``.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from farmbot.core.clock import ClockOffset
from farmbot.core.correlator import CallCorrelator
from farmbot.core.session import SessionIdentity
from farmbot.engines.base import EngineContext
from farmbot.game.client import GameClient
from farmbot.logging import get_logger
from farmbot.protocol.codec import JsonPayloadCodec
from farmbot.protocol.frame import GateFrame, GateMeta, MessageKind, decode_frame, encode_frame
from farmbot.protocol.messages import (
    EventMessage,
    LandInfo,
    PlantInfo,
    PlantPhaseInfo,
)
from farmbot.transport.base import MessageTransport

NO_REPLY = object()

MUTATING_METHODS = {
    "Harvest",
    "WaterLand",
    "WeedOut",
    "Insecticide",
    "PutWeeds",
    "PutInsects",
    "RemovePlant",
    "Plant",
    "Fertilize",
    "BuyGoods",
    "Sell",
    "ClaimTaskReward",
}


class FakeRemoteError(Exception):
    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class RecordedCall:
    method: str
    meta: GateMeta
    request: dict[str, Any]


class FakeGameServer:
    def __init__(self) -> None:
        self.codec = JsonPayloadCodec()
        self.handlers: dict[str, Any] = {}
        self.calls: list[RecordedCall] = []
        self.server_seq = 0
        self.refuse_connect = False

    def on(self, method: str, handler: Any) -> None:
        self.handlers[method] = handler

    def count(self, method: str) -> int:
        return sum(1 for c in self.calls if c.method == method)

    def requests(self, method: str) -> list[dict[str, Any]]:
        return [c.request for c in self.calls if c.method == method]

    def methods(self) -> list[str]:
        return [c.method for c in self.calls]

    def mutating_calls(self) -> list[str]:
        return [c.method for c in self.calls if c.method in MUTATING_METHODS]

    def handle(self, transport: FakeTransport, frame: GateFrame) -> None:
        meta = frame.meta
        request = json.loads(frame.body) if frame.body else {}
        self.calls.append(RecordedCall(meta.method_name, meta, request))

        error_code = 0
        error_message = ""
        body = b""
        try:
            result = self._resolve(meta.method_name, request)
        except FakeRemoteError as e:
            error_code, error_message = e.code, e.message
        else:
            if result is NO_REPLY:
                return
            if isinstance(result, BaseModel):
                body = self.codec.encode(result)

        self.server_seq += 1
        reply = GateMeta(
            service_name=meta.service_name,
            method_name=meta.method_name,
            message_type=MessageKind.REPLY,
            client_seq=meta.client_seq,
            server_seq=self.server_seq,
            error_code=error_code,
            error_message=error_message,
        )
        transport.feed(encode_frame(reply, body))

    def _resolve(self, method: str, request: dict[str, Any]) -> Any:
        handler = self.handlers.get(method)
        if isinstance(handler, list):
            handler = handler.pop(0) if len(handler) > 1 else handler[0]
        if isinstance(handler, FakeRemoteError):
            raise handler
        if handler is None or handler is NO_REPLY or isinstance(handler, BaseModel):
            return handler
        return handler(request)


class FakeTransport(MessageTransport):
    def __init__(self, server: FakeGameServer | None = None) -> None:
        self.server = server
        self.connected = False
        self.url: str | None = None
        self.connect_kwargs: dict[str, Any] = {}
        self.sent: list[GateFrame] = []
        self.disconnects = 0
        self._inbox: asyncio.Queue[bytes | None] = asyncio.Queue()

    async def connect(self, url: str, **kwargs: Any) -> None:
        if self.server is not None and self.server.refuse_connect:
            raise ConnectionError("refused")
        self.url = url
        self.connect_kwargs = kwargs
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnects += 1
        if self.connected:
            self.connected = False
            self._inbox.put_nowait(None)

    async def send(self, data: bytes) -> None:
        if not self.connected:
            raise ConnectionError("Not connected")
        frame = decode_frame(data)
        self.sent.append(frame)
        if self.server is not None:
            self.server.handle(self, frame)

    async def receive(self) -> bytes:
        if not self.connected and self._inbox.empty():
            raise ConnectionError("Not connected")
        data = await self._inbox.get()
        if data is None:
            raise ConnectionError("closed by remote")
        return data

    def is_connected(self) -> bool:
        return self.connected

    def feed(self, data: bytes) -> None:
        self._inbox.put_nowait(data)

    def push(self, event_name: str, message: BaseModel | None = None, server_seq: int = 0) -> None:
        codec = JsonPayloadCodec()
        inner = codec.encode(message) if message is not None else b""
        event = EventMessage(message_type=event_name, body=inner)
        meta = GateMeta(message_type=MessageKind.PUSH, server_seq=server_seq)
        self.feed(encode_frame(meta, codec.encode(event)))

    def close_remote(self) -> None:
        self.connected = False
        self._inbox.put_nowait(None)


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, text: str) -> None:
        self.messages.append(text)


async def settle(rounds: int = 10) -> None:
    """Let the reader pump and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def fixed_clock(now_sec: int) -> ClockOffset:
    clock = ClockOffset(timer=lambda: 0.0)
    clock.observe(now_sec * 1000)
    return clock


def phase(kind: int, begin: int, **kwargs: int) -> PlantPhaseInfo:
    return PlantPhaseInfo(phase=kind, begin_time=begin, **kwargs)


def land(land_id: int, phases: list[PlantPhaseInfo] | None = None, *, unlocked: bool = True, **plant: Any) -> LandInfo:
    """Land with a plant when ``phases`` is given, empty otherwise."""
    info = PlantInfo(id=1020000 + land_id, name="carrot", phases=phases, **plant) if phases else None
    return LandInfo(id=land_id, unlocked=unlocked, plant=info)


class Harness:
    """Connected client + engine context over a fake server."""

    def __init__(
        self,
        server: FakeGameServer | None = None,
        *,
        gid: int = 1,
        level: int = 10,
        gold: int = 1000,
        now_sec: int = 1_000,
        call_timeout_s: float = 1.0,
        on_timeout: Callable[..., None] | None = None,
    ) -> None:
        self.server = server or FakeGameServer()
        self.transport = FakeTransport(self.server)
        self.correlator = CallCorrelator(self.transport, default_timeout_s=call_timeout_s, on_timeout=on_timeout)
        self.client = GameClient(self.correlator, "test")
        self.notifier = RecordingNotifier()
        self.identity = SessionIdentity(gid=gid, name="me", level=level, gold=gold)
        self.ctx = EngineContext(
            label="U1",
            client=self.client,
            identity=self.identity,
            clock=fixed_clock(now_sec),
            log=get_logger("tests"),
            notifier=self.notifier,
        )

    async def __aenter__(self) -> Harness:
        await self.correlator.open("ws://fake")
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.correlator.close("test done")
