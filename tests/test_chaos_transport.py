from __future__ import annotations

from typing import Any

import pytest

from farmbot.config import ChaosConfig
from farmbot.transport import ChaosTransport, WebSocketTransport, build_transport
from farmbot.transport.base import MessageTransport


class DummyTransport(MessageTransport):
    def __init__(self) -> None:
        self.connected = False
        self.rx_calls = 0

    async def connect(self, url: str, **kwargs: Any) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def send(self, data: bytes) -> None:
        if not self.connected:
            raise ConnectionError("Not connected")

    async def receive(self) -> bytes:
        if not self.connected:
            raise ConnectionError("Not connected")
        self.rx_calls += 1
        return f"msg{self.rx_calls}".encode()

    def is_connected(self) -> bool:
        return self.connected


@pytest.mark.asyncio
async def test_chaos_disconnect_every_n_receives() -> None:
    inner = DummyTransport()
    transport = ChaosTransport(inner, seed=1, disconnect_every_n_receives=2, label="t")
    await transport.connect("ws://x")

    assert await transport.receive() == b"msg1"
    assert inner.is_connected()

    with pytest.raises(ConnectionError, match="injected disconnect"):
        await transport.receive()
    assert not inner.is_connected()


@pytest.mark.asyncio
async def test_chaos_drop_every_n_receives_skips_message() -> None:
    inner = DummyTransport()
    transport = ChaosTransport(inner, seed=1, drop_every_n_receives=2, label="t")
    await transport.connect("ws://x")

    assert await transport.receive() == b"msg1"
    assert await transport.receive() == b"msg3"
    assert inner.rx_calls == 3


def test_build_transport_wraps_when_configured() -> None:
    assert isinstance(build_transport(), WebSocketTransport)
    assert isinstance(build_transport(ChaosConfig(drop_every_n_receives=3)), ChaosTransport)
