# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/reply correlation over a single connection.

Every outbound call gets the next client sequence number and a future kept
in a pending map. A background reader pump resolves futures from reply
frames, routes push frames to handlers by event name, and on connection
loss fails every pending call before anything else happens.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

from farmbot.constants import DEFAULT_CALL_TIMEOUT_S
from farmbot.errors import CallTimeoutError, DecodeError, RemoteError, TransportClosedError
from farmbot.keepalive import KeepaliveController
from farmbot.logging import get_logger
from farmbot.protocol.codec import JsonPayloadCodec, PayloadCodec
from farmbot.protocol.frame import GateFrame, GateMeta, MessageKind, decode_frame, encode_frame
from farmbot.protocol.messages import EventMessage

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from farmbot.transport.base import MessageTransport

M = TypeVar("M", bound=BaseModel)


class CallCorrelator:
    """Owns one transport and multiplexes correlated calls over it."""

    def __init__(
        self,
        transport: MessageTransport,
        codec: PayloadCodec | None = None,
        *,
        default_timeout_s: float = DEFAULT_CALL_TIMEOUT_S,
        logger: Any = None,
        on_close: Callable[[str], None] | None = None,
        on_timeout: Callable[[CallTimeoutError], None] | None = None,
    ) -> None:
        """Initialize correlator.

        Args:
            transport: Connection this correlator exclusively owns
            codec: Payload codec (defaults to pydantic JSON)
            default_timeout_s: Deadline for calls that do not pass one
            logger: Bound structlog logger for this session
            on_close: Invoked once, synchronously, after teardown
            on_timeout: Invoked for every call whose deadline elapsed
        """
        self.transport = transport
        self.codec: PayloadCodec = codec or JsonPayloadCodec()
        self.default_timeout_s = default_timeout_s
        self._log = logger or get_logger(__name__)
        self._on_close = on_close
        self._on_timeout = on_timeout

        self._pending: dict[int, asyncio.Future[GateFrame]] = {}
        self._next_seq = 1
        self._server_seq = 0
        self._push_handlers: dict[str, list[Callable[[EventMessage], None]]] = {}
        self._reader_task: asyncio.Task[None] | None = None
        self._keepalive: KeepaliveController | None = None
        self._closed = False
        self.close_reason: str | None = None

    # ------------------------------------------------------------ state

    @property
    def server_seq(self) -> int:
        """Highest server sequence seen in any inbound frame."""
        return self._server_seq

    @property
    def next_seq(self) -> int:
        return self._next_seq

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def is_open(self) -> bool:
        return not self._closed and self.transport.is_connected()

    # ------------------------------------------------------------ lifecycle

    async def open(self, url: str, **kwargs: Any) -> None:
        """Connect the transport and start the reader pump.

        Raises:
            TransportClosedError: If the correlator was closed or connecting fails
        """
        if self._closed:
            raise TransportClosedError("correlator already closed")
        try:
            await self.transport.connect(url, **kwargs)
        except (ConnectionError, TimeoutError) as e:
            raise TransportClosedError(f"connect failed: {e}") from e
        self._reader_task = asyncio.create_task(self._reader_loop())

    async def close(self, reason: str = "closed by client") -> None:
        """Tear down locally: fail pending calls, stop the beat, drop the connection."""
        self._teardown(reason)
        task = self._reader_task
        self._reader_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.transport.disconnect()

    def start_beat(self, beat: Callable[[], Awaitable[None]], interval_s: float) -> None:
        """Run ``beat`` every ``interval_s`` while the connection is open."""
        if self._closed:
            return
        if self._keepalive is not None:
            self._keepalive.cancel()
        self._keepalive = KeepaliveController(beat, self.is_open, interval_s)
        self._keepalive.on_connect()

    def beat_status(self) -> dict[str, Any] | None:
        return self._keepalive.status() if self._keepalive else None

    def on_push(self, event_name: str, handler: Callable[[EventMessage], None]) -> None:
        """Register a handler for a declared push event name."""
        self._push_handlers.setdefault(event_name, []).append(handler)

    # ------------------------------------------------------------ calls

    async def call(
        self,
        service: str,
        method: str,
        body: bytes = b"",
        timeout_s: float | None = None,
    ) -> GateFrame:
        """Send one request and wait for its reply.

        Args:
            service: Remote service name
            method: Remote method name
            body: Encoded request payload
            timeout_s: Deadline in seconds (default_timeout_s if None)

        Returns:
            The reply frame

        Raises:
            CallTimeoutError: No reply before the deadline
            RemoteError: Reply carried a nonzero error code
            TransportClosedError: Connection is or went away
        """
        if not self.is_open():
            raise TransportClosedError(f"{service}.{method}: connection not open")

        timeout = self.default_timeout_s if timeout_s is None else timeout_s
        seq = self._next_seq
        self._next_seq += 1
        meta = GateMeta(
            service_name=service,
            method_name=method,
            message_type=MessageKind.REQUEST,
            client_seq=seq,
            server_seq=self._server_seq,
        )
        future: asyncio.Future[GateFrame] = asyncio.get_running_loop().create_future()
        self._pending[seq] = future

        try:
            try:
                await self.transport.send(encode_frame(meta, body))
            except ConnectionError as e:
                self._teardown(f"send failed: {e}")
                raise TransportClosedError(f"{service}.{method}: send failed") from e

            try:
                return await asyncio.wait_for(future, timeout=timeout)
            except TimeoutError:
                err = CallTimeoutError(service, method, seq, timeout)
                self._log.warning("call_timeout", call=meta.call_name, seq=seq, timeout_s=timeout)
                if self._on_timeout is not None:
                    self._on_timeout(err)
                raise err from None
        finally:
            self._pending.pop(seq, None)

    async def request(
        self,
        service: str,
        method: str,
        message: BaseModel,
        reply_model: type[M],
        timeout_s: float | None = None,
    ) -> M:
        """Typed call: encode ``message``, decode the reply as ``reply_model``.

        Raises:
            DecodeError: Reply payload does not match ``reply_model``
        """
        frame = await self.call(service, method, self.codec.encode(message), timeout_s)
        return self.codec.decode(frame.body, reply_model)

    # ------------------------------------------------------------ inbound

    async def _reader_loop(self) -> None:
        reason = "connection closed"
        try:
            while True:
                data = await self.transport.receive()
                self._dispatch(data)
        except asyncio.CancelledError:
            return
        except ConnectionError as e:
            reason = str(e) or reason

        self._teardown(reason)
        await self.transport.disconnect()

    def _dispatch(self, data: bytes) -> None:
        try:
            frame = decode_frame(data)
        except DecodeError as e:
            self._log.warning("frame_decode_failed", error=str(e), size=len(data))
            return

        meta = frame.meta
        if meta.server_seq > self._server_seq:
            self._server_seq = meta.server_seq

        if meta.message_type == MessageKind.REPLY:
            self._resolve(frame)
        elif meta.message_type == MessageKind.PUSH:
            self._dispatch_push(frame)
        else:
            self._log.debug("frame_ignored", message_type=meta.message_type, call=meta.call_name)

    def _resolve(self, frame: GateFrame) -> None:
        meta = frame.meta
        future = self._pending.pop(meta.client_seq, None)
        if future is None or future.done():
            if meta.error_code:
                self._log.warning(
                    "remote_error_unmatched",
                    call=meta.call_name,
                    seq=meta.client_seq,
                    code=meta.error_code,
                    message=meta.error_message,
                )
            else:
                self._log.debug("reply_unmatched", call=meta.call_name, seq=meta.client_seq)
            return

        if meta.error_code != 0:
            future.set_exception(RemoteError(meta.service_name, meta.method_name, meta.error_code, meta.error_message))
        else:
            future.set_result(frame)

    def _dispatch_push(self, frame: GateFrame) -> None:
        if not frame.body:
            return
        try:
            event = self.codec.decode(frame.body, EventMessage)
        except DecodeError as e:
            self._log.warning("push_decode_failed", error=str(e))
            return

        handlers = self._push_handlers.get(event.message_type)
        if not handlers:
            self._log.debug("push_ignored", event=event.message_type)
            return
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                self._log.exception("push_handler_failed", event=event.message_type)

    # ------------------------------------------------------------ teardown

    def _teardown(self, reason: str) -> None:
        """Fail every pending call and stop the beat. Runs at most once."""
        if self._closed:
            return
        self._closed = True
        self.close_reason = reason
        if self._keepalive is not None:
            self._keepalive.cancel()

        pending, self._pending = self._pending, {}
        for seq, future in pending.items():
            if not future.done():
                future.set_exception(TransportClosedError(f"{reason} (seq={seq})"))

        self._log.info("correlator_closed", reason=reason, failed_calls=len(pending))
        if self._on_close is not None:
            self._on_close(reason)
