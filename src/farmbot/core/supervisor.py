# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Multi-session supervision keyed by login credential."""

from __future__ import annotations

import asyncio
import functools
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from farmbot.config import BotConfig
from farmbot.constants import CODE_PREFIX_LEN
from farmbot.core.session import Session, SessionEvent, SessionEventKind, SessionIdentity
from farmbot.errors import FarmbotError
from farmbot.game.gamedata import GameData
from farmbot.logging import get_logger
from farmbot.notify import Notifier
from farmbot.protocol.codec import PayloadCodec
from farmbot.transport import MessageTransport, build_transport

log = get_logger(__name__)

_CODE_IN_URL = re.compile(r"[?&]code=([0-9a-fA-F]{32})")
_BARE_CODE = re.compile(r"^[0-9a-fA-F]{32}$")


def extract_code(text: str) -> str | None:
    """Pull a login code from a pasted URL or a bare 32-hex string."""
    text = text.strip()
    match = _CODE_IN_URL.search(text)
    if match:
        return match.group(1)
    if _BARE_CODE.match(text):
        return text
    return None


def code_prefix(code: str) -> str:
    return f"{code[:CODE_PREFIX_LEN]}..."


@dataclass
class _Entry:
    session: Session
    failure_count: int = 0
    identity: SessionIdentity | None = None


class SessionSupervisor:
    """Owns zero or more sessions, at most one per credential.

    A closed or kicked session is torn down at once. Call timeouts are
    counted and the session is torn down after ``max_timeouts`` in a row;
    a successful login resets the count. Every teardown emits exactly one
    notification.
    """

    def __init__(
        self,
        config: BotConfig | None = None,
        notifier: Notifier | None = None,
        transport_factory: Callable[[], MessageTransport] | None = None,
        *,
        codec: PayloadCodec | None = None,
        gamedata: GameData | None = None,
    ) -> None:
        """Initialize supervisor.

        Args:
            config: Bot configuration shared by all sessions
            notifier: Receives human-readable event summaries
            transport_factory: Builds one fresh transport per session (websocket,
                with fault injection when server.chaos is set, if None)
            codec: Payload codec handed to each session
            gamedata: Static game data shared by all sessions
        """
        self.config = config or BotConfig()
        self.notifier = notifier
        self._transport_factory = transport_factory or functools.partial(build_transport, self.config.server.chaos)
        self._codec = codec
        self._gamedata = gamedata or GameData()
        self._entries: dict[str, _Entry] = {}
        self._counter = 0
        self._teardowns: set[asyncio.Task[Any]] = set()
        self._empty = asyncio.Event()
        self._empty.set()

    @property
    def session_count(self) -> int:
        return len(self._entries)

    @property
    def max_timeouts(self) -> int:
        return self.config.supervisor.max_timeouts

    def get_session(self, code: str) -> Session | None:
        entry = self._entries.get(code)
        return entry.session if entry else None

    async def add_session(self, code: str) -> dict[str, Any]:
        """Create, connect and authenticate a session for ``code``.

        Returns:
            ``{"success": bool, "message": str}``; on success also ``label``
        """
        code = code.strip()
        if not code:
            return {"success": False, "message": "empty login code"}
        if code in self._entries:
            return {"success": False, "message": f"session already running for {code_prefix(code)}"}

        self._counter += 1
        label = f"U{self._counter}"
        session = Session(
            code,
            label,
            self.config,
            self._transport_factory,
            codec=self._codec,
            notifier=self.notifier,
            on_event=self._on_session_event,
            gamedata=self._gamedata,
        )
        entry = _Entry(session=session)
        self._entries[code] = entry
        self._empty.clear()
        log.info("session_adding", label=label, code=code_prefix(code))

        try:
            identity = await session.start()
        except FarmbotError as e:
            self._forget(code, entry)
            log.warning("session_add_failed", label=label, code=code_prefix(code), error=str(e))
            return {"success": False, "message": f"{label} login failed: {e}"}

        return {
            "success": True,
            "message": f"{label} logged in as {identity.name or identity.gid}",
            "label": label,
        }

    async def remove_session(self, code: str) -> bool:
        """Stop one session without a notification."""
        entry = self._entries.get(code)
        if entry is None:
            return False
        self._forget(code, entry)
        await entry.session.stop("removed by operator")
        log.info("session_removed", label=entry.session.label, code=code_prefix(code))
        return True

    async def stop_all(self) -> None:
        """Stop every session. Safe with none running."""
        entries = list(self._entries.values())
        self._entries.clear()
        self._empty.set()
        if entries:
            await asyncio.gather(*(e.session.stop("supervisor stopping") for e in entries))
        if self._teardowns:
            await asyncio.gather(*list(self._teardowns), return_exceptions=True)
        log.info("supervisor_stopped", sessions=len(entries))

    def list_sessions(self) -> list[dict[str, Any]]:
        out = []
        for code, entry in self._entries.items():
            identity = entry.identity or entry.session.identity
            out.append(
                {
                    "code": code_prefix(code),
                    "label": entry.session.label,
                    "user_name": identity.name,
                    "status": str(entry.session.state),
                    "failure_count": entry.failure_count,
                }
            )
        return out

    async def wait_empty(self) -> None:
        """Block until no session remains."""
        await self._empty.wait()

    # ------------------------------------------------------------ events

    def _on_session_event(self, event: SessionEvent) -> None:
        entry = self._entries.get(event.code)
        if entry is None or entry.session.label != event.label:
            log.debug("session_event_ignored", label=event.label, kind=str(event.kind))
            return

        if event.kind is SessionEventKind.LOGIN_SUCCESS:
            entry.failure_count = 0
            entry.identity = event.identity
            identity = event.identity or SessionIdentity()
            log.info("session_login", label=event.label, name=identity.name, gid=identity.gid)
            self._notify(f"[{event.label}] Logged in: {identity.name} (Lv{identity.level}, gold {identity.gold})")
        elif event.kind is SessionEventKind.TIMEOUT:
            entry.failure_count += 1
            log.warning(
                "session_timeout",
                label=event.label,
                count=entry.failure_count,
                max_timeouts=self.max_timeouts,
            )
            if entry.failure_count >= self.max_timeouts:
                self._teardown(event.code, entry, f"{entry.failure_count} consecutive timeouts")
        elif event.terminal:
            self._teardown(event.code, entry, event.reason or str(event.kind))

    def _teardown(self, code: str, entry: _Entry, cause: str) -> None:
        self._forget(code, entry)
        session = entry.session
        identity = entry.identity or session.identity
        log.warning("session_teardown", label=session.label, code=code_prefix(code), cause=cause)
        self._notify(
            f"[{session.label}] Session ended: {identity.name or 'unknown'} ({code_prefix(code)}), cause: {cause}"
        )
        task = asyncio.create_task(session.stop(cause))
        self._teardowns.add(task)
        task.add_done_callback(self._teardowns.discard)

    def _forget(self, code: str, entry: _Entry) -> None:
        if self._entries.get(code) is entry:
            del self._entries[code]
        if not self._entries:
            self._empty.set()

    def _notify(self, text: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(text)
