# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception hierarchy for farmbot."""

from __future__ import annotations


class FarmbotError(Exception):
    """Base exception for farmbot."""

    pass


class CallError(FarmbotError):
    """A single correlated call failed; the session is still usable."""

    pass


class CallTimeoutError(CallError, TimeoutError):
    """No reply arrived before the call deadline."""

    def __init__(self, service: str, method: str, seq: int, timeout_s: float) -> None:
        self.service = service
        self.method = method
        self.seq = seq
        self.timeout_s = timeout_s
        super().__init__(f"{service}.{method} timed out after {timeout_s:g}s (seq={seq})")


class RemoteError(CallError):
    """The server answered with a nonzero error code."""

    def __init__(self, service: str, method: str, code: int, message: str = "") -> None:
        self.service = service
        self.method = method
        self.code = code
        self.message = message
        super().__init__(f"{service}.{method} error: code={code} {message}".rstrip())


class DecodeError(CallError):
    """Malformed frame or payload."""

    pass


class TransportClosedError(FarmbotError, ConnectionError):
    """The connection is gone; every pending call fails with this."""

    pass


class SessionStateError(FarmbotError):
    """Illegal session lifecycle transition."""

    pass
