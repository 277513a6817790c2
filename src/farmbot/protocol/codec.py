# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Payload codec collaborator.

The correlator never looks inside a payload. Engines hand typed request
models to a codec and get typed reply models back. The default codec uses
pydantic JSON; a schema-compiled binary codec can be swapped in by
implementing the same two methods.
"""

from __future__ import annotations

from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from farmbot.errors import DecodeError

M = TypeVar("M", bound=BaseModel)


class PayloadCodec(Protocol):
    def encode(self, message: BaseModel) -> bytes: ...

    def decode(self, data: bytes, model: type[M]) -> M: ...


class JsonPayloadCodec:
    """pydantic JSON payloads."""

    def encode(self, message: BaseModel) -> bytes:
        return message.model_dump_json().encode("utf-8")

    def decode(self, data: bytes, model: type[M]) -> M:
        if not data:
            # Empty body means "all defaults", as with protobuf.
            return model()
        try:
            return model.model_validate_json(data)
        except ValidationError as e:
            raise DecodeError(f"cannot decode {model.__name__}: {e.error_count()} error(s)") from e
