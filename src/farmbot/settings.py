# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from farmbot.paths import default_data_root


class Settings(BaseSettings):
    data_root: Path = Field(default_factory=default_data_root)
    log_level: str = "INFO"
    log_format: str = "console"
    config_path: Path | None = None
    telegram_token: str | None = None
    telegram_chat_id: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="FARMBOT_",
        env_nested_delimiter="__",
        extra="ignore",
    )
