# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from farmbot.config import BotConfig
from farmbot.protocol.messages import LoginReply, UserBasic

from .fake_server import FakeGameServer, RecordingNotifier

NOW_MS = 1_700_000_000_000


@pytest.fixture
def server() -> FakeGameServer:
    """Fake gateway that accepts logins for gid 42."""
    fake = FakeGameServer()
    fake.on(
        "Login",
        LoginReply(
            basic=UserBasic(gid=42, name="Farmer", level=12, gold=500, exp=1000),
            time_now_millis=NOW_MS,
        ),
    )
    return fake


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def quiet_config() -> BotConfig:
    """Config with every engine disabled and a slow beat."""
    config = BotConfig()
    config.server.heartbeat_interval_s = 3600
    config.server.call_timeout_s = 0.05
    for section in (config.farm, config.friend, config.task, config.warehouse):
        section.enabled = False
    return config
