"""Tests for behavior config and environment settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from farmbot.config import BotConfig, FarmConfig, load_config
from farmbot.settings import Settings


def test_defaults() -> None:
    config = BotConfig()
    assert config.server.call_timeout_s == 10
    assert config.server.heartbeat_interval_s == 25
    assert config.farm.interval_s == 1
    assert config.friend.interval_s == 10
    assert config.warehouse.batch_size == 15
    assert config.supervisor.max_timeouts == 3
    assert config.server.chaos is None


def test_interval_has_a_floor() -> None:
    assert FarmConfig(interval_s=0.1).interval_s == 1.0
    assert FarmConfig(interval_s=5).interval_s == 5


def test_login_url() -> None:
    url = BotConfig().server.login_url("abc")
    assert url.startswith("wss://")
    assert "platform=qq" in url
    assert "ver=1.6.0.14_20251224" in url
    assert url.endswith("code=abc&openID=")


def test_yaml_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "farmbot.yaml"
    config = BotConfig()
    config.friend.nuisance = False
    config.farm.lowest_tier_seed = True
    config.to_yaml(path)

    loaded = load_config(path)
    assert loaded == config


def test_yaml_partial_and_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "farmbot.yaml"
    path.write_text("farm:\n  fertilize: false\n  bogus: 1\nserver:\n  chaos:\n    drop_every_n_receives: 4\n")

    config = load_config(path)
    assert config.farm.fertilize is False
    assert config.farm.step_delay_s == 0.5
    assert config.server.chaos.drop_every_n_receives == 4
    assert load_config(None) == BotConfig()


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FARMBOT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FARMBOT_DATA_ROOT", str(tmp_path))
    monkeypatch.setenv("FARMBOT_TELEGRAM_TOKEN", "t0k")

    settings = Settings()
    assert settings.log_level == "DEBUG"
    assert settings.data_root == tmp_path
    assert settings.telegram_token == "t0k"
    assert settings.telegram_chat_id is None
