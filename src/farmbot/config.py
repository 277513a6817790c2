# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Behavior configuration for farmbot sessions."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmbot.constants import (
    DEFAULT_CALL_TIMEOUT_S,
    DEFAULT_CONNECT_TIMEOUT_S,
    DEFAULT_FERTILIZER_ID,
    DEFAULT_HEARTBEAT_INTERVAL_S,
    DEFAULT_MAX_TIMEOUTS,
    SEED_SHOP_ID,
    SELL_BATCH_SIZE,
)
from farmbot.logging import get_logger

logger = get_logger(__name__)

MIN_INTERVAL_S = 1.0


class ChaosConfig(BaseModel):
    """Fault injection for resilience runs; see ChaosTransport."""

    seed: int = 1
    disconnect_every_n_receives: int = 0
    drop_every_n_receives: int = 0
    max_jitter_ms: int = 0
    label: str = "chaos"

    model_config = ConfigDict(extra="ignore")


class ServerConfig(BaseModel):
    """Gateway connection settings."""

    url: str = "wss://gate-obt.nqf.qq.com/prod/ws"
    client_version: str = "1.6.0.14_20251224"
    platform: str = "qq"
    os: str = "iOS"
    origin: str = "https://gate-obt.nqf.qq.com"
    call_timeout_s: float = DEFAULT_CALL_TIMEOUT_S
    connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S
    heartbeat_interval_s: float = DEFAULT_HEARTBEAT_INTERVAL_S
    chaos: ChaosConfig | None = None

    model_config = ConfigDict(extra="ignore")

    def login_url(self, code: str) -> str:
        return f"{self.url}?platform={self.platform}&os={self.os}&ver={self.client_version}&code={code}&openID="


class LoopConfig(BaseModel):
    """Common polling loop settings."""

    enabled: bool = True
    interval_s: float = 10.0
    initial_delay_s: float = 0.0

    model_config = ConfigDict(extra="ignore")

    @field_validator("interval_s")
    @classmethod
    def _floor_interval(cls, value: float) -> float:
        return max(value, MIN_INTERVAL_S)


class FarmConfig(LoopConfig):
    """Own-farm engine settings."""

    interval_s: float = 1.0
    initial_delay_s: float = 2.0
    step_delay_s: float = 0.5
    plant_delay_s: float = 0.3
    lowest_tier_seed: bool = False
    seed_shop_id: int = SEED_SHOP_ID
    fertilize: bool = True
    fertilizer_id: int = DEFAULT_FERTILIZER_ID


class FriendConfig(LoopConfig):
    """Friend-farm engine settings."""

    interval_s: float = 10.0
    initial_delay_s: float = 8.0
    op_delay_s: float = 0.3
    visit_delay_s: float = 0.8
    help: bool = True
    steal: bool = True
    nuisance: bool = True


class TaskConfig(LoopConfig):
    """Task reward engine settings."""

    interval_s: float = 300.0
    initial_delay_s: float = 4.0
    claim_delay_s: float = 0.3
    notify_delay_s: float = 1.0


class WarehouseConfig(LoopConfig):
    """Fruit selling engine settings."""

    interval_s: float = 60.0
    initial_delay_s: float = 10.0
    sell_delay_s: float = 0.3
    batch_size: int = SELL_BATCH_SIZE


class SupervisorConfig(BaseModel):
    """Session supervisor settings."""

    max_timeouts: int = DEFAULT_MAX_TIMEOUTS

    model_config = ConfigDict(extra="ignore")


class BotConfig(BaseModel):
    """Complete bot configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    farm: FarmConfig = Field(default_factory=FarmConfig)
    friend: FriendConfig = Field(default_factory=FriendConfig)
    task: TaskConfig = Field(default_factory=TaskConfig)
    warehouse: WarehouseConfig = Field(default_factory=WarehouseConfig)
    supervisor: SupervisorConfig = Field(default_factory=SupervisorConfig)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_yaml(cls, path: Path | str) -> BotConfig:
        path = Path(path)
        logger.info("config_loading", path=str(path))
        data = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: Path | str) -> None:
        path = Path(path)
        logger.info("config_saving", path=str(path))
        data = self.model_dump(mode="json")
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))


def load_config(path: Path | str | None) -> BotConfig:
    if path is None:
        return BotConfig()
    return BotConfig.from_yaml(path)
