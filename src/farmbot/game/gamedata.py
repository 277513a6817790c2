# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Read-only lookup of static game configuration.

Loads ``Plant.json`` and ``RoleLevel.json`` when they exist. A missing file
or id never raises: names degrade to a synthesized placeholder.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from farmbot.logging import get_logger

logger = get_logger(__name__)

_PHASE_SECONDS = re.compile(r":(\d+)")


class FruitConfig(BaseModel):
    id: int = 0
    count: int = 0

    model_config = ConfigDict(extra="ignore")


class PlantConfig(BaseModel):
    id: int
    name: str = ""
    seed_id: int = 0
    exp: int = 0
    grow_phases: str = ""
    fruit: FruitConfig | None = None

    model_config = ConfigDict(extra="ignore")


class RoleLevelConfig(BaseModel):
    level: int
    exp: int = 0

    model_config = ConfigDict(extra="ignore")


class LevelProgress(BaseModel):
    current: int = 0
    needed: int = 0


class GameData:
    """Static plant and level tables."""

    def __init__(self, plants: list[PlantConfig] | None = None, levels: list[RoleLevelConfig] | None = None) -> None:
        self._plants: dict[int, PlantConfig] = {}
        self._by_seed: dict[int, PlantConfig] = {}
        self._by_fruit: dict[int, PlantConfig] = {}
        self._level_exp: dict[int, int] = {}
        for plant in plants or []:
            self._plants[plant.id] = plant
            if plant.seed_id:
                self._by_seed[plant.seed_id] = plant
            if plant.fruit and plant.fruit.id:
                self._by_fruit[plant.fruit.id] = plant
        for level in levels or []:
            self._level_exp[level.level] = level.exp

    @classmethod
    def load(cls, config_dir: Path) -> GameData:
        """Load whatever tables exist under ``config_dir``."""
        plants = _load_list(config_dir / "Plant.json", PlantConfig)
        levels = _load_list(config_dir / "RoleLevel.json", RoleLevelConfig)
        logger.info("gamedata_loaded", dir=str(config_dir), plants=len(plants), levels=len(levels))
        return cls(plants, levels)

    @property
    def plant_count(self) -> int:
        return len(self._plants)

    def plant(self, plant_id: int) -> PlantConfig | None:
        return self._plants.get(plant_id)

    def plant_by_seed(self, seed_id: int) -> PlantConfig | None:
        return self._by_seed.get(seed_id)

    def plant_by_fruit(self, fruit_id: int) -> PlantConfig | None:
        return self._by_fruit.get(fruit_id)

    def plant_name(self, plant_id: int) -> str:
        plant = self._plants.get(plant_id)
        return plant.name if plant and plant.name else f"plant#{plant_id}"

    def seed_name(self, seed_id: int) -> str:
        plant = self._by_seed.get(seed_id)
        return plant.name if plant and plant.name else f"seed#{seed_id}"

    def fruit_name(self, fruit_id: int) -> str:
        plant = self._by_fruit.get(fruit_id)
        return plant.name if plant and plant.name else f"fruit#{fruit_id}"

    def grow_time(self, plant_id: int) -> int:
        """Total growth seconds: sum of the ``name:seconds`` segments."""
        plant = self._plants.get(plant_id)
        if plant is None or not plant.grow_phases:
            return 0
        total = 0
        for segment in filter(None, plant.grow_phases.split(";")):
            match = _PHASE_SECONDS.search(segment)
            if match:
                total += int(match.group(1))
        return total

    def plant_exp(self, plant_id: int) -> int:
        plant = self._plants.get(plant_id)
        return plant.exp if plant else 0

    def level_progress(self, level: int, total_exp: int) -> LevelProgress:
        if not self._level_exp or level <= 0:
            return LevelProgress()
        start = self._level_exp.get(level, 0)
        nxt = self._level_exp.get(level + 1) or start + 100_000
        return LevelProgress(current=max(0, total_exp - start), needed=nxt - start)


def _load_list(path: Path, model: type[BaseModel]) -> list:
    if not path.exists():
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return [model.model_validate(item) for item in raw]
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("gamedata_load_failed", path=str(path), error=str(e))
        return []
