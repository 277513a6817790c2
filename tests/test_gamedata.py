"""Tests for static game data lookups."""

from __future__ import annotations

import json
from pathlib import Path

from farmbot.game.gamedata import GameData

PLANTS = [
    {"id": 1020002, "name": "Carrot", "seed_id": 20002, "exp": 12, "grow_phases": "seed:30;sprout:60;ripe:0;", "fruit": {"id": 3002, "count": 10}},
    {"id": 1020003, "name": "Corn", "seed_id": 20003, "exp": 20, "grow_phases": "seed:100;ripe:200", "extra": True},
]
LEVELS = [{"level": 1, "exp": 0}, {"level": 2, "exp": 100}, {"level": 3, "exp": 300}]


def write_config(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "Plant.json").write_text(json.dumps(PLANTS), encoding="utf-8")
    (root / "RoleLevel.json").write_text(json.dumps(LEVELS), encoding="utf-8")
    return root


def test_lookups(tmp_path: Path) -> None:
    data = GameData.load(write_config(tmp_path / "gameConfig"))

    assert data.plant_count == 2
    assert data.plant_name(1020002) == "Carrot"
    assert data.seed_name(20003) == "Corn"
    assert data.fruit_name(3002) == "Carrot"
    assert data.plant_by_seed(20002).id == 1020002
    assert data.grow_time(1020002) == 90
    assert data.grow_time(1020003) == 300
    assert data.plant_exp(1020003) == 20


def test_missing_ids_get_placeholders(tmp_path: Path) -> None:
    data = GameData.load(tmp_path / "nothing-here")

    assert data.plant_count == 0
    assert data.plant_name(7) == "plant#7"
    assert data.seed_name(8) == "seed#8"
    assert data.fruit_name(9) == "fruit#9"
    assert data.grow_time(7) == 0
    assert data.plant_exp(7) == 0


def test_broken_file_degrades_to_empty(tmp_path: Path) -> None:
    root = tmp_path / "gameConfig"
    root.mkdir()
    (root / "Plant.json").write_text("{not json", encoding="utf-8")

    data = GameData.load(root)
    assert data.plant_count == 0
    assert data.plant_name(1020002) == "plant#1020002"


def test_level_progress(tmp_path: Path) -> None:
    data = GameData.load(write_config(tmp_path))

    progress = data.level_progress(2, 150)
    assert progress.current == 50
    assert progress.needed == 200
    assert GameData().level_progress(2, 150).needed == 0
