# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem paths for static game data."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

ENV_DATA_ROOT = "FARMBOT_DATA_ROOT"
GAME_CONFIG_DIRNAME = "gameConfig"


def default_data_root() -> Path:
    """Get the default data root directory."""
    env_root = os.getenv(ENV_DATA_ROOT)
    if env_root:
        return Path(env_root)
    return Path(user_data_dir("farmbot", "farmbot"))


def game_config_dir(data_root: Path | None = None) -> Path:
    """Directory holding Plant.json / RoleLevel.json."""
    return (data_root or default_data_root()) / GAME_CONFIG_DIRNAME
