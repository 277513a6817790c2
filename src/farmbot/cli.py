# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path

import click

from farmbot.config import BotConfig, load_config
from farmbot.core.supervisor import SessionSupervisor, extract_code
from farmbot.game.gamedata import GameData
from farmbot.logging import configure_logging, get_logger
from farmbot.notify import TelegramNotifier, build_notifier
from farmbot.paths import game_config_dir
from farmbot.settings import Settings

log = get_logger(__name__)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """farmbot command line interface."""


@cli.command("run")
@click.option("--code", "codes", multiple=True, required=True, help="Login code or a URL containing ?code=.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML behavior configuration.",
)
@click.option("--log-level", default=None, help="Override FARMBOT_LOG_LEVEL.")
def run(codes: tuple[str, ...], config_path: Path | None, log_level: str | None) -> None:
    """Run one session per login code until interrupted or all sessions end."""
    settings = Settings()
    if log_level:
        settings.log_level = log_level
    configure_logging(settings)

    parsed = []
    for raw in codes:
        code = extract_code(raw)
        if code is None:
            raise click.BadParameter(f"no login code found in {raw!r}", param_hint="--code")
        parsed.append(code)

    config = load_config(config_path or settings.config_path)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run(settings, config, parsed))


async def _run(settings: Settings, config: BotConfig, codes: list[str]) -> None:
    notifier = build_notifier(settings)
    gamedata = GameData.load(game_config_dir(settings.data_root))
    supervisor = SessionSupervisor(config, notifier, gamedata=gamedata)
    try:
        for code in codes:
            result = await supervisor.add_session(code)
            log.info("session_add_result", **result)
        await supervisor.wait_empty()
    finally:
        await supervisor.stop_all()
        if isinstance(notifier, TelegramNotifier):
            await notifier.aclose()


@cli.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def init_config(path: Path, force: bool) -> None:
    """Write the default configuration to PATH."""
    if path.exists() and not force:
        raise click.ClickException(f"{path} exists (use --force to overwrite)")
    BotConfig().to_yaml(path)
    click.echo(f"Wrote {path}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
