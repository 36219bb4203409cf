#!/usr/bin/env python3
"""Console entry point: load settings, configure logging, run the music board bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_music_board.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_music_board.config.settings import Settings

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

_FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(log_level: str = "INFO", config_path: Path = LOGGING_CONFIG_PATH) -> None:
    """Apply the JSON dictConfig, or a plain basicConfig when it is missing or invalid."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    except (OSError, json.JSONDecodeError, ValueError):
        logging.basicConfig(level=level, format=_FALLBACK_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger(__name__).warning(
            "Could not load %s, falling back to basic config", config_path
        )

    logging.getLogger().setLevel(level)


def run(settings: Settings) -> int:
    logger = logging.getLogger(__name__)

    token = settings.discord.token.get_secret_value()
    if not token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    from discord_music_board.config.container import create_container
    from discord_music_board.infrastructure.discord.bot import create_bot

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    bot = create_bot(create_container(settings), settings)

    try:
        bot.run_with_graceful_shutdown(token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1

    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def main() -> int:
    from discord_music_board.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)
    return run(settings)


def cli() -> None:
    """Console script entry point (``discord-music-board``)."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
