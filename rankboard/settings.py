"""
Per-game runtime settings read from the environment.

    GAME_<TYPE>_CHANNEL_ID   channel that receives LB_UPDATE commands
    GAME_<TYPE>_WEBHOOK_URL  webhook that owns the leaderboard message
    GAME_<TYPE>_MESSAGE_ID   leaderboard message to edit (optional)
"""

import os
from dataclasses import dataclass

from rankboard.config import GAME_ENV_PREFIX
from rankboard.exceptions import ConfigurationError
from rankboard.games import GameType, get_game_config
from rankboard.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


@dataclass
class GameSettings:
    game: GameType
    channel_id: str | None
    webhook_url: str | None
    message_id: str | None = None

    @property
    def name(self) -> str:
        return get_game_config(self.game).display_name


def _env(environ, game: GameType, key: str) -> str | None:
    value = environ.get(f"{GAME_ENV_PREFIX}{game.value}_{key}", "").strip()
    return value or None


def load_game_settings(
    games: list[GameType] | None = None,
    local: bool = False,
    environ=None,
) -> list[GameSettings]:
    """
    Load settings for the configured games.

    In Discord mode a game needs both a channel id and a webhook URL and is
    skipped with a warning otherwise. In local mode nothing is required:
    the channel id only filters export files and the leaderboard message id
    defaults to the lowercase game name.

    Args:
        games: Games to load (default: all)
        local: Whether the local export transport is used
        environ: Mapping to read from (default: os.environ)

    Returns:
        List of GameSettings

    Raises:
        ConfigurationError: If no game is usable
    """
    environ = os.environ if environ is None else environ
    games = games or list(GameType)
    settings = []

    logger.info("Loading game configurations...")

    for game in games:
        channel_id = _env(environ, game, "CHANNEL_ID")
        webhook_url = _env(environ, game, "WEBHOOK_URL")
        message_id = _env(environ, game, "MESSAGE_ID")
        name = get_game_config(game).display_name

        if local:
            message_id = message_id or game.value.lower()
        elif not channel_id or not webhook_url:
            logger.warning(f"Incomplete configuration for {name}, skipping")
            continue

        settings.append(GameSettings(
            game=game,
            channel_id=channel_id,
            webhook_url=webhook_url,
            message_id=message_id,
        ))
        logger.info(f"  {name}: channel {channel_id or 'any'}")

    if not settings:
        raise ConfigurationError("No valid game configurations found")

    logger.info(f"Loaded {len(settings)} game(s)")
    return settings
