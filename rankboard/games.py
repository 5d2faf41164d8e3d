"""
Supported games and their static ranking configuration.

Every component looks a game up here once and parameterizes on the
returned GameConfig instead of comparing game-name strings.
"""

from dataclasses import dataclass
from enum import Enum


class GameType(str, Enum):
    """Closed set of games with a leaderboard."""

    MARVEL_RIVALS = "MARVEL_RIVALS"
    OVERWATCH = "OVERWATCH"
    DEADLOCK = "DEADLOCK"


@dataclass(frozen=True)
class GameConfig:
    """Static per-game settings."""

    game: GameType
    display_name: str
    command_tag: str
    ranks: tuple[str, ...]  # worst -> best
    max_tier: int
    label_field: str  # "role" or "hero_name"
    value_label: str  # unit shown next to the ladder value
    two_rank: bool  # tracks a peak rank/value besides the current one

    @property
    def column_count(self) -> int:
        """Number of pipe-delimited columns in a persisted player line."""
        return 7 if self.two_rank else 5

    @property
    def min_tokens(self) -> int:
        """Fewest whitespace tokens a valid update command can have."""
        return 7 if self.two_rank else 5


MARVEL_RIVALS_RANKS = (
    'Bronze', 'Silver', 'Gold', 'Platinum', 'Diamond',
    'Grandmaster', 'Celestial', 'Eternity', 'One Above All',
)

OVERWATCH_RANKS = (
    'Bronze', 'Silver', 'Gold', 'Platinum', 'Diamond',
    'Master', 'Grandmaster', 'Champion', 'Top 500',
)

# Deadlock tiers count upwards (6 is the best tier within a rank)
DEADLOCK_RANKS = (
    'Initiate', 'Seeker', 'Alchemist', 'Arcanist', 'Ritualist',
    'Emissary', 'Archon', 'Oracle', 'Phantom Ascendant', 'Eternus',
)

GAME_CONFIGS: dict[GameType, GameConfig] = {
    GameType.MARVEL_RIVALS: GameConfig(
        game=GameType.MARVEL_RIVALS,
        display_name="Marvel Rivals",
        command_tag="LB_UPDATE_MR:",
        ranks=MARVEL_RIVALS_RANKS,
        max_tier=3,
        label_field="role",
        value_label="RR",
        two_rank=True,
    ),
    GameType.OVERWATCH: GameConfig(
        game=GameType.OVERWATCH,
        display_name="Overwatch",
        command_tag="LB_UPDATE_OW:",
        ranks=OVERWATCH_RANKS,
        max_tier=5,
        label_field="role",
        value_label="SR",
        two_rank=True,
    ),
    GameType.DEADLOCK: GameConfig(
        game=GameType.DEADLOCK,
        display_name="Deadlock",
        command_tag="LB_UPDATE_DL:",
        ranks=DEADLOCK_RANKS,
        max_tier=6,
        label_field="hero_name",
        value_label="MMR",
        two_rank=False,
    ),
}


def get_game_config(game: GameType | str) -> GameConfig:
    """
    Look up the configuration for a game.

    Args:
        game: GameType member or its name (e.g. "OVERWATCH")

    Returns:
        The game's GameConfig

    Raises:
        ValueError: If the name is not a supported game
    """
    if not isinstance(game, GameType):
        try:
            game = GameType(game)
        except ValueError:
            raise ValueError(
                f"Unknown game: '{game}'. "
                f"Allowed values: {', '.join(g.value for g in GameType)}"
            ) from None
    return GAME_CONFIGS[game]
