"""
Record types shared by the parser, codec, merge engine and renderer.
"""

from dataclasses import dataclass, field
from datetime import datetime

from rankboard.games import GameType


@dataclass(frozen=True)
class Rank:
    """A rank name plus tier, e.g. Rank("Diamond", 2)."""

    name: str
    tier: int = 1

    def __str__(self) -> str:
        return f"{self.name} {self.tier}"


@dataclass(frozen=True)
class RolePlayerRecord:
    """Leaderboard entry for the two-rank games (current and peak)."""

    user_id: str
    role: str
    current_rank: Rank
    current_value: int
    peak_rank: Rank
    peak_value: int
    last_updated: str

    @property
    def label(self) -> str:
        return self.role


@dataclass(frozen=True)
class HeroPlayerRecord:
    """Leaderboard entry for the single-rank game."""

    user_id: str
    hero_name: str
    current_rank: Rank
    current_value: int
    last_updated: str

    @property
    def label(self) -> str:
        return self.hero_name


PlayerRecord = RolePlayerRecord | HeroPlayerRecord


@dataclass
class LeaderboardState:
    """Decoded snapshot: game, processing cursor and the player set."""

    game: GameType | None = None
    cursor: str | None = None
    players: list[PlayerRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedUpdate:
    """A successfully parsed command together with its source message."""

    message_id: str
    timestamp: datetime | None
    record: PlayerRecord


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one command message."""

    game: GameType
    record: PlayerRecord | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class ChannelMessage:
    """Transport-neutral view of one chat message."""

    id: str
    content: str
    created_at: datetime | None = None
