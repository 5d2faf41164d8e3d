"""
Leaderboard Renderer

Formats the human-readable leaderboard message. The encoded snapshot of
all players is appended at the bottom so the message doubles as storage.
"""

from datetime import datetime, timezone

import pandas as pd

from rankboard.config import (
    DISCORD_MESSAGE_LIMIT,
    MAX_RENDERED_PLAYERS,
    MIN_RENDERED_PLAYERS,
    TRUNCATE_TARGET_LENGTH,
)
from rankboard.games import GameType, get_game_config
from rankboard.storage.codec import encode_state
from rankboard.utils import setup_logging, to_timestamp

# --- Module Logger ---
logger = setup_logging(__name__)

RANK_EMOJIS = {
    # Marvel Rivals
    'bronze': '🟫',
    'silver': '⚪',
    'gold': '🟡',
    'platinum': '🔵',
    'diamond': '💎',
    'grandmaster': '👑',
    'celestial': '✨',
    'eternity': '♾️',
    'one above all': '🌟',

    # Overwatch
    'master': '🎖️',
    'champion': '🏆',
    'top 500': '⭐',

    # Deadlock
    'initiate': '🔰',
    'seeker': '🔍',
    'alchemist': '⚗️',
    'arcanist': '🔮',
    'ritualist': '📿',
    'emissary': '💼',
    'archon': '👤',
    'oracle': '🧙',
    'phantom ascendant': '👻',
    'eternus': '♾️',
}
DEFAULT_RANK_EMOJI = '🔹'

SEPARATOR = '  •  '

# (unit, seconds per unit, upper bound in that unit before moving on)
_TIME_UNITS = [
    ('second', 1, 60),
    ('minute', 60, 60),
    ('hour', 3600, 24),
    ('day', 86400, 7),
    ('week', 7 * 86400, 4),
    ('month', 30 * 86400, 12),
]


def get_rank_emoji(rank_name: str) -> str:
    return RANK_EMOJIS.get(rank_name.lower(), DEFAULT_RANK_EMOJI)


def relative_time(timestamp: str, now: datetime | None = None) -> str:
    """
    Describe how long ago a timestamp was, e.g. "3 days ago".

    Args:
        timestamp: ISO-8601 timestamp
        now: Reference time (default: current UTC time)

    Returns:
        Relative time string with singular/plural units
    """
    now_ts = pd.Timestamp(now or datetime.now(timezone.utc))
    if now_ts.tzinfo is None:
        now_ts = now_ts.tz_localize("UTC")
    seconds = max(0, int((now_ts - to_timestamp(timestamp)).total_seconds()))

    def _plural(count, unit):
        return f"1 {unit} ago" if count == 1 else f"{count} {unit}s ago"

    for unit, size, limit in _TIME_UNITS:
        count = seconds // size
        if count < limit:
            return _plural(count, unit)
    return _plural(seconds // (365 * 86400), 'year')


def render_entry(player, game: GameType, now: datetime | None = None) -> str:
    """Render one leaderboard line."""
    config = get_game_config(game)
    rank = player.current_rank
    parts = [
        f"<@{player.user_id}>",
        player.label,
        f"{get_rank_emoji(rank.name)} {rank} ({player.current_value} {config.value_label})",
    ]
    if config.two_rank:
        peak = player.peak_rank
        parts.append(f"Peak: {get_rank_emoji(peak.name)} {peak} {player.peak_value}")
    parts.append(relative_time(player.last_updated, now))
    return SEPARATOR.join(parts)


def render_leaderboard(
    players: list,
    cursor: str | None,
    game: GameType,
    max_players: int = MAX_RENDERED_PLAYERS,
    now: datetime | None = None,
) -> str:
    """
    Render the complete leaderboard message.

    Args:
        players: Sorted player records
        cursor: Id of the last processed update message
        game: Game being rendered
        max_players: Number of player lines to show
        now: Reference time for relative times and the footer

    Returns:
        Message content: header, player lines, footer and snapshot blob
    """
    config = get_game_config(game)
    now = now or datetime.now(timezone.utc)
    output = [f"🏆 {config.display_name.upper()} LEADERBOARD", ""]

    if not players:
        output.append("No leaderboard data available.")
        output.append("")
        output.append(f"💡 Use `{config.command_tag} @user ...` to add entries.")
    else:
        for player in players[:max_players]:
            output.append(render_entry(player, game, now))

    # Footer
    output.append("")
    output.append("━" * 18)
    if players:
        output.append(f"📊 Total Players: {len(players)}")
        if len(players) > max_players:
            output.append(f"(Showing top {max_players})")
    output.append(f"Last Updated: {now.strftime('%a, %d %b %Y %H:%M:%S GMT')}")
    output.append("")

    # The snapshot carries every player given, shown or not
    output.append(encode_state(players, cursor, game))

    return "\n".join(output)


def validate_message_length(content: str, limit: int = DISCORD_MESSAGE_LIMIT) -> bool:
    """Check that content fits in one Discord message."""
    if len(content) > limit:
        logger.warning(f"Message exceeds Discord limit: {len(content)}/{limit} characters")
        return False
    return True


def truncate_if_needed(
    players: list,
    cursor: str | None,
    game: GameType,
    max_length: int = TRUNCATE_TARGET_LENGTH,
    now: datetime | None = None,
) -> dict:
    """
    Render the leaderboard so that it fits in max_length characters.

    The shown player count is halved first while the snapshot keeps every
    player. When even that does not fit, the lowest-ranked players are
    dropped from the snapshot too (halving again), showing only the top
    MIN_RENDERED_PLAYERS lines.

    Args:
        players: Sorted player records
        cursor: Id of the last processed update message
        game: Game being rendered
        max_length: Target maximum content length
        now: Reference time

    Returns:
        Dictionary with content, truncated flag, shown_count and
        stored_count (players kept in the snapshot, best first)
    """
    rendered = render_leaderboard(players, cursor, game, now=now)
    if len(rendered) <= max_length:
        return {
            'content': rendered,
            'truncated': False,
            'shown_count': min(len(players), MAX_RENDERED_PLAYERS),
            'stored_count': len(players),
        }

    player_count = len(players) // 2
    while player_count > 0:
        rendered = render_leaderboard(players, cursor, game, max_players=player_count, now=now)
        if len(rendered) <= max_length:
            return {
                'content': rendered,
                'truncated': True,
                'shown_count': player_count,
                'stored_count': len(players),
            }
        player_count //= 2

    # The snapshot alone is too long
    stored_count = max(len(players) // 2, 1)
    while True:
        rendered = render_leaderboard(
            players[:stored_count], cursor, game, max_players=MIN_RENDERED_PLAYERS, now=now
        )
        if len(rendered) <= max_length or stored_count == 1:
            break
        stored_count //= 2

    logger.warning(f"Snapshot too long; keeping top {stored_count} of {len(players)} players")
    return {
        'content': rendered,
        'truncated': True,
        'shown_count': min(stored_count, MIN_RENDERED_PLAYERS),
        'stored_count': stored_count,
    }
