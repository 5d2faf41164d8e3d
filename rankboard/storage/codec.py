"""
Snapshot Blob Codec

The whole leaderboard state of one game is stored as a text block inside
the published leaderboard message:

    [DATA:v1]
    GAME:OVERWATCH
    LAST:1207431212345678901
    123456789|Tank|Diamond 3|3200|Master 2|3400|2026-02-14T00:00:00.000Z
    [/DATA]

Player lines are pipe-delimited in a fixed per-game column order with each
rank written as "<name> <tier>". Fields are not escaped: the round trip
only holds while no field contains "|" or a newline.
"""

from rankboard.config import (
    CURSOR_PREFIX,
    DATA_END_MARKER,
    DATA_START_MARKER,
    FIELD_SEPARATOR,
    GAME_PREFIX,
    NO_CURSOR,
)
from rankboard.exceptions import MalformedLineError
from rankboard.games import GameConfig, GameType, get_game_config
from rankboard.models import HeroPlayerRecord, LeaderboardState, Rank, RolePlayerRecord
from rankboard.ranking.ranks import normalize_tier
from rankboard.utils import setup_logging, to_timestamp

# --- Module Logger ---
logger = setup_logging(__name__)


def _player_fields(player, config: GameConfig) -> list[str]:
    """Column values of one player line, in persisted order."""
    fields = [
        player.user_id,
        player.label,
        str(player.current_rank),
        str(player.current_value),
    ]
    if config.two_rank:
        fields += [str(player.peak_rank), str(player.peak_value)]
    fields.append(player.last_updated)
    return fields


def encode_player(player, config: GameConfig) -> str:
    """Encode one player record as a pipe-delimited line."""
    fields = _player_fields(player, config)
    for value in fields:
        if FIELD_SEPARATOR in value or "\n" in value:
            logger.warning(
                f"Field {value!r} of user {player.user_id} contains a delimiter; "
                f"the snapshot will not decode cleanly"
            )
    return FIELD_SEPARATOR.join(fields)


def encode_state(players: list, cursor: str | None, game: GameType) -> str:
    """
    Encode a leaderboard state into the snapshot blob.

    Players are written in the order given; the codec does not sort.

    Args:
        players: Player records of one game
        cursor: Id of the last processed update message (None if none yet)
        game: Game the records belong to

    Returns:
        The blob, from the start marker to the end marker inclusive
    """
    config = get_game_config(game)
    lines = [
        DATA_START_MARKER,
        f"{GAME_PREFIX}{config.game.value}",
        f"{CURSOR_PREFIX}{cursor or NO_CURSOR}",
    ]
    lines.extend(encode_player(player, config) for player in players)
    lines.append(DATA_END_MARKER)
    return "\n".join(lines)


def _decode_rank(field: str, config: GameConfig) -> Rank:
    """Split "<name> <tier>" on the last space; multi-word names survive."""
    name, sep, tier = field.strip().rpartition(" ")
    if not sep or not name or not tier.isdecimal():
        raise MalformedLineError(f"Invalid rank field: '{field}'")
    return Rank(name, normalize_tier(int(tier), config.game))


def _decode_int(field: str) -> int:
    try:
        return int(field)
    except ValueError:
        raise MalformedLineError(f"Invalid number: '{field}'") from None


def _decode_timestamp(field: str) -> str:
    try:
        to_timestamp(field)
    except ValueError:
        raise MalformedLineError(f"Invalid timestamp: '{field}'") from None
    return field.strip()


def decode_player(line: str, config: GameConfig):
    """
    Decode one persisted player line.

    Args:
        line: Pipe-delimited player line
        config: Configuration of the game named in the blob

    Returns:
        RolePlayerRecord or HeroPlayerRecord

    Raises:
        MalformedLineError: If the line has too few columns or bad values
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < config.column_count:
        raise MalformedLineError(
            f"Expected {config.column_count} fields, found {len(parts)}"
        )

    if config.two_rank:
        return RolePlayerRecord(
            user_id=parts[0],
            role=parts[1],
            current_rank=_decode_rank(parts[2], config),
            current_value=_decode_int(parts[3]),
            peak_rank=_decode_rank(parts[4], config),
            peak_value=_decode_int(parts[5]),
            last_updated=_decode_timestamp(parts[6]),
        )
    return HeroPlayerRecord(
        user_id=parts[0],
        hero_name=parts[1],
        current_rank=_decode_rank(parts[2], config),
        current_value=_decode_int(parts[3]),
        last_updated=_decode_timestamp(parts[4]),
    )


def decode_state(content: str | None) -> LeaderboardState:
    """
    Decode the snapshot blob embedded in a message.

    Text outside the markers is ignored. A missing marker is the bootstrap
    case and yields an empty state. Malformed player lines are dropped with
    a warning; decoding continues. Of several lines for one user only the
    one with the latest last_updated is kept.

    Args:
        content: Full message content (may be None or empty)

    Returns:
        Decoded LeaderboardState
    """
    if not content:
        return LeaderboardState()

    start_idx = content.find(DATA_START_MARKER)
    end_idx = content.find(DATA_END_MARKER)
    if start_idx == -1 or end_idx == -1 or end_idx < start_idx:
        return LeaderboardState()

    data_section = content[start_idx + len(DATA_START_MARKER):end_idx].strip()
    lines = data_section.split("\n")

    # Parse game type
    game_line = lines[0].strip() if lines else ""
    if not game_line.startswith(GAME_PREFIX):
        logger.warning(f"Snapshot has no {GAME_PREFIX} line, starting fresh")
        return LeaderboardState()
    try:
        config = get_game_config(game_line[len(GAME_PREFIX):].strip())
    except ValueError as e:
        logger.warning(f"Snapshot names an unsupported game: {e}")
        return LeaderboardState()

    # Parse last processed message ID
    cursor = None
    if len(lines) > 1 and lines[1].strip().startswith(CURSOR_PREFIX):
        value = lines[1].strip()[len(CURSOR_PREFIX):].strip()
        cursor = None if value in ("", NO_CURSOR) else value

    # Parse player data; one record per user, the latest last_updated wins
    players = {}
    for line in lines[2:]:
        line = line.strip()
        if not line:
            continue
        try:
            player = decode_player(line, config)
        except MalformedLineError as e:
            logger.warning(f"Dropping invalid data line {line!r}: {e}")
            continue

        existing = players.get(player.user_id)
        if existing is not None:
            logger.warning(f"Duplicate data line for user {player.user_id}, keeping the latest")
            if to_timestamp(player.last_updated) < to_timestamp(existing.last_updated):
                continue
        players[player.user_id] = player

    return LeaderboardState(game=config.game, cursor=cursor, players=list(players.values()))
