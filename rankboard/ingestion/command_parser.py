"""
Leaderboard Update Command Parser

Turns raw chat messages into player records. Three command tags exist,
one per game; everything after the tag is whitespace-separated:

    LB_UPDATE_MR: <@id> role  CurRank [tier] value  PeakRank [tier] value  date
    LB_UPDATE_OW: <@id> role  CurRank [tier] value  PeakRank [tier] value  date
    LB_UPDATE_DL: <@id> hero  CurRank [tier] value  date

Example:
    LB_UPDATE_OW: <@123456789> Tank Diamond 3 3200 Master 2 3400 2026-02-14

Parsing is fail-soft: a malformed command yields a ParseResult carrying
the failure reason instead of raising.

Usage:
    from rankboard.ingestion.command_parser import parse_message, parse_messages

    result = parse_message(content)
    batch = parse_messages(messages, GameType.DEADLOCK)
"""

from rankboard.config import UNKNOWN_LABEL
from rankboard.exceptions import (
    CommandParseError,
    InsufficientFieldsError,
    InvalidDateError,
    InvalidMentionError,
    InvalidRankError,
    InvalidValueError,
    MissingValueError,
    UnknownRankError,
)
from rankboard.games import GAME_CONFIGS, GameConfig, GameType
from rankboard.models import (
    ChannelMessage,
    HeroPlayerRecord,
    ParsedUpdate,
    ParseResult,
    Rank,
    RolePlayerRecord,
)
from rankboard.ranking.ranks import recognize_rank
from rankboard.utils import (
    extract_user_id,
    is_number,
    normalize_timestamp,
    sanitize_label,
    setup_logging,
)

# --- Module Logger ---
logger = setup_logging(__name__)


def detect_game(content: str) -> GameConfig | None:
    """
    Find which game's command tag occurs in the message.

    Tags are checked in GameType order; the first one found anywhere in
    the text wins.

    Args:
        content: Raw message content

    Returns:
        The matching GameConfig, or None if the message is not a command
    """
    if not content:
        return None
    for config in GAME_CONFIGS.values():
        if config.command_tag in content:
            return config
    return None


def tokenize_command(content: str, config: GameConfig) -> list[str]:
    """Return the whitespace-separated fields that follow the command tag."""
    _, _, remainder = content.partition(config.command_tag)
    return remainder.strip().split()


def _extract_rank_and_value(
    tokens: list[str],
    start: int,
    config: GameConfig,
    step: str,
) -> tuple[Rank, int, int]:
    """
    Read one rank phrase, optional tier and ladder value starting at tokens[start].

    Args:
        tokens: All command fields
        start: Index of the first rank-name token
        config: Game configuration
        step: "current" or "peak", used in failure reasons

    Returns:
        Tuple of (Rank, value, index of the first token after the value)

    Raises:
        MissingValueError, InvalidRankError, InvalidValueError
    """
    end = start
    while end < len(tokens) and not is_number(tokens[end]):
        end += 1
    if end >= len(tokens):
        raise MissingValueError(f"No {step} value after '{' '.join(tokens[start:])}'", step)

    try:
        rank, consumed = recognize_rank(tokens[start:], config.game)
    except UnknownRankError as e:
        raise InvalidRankError(str(e), step) from e

    pos = start + consumed
    tier_taken = consumed > len(rank.name.split())

    # A single number after the rank name is the value, not the tier
    if tier_taken and (pos >= len(tokens) or not is_number(tokens[pos])):
        rank = Rank(rank.name, 1)
        pos -= 1

    if pos >= len(tokens):
        raise MissingValueError(f"No {step} value after rank '{rank.name}'", step)

    value_token = tokens[pos]
    if not is_number(value_token) or int(value_token) < 0:
        raise InvalidValueError(f"Invalid {step} value: '{value_token}'", step)

    return rank, int(value_token), pos + 1


def parse_command(content: str, config: GameConfig):
    """
    Parse one update command for a known game.

    Args:
        content: Raw message content containing config.command_tag
        config: Game configuration selected by detect_game()

    Returns:
        RolePlayerRecord for two-rank games, HeroPlayerRecord otherwise

    Raises:
        CommandParseError: Subclass naming the first failing field
    """
    tokens = tokenize_command(content, config)

    if len(tokens) < config.min_tokens:
        raise InsufficientFieldsError(
            f"Expected at least {config.min_tokens} fields, found {len(tokens)}"
        )

    user_id = extract_user_id(tokens[0])
    if not user_id:
        raise InvalidMentionError(f"Invalid mention: '{tokens[0]}'")

    # A label stripped down to nothing is shown as "Unknown"
    label = sanitize_label(tokens[1]) or UNKNOWN_LABEL

    current_rank, current_value, pos = _extract_rank_and_value(tokens, 2, config, "current")
    if config.two_rank:
        peak_rank, peak_value, pos = _extract_rank_and_value(tokens, pos, config, "peak")

    # Everything else is the date
    date_string = " ".join(tokens[pos:])
    try:
        last_updated = normalize_timestamp(date_string)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date '{date_string}': {e}") from e

    if config.two_rank:
        return RolePlayerRecord(
            user_id=user_id,
            role=label,
            current_rank=current_rank,
            current_value=current_value,
            peak_rank=peak_rank,
            peak_value=peak_value,
            last_updated=last_updated,
        )
    return HeroPlayerRecord(
        user_id=user_id,
        hero_name=label,
        current_rank=current_rank,
        current_value=current_value,
        last_updated=last_updated,
    )


def parse_message(content: str) -> ParseResult | None:
    """
    Detect and parse an update command without raising.

    Args:
        content: Raw message content

    Returns:
        None if the message is not an update command, otherwise a
        ParseResult holding either the record or the failure reason
    """
    config = detect_game(content)
    if config is None:
        return None

    try:
        record = parse_command(content, config)
    except CommandParseError as e:
        return ParseResult(game=config.game, reason=e.failure_reason)

    return ParseResult(game=config.game, record=record)


def parse_messages(messages: list[ChannelMessage], game: GameType | None = None) -> dict:
    """
    Batch parse chronologically ordered messages.

    Args:
        messages: Messages in send order
        game: Only keep commands for this game (None keeps all)

    Returns:
        Dictionary with:
            - successful: list of ParsedUpdate
            - failed: list of dicts with message_id, content, reason
            - skipped: count of non-commands and other games' commands
    """
    results = {
        'successful': [],
        'failed': [],
        'skipped': 0,
    }

    for message in messages:
        parsed = parse_message(message.content)

        if parsed is None:
            results['skipped'] += 1
            continue

        # Filter by game type if specified
        if game is not None and parsed.game != game:
            results['skipped'] += 1
            continue

        if parsed.ok:
            results['successful'].append(ParsedUpdate(
                message_id=message.id,
                timestamp=message.created_at,
                record=parsed.record,
            ))
        else:
            logger.warning(f"Failed to parse message id {message.id}: {parsed.reason}")
            results['failed'].append({
                'message_id': message.id,
                'content': message.content,
                'reason': parsed.reason,
            })

    return results
