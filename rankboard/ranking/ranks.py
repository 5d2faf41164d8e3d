"""
Rank recognition and ordering.

Each game has a fixed list of rank names from worst to best and a tier
count. Rank names may span several tokens ("One Above All", "Top 500"),
so recognition tries the longest token prefix first.

Usage:
    from rankboard.ranking.ranks import recognize_rank, sort_key

    rank, consumed = recognize_rank(["Diamond", "2"], GameType.MARVEL_RIVALS)
    sort_key(rank, GameType.MARVEL_RIVALS)
"""

from rankboard.exceptions import UnknownRankError
from rankboard.games import GameType, get_game_config
from rankboard.models import Rank
from rankboard.utils import is_number

# Valid keys start at 1, so 0 always sorts below every recognized rank
UNRANKED_SORT_KEY = 0


def find_rank_name(name: str, game: GameType) -> str | None:
    """
    Case-insensitive exact lookup of a rank name.

    Args:
        name: Candidate rank name (words joined by single spaces)
        game: Game whose rank list is searched

    Returns:
        The canonical rank name, or None if not a rank of the game
    """
    wanted = name.strip().lower()
    for rank_name in get_game_config(game).ranks:
        if rank_name.lower() == wanted:
            return rank_name
    return None


def normalize_tier(tier: int | None, game: GameType) -> int:
    """Return tier, or 1 when it is missing or outside [1, max_tier]."""
    max_tier = get_game_config(game).max_tier
    if tier is None or tier < 1 or tier > max_tier:
        return 1
    return tier


def recognize_rank(tokens: list[str], game: GameType) -> tuple[Rank, int]:
    """
    Recognize a (possibly multi-word) rank and optional tier at the start of tokens.

    The longest prefix of tokens that names a rank wins. If the token right
    after the name is numeric it is consumed as the tier; an out-of-range
    tier is still consumed but normalized to 1.

    Args:
        tokens: Whitespace-separated tokens, rank name first
        game: Game whose rank list is used

    Returns:
        Tuple of (Rank, number of tokens consumed)

    Raises:
        UnknownRankError: If no prefix of tokens names a rank
    """
    for end in range(len(tokens), 0, -1):
        rank_name = find_rank_name(" ".join(tokens[:end]), game)
        if rank_name is None:
            continue

        if end < len(tokens) and is_number(tokens[end]):
            tier = normalize_tier(int(tokens[end]), game)
            return Rank(rank_name, tier), end + 1
        return Rank(rank_name, 1), end

    raise UnknownRankError(f"Unknown {get_game_config(game).display_name} rank: '{' '.join(tokens)}'")


def sort_key(rank: Rank | None, game: GameType) -> int:
    """
    Total-order key for a rank (higher = better).

    Formula: index(rank) * max_tier + (max_tier - tier + 1)
    Example for Diamond 2 in Marvel Rivals (max_tier=3):
        4 * 3 + (3 - 2 + 1) = 14; Diamond 1 gives 15, Grandmaster 3 gives 16.

    Args:
        rank: Rank to score (None or unknown name sorts last)
        game: Game whose rank list is used

    Returns:
        Integer key; UNRANKED_SORT_KEY for an unknown or absent rank
    """
    if rank is None:
        return UNRANKED_SORT_KEY

    config = get_game_config(game)
    rank_name = find_rank_name(rank.name, game)
    if rank_name is None:
        return UNRANKED_SORT_KEY

    index = config.ranks.index(rank_name)
    return index * config.max_tier + (config.max_tier - rank.tier + 1)
