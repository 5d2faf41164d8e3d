"""
Leaderboard ordering.

Players are ordered best first by:
1. current rank (sort_key, descending)
2. current ladder value (ascending, lower is better at equal rank)
3. peak rank (descending, two-rank games only)
4. peak ladder value (ascending, two-rank games only)
5. last update (most recent first)
"""

import pandas as pd

from rankboard.games import GameType, get_game_config
from rankboard.ranking.ranks import sort_key
from rankboard.utils import to_timestamp


def build_sort_frame(players: list, game: GameType) -> pd.DataFrame:
    """
    Build a DataFrame with one row of sort keys per player.

    Args:
        players: Player records of one game
        game: Game the records belong to

    Returns:
        DataFrame with columns position, rank_key, current_value,
        [peak_key, peak_value,] last_updated
    """
    config = get_game_config(game)
    rows = []
    for position, player in enumerate(players):
        row = {
            'position': position,
            'rank_key': sort_key(player.current_rank, game),
            'current_value': player.current_value,
            'last_updated': to_timestamp(player.last_updated),
        }
        if config.two_rank:
            row['peak_key'] = sort_key(player.peak_rank, game)
            row['peak_value'] = player.peak_value
        rows.append(row)
    return pd.DataFrame(rows)


def sort_players(players: list, game: GameType) -> list:
    """
    Return players in leaderboard order (best first).

    Args:
        players: Player records of one game, in any order
        game: Game the records belong to

    Returns:
        New list sorted by the game's ranking rules
    """
    if not players:
        return []

    config = get_game_config(game)
    if config.two_rank:
        by = ['rank_key', 'current_value', 'peak_key', 'peak_value', 'last_updated']
        ascending = [False, True, False, True, False]
    else:
        by = ['rank_key', 'current_value', 'last_updated']
        ascending = [False, True, False]

    df = build_sort_frame(players, game)
    df = df.sort_values(by=by, ascending=ascending, kind='mergesort')
    return [players[i] for i in df['position']]
