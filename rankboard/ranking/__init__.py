"""
Rank Ordering

Modules:
- ranks: Rank recognition and sort keys
- ordering: Multi-key leaderboard sort
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name in ("recognize_rank", "sort_key"):
        from rankboard.ranking import ranks
        return getattr(ranks, name)
    if name == "sort_players":
        from rankboard.ranking.ordering import sort_players
        return sort_players
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
