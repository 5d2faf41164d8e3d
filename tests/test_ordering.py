"""
Tests for leaderboard ordering.
"""

from rankboard.games import GameType
from rankboard.models import HeroPlayerRecord, Rank, RolePlayerRecord
from rankboard.ranking.ordering import build_sort_frame, sort_players


def _mr(user_id, rank, value, peak=Rank("Celestial", 1), peak_value=3000,
        last_updated="2026-02-14T00:00:00.000Z"):
    return RolePlayerRecord(
        user_id=user_id,
        role="Duelist",
        current_rank=rank,
        current_value=value,
        peak_rank=peak,
        peak_value=peak_value,
        last_updated=last_updated,
    )


def _dl(user_id, rank, value, last_updated="2026-02-14T00:00:00.000Z"):
    return HeroPlayerRecord(
        user_id=user_id,
        hero_name="Haze",
        current_rank=rank,
        current_value=value,
        last_updated=last_updated,
    )


class TestSortPlayers:
    """Tests for sort_players."""

    def test_higher_rank_wins_regardless_of_value(self):
        x = _mr("x", Rank("Diamond", 2), 2450)
        y = _mr("y", Rank("Platinum", 1), 2100)
        assert sort_players([y, x], GameType.MARVEL_RIVALS) == [x, y]

    def test_lower_value_better_at_equal_rank(self):
        a = _mr("a", Rank("Diamond", 2), 2450)
        b = _mr("b", Rank("Diamond", 2), 2300)
        assert sort_players([a, b], GameType.MARVEL_RIVALS) == [b, a]

    def test_better_tier_wins(self):
        tier1 = _mr("t1", Rank("Diamond", 1), 2500)
        tier3 = _mr("t3", Rank("Diamond", 3), 2100)
        assert sort_players([tier3, tier1], GameType.MARVEL_RIVALS) == [tier1, tier3]

    def test_peak_breaks_ties(self):
        low_peak = _mr("low", Rank("Diamond", 2), 2450, peak=Rank("Diamond", 1))
        high_peak = _mr("high", Rank("Diamond", 2), 2450, peak=Rank("Eternity", 1))
        assert sort_players([low_peak, high_peak], GameType.MARVEL_RIVALS) == [high_peak, low_peak]

    def test_peak_value_breaks_ties(self):
        a = _mr("a", Rank("Diamond", 2), 2450, peak_value=3100)
        b = _mr("b", Rank("Diamond", 2), 2450, peak_value=2900)
        assert sort_players([a, b], GameType.MARVEL_RIVALS) == [b, a]

    def test_most_recent_update_breaks_final_tie(self):
        old = _mr("old", Rank("Diamond", 2), 2450, last_updated="2026-01-01T00:00:00.000Z")
        new = _mr("new", Rank("Diamond", 2), 2450, last_updated="2026-02-01T00:00:00.000Z")
        assert sort_players([old, new], GameType.MARVEL_RIVALS) == [new, old]

    def test_unknown_rank_sorts_last(self):
        ranked = _mr("ranked", Rank("Bronze", 3), 900)
        unknown = _mr("unknown", Rank("Mystery", 1), 100)
        assert sort_players([unknown, ranked], GameType.MARVEL_RIVALS) == [ranked, unknown]

    def test_single_rank_game(self):
        eternus = _dl("e", Rank("Eternus", 1), 5000)
        seeker = _dl("s", Rank("Seeker", 1), 300)
        cheap_seeker = _dl("c", Rank("Seeker", 1), 200)
        assert sort_players([seeker, eternus, cheap_seeker], GameType.DEADLOCK) == [
            eternus, cheap_seeker, seeker,
        ]

    def test_input_list_unchanged(self):
        players = [_dl("s", Rank("Seeker", 1), 300), _dl("e", Rank("Eternus", 1), 5000)]
        sort_players(players, GameType.DEADLOCK)
        assert [p.user_id for p in players] == ["s", "e"]

    def test_empty(self):
        assert sort_players([], GameType.OVERWATCH) == []


class TestBuildSortFrame:
    """Tests for build_sort_frame."""

    def test_two_rank_columns(self):
        df = build_sort_frame([_mr("a", Rank("Diamond", 2), 2450)], GameType.MARVEL_RIVALS)
        assert {'rank_key', 'current_value', 'peak_key', 'peak_value', 'last_updated'} <= set(df.columns)
        assert df.loc[0, 'rank_key'] == 14

    def test_single_rank_columns(self):
        df = build_sort_frame([_dl("e", Rank("Eternus", 1), 5000)], GameType.DEADLOCK)
        assert 'peak_key' not in df.columns
