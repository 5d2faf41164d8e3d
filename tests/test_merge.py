"""
Tests for the merge engine.
"""

from rankboard.games import GameType
from rankboard.models import HeroPlayerRecord, LeaderboardState, ParsedUpdate, Rank
from rankboard.storage.merge import UpsertOutcome, apply_updates, upsert


def _player(user_id="42", value=1200, last_updated="2026-02-14T12:00:00.000Z"):
    return HeroPlayerRecord(
        user_id=user_id,
        hero_name="Haze",
        current_rank=Rank("Archon", 4),
        current_value=value,
        last_updated=last_updated,
    )


def _update(message_id, record):
    return ParsedUpdate(message_id=message_id, timestamp=None, record=record)


class TestUpsert:
    """Tests for upsert."""

    def test_insert_new_player(self):
        players = {}
        assert upsert(players, _player()) is UpsertOutcome.APPLIED
        assert players == {"42": _player()}

    def test_older_update_is_stale(self):
        existing = _player(value=1200)
        players = {"42": existing}

        outcome = upsert(players, _player(value=1500, last_updated="2026-02-14T11:59:59.000Z"))

        assert outcome is UpsertOutcome.STALE
        assert players["42"] is existing

    def test_equal_timestamp_replaces(self):
        players = {"42": _player(value=1200)}
        newer = _player(value=1500)

        assert upsert(players, newer) is UpsertOutcome.APPLIED
        assert players["42"] is newer

    def test_newer_update_replaces(self):
        players = {"42": _player(value=1200)}
        newer = _player(value=1100, last_updated="2026-02-15T00:00:00.000Z")

        assert upsert(players, newer) is UpsertOutcome.APPLIED
        assert players["42"].current_value == 1100

    def test_compares_as_timestamps(self):
        players = {"42": _player(last_updated="2026-02-14T12:00:00.000Z")}
        # Midnight sorts before noon on the same day
        assert upsert(players, _player(last_updated="2026-02-14T00:00:00.000Z")) is UpsertOutcome.STALE


class TestApplyUpdates:
    """Tests for apply_updates."""

    def test_counts_and_cursor(self):
        state = LeaderboardState(game=GameType.DEADLOCK, cursor="5", players=[_player()])
        updates = [
            _update("6", _player("43")),
            _update("7", _player("42", last_updated="2026-01-01T00:00:00.000Z")),
        ]

        new_state, counts = apply_updates(state, updates)

        assert counts == {'applied': 1, 'stale': 1}
        assert new_state.cursor == "7"
        assert new_state.game is GameType.DEADLOCK
        assert {p.user_id for p in new_state.players} == {"42", "43"}

    def test_no_updates_keeps_cursor(self):
        state = LeaderboardState(game=GameType.DEADLOCK, cursor="5", players=[_player()])

        new_state, counts = apply_updates(state, [])

        assert counts == {'applied': 0, 'stale': 0}
        assert new_state.cursor == "5"
        assert new_state.players == [_player()]

    def test_input_state_unchanged(self):
        original = _player()
        state = LeaderboardState(game=GameType.DEADLOCK, cursor="5", players=[original])

        apply_updates(state, [_update("6", _player(value=900, last_updated="2026-03-01"))])

        assert state.cursor == "5"
        assert state.players == [original]

    def test_last_update_for_player_wins(self):
        state = LeaderboardState(game=GameType.DEADLOCK)
        updates = [
            _update("1", _player(value=1000)),
            _update("2", _player(value=1300)),
        ]

        new_state, _ = apply_updates(state, updates)

        assert len(new_state.players) == 1
        assert new_state.players[0].current_value == 1300

    def test_one_record_per_user(self):
        state = LeaderboardState(game=GameType.DEADLOCK, players=[_player("1"), _player("2")])
        updates = [_update(str(i), _player(str(i % 3))) for i in range(10, 20)]

        new_state, _ = apply_updates(state, updates)

        user_ids = [p.user_id for p in new_state.players]
        assert len(user_ids) == len(set(user_ids))
