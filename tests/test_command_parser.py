"""
Tests for update command parsing.
"""

import pytest

from rankboard.games import GameType, get_game_config
from rankboard.ingestion.command_parser import (
    detect_game,
    parse_command,
    parse_message,
    parse_messages,
    tokenize_command,
)
from rankboard.exceptions import InvalidMentionError
from rankboard.models import ChannelMessage, HeroPlayerRecord, Rank, RolePlayerRecord
from rankboard.utils import extract_user_id, is_number, sanitize_label, to_timestamp


class TestHelpers:
    """Tests for the shared parsing helpers."""

    def test_extract_user_id(self):
        assert extract_user_id("<@123456789>") == "123456789"

    def test_extract_user_id_nickname_form(self):
        assert extract_user_id("<@!123456789>") == "123456789"

    def test_extract_user_id_plain_name(self):
        assert extract_user_id("@Turbo") is None

    def test_is_number(self):
        assert is_number("2450")
        assert is_number("-5")
        assert not is_number("2026-02-14")
        assert not is_number("Diamond")

    def test_sanitize_label_removes_disallowed(self):
        assert sanitize_label("<Du;el'ist>") == "Duelist"
        assert sanitize_label('Tank("main")') == "Tankmain"

    def test_sanitize_label_caps_length(self):
        assert len(sanitize_label("x" * 500)) == 200

    def test_sanitize_label_keeps_pipe(self):
        assert sanitize_label("a|b") == "a|b"

    def test_to_timestamp_requires_calendar_date(self):
        for value in ("now", "today", "14/02/2026"):
            with pytest.raises(ValueError):
                to_timestamp(value)


class TestDetectGame:
    """Tests for detect_game."""

    def test_each_tag(self):
        assert detect_game("LB_UPDATE_MR: x").game is GameType.MARVEL_RIVALS
        assert detect_game("LB_UPDATE_OW: x").game is GameType.OVERWATCH
        assert detect_game("LB_UPDATE_DL: x").game is GameType.DEADLOCK

    def test_tag_anywhere(self):
        assert detect_game("hey bot LB_UPDATE_DL: x").game is GameType.DEADLOCK

    def test_no_tag(self):
        assert detect_game("gg everyone") is None
        assert detect_game("") is None

    def test_tokenize_strips_tag(self):
        config = get_game_config(GameType.DEADLOCK)
        tokens = tokenize_command("LB_UPDATE_DL:   <@1>  Haze\tArchon 4 ", config)
        assert tokens == ["<@1>", "Haze", "Archon", "4"]


class TestParseMessage:
    """End-to-end tests for parse_message."""

    def test_two_rank_command(self):
        result = parse_message(
            "LB_UPDATE_MR: <@123456789> Duelist Diamond 2 2450 Grandmaster 1 2610 2026-02-14"
        )
        assert result.ok
        assert result.game is GameType.MARVEL_RIVALS
        assert result.record == RolePlayerRecord(
            user_id="123456789",
            role="Duelist",
            current_rank=Rank("Diamond", 2),
            current_value=2450,
            peak_rank=Rank("Grandmaster", 1),
            peak_value=2610,
            last_updated="2026-02-14T00:00:00.000Z",
        )

    def test_peak_rank_of_other_game_is_rejected(self):
        # Master is an Overwatch rank, not a Marvel Rivals one
        result = parse_message(
            "LB_UPDATE_MR: <@123456789> Duelist Diamond 2 2450 Master 1 2610 2026-02-14"
        )
        assert not result.ok
        assert result.reason == "invalid_rank:peak"

    def test_overwatch_command(self):
        result = parse_message(
            "LB_UPDATE_OW: <@123456789> Duelist Diamond 2 2450 Master 1 2610 2026-02-14"
        )
        assert result.ok
        assert result.record.role == "Duelist"
        assert result.record.current_rank == Rank("Diamond", 2)
        assert result.record.current_value == 2450
        assert result.record.peak_rank == Rank("Master", 1)
        assert result.record.peak_value == 2610
        assert result.record.last_updated == "2026-02-14T00:00:00.000Z"

    def test_single_rank_command_has_no_peak(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon 4 1200 2026-02-14")
        assert result.ok
        record = result.record
        assert isinstance(record, HeroPlayerRecord)
        assert record.hero_name == "Haze"
        assert record.current_rank == Rank("Archon", 4)
        assert record.current_value == 1200
        assert not hasattr(record, "peak_rank")
        assert not hasattr(record, "peak_value")

    def test_multi_word_ranks(self):
        result = parse_message(
            "LB_UPDATE_MR: <@1> Strategist One Above All 1 5000 One Above All 1 5200 2026-03-01"
        )
        assert result.ok
        assert result.record.current_rank == Rank("One Above All", 1)
        assert result.record.current_value == 5000
        assert result.record.peak_value == 5200

    def test_rank_name_with_number_and_no_tier(self):
        result = parse_message(
            "LB_UPDATE_OW: <@7> Support Top 500 4700 Top 500 4800 2026-03-01T12:30:00Z"
        )
        assert result.ok
        assert result.record.current_rank == Rank("Top 500", 1)
        assert result.record.current_value == 4700
        assert result.record.peak_rank == Rank("Top 500", 1)
        assert result.record.peak_value == 4800
        assert result.record.last_updated == "2026-03-01T12:30:00.000Z"

    def test_missing_tier_reads_number_as_value(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Oracle 1500 2026-02-14")
        assert result.ok
        assert result.record.current_rank == Rank("Oracle", 1)
        assert result.record.current_value == 1500

    def test_case_insensitive_rank(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze phantom ascendant 2 3100 2026-02-14")
        assert result.record.current_rank == Rank("Phantom Ascendant", 2)

    def test_datetime_normalized_to_utc(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon 4 1200 2026-02-14T10:00:00+02:00")
        assert result.record.last_updated == "2026-02-14T08:00:00.000Z"

    def test_tag_not_at_start(self):
        result = parse_message("update pls LB_UPDATE_DL: <@42> Haze Archon 4 1200 2026-02-14")
        assert result.ok

    def test_nickname_mention(self):
        result = parse_message("LB_UPDATE_DL: <@!42> Haze Archon 4 1200 2026-02-14")
        assert result.record.user_id == "42"

    def test_label_is_sanitized(self):
        result = parse_message("LB_UPDATE_DL: <@42> Ha(z)e; Archon 4 1200 2026-02-14")
        assert result.record.hero_name == "Haze"

    def test_empty_label_becomes_unknown(self):
        result = parse_message("LB_UPDATE_DL: <@42> () Archon 4 1200 2026-02-14")
        assert result.record.hero_name == "Unknown"

    def test_not_a_command(self):
        assert parse_message("good games tonight") is None


class TestParseFailures:
    """Tests for failure reasons returned by parse_message."""

    def test_invalid_mention(self):
        result = parse_message("LB_UPDATE_DL: @P Haze Archon 4 1200 2026-02-14")
        assert result.reason == "invalid_mention"
        assert result.record is None

    def test_insufficient_fields(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon")
        assert result.reason == "insufficient_fields"

    def test_missing_value(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon Oracle Seeker Eternus")
        assert result.reason == "missing_value:current"

    def test_unknown_current_rank(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Nonsense 4 1200 2026-02-14")
        assert result.reason == "invalid_rank:current"

    def test_negative_value(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon -5 2026-02-14")
        assert result.reason == "invalid_value:current"

    def test_non_numeric_value(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon Gold 1200 2026-02-14")
        assert result.reason == "invalid_value:current"

    def test_missing_peak_value(self):
        result = parse_message("LB_UPDATE_OW: <@42> Tank Diamond 3 3200 Master 2026-02-14")
        assert result.reason == "missing_value:peak"

    def test_invalid_date(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon 4 1200 yesterday")
        assert result.reason == "invalid_date"

    def test_relative_date_keywords_rejected(self):
        for word in ("now", "today"):
            result = parse_message(f"LB_UPDATE_DL: <@42> Haze Archon 4 1200 {word}")
            assert result.reason == "invalid_date"

    def test_missing_date(self):
        result = parse_message("LB_UPDATE_DL: <@42> Haze Archon 4 1200")
        assert result.reason == "invalid_date"

    def test_parse_command_raises(self):
        config = get_game_config(GameType.DEADLOCK)
        with pytest.raises(InvalidMentionError):
            parse_command("LB_UPDATE_DL: nobody Haze Archon 4 1200 2026-02-14", config)


class TestParseMessages:
    """Tests for the batch parser."""

    def _messages(self):
        return [
            ChannelMessage(id="1", content="LB_UPDATE_DL: <@42> Haze Archon 4 1200 2026-02-14"),
            ChannelMessage(id="2", content="nice match"),
            ChannelMessage(id="3", content="LB_UPDATE_OW: <@7> Tank Diamond 3 3200 Master 2 3400 2026-02-14"),
            ChannelMessage(id="4", content="LB_UPDATE_DL: <@43> Haze Nonsense 1 900 2026-02-14"),
        ]

    def test_partitions_by_outcome(self):
        results = parse_messages(self._messages(), GameType.DEADLOCK)

        assert [u.message_id for u in results['successful']] == ["1"]
        assert results['successful'][0].record.user_id == "42"
        assert len(results['failed']) == 1
        assert results['failed'][0]['message_id'] == "4"
        assert results['failed'][0]['reason'] == "invalid_rank:current"
        assert results['skipped'] == 2

    def test_without_game_filter(self):
        results = parse_messages(self._messages())

        assert [u.message_id for u in results['successful']] == ["1", "3"]
        assert results['skipped'] == 1

    def test_empty_input(self):
        results = parse_messages([])
        assert results == {'successful': [], 'failed': [], 'skipped': 0}
