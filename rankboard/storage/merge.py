"""
Merge Engine

Applies parsed updates onto a decoded leaderboard state. The record with
the latest `last_updated` wins; an update older than the stored record is
stale and ignored, an update with an equal timestamp replaces it.
"""

from enum import Enum

from rankboard.models import LeaderboardState, ParsedUpdate
from rankboard.utils import setup_logging, to_timestamp

# --- Module Logger ---
logger = setup_logging(__name__)


class UpsertOutcome(str, Enum):
    APPLIED = "applied"
    STALE = "stale"


def upsert(players: dict, incoming) -> UpsertOutcome:
    """
    Insert or replace one player record, keyed by user id.

    Args:
        players: Mapping of user_id -> record, modified in place
        incoming: Record from a parsed update

    Returns:
        UpsertOutcome.STALE if incoming is strictly older than the stored
        record, otherwise UpsertOutcome.APPLIED
    """
    existing = players.get(incoming.user_id)

    if existing is not None:
        if to_timestamp(incoming.last_updated) < to_timestamp(existing.last_updated):
            logger.info(f"Ignoring stale data for user {incoming.user_id}")
            return UpsertOutcome.STALE

    players[incoming.user_id] = incoming
    return UpsertOutcome.APPLIED


def apply_updates(
    state: LeaderboardState,
    updates: list[ParsedUpdate],
) -> tuple[LeaderboardState, dict]:
    """
    Fold chronologically ordered updates onto a state.

    The input state is not modified. The cursor advances to the message id
    of the last update that went through upsert (applied or stale); with no
    updates the previous cursor is kept.

    Args:
        state: Decoded previous state
        updates: Successfully parsed updates in send order

    Returns:
        Tuple of (new LeaderboardState, {'applied': n, 'stale': m})
    """
    players = {player.user_id: player for player in state.players}
    cursor = state.cursor
    counts = {'applied': 0, 'stale': 0}

    for update in updates:
        outcome = upsert(players, update.record)
        counts[outcome.value] += 1
        if outcome is UpsertOutcome.APPLIED:
            logger.info(f"Updated {update.record.user_id}")
        cursor = update.message_id

    new_state = LeaderboardState(
        game=state.game,
        cursor=cursor,
        players=list(players.values()),
    )
    return new_state, counts
