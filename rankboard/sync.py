"""
Multi-Game Leaderboard Sync

Runs one sync cycle per configured game:
decode snapshot -> fetch new messages -> parse -> merge -> sort -> render -> publish.

Usage:
    python -m rankboard.sync
    python -m rankboard.sync --export-dir data/exports --state-dir data/state
    OR
    rankboard-sync --game DEADLOCK --dry-run
"""

import sys
from pathlib import Path

# Enable both `python rankboard/sync.py` and `python -m rankboard.sync` execution modes.
# This ensures rankboard.config imports work regardless of how the script is invoked.
_project_root = str(Path(__file__).parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import argparse
import asyncio

from rankboard.config import DISCORD_BOT_TOKEN, MAX_MESSAGES_PER_SYNC, STATE_FOLDER
from rankboard.exceptions import ConfigurationError, TransportError
from rankboard.games import GameType
from rankboard.ingestion.command_parser import parse_messages
from rankboard.models import LeaderboardState
from rankboard.ranking.ordering import sort_players
from rankboard.render import truncate_if_needed, validate_message_length
from rankboard.settings import GameSettings, load_game_settings
from rankboard.storage.codec import decode_state
from rankboard.storage.merge import apply_updates
from rankboard.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def run_cycle(state: LeaderboardState, messages: list, game: GameType, now=None) -> dict:
    """
    Pure per-game pipeline: parse, merge, sort and render.

    Args:
        state: Decoded previous snapshot
        messages: New ChannelMessages in send order
        game: Game being synced
        now: Reference time for rendering

    Returns:
        Dictionary with:
            - state: merged LeaderboardState (players sorted)
            - content: rendered message content
            - applied / stale: merge counts
            - failed / skipped: parse counts
            - truncated, shown_count: rendering details
            - fits: whether content is within the Discord message limit
    """
    if state.game is not None and state.game != game:
        logger.warning(
            f"Snapshot belongs to {state.game.value}, not {game.value}; starting fresh"
        )
        state = LeaderboardState(game=game)
    elif state.game is None:
        state = LeaderboardState(game=game, cursor=state.cursor, players=state.players)

    logger.info("Parsing messages...")
    parse_results = parse_messages(messages, game)
    logger.info(f"  Successful: {len(parse_results['successful'])}")
    logger.info(f"  Failed: {len(parse_results['failed'])}")
    logger.info(f"  Skipped: {parse_results['skipped']}")

    merged, counts = apply_updates(state, parse_results['successful'])
    merged.players = sort_players(merged.players, game)

    logger.info("Rendering leaderboard...")
    rendered = truncate_if_needed(merged.players, merged.cursor, game, now=now)
    if rendered['truncated']:
        logger.warning(f"Showing {rendered['shown_count']} of {len(merged.players)} players")
    if rendered['stored_count'] < len(merged.players):
        logger.warning(
            f"Dropping {len(merged.players) - rendered['stored_count']} lowest-ranked "
            f"players from the snapshot to fit the message"
        )
        merged.players = merged.players[:rendered['stored_count']]

    return {
        'state': merged,
        'content': rendered['content'],
        'applied': counts['applied'],
        'stale': counts['stale'],
        'failed': len(parse_results['failed']),
        'skipped': parse_results['skipped'],
        'truncated': rendered['truncated'],
        'shown_count': rendered['shown_count'],
        'fits': validate_message_length(rendered['content']),
    }


async def sync_game(
    transport,
    settings: GameSettings,
    max_messages: int = MAX_MESSAGES_PER_SYNC,
    dry_run: bool = False,
) -> dict:
    """
    Sync one game's leaderboard through a transport.

    Args:
        transport: LocalTransport or DiscordTransport
        settings: The game's channel/webhook/message settings
        max_messages: Most messages fetched per cycle
        dry_run: Compute everything but do not publish

    Returns:
        Dictionary with processed, updated, stale, failed, skipped,
        total_players and created_message_id (None unless a new
        leaderboard message was created)

    Raises:
        TransportError: If the channel or webhook is unreachable
    """
    logger.info("=" * 60)
    logger.info(f"Syncing {settings.name}...")
    logger.info("=" * 60)

    # Fetch current state
    message_id = settings.message_id
    state = LeaderboardState(game=settings.game)
    if message_id:
        content = await transport.fetch_snapshot(settings.webhook_url, message_id)
        if content is not None:
            state = decode_state(content)
            if state.game is not None and state.game != settings.game:
                # Neither the players nor the cursor apply to this game
                logger.warning(
                    f"Snapshot belongs to {state.game.value}, not {settings.game.value}; starting fresh"
                )
                state = LeaderboardState(game=settings.game)
            logger.info(f"  Found {len(state.players)} existing players")
            logger.info(f"  Last processed: {state.cursor or 'none'}")
        else:
            logger.info("  Message not found, starting fresh")
    else:
        logger.info("  No persistent message ID, starting fresh")

    result = {
        'processed': 0,
        'updated': 0,
        'stale': 0,
        'failed': 0,
        'skipped': 0,
        'total_players': len(state.players),
        'created_message_id': None,
    }

    # Fetch new messages
    messages = await transport.fetch_messages(settings.channel_id, state.cursor, max_messages)
    if not messages:
        logger.info("  No new messages")
        return result

    cycle = run_cycle(state, messages, settings.game)
    result.update({
        'processed': len(messages),
        'updated': cycle['applied'],
        'stale': cycle['stale'],
        'failed': cycle['failed'],
        'skipped': cycle['skipped'],
        'total_players': len(cycle['state'].players),
    })

    if dry_run:
        logger.info("[DRY RUN] Leaderboard not published")
        return result

    if not cycle['fits']:
        raise TransportError(f"Rendered {settings.name} leaderboard exceeds the Discord message limit")

    # A missing message is recreated by the transport
    published_id, action = await transport.publish(settings.webhook_url, message_id, cycle['content'])
    if action == "created":
        logger.info(f"Created new message: {published_id}")
        if published_id != settings.message_id:
            result['created_message_id'] = published_id
    else:
        logger.info("Updated leaderboard")

    return result


async def sync_all(
    transport,
    games: list[GameSettings],
    max_messages: int = MAX_MESSAGES_PER_SYNC,
    dry_run: bool = False,
) -> dict:
    """
    Sync every configured game; one game's failure does not stop the others.

    Returns:
        Dictionary with totals, per-game results and created_messages
        (game value -> new message id)
    """
    results = {
        'total_processed': 0,
        'total_updated': 0,
        'total_failed': 0,
        'total_skipped': 0,
        'games': [],
        'created_messages': {},
    }

    for settings in games:
        try:
            game_results = await sync_game(transport, settings, max_messages, dry_run)
        except TransportError as e:
            logger.error(f"Error syncing {settings.name}: {e}")
            results['games'].append({'name': settings.name, 'error': str(e)})
            continue
        except Exception as e:
            logger.exception(f"Unexpected error syncing {settings.name}")
            results['games'].append({'name': settings.name, 'error': f"{type(e).__name__}: {e}"})
            continue

        results['total_processed'] += game_results['processed']
        results['total_updated'] += game_results['updated']
        results['total_failed'] += game_results['failed']
        results['total_skipped'] += game_results['skipped']
        results['games'].append({'name': settings.name, **game_results})

        if game_results['created_message_id']:
            results['created_messages'][settings.game.value] = game_results['created_message_id']

    return results


def print_summary(results: dict) -> None:
    """Print the end-of-run summary."""
    print("=" * 60)
    print("SYNC SUMMARY")
    print("=" * 60)
    print(f"Total Messages: {results['total_processed']}")
    print(f"Total Updates: {results['total_updated']}")
    print(f"Total Failed: {results['total_failed']}")
    print(f"Total Skipped: {results['total_skipped']}")
    print()

    for game in results['games']:
        if 'error' in game:
            print(f"  {game['name']}: ERROR {game['error']}")
        else:
            print(f"  {game['name']}: {game['updated']} updates, {game['total_players']} players")
    print("=" * 60)

    if results['created_messages']:
        print("\nNew messages created. Add to .env or your CI secrets:")
        for game_value, message_id in results['created_messages'].items():
            print(f"   GAME_{game_value}_MESSAGE_ID={message_id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync message-backed game leaderboards.")
    parser.add_argument(
        "--export-dir",
        type=Path,
        help="Read commands from Discord JSON exports in this folder instead of Discord",
    )
    parser.add_argument(
        "--state-dir",
        type=Path,
        default=STATE_FOLDER,
        help="Folder holding leaderboard messages in export mode (default: %(default)s)",
    )
    parser.add_argument(
        "--game",
        choices=[g.value for g in GameType],
        action="append",
        help="Sync only this game (repeatable)",
    )
    parser.add_argument(
        "--max-messages",
        type=int,
        default=MAX_MESSAGES_PER_SYNC,
        help="Most messages fetched per game (default: %(default)s)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Do not publish")
    return parser


async def _run(args) -> dict:
    games = [GameType(g) for g in args.game] if args.game else None
    local = args.export_dir is not None
    settings = load_game_settings(games, local=local)

    if local:
        from rankboard.transport.local import LocalTransport
        transport = LocalTransport(args.export_dir, args.state_dir)
    else:
        if not DISCORD_BOT_TOKEN:
            raise ConfigurationError("Missing required environment variable: DISCORD_BOT_TOKEN")
        from rankboard.transport.discord_client import DiscordTransport
        transport = DiscordTransport(DISCORD_BOT_TOKEN)
        await transport.connect()

    try:
        return await sync_all(transport, settings, args.max_messages, args.dry_run)
    finally:
        logger.info("Cleaning up...")
        await transport.close()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    logger.info("=" * 60)
    logger.info("Multi-Game Leaderboard Sync")
    logger.info("=" * 60)

    try:
        results = asyncio.run(_run(args))
    except (ConfigurationError, TransportError) as e:
        logger.error(f"Fatal error: {e}")
        return 1

    print_summary(results)
    has_errors = any('error' in g for g in results['games'])
    return 1 if has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
