"""
Local file transport.

Reads update commands from Discord JSON channel exports and keeps each
leaderboard message as a text file, so a sync cycle can run without a
bot token. Exports may be a dict with a "messages" key (optionally with
"channel": {"id": ...}) or a plain list of messages.
"""

import json
import uuid
from pathlib import Path

import pandas as pd

from rankboard.models import ChannelMessage
from rankboard.utils import atomic_write_text, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def load_export_messages(json_file: Path, channel_id: str | None = None) -> list[ChannelMessage]:
    """
    Parse a single JSON export file.

    Args:
        json_file: Path to the export
        channel_id: Keep the file only if it belongs to this channel
            (exports without channel information are always kept)

    Returns:
        List of ChannelMessage in file order
    """
    with open(json_file, encoding="utf-8") as f:
        json_data = json.load(f)

    # Handle dict with "messages" key or plain list
    if isinstance(json_data, dict) and "messages" in json_data:
        messages_list = json_data["messages"]
        export_channel = (json_data.get("channel") or {}).get("id")
        if channel_id and export_channel and str(export_channel) != str(channel_id):
            logger.debug(f"Skipping {json_file}: channel {export_channel}")
            return []
    elif isinstance(json_data, list):
        messages_list = json_data
    else:
        logger.warning(f"Skipping {json_file}: unrecognized format")
        return []

    messages = []
    for msg in messages_list:
        if not isinstance(msg, dict) or msg.get("id") is None:
            continue
        timestamp = msg.get("timestamp")
        messages.append(ChannelMessage(
            id=str(msg["id"]),
            content=msg.get("content") or "",
            created_at=pd.Timestamp(timestamp).to_pydatetime() if timestamp else None,
        ))
    return messages


class LocalTransport:
    """Transport backed by export files and a snapshot folder."""

    def __init__(self, export_folder: Path, state_folder: Path):
        self.export_folder = Path(export_folder)
        self.state_folder = Path(state_folder)

    def _snapshot_path(self, message_id: str) -> Path:
        return self.state_folder / f"{message_id}.txt"

    async def fetch_messages(
        self,
        channel_id: str | None,
        after: str | None = None,
        limit: int = 100,
    ) -> list[ChannelMessage]:
        """
        Return messages newer than `after`, oldest first.

        With a cursor the oldest `limit` newer messages are returned,
        without one the latest `limit` messages.
        """
        json_files = sorted(self.export_folder.glob("*.json"))
        logger.info(f"Found {len(json_files)} JSON files in {self.export_folder}")

        by_id = {}
        for json_file in json_files:
            for message in load_export_messages(json_file, channel_id):
                by_id[message.id] = message

        messages = sorted(by_id.values(), key=lambda m: int(m.id))
        if after:
            messages = [m for m in messages if int(m.id) > int(after)][:limit]
        else:
            messages = messages[-limit:]

        logger.info(f"Fetched {len(messages)} messages from {self.export_folder}")
        return messages

    async def fetch_snapshot(self, webhook_url: str | None, message_id: str | None) -> str | None:
        if not message_id:
            return None
        path = self._snapshot_path(message_id)
        if not path.exists():
            logger.warning(f"Message {message_id} not found")
            return None
        return path.read_text(encoding="utf-8")

    async def publish(
        self,
        webhook_url: str | None,
        message_id: str | None,
        content: str,
    ) -> tuple[str, str]:
        """Write the leaderboard; returns (message_id, "updated" | "created")."""
        message_id = message_id or uuid.uuid4().hex
        path = self._snapshot_path(message_id)
        action = "updated" if path.exists() else "created"
        atomic_write_text(content, path)
        logger.info(f"Wrote leaderboard message {message_id} to {path}")
        return message_id, action

    async def close(self) -> None:
        pass
