"""
Central configuration for the Rankboard leaderboard sync.

All shared constants and configuration values should be defined here
to avoid duplication and ensure consistency across modules. Values that
differ per deployment are read from the environment (a local `.env`
file is loaded first when present).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# --- Project Paths ---
PROJECT_ROOT = Path(__file__).parent.parent
DATA_FOLDER = PROJECT_ROOT / "data"
STATE_FOLDER = DATA_FOLDER / "state"

# --- Snapshot Blob Format ---
DATA_VERSION = "v1"
DATA_START_MARKER = f"[DATA:{DATA_VERSION}]"
DATA_END_MARKER = "[/DATA]"
GAME_PREFIX = "GAME:"
CURSOR_PREFIX = "LAST:"
NO_CURSOR = "none"
FIELD_SEPARATOR = "|"
UNKNOWN_LABEL = "Unknown"

# --- Command Parsing ---
# Characters removed from the free-text label (role / hero name)
LABEL_DISALLOWED_CHARS = "<>'\"`;()"
MAX_LABEL_LENGTH = 200

# --- Rendering ---
DISCORD_MESSAGE_LIMIT = 2000  # Hard Discord limit for message content
TRUNCATE_TARGET_LENGTH = 1900  # Leave headroom below the hard limit
MAX_RENDERED_PLAYERS = 50
MIN_RENDERED_PLAYERS = 3
WEBHOOK_USERNAME = "Leaderboard System"

# --- Runtime Settings (environment) ---
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
MAX_MESSAGES_PER_SYNC = int(os.getenv("MAX_MESSAGES_PER_SYNC", "100"))
DISCORD_HISTORY_LIMIT = 100  # Discord caps one history page at 100 messages
DISCORD_RATE_LIMIT_DELAY = int(os.getenv("DISCORD_RATE_LIMIT_DELAY", "1000"))  # ms
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Per-game variables are GAME_<TYPE>_CHANNEL_ID / _WEBHOOK_URL / _MESSAGE_ID
GAME_ENV_PREFIX = "GAME_"
