"""
Shared utilities for Rankboard.

This module provides common functions used across multiple modules
to avoid code duplication.
"""

import logging
import re
import shutil
import tempfile
from pathlib import Path

import pandas as pd

from rankboard.config import LABEL_DISALLOWED_CHARS, LOG_LEVEL, MAX_LABEL_LENGTH

# --- Shared Regex Patterns for Command Parsing ---
# Discord user mention: <@123456789> or <@!123456789> (nickname form)
MENTION_RE = re.compile(r"<@!?(\d+)>")

# Whole-token integer, optionally signed (signed values are rejected later)
NUMBER_RE = re.compile(r"^[+-]?\d+$")

# ISO-8601 text starts with a calendar date; rules out pandas keywords like "now"
ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")

_LABEL_STRIP_RE = re.compile(f"[{re.escape(LABEL_DISALLOWED_CHARS)}]")


def extract_user_id(mention: str) -> str | None:
    """Return the numeric user id from a Discord mention, or None."""
    match = MENTION_RE.search(mention)
    return match.group(1) if match else None


def is_number(token: str) -> bool:
    """True if the whole token is an integer literal."""
    return bool(NUMBER_RE.match(token))


def sanitize_label(text: str) -> str:
    """Remove disallowed characters, trim, and cap to MAX_LABEL_LENGTH."""
    if not isinstance(text, str):
        return ""
    return _LABEL_STRIP_RE.sub("", text).strip()[:MAX_LABEL_LENGTH]


# --- Timestamps ---
def to_timestamp(value: str) -> pd.Timestamp:
    """
    Parse an ISO-8601 date or datetime into a UTC Timestamp.

    Naive values are taken as UTC.

    Args:
        value: ISO-8601 text, e.g. "2026-02-14" or "2026-02-14T18:30:00Z"

    Returns:
        Timezone-aware pandas Timestamp in UTC

    Raises:
        ValueError: If the text is not an ISO-8601 date/datetime
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Empty or non-text timestamp: {value!r}")
    if not ISO_DATE_RE.match(value.strip()):
        raise ValueError(f"Not an ISO-8601 date: {value!r}")
    ts = pd.to_datetime(value.strip(), format="ISO8601", utc=True)
    if pd.isna(ts):
        raise ValueError(f"Not a timestamp: {value!r}")
    return ts


def format_timestamp(ts: pd.Timestamp) -> str:
    """Canonical storage form: YYYY-MM-DDTHH:MM:SS.mmmZ (UTC)."""
    ts = ts.tz_convert("UTC") if ts.tzinfo is not None else ts.tz_localize("UTC")
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def normalize_timestamp(value: str) -> str:
    """Parse ISO-8601 text and return it in canonical storage form."""
    return format_timestamp(to_timestamp(value))


# --- Logging Setup ---
def setup_logging(name: str | None = None, level: int | str = LOG_LEVEL) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ from the calling module)
        level: Logging level (default: LOG_LEVEL from the environment)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


# --- File Operations ---
def atomic_write_text(text: str, path: Path) -> None:
    """
    Write text to a file atomically using a temporary file.

    This prevents a half-written snapshot if the write is interrupted.

    Args:
        text: Content to write
        path: Destination path
    """
    logger = setup_logging(__name__)

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    # Write to temp file first
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            delete=False,
            suffix='.txt',
            dir=path.parent  # Same filesystem for atomic move
        ) as tmp:
            tmp.write(text)
            tmp_path = Path(tmp.name)

        # Atomic move (rename) to final destination
        shutil.move(str(tmp_path), str(path))
        logger.debug(f"Atomically wrote {len(text)} characters to {path}")

    except Exception:
        # Clean up temp file if it exists
        if 'tmp_path' in locals() and tmp_path.exists():
            tmp_path.unlink()
        raise


__all__ = [
    # Logging
    'setup_logging',
    # File operations
    'atomic_write_text',
    # Timestamps
    'to_timestamp',
    'format_timestamp',
    'normalize_timestamp',
    # Command parsing
    'MENTION_RE',
    'NUMBER_RE',
    'ISO_DATE_RE',
    'extract_user_id',
    'is_number',
    'sanitize_label',
]
