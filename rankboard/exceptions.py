"""
Exception hierarchy for Rankboard.

Parser and codec errors are raised at the failure point and converted to
logged failure reasons at the batch boundary; they never abort a sync
cycle. Transport errors abort the cycle of a single game only.
"""


class RankboardError(Exception):
    """Base class for all Rankboard errors"""
    pass


# --- Command parsing ---
class CommandParseError(RankboardError):
    """An update command could not be turned into a player record"""

    reason = "parse_error"

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step

    @property
    def failure_reason(self) -> str:
        """Reason code, qualified by the current/peak step when known."""
        return f"{self.reason}:{self.step}" if self.step else self.reason


class InsufficientFieldsError(CommandParseError):
    """Too few whitespace-separated fields after the command tag"""
    reason = "insufficient_fields"


class InvalidMentionError(CommandParseError):
    """First field is not a <@id> user mention"""
    reason = "invalid_mention"


class UnknownRankError(CommandParseError):
    """No prefix of the tokens names a rank of the game"""
    reason = "unknown_rank"


class InvalidRankError(CommandParseError):
    """The rank phrase of the current or peak step was not recognized"""
    reason = "invalid_rank"


class MissingValueError(CommandParseError):
    """No numeric ladder value follows a rank phrase"""
    reason = "missing_value"


class InvalidValueError(CommandParseError):
    """The ladder value is not a non-negative integer"""
    reason = "invalid_value"


class InvalidDateError(CommandParseError):
    """Trailing fields are not an ISO-8601 date or datetime"""
    reason = "invalid_date"


# --- Snapshot codec ---
class MalformedLineError(RankboardError):
    """A persisted player line cannot be decoded"""
    pass


# --- Runtime ---
class ConfigurationError(RankboardError):
    """Required settings are missing or invalid"""
    pass


class TransportError(RankboardError):
    """A channel or webhook could not be reached"""
    pass
