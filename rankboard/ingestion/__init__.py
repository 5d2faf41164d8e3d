"""
Update Command Ingestion

Modules:
- command_parser: Parse LB_UPDATE_* chat commands
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name in ("parse_message", "parse_messages"):
        from rankboard.ingestion import command_parser
        return getattr(command_parser, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
