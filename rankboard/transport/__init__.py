"""
Message Transports

Modules:
- local: Discord JSON exports in, snapshot text files out
- discord_client: Discord channel history in, webhook message out
"""


def __getattr__(name):
    """Lazy imports so the local transport works without discord.py loaded."""
    if name == "LocalTransport":
        from rankboard.transport.local import LocalTransport
        return LocalTransport
    if name == "DiscordTransport":
        from rankboard.transport.discord_client import DiscordTransport
        return DiscordTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
