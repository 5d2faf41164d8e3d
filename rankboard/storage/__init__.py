"""
Message-as-Database Storage

Modules:
- codec: Encode/decode the snapshot blob
- merge: Apply parsed updates onto a decoded state
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name in ("encode_state", "decode_state"):
        from rankboard.storage import codec
        return getattr(codec, name)
    if name in ("upsert", "apply_updates"):
        from rankboard.storage import merge
        return getattr(merge, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
