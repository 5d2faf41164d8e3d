"""
Rankboard - Message-Backed Game Leaderboards

This package contains the modules for:
- Rank recognition and leaderboard ordering (rankboard.ranking)
- Update command parsing (rankboard.ingestion)
- Snapshot encoding and merging (rankboard.storage)
- Message transports and the sync cycle (rankboard.transport, rankboard.sync)
- Shared configuration and utilities
"""

__version__ = "1.0.0"
