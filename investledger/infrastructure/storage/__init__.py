"""
Storage infrastructure.

This module provides the in-memory store and JSON snapshot persistence
behind the ledger's storage interface.
"""

from .memory_store import InMemoryPortfolioStore
from .snapshot import SnapshotFileStore, export_snapshot, import_snapshot, parse_snapshot

__all__ = [
    "InMemoryPortfolioStore",
    "SnapshotFileStore",
    "export_snapshot",
    "import_snapshot",
    "parse_snapshot",
]
