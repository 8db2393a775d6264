"""
Storage layer for navistore.

SQLite-backed persistence for way topology, raw ingestion data and derived
navigation data.
"""

from .sqlite import NaviStore

__all__ = [
    "NaviStore",
]
