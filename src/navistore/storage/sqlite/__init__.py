"""
SQLite Storage Package

Public API:
- NaviStore: Main facade for storage operations

Internal Modules:
- schema: Table definitions, partitions and initialization
- codec: Record <-> statement parameter / row mapping
- persistence: Connection management, transactions, statistics
- ways: Way, way node and way data operations
- navi: Navigation data operations
- allocator: Way id and partition allocation
- config: Configuration constants
"""

from navistore.storage.sqlite.facade import NaviStore

__all__ = ['NaviStore']
