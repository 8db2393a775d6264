"""
SQLite Storage Facade

Public API of the navigation store. Delegates to specialized modules:
- persistence: Connection lifecycle, transactions, statistics
- schema: Table existence, creation, initialization, partitions
- ways: Way, way node and way data operations
- navi: Navigation data operations
- allocator: Way id and partition allocation
"""

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from navistore.exceptions import SchemaError
from navistore.logging_config import logger
from navistore.paths import NaviStorePaths, get_paths
from navistore.schemas import (
    LookupResult,
    NaviData,
    NaviInfo,
    SpeedLimit,
    Way,
    WayData,
    WayNodes,
)
from navistore.storage.sqlite.allocator import SQLiteAllocator
from navistore.storage.sqlite.config import (
    DEFAULT_TIMEOUT,
    ENABLE_WAL_MODE,
    MAX_ROWS_PER_NAVI_TABLE,
)
from navistore.storage.sqlite.navi import SQLiteNaviOperations
from navistore.storage.sqlite.persistence import SQLitePersistence
from navistore.storage.sqlite.schema import SQLiteSchemaOperations, TableName
from navistore.storage.sqlite.ways import SQLiteWayOperations
from navistore.user_config import UserConfig, get_user_config


class NaviStore:
    """
    SQLite-backed store for way topology, raw data and navigation data.

    Features:
    - Idempotent schema initialization with seeded speed limits
    - All-or-nothing batch saves of node and navigation sequences
    - Three-state lookups (found / not found / error)
    - Cascading delete of a way and everything that references it
    - Way id allocation and navigation-data partition rollover

    One connection is opened here and shared by every call until close().
    Not safe for concurrent use.

    Args:
        location: Directory to hold navi.sqlite, or a .sqlite/.db file path.
                  Defaults to .navistore/ under the current directory.
        timeout: Busy timeout in seconds (default: storage.timeout)
        wal_mode: Enable WAL journaling (default: storage.wal_mode)
        max_rows: Partition row ceiling (default: partition.max_rows)
        auto_init: Run initialize() now and raise SchemaError if it fails
        config: Configuration source (default: the user config singleton)
    """

    def __init__(
        self,
        location: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
        wal_mode: Optional[bool] = None,
        max_rows: Optional[int] = None,
        auto_init: bool = True,
        config: Optional[UserConfig] = None,
    ):
        config = config or get_user_config()
        db_name = config.get("storage.db_name", NaviStorePaths.DATABASE_NAME)

        if location is None:
            db_path = get_paths().navistore_dir / db_name
        else:
            db_path = NaviStorePaths.resolve_database(location, db_name)

        if timeout is None:
            timeout = float(config.get("storage.timeout", DEFAULT_TIMEOUT))
        if wal_mode is None:
            wal_mode = bool(config.get("storage.wal_mode", ENABLE_WAL_MODE))
        if max_rows is None:
            max_rows = config.get_int("partition.max_rows", MAX_ROWS_PER_NAVI_TABLE)

        try:
            self.persistence = SQLitePersistence(db_path, timeout=timeout, wal_mode=wal_mode)
        except sqlite3.Error as e:
            raise SchemaError(f"Cannot open navigation database {db_path}: {e}") from e

        self.schema = SQLiteSchemaOperations(self.persistence)
        self.ways = SQLiteWayOperations(self.persistence)
        self.navi = SQLiteNaviOperations(self.persistence)
        self.allocator = SQLiteAllocator(self.persistence, max_rows=max_rows)

        self.db_path = self.persistence.db_path

        if auto_init and not self.initialize():
            self.close()
            raise SchemaError(f"Failed to initialize navigation schema at {self.db_path}")

    def __enter__(self) -> "NaviStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ========== CONNECTION & TRANSACTION MANAGEMENT ==========

    def transaction(self):
        """
        Context manager grouping several calls into one transaction.

        Batch and composite operations inside it become savepoints; nothing
        is durable until the block exits cleanly.
        """
        return self.persistence.transaction()

    def close(self):
        """Close the shared connection."""
        return self.persistence.close()

    # ========== SCHEMA ==========

    def table_exists(self, name: Union[str, TableName]) -> bool:
        return self.schema.table_exists(name)

    def create_table(self, name: Union[str, TableName]) -> bool:
        return self.schema.create_table(name)

    def initialize(self) -> bool:
        """Create the five tables and seed speed limits unless `way` exists."""
        return self.schema.initialize()

    def create_navi_partition(self, table_id: int) -> bool:
        """Create navi_data_<table_id> if it does not exist."""
        return self.schema.create_navi_partition(table_id)

    def list_navi_partitions(self) -> List[int]:
        return self.schema.list_navi_partitions()

    # ========== WAYS ==========

    def save_way(self, way: Way) -> bool:
        return self.ways.save_way(way)

    def update_way(self, way_id: int, way: Way) -> bool:
        return self.ways.update_way(way_id, way)

    def update_way_speed_limit(self, way_id: int, speed_min: int, speed_max: int) -> bool:
        return self.ways.update_way_speed_limit(way_id, speed_min, speed_max)

    def query_way(self, way_id: int) -> LookupResult[Way]:
        return self.ways.query_way(way_id)

    def query_speed_limits(self) -> List[SpeedLimit]:
        return self.ways.query_speed_limits()

    def delete_way(self, way_id: int) -> bool:
        """Delete a way and all of its dependent rows atomically."""
        return self.ways.delete_way(way_id)

    # ========== WAY NODES ==========

    def save_way_nodes(self, way_nodes: WayNodes) -> bool:
        return self.ways.save_way_nodes(way_nodes)

    def update_way_nodes(self, way_id: int, way_nodes: WayNodes) -> bool:
        return self.ways.update_way_nodes(way_id, way_nodes)

    def query_way_nodes(self, way_id: int) -> LookupResult[WayNodes]:
        return self.ways.query_way_nodes(way_id)

    def delete_way_nodes(self, way_id: int) -> bool:
        return self.ways.delete_way_nodes(way_id)

    # ========== WAY DATA ==========

    def save_way_data(self, way_data: WayData) -> bool:
        return self.ways.save_way_data(way_data)

    def update_way_data(self, way_id: int, way_data: WayData) -> bool:
        return self.ways.update_way_data(way_id, way_data)

    def query_way_data(self, way_id: int) -> LookupResult[WayData]:
        return self.ways.query_way_data(way_id)

    def delete_way_data(self, way_id: int) -> bool:
        return self.ways.delete_way_data(way_id)

    # ========== NAVIGATION DATA ==========

    def save_navi_data(self, navi_info: NaviInfo, table_id: Optional[int] = None) -> bool:
        return self.navi.save_navi_data(navi_info, table_id)

    def update_navi_data(self, way_id: int, navi_info: NaviInfo, table_id: Optional[int] = None) -> bool:
        return self.navi.update_navi_data(way_id, navi_info, table_id)

    def query_navi_data(self, way_id: int, table_id: Optional[int] = None) -> LookupResult[List[NaviData]]:
        return self.navi.query_navi_data(way_id, table_id)

    def query_navi_data_entry(
        self, way_id: int, navi_index: int, table_id: Optional[int] = None
    ) -> LookupResult[NaviData]:
        return self.navi.query_navi_data_entry(way_id, navi_index, table_id)

    def delete_navi_data(self, way_id: int, table_id: Optional[int] = None) -> bool:
        return self.navi.delete_navi_data(way_id, table_id)

    # ========== ALLOCATION ==========

    def create_new_way_id(self) -> Optional[int]:
        return self.allocator.create_new_way_id()

    def get_navi_table_id(self) -> Optional[int]:
        return self.allocator.get_navi_table_id()

    # ========== STATS ==========

    def get_stats(self) -> Dict[str, Any]:
        """Row counts per table and partition plus file size; {} on error."""
        try:
            return self.persistence.get_stats()
        except sqlite3.Error as e:
            logger.error(f"Collecting store statistics failed: {e}")
            return {}
