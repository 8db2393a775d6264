"""
SQLite ID & Partition Allocator

Hands out way ids and decides which navigation-data partition new rows go
to. Neither call locks anything: a single writer is assumed.
"""

import sqlite3
from typing import Optional

from navistore.exceptions import InvalidTableError
from navistore.logging_config import logger
from navistore.schemas import MAX_ID
from navistore.storage.sqlite.config import MAX_ROWS_PER_NAVI_TABLE
from navistore.storage.sqlite.schema import has_table, partition_table_name


class SQLiteAllocator:
    """
    Way id and partition allocation.

    Args:
        persistence: SQLitePersistence owning the shared connection
        max_rows: Row ceiling of one partition before rolling over
    """

    def __init__(self, persistence, max_rows: int = MAX_ROWS_PER_NAVI_TABLE):
        self._persistence = persistence
        self.max_rows = max_rows

    def create_new_way_id(self) -> Optional[int]:
        """
        Next way id: 1 on an empty table, otherwise max(way_id) + 1.

        Gaps below the current maximum are not filled.

        Returns:
            The id, or None if the query failed or the id space is used up
        """
        try:
            row = self._persistence.connection.execute("SELECT max(way_id) FROM way").fetchone()
        except sqlite3.Error as e:
            logger.error(f"Allocating a way id failed: {e}")
            return None

        current = row[0]
        if current is None:
            return 1
        if current >= MAX_ID:
            logger.error(f"Allocating a way id failed: way {current} already holds the largest id")
            return None
        return current + 1

    def get_navi_table_id(self) -> Optional[int]:
        """
        Partition that new navigation rows should be written to.

        The current partition is the highest navi_table_id recorded in
        way_data (0 when there is none). If it holds fewer than max_rows rows
        its id is returned, otherwise the next id. A partition table that
        does not exist yet counts as empty. Creating a new partition is left
        to the caller.

        Returns:
            The partition id, or None if a query failed
        """
        conn = self._persistence.connection
        try:
            row = conn.execute("SELECT max(navi_table_id) FROM way_data").fetchone()
            current = 0 if row[0] is None else row[0]

            partition = partition_table_name(current)
            if has_table(conn, partition):
                row_count = self._persistence.count_rows(partition)
            else:
                logger.debug(f"Partition {partition} does not exist yet, treating it as empty")
                row_count = 0
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Resolving the navigation partition failed: {e}")
            return None

        if row_count < self.max_rows:
            return current

        logger.info(f"Partition {partition} holds {row_count} rows, rolling over to {current + 1}")
        return current + 1
