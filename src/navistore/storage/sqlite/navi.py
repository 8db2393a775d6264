"""
SQLite Navigation Data Operations

Handles the ordered navigation entries derived for each way. Entries live in
the base navi_data table or, when a table_id is given, in the partition
navi_data_<table_id>.
"""

import sqlite3
from typing import List, Optional

from navistore.exceptions import InvalidTableError
from navistore.logging_config import logger
from navistore.schemas import LookupResult, NaviData, NaviInfo
from navistore.storage.sqlite import codec
from navistore.storage.sqlite.schema import TableName, partition_table_name


def navi_table(table_id: Optional[int] = None) -> str:
    """Physical table for navigation rows: the base table or a partition."""
    if table_id is None:
        return TableName.NAVI_DATA.value
    return partition_table_name(table_id)


class SQLiteNaviOperations:
    """
    Navigation data CRUD operations.

    Saves are all-or-nothing batches; updates replace the whole sequence of
    a way inside one transaction.
    """

    def __init__(self, persistence):
        """
        Args:
            persistence: SQLitePersistence owning the shared connection
        """
        self._persistence = persistence

    def _insert_navi_data(self, conn: sqlite3.Connection, table: str, navi_info: NaviInfo) -> None:
        conn.executemany(
            f"INSERT INTO {table} (way_id, navi_index, data) VALUES (?, ?, ?)",
            (codec.navi_data_params(navi_info.way_id, entry) for entry in navi_info.navi_data)
        )

    def save_navi_data(self, navi_info: NaviInfo, table_id: Optional[int] = None) -> bool:
        """
        Insert a way's navigation entries as one batch.

        Args:
            navi_info: Way id plus ordered entries
            table_id: Partition to write into; None for the base table

        Returns:
            True if every row was committed, False if the batch was rolled back
        """
        try:
            table = navi_table(table_id)
            with self._persistence.transaction() as conn:
                self._insert_navi_data(conn, table, navi_info)
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Save navigation data of way {navi_info.way_id} failed, batch rolled back: {e}")
            return False

        logger.debug(f"Saved {len(navi_info.navi_data)} navigation entries for way {navi_info.way_id} into {table}")
        return True

    def update_navi_data(self, way_id: int, navi_info: NaviInfo, table_id: Optional[int] = None) -> bool:
        """Replace the navigation entries of `way_id`; previous rows survive a failure."""
        if navi_info.way_id != way_id:
            logger.error(f"Update navigation data of way {way_id} rejected: record belongs to way {navi_info.way_id}")
            return False

        try:
            table = navi_table(table_id)
            with self._persistence.transaction() as conn:
                conn.execute(f"DELETE FROM {table} WHERE way_id = ?", (way_id,))
                self._insert_navi_data(conn, table, navi_info)
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Update navigation data of way {way_id} failed, previous entries kept: {e}")
            return False
        return True

    def query_navi_data(self, way_id: int, table_id: Optional[int] = None) -> LookupResult[List[NaviData]]:
        """All entries of `way_id` in insertion order; found iff at least one row."""
        try:
            table = navi_table(table_id)
            cursor = self._persistence.connection.execute(
                f"SELECT navi_index, data FROM {table} WHERE way_id = ? ORDER BY rowid",
                (way_id,)
            )
            entries = [codec.navi_data_from_row(row) for row in cursor]
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Query navigation data of way {way_id} failed: {e}")
            return LookupResult[List[NaviData]].from_error(e)

        if not entries:
            return LookupResult[List[NaviData]].missing()
        return LookupResult[List[NaviData]].from_record(entries)

    def query_navi_data_entry(
        self,
        way_id: int,
        navi_index: int,
        table_id: Optional[int] = None,
    ) -> LookupResult[NaviData]:
        """Single entry by (way_id, navi_index)."""
        try:
            table = navi_table(table_id)
            row = self._persistence.connection.execute(
                f"SELECT navi_index, data FROM {table} WHERE way_id = ? AND navi_index = ?",
                (way_id, navi_index)
            ).fetchone()
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Query navigation entry {navi_index} of way {way_id} failed: {e}")
            return LookupResult[NaviData].from_error(e)

        if row is None:
            return LookupResult[NaviData].missing()
        return LookupResult[NaviData].from_record(codec.navi_data_from_row(row))

    def delete_navi_data(self, way_id: int, table_id: Optional[int] = None) -> bool:
        try:
            table = navi_table(table_id)
            self._persistence.connection.execute(f"DELETE FROM {table} WHERE way_id = ?", (way_id,))
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Delete navigation data of way {way_id} failed: {e}")
            return False
        return True
