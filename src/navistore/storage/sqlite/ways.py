"""
SQLite Way Operations

Handles writes, lookups and deletes for ways, their node sequences and their
raw data rows.
"""

import sqlite3
from typing import List, Tuple

from navistore.exceptions import InvalidTableError
from navistore.logging_config import logger
from navistore.schemas import LookupResult, SpeedLimit, Way, WayData, WayNodes
from navistore.storage.sqlite import codec
from navistore.storage.sqlite.schema import has_table, partition_table_name


class SQLiteWayOperations:
    """
    Way, way node and way data CRUD operations.

    Public methods return a success flag or a LookupResult; sqlite errors
    are logged and converted at this boundary. Multi-statement operations
    run in one transaction and leave no partial state behind.
    """

    def __init__(self, persistence):
        """
        Args:
            persistence: SQLitePersistence owning the shared connection
        """
        self._persistence = persistence

    def _execute(self, sql: str, params: Tuple, action: str) -> bool:
        """Run one self-committing statement, logging failures."""
        try:
            self._persistence.connection.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"{action} failed: {e}")
            return False
        return True

    # ========== WAY ==========

    def save_way(self, way: Way) -> bool:
        """Insert a way. A single statement, so no explicit transaction."""
        return self._execute(
            "INSERT INTO way (way_id, pre_way_id, next_way_id, speed_min, speed_max) "
            "VALUES (?, ?, ?, ?, ?)",
            codec.way_insert_params(way),
            f"Save way {way.way_id}",
        )

    def update_way(self, way_id: int, way: Way) -> bool:
        """Overwrite links and speed range of `way_id`."""
        return self._execute(
            "UPDATE way SET pre_way_id = ?, next_way_id = ?, speed_min = ?, speed_max = ? "
            "WHERE way_id = ?",
            codec.way_update_params(way_id, way),
            f"Update way {way_id}",
        )

    def update_way_speed_limit(self, way_id: int, speed_min: int, speed_max: int) -> bool:
        return self._execute(
            "UPDATE way SET speed_min = ?, speed_max = ? WHERE way_id = ?",
            codec.speed_limit_update_params(way_id, speed_min, speed_max),
            f"Update speed limit of way {way_id}",
        )

    def query_way(self, way_id: int) -> LookupResult[Way]:
        try:
            row = self._persistence.connection.execute(
                "SELECT way_id, pre_way_id, next_way_id, speed_min, speed_max FROM way WHERE way_id = ?",
                (way_id,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Query way {way_id} failed: {e}")
            return LookupResult[Way].from_error(e)

        if row is None:
            return LookupResult[Way].missing()
        return LookupResult[Way].from_record(codec.way_from_row(row))

    def query_speed_limits(self) -> List[SpeedLimit]:
        """All speed limits by id; empty list (logged) on error."""
        try:
            cursor = self._persistence.connection.execute("SELECT id, speed FROM speed_limit ORDER BY id")
            return [codec.speed_limit_from_row(row) for row in cursor]
        except sqlite3.Error as e:
            logger.error(f"Query speed limits failed: {e}")
            return []

    # ========== WAY NODES ==========

    def _insert_way_nodes(self, conn: sqlite3.Connection, way_id: int, way_nodes: WayNodes) -> None:
        # executemany reuses one prepared statement and stops at the first failing row
        conn.executemany(
            "INSERT INTO way_nodes (way_id, node_index, data_line_number, node_value) "
            "VALUES (?, ?, ?, ?)",
            (codec.node_params(way_id, node) for node in way_nodes.nodes)
        )

    def save_way_nodes(self, way_nodes: WayNodes) -> bool:
        """
        Insert a way's node sequence as one batch.

        The first failing row rolls back the whole batch; no partial
        sequence is ever committed.
        """
        try:
            with self._persistence.transaction() as conn:
                self._insert_way_nodes(conn, way_nodes.way_id, way_nodes)
        except sqlite3.Error as e:
            logger.error(f"Save nodes of way {way_nodes.way_id} failed, batch rolled back: {e}")
            return False

        logger.debug(f"Saved {len(way_nodes.nodes)} nodes for way {way_nodes.way_id}")
        return True

    def update_way_nodes(self, way_id: int, way_nodes: WayNodes) -> bool:
        """
        Replace the node sequence of `way_id`.

        Delete and re-insert share one transaction, so a failed insert keeps
        the previous nodes.
        """
        if way_nodes.way_id != way_id:
            logger.error(f"Update nodes of way {way_id} rejected: record belongs to way {way_nodes.way_id}")
            return False

        try:
            with self._persistence.transaction() as conn:
                conn.execute("DELETE FROM way_nodes WHERE way_id = ?", (way_id,))
                self._insert_way_nodes(conn, way_id, way_nodes)
        except sqlite3.Error as e:
            logger.error(f"Update nodes of way {way_id} failed, previous nodes kept: {e}")
            return False
        return True

    def query_way_nodes(self, way_id: int) -> LookupResult[WayNodes]:
        """Nodes of `way_id` in insertion order; found iff at least one row."""
        try:
            cursor = self._persistence.connection.execute(
                "SELECT node_index, data_line_number, node_value FROM way_nodes "
                "WHERE way_id = ? ORDER BY rowid",
                (way_id,)
            )
            nodes = [codec.node_from_row(row) for row in cursor]
        except sqlite3.Error as e:
            logger.error(f"Query nodes of way {way_id} failed: {e}")
            return LookupResult[WayNodes].from_error(e)

        if not nodes:
            return LookupResult[WayNodes].missing()
        return LookupResult[WayNodes].from_record(WayNodes(way_id=way_id, nodes=nodes))

    def delete_way_nodes(self, way_id: int) -> bool:
        return self._execute("DELETE FROM way_nodes WHERE way_id = ?", (way_id,), f"Delete nodes of way {way_id}")

    # ========== WAY DATA ==========

    def save_way_data(self, way_data: WayData) -> bool:
        return self._execute(
            "INSERT INTO way_data (way_id, raw_data, navi_number, navi_table_id) VALUES (?, ?, ?, ?)",
            codec.way_data_insert_params(way_data),
            f"Save data of way {way_data.way_id}",
        )

    def update_way_data(self, way_id: int, way_data: WayData) -> bool:
        return self._execute(
            "UPDATE way_data SET raw_data = ?, navi_number = ?, navi_table_id = ? WHERE way_id = ?",
            codec.way_data_update_params(way_id, way_data),
            f"Update data of way {way_id}",
        )

    def query_way_data(self, way_id: int) -> LookupResult[WayData]:
        try:
            row = self._persistence.connection.execute(
                "SELECT way_id, raw_data, navi_number, navi_table_id FROM way_data WHERE way_id = ?",
                (way_id,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Query data of way {way_id} failed: {e}")
            return LookupResult[WayData].from_error(e)

        if row is None:
            return LookupResult[WayData].missing()
        return LookupResult[WayData].from_record(codec.way_data_from_row(row))

    def delete_way_data(self, way_id: int) -> bool:
        return self._execute("DELETE FROM way_data WHERE way_id = ?", (way_id,), f"Delete data of way {way_id}")

    # ========== CASCADING DELETE ==========

    def delete_way(self, way_id: int) -> bool:
        """
        Delete a way and every row that references it.

        Removes the way, then its rows in way_nodes, way_data, navi_data and
        the partition named by its navi_table_id. All deletes share one
        transaction: on failure nothing is removed.
        """
        try:
            with self._persistence.transaction() as conn:
                row = conn.execute(
                    "SELECT navi_table_id FROM way_data WHERE way_id = ?", (way_id,)
                ).fetchone()

                conn.execute("DELETE FROM way WHERE way_id = ?", (way_id,))
                conn.execute("DELETE FROM way_nodes WHERE way_id = ?", (way_id,))
                conn.execute("DELETE FROM way_data WHERE way_id = ?", (way_id,))
                conn.execute("DELETE FROM navi_data WHERE way_id = ?", (way_id,))

                if row is not None:
                    partition = partition_table_name(row["navi_table_id"])
                    if has_table(conn, partition):
                        conn.execute(f"DELETE FROM {partition} WHERE way_id = ?", (way_id,))
        except (sqlite3.Error, InvalidTableError) as e:
            logger.error(f"Delete way {way_id} failed, nothing removed: {e}")
            return False

        logger.debug(f"Deleted way {way_id} and its dependent rows")
        return True
