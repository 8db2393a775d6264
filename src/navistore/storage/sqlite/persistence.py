"""
SQLite Persistence Layer

Handles the connection lifecycle, transaction boundaries, and database
statistics.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from navistore.logging_config import logger
from navistore.storage.sqlite.config import DEFAULT_TIMEOUT, ENABLE_WAL_MODE
from navistore.storage.sqlite.schema import (
    TableName,
    has_table,
    navi_partition_ids,
    partition_table_name,
)


class SQLitePersistence:
    """
    Owns the single connection shared by every operation of a store.

    Responsibilities:
    - Connection creation and configuration
    - Transaction management (nested calls become savepoints)
    - Database statistics

    The connection runs in autocommit mode; statements outside transaction()
    commit on their own.
    """

    def __init__(
        self,
        db_path: Path,
        timeout: float = DEFAULT_TIMEOUT,
        wal_mode: bool = ENABLE_WAL_MODE,
    ):
        """
        Open the database file, creating its directory if needed.

        Args:
            db_path: Path to the .sqlite file
            timeout: Seconds to wait on a locked database
            wal_mode: Enable write-ahead logging
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout
        self.wal_mode = wal_mode

        self._depth = 0
        self._closed = False
        self._conn = self._open_connection()

    def _open_connection(self) -> sqlite3.Connection:
        """
        Open the connection with foreign keys enabled.

        Returns:
            Connection with row factory configured
        """
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout, isolation_level=None)
        try:
            conn.row_factory = sqlite3.Row  # Access columns by name
            conn.execute("PRAGMA foreign_keys = ON")  # Enable cascade deletes

            if self.wal_mode:
                conn.execute("PRAGMA journal_mode = WAL")

            conn.execute(f"PRAGMA busy_timeout = {int(self.timeout * 1000)}")
        except sqlite3.Error:
            conn.close()
            raise
        logger.debug(f"Opened database {self.db_path}")
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for atomic transactions.

        Usage:
            with persistence.transaction() as conn:
                # Perform database operations
                # Commits on success, rolls back on exception

        A transaction() opened inside another one becomes a savepoint: its
        failure undoes only its own work, and nothing is durable until the
        outermost block commits.

        Yields:
            The shared connection
        """
        conn = self._conn
        savepoint: Optional[str] = None

        if self._depth:
            savepoint = f"navistore_sp_{self._depth}"
            conn.execute(f"SAVEPOINT {savepoint}")
        else:
            conn.execute("BEGIN")
        self._depth += 1

        try:
            yield conn
            if savepoint:
                conn.execute(f"RELEASE SAVEPOINT {savepoint}")
            else:
                conn.execute("COMMIT")
                logger.debug("Transaction committed successfully")
        except BaseException as e:
            try:
                self._rollback(conn, savepoint)
            except sqlite3.Error as rollback_error:
                logger.error(f"Rollback failed: {rollback_error}")
            if savepoint:
                logger.debug(f"Rolled back to savepoint {savepoint}: {e}")
            else:
                logger.warning(f"Transaction rolled back due to error: {e}")
            raise
        finally:
            self._depth -= 1

    def _rollback(self, conn: sqlite3.Connection, savepoint: Optional[str]) -> None:
        # SQLite may already have rolled back on its own (e.g. SQLITE_FULL)
        if not conn.in_transaction:
            return
        if savepoint:
            conn.execute(f"ROLLBACK TO SAVEPOINT {savepoint}")
            conn.execute(f"RELEASE SAVEPOINT {savepoint}")
        else:
            conn.execute("ROLLBACK")

    def count_rows(self, table: str) -> int:
        """Row count of a physical table. Callers pass trusted names only."""
        return self._conn.execute(f"SELECT count(*) FROM {table}").fetchone()[0]

    def get_stats(self) -> Dict[str, Any]:
        """
        Get store statistics.

        Returns:
            Dict with per-table counts, partition counts and file size
        """
        conn = self._conn
        stats: Dict[str, Any] = {}
        for table in TableName:
            if has_table(conn, table.value):
                stats[f"total_{table.value}"] = self.count_rows(table.value)

        stats['navi_partitions'] = {
            table_id: self.count_rows(partition_table_name(table_id))
            for table_id in navi_partition_ids(conn)
        }
        stats['db_size_bytes'] = self.db_path.stat().st_size if self.db_path.exists() else 0
        return stats

    def close(self) -> None:
        """Close the shared connection. Safe to call more than once."""
        if self._closed:
            return
        self._conn.close()
        self._closed = True
        logger.debug(f"Closed database {self.db_path}")
