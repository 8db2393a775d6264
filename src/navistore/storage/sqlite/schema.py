"""
SQLite Schema Definitions

Contains the fixed table definitions, the navigation-data partition layout,
and schema initialization logic.
"""

import sqlite3
from enum import Enum
from typing import List, Union

from navistore.exceptions import InvalidTableError
from navistore.logging_config import logger
from navistore.schemas import MAX_ID, default_speed_limits
from navistore.storage.sqlite.config import NAVI_PARTITION_PREFIX


class TableName(str, Enum):
    """The five base tables, in creation (dependency) order."""
    SPEED_LIMIT = "speed_limit"
    WAY = "way"
    WAY_NODES = "way_nodes"
    WAY_DATA = "way_data"
    NAVI_DATA = "navi_data"


_NAVI_TABLE_SQL = """
CREATE TABLE {if_not_exists}{name} (
    way_id INTEGER NOT NULL REFERENCES way(way_id) ON UPDATE CASCADE ON DELETE CASCADE,
    navi_index INTEGER NOT NULL,
    data BLOB,
    UNIQUE (way_id, navi_index)
)
"""

TABLE_SQL = {
    TableName.SPEED_LIMIT: """
        CREATE TABLE speed_limit (
            id INTEGER PRIMARY KEY,
            speed INTEGER NOT NULL
        )
    """,
    # pre/next way ids are plain columns: a neighbour may be saved later
    TableName.WAY: """
        CREATE TABLE way (
            way_id INTEGER PRIMARY KEY,
            pre_way_id INTEGER,
            next_way_id INTEGER,
            speed_min INTEGER REFERENCES speed_limit(id) ON UPDATE CASCADE,
            speed_max INTEGER REFERENCES speed_limit(id) ON UPDATE CASCADE
        )
    """,
    TableName.WAY_NODES: """
        CREATE TABLE way_nodes (
            way_id INTEGER NOT NULL REFERENCES way(way_id) ON UPDATE CASCADE ON DELETE CASCADE,
            node_index INTEGER NOT NULL,
            data_line_number INTEGER NOT NULL,
            node_value TEXT NOT NULL,
            UNIQUE (way_id, node_index)
        )
    """,
    TableName.WAY_DATA: """
        CREATE TABLE way_data (
            way_id INTEGER PRIMARY KEY REFERENCES way(way_id) ON UPDATE CASCADE ON DELETE CASCADE,
            raw_data BLOB,
            navi_number INTEGER NOT NULL DEFAULT 0,
            navi_table_id INTEGER NOT NULL DEFAULT 0
        )
    """,
    TableName.NAVI_DATA: _NAVI_TABLE_SQL.format(if_not_exists="", name=TableName.NAVI_DATA.value),
}


def resolve_table_name(name: Union[str, TableName]) -> TableName:
    """
    Map a logical table name to TableName.

    Raises:
        InvalidTableError: If the name is not one of the five base tables
    """
    try:
        return TableName(name)
    except ValueError:
        raise InvalidTableError(name, f"Expected one of: {', '.join(t.value for t in TableName)}")


def partition_table_name(table_id: int) -> str:
    """
    Physical name of navigation-data partition `table_id`.

    The id is interpolated into SQL, so only non-negative ints are accepted.
    """
    if isinstance(table_id, bool) or not isinstance(table_id, int) or not 0 <= table_id <= MAX_ID:
        raise InvalidTableError(table_id, "Partition ids must be non-negative integers.")
    return f"{NAVI_PARTITION_PREFIX}{table_id}"


def has_table(conn: sqlite3.Connection, name: str) -> bool:
    """Catalog lookup for a physical table name."""
    row = conn.execute(
        "SELECT count(*) FROM sqlite_master WHERE type = 'table' AND name = ?",
        (name,)
    ).fetchone()
    return row[0] > 0


def navi_partition_ids(conn: sqlite3.Connection) -> List[int]:
    """Ids of all existing navi_data_<id> tables, ascending."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name GLOB ?",
        (f"{NAVI_PARTITION_PREFIX}[0-9]*",)
    )
    ids = []
    for row in cursor:
        suffix = row[0][len(NAVI_PARTITION_PREFIX):]
        if suffix.isdigit():
            ids.append(int(suffix))
    return sorted(ids)


class SQLiteSchemaOperations:
    """
    Table lifecycle: existence checks, creation, and idempotent initialization.

    Every public method returns a success flag; sqlite errors are logged here
    and never escape.
    """

    def __init__(self, persistence):
        """
        Args:
            persistence: SQLitePersistence owning the shared connection
        """
        self._persistence = persistence

    def table_exists(self, name: Union[str, TableName]) -> bool:
        """
        Check whether one of the base tables exists.

        Returns False (and logs) for unknown names and catalog errors.
        """
        try:
            table = resolve_table_name(name)
        except InvalidTableError as e:
            logger.error(str(e))
            return False

        try:
            return has_table(self._persistence.connection, table.value)
        except sqlite3.Error as e:
            logger.error(f"Catalog query for table '{table.value}' failed: {e}")
            return False

    def create_table(self, name: Union[str, TableName]) -> bool:
        """
        Run the fixed DDL for one base table.

        Fails if the name is unknown or the table already exists.
        """
        try:
            table = resolve_table_name(name)
        except InvalidTableError as e:
            logger.error(f"Cannot create table: {e}")
            return False

        try:
            self._persistence.connection.execute(TABLE_SQL[table])
        except sqlite3.Error as e:
            logger.error(f"Create database table {table.value} failed. {e}")
            return False

        logger.info(f"Created table {table.value}")
        return True

    def fill_speed_limits(self) -> bool:
        """Seed speed_limit with ids 1..13 in a single transaction."""
        rows = [(limit.id, limit.speed) for limit in default_speed_limits()]
        try:
            with self._persistence.transaction() as conn:
                conn.executemany("INSERT INTO speed_limit (id, speed) VALUES (?, ?)", rows)
        except sqlite3.Error as e:
            logger.error(f"Seeding speed_limit failed: {e}")
            return False

        logger.debug(f"Seeded {len(rows)} speed limits")
        return True

    def initialize(self) -> bool:
        """
        Create the schema unless it is already present.

        The presence of `way` is taken to mean the whole schema exists; the
        other tables are not re-verified. Creation is not transactional as a
        whole: a failure midway leaves the tables created so far in place,
        and such a database must be treated as corrupt.
        """
        if self.table_exists(TableName.WAY):
            logger.debug(f"Schema already present in {self._persistence.db_path}")
            return True

        for table in TableName:
            if not self.create_table(table):
                return False

        if not self.fill_speed_limits():
            return False

        logger.info(f"Initialized navigation schema at {self._persistence.db_path}")
        return True

    def create_navi_partition(self, table_id: int) -> bool:
        """Create navi_data_<table_id> with the navi_data layout if missing."""
        try:
            name = partition_table_name(table_id)
        except InvalidTableError as e:
            logger.error(f"Cannot create partition: {e}")
            return False

        try:
            if has_table(self._persistence.connection, name):
                logger.debug(f"Navigation partition {name} already exists")
                return True
            self._persistence.connection.execute(
                _NAVI_TABLE_SQL.format(if_not_exists="IF NOT EXISTS ", name=name)
            )
        except sqlite3.Error as e:
            logger.error(f"Create partition {name} failed. {e}")
            return False

        logger.info(f"Created navigation partition {name}")
        return True

    def list_navi_partitions(self) -> List[int]:
        """Ids of existing partitions; empty list (logged) on catalog errors."""
        try:
            return navi_partition_ids(self._persistence.connection)
        except sqlite3.Error as e:
            logger.error(f"Listing navigation partitions failed: {e}")
            return []
