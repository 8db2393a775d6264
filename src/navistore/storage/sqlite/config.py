"""
SQLite Storage Configuration

Centralized configuration for the SQLite storage subsystem. Values here are
the defaults; user config (storage.*, partition.*) overrides them.
"""

# Connection settings
DEFAULT_TIMEOUT = 30.0
ENABLE_WAL_MODE = True

# Partitioning: a navi_data_<id> table rolls over once it holds this many rows
MAX_ROWS_PER_NAVI_TABLE = 10000

# Prefix of the physically separate navigation-data partitions
NAVI_PARTITION_PREFIX = "navi_data_"
