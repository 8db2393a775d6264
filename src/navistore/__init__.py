"""
navistore - Way topology and navigation data store

Persistence layer of an offline map-processing pipeline.
"""

__version__ = "1.0.0"

# Core exports
from navistore.exceptions import ConfigError, InvalidTableError, NaviStoreError, SchemaError
from navistore.schemas import (
    LookupResult,
    LookupStatus,
    NaviData,
    NaviInfo,
    Node,
    SpeedLimit,
    Way,
    WayData,
    WayNodes,
)
from navistore.storage import NaviStore

__all__ = [
    "__version__",
    "NaviStore",
    "Way",
    "WayNodes",
    "Node",
    "WayData",
    "NaviData",
    "NaviInfo",
    "SpeedLimit",
    "LookupResult",
    "LookupStatus",
    "NaviStoreError",
    "SchemaError",
    "ConfigError",
    "InvalidTableError",
]
