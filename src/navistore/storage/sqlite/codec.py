"""
Record Codec

Maps domain records to statement parameters and sqlite3.Row objects back to
records. Optional references are written as NULL when they hold the
NO_REFERENCE sentinel, and NULL reads back as the sentinel; a literal 0 is
never stored for them.
"""

import sqlite3
from typing import Any, Optional, Tuple

from navistore.schemas import (
    NO_REFERENCE,
    NaviData,
    Node,
    SpeedLimit,
    Way,
    WayData,
)


def encode_reference(value: int) -> Optional[int]:
    """Bind value for an optional reference: NULL for the sentinel."""
    return None if value == NO_REFERENCE else value


def decode_reference(value: Optional[int]) -> int:
    """Inverse of encode_reference."""
    return NO_REFERENCE if value is None else int(value)


def encode_blob(data: bytes) -> sqlite3.Binary:
    return sqlite3.Binary(data)


def decode_blob(value: Any) -> bytes:
    return b"" if value is None else bytes(value)


# ========== WAY ==========

def way_insert_params(way: Way) -> Tuple:
    """(way_id, pre_way_id, next_way_id, speed_min, speed_max)"""
    return (way.way_id,) + _way_link_params(way)


def way_update_params(way_id: int, way: Way) -> Tuple:
    """(pre_way_id, next_way_id, speed_min, speed_max, way_id)"""
    return _way_link_params(way) + (way_id,)


def _way_link_params(way: Way) -> Tuple:
    return (
        encode_reference(way.pre_way_id),
        encode_reference(way.next_way_id),
        encode_reference(way.speed_min),
        encode_reference(way.speed_max),
    )


def speed_limit_update_params(way_id: int, speed_min: int, speed_max: int) -> Tuple:
    """(speed_min, speed_max, way_id)"""
    return (encode_reference(speed_min), encode_reference(speed_max), way_id)


def way_from_row(row: sqlite3.Row) -> Way:
    return Way(
        way_id=row["way_id"],
        pre_way_id=decode_reference(row["pre_way_id"]),
        next_way_id=decode_reference(row["next_way_id"]),
        speed_min=decode_reference(row["speed_min"]),
        speed_max=decode_reference(row["speed_max"]),
    )


def speed_limit_from_row(row: sqlite3.Row) -> SpeedLimit:
    return SpeedLimit(id=row["id"], speed=row["speed"])


# ========== WAY NODES ==========

def node_params(way_id: int, node: Node) -> Tuple:
    """(way_id, node_index, data_line_number, node_value)"""
    return (way_id, node.node_index, node.data_line_number, node.node_value)


def node_from_row(row: sqlite3.Row) -> Node:
    return Node(
        node_index=row["node_index"],
        data_line_number=row["data_line_number"],
        node_value=row["node_value"],
    )


# ========== WAY DATA ==========

def way_data_insert_params(way_data: WayData) -> Tuple:
    """(way_id, raw_data, navi_number, navi_table_id)"""
    return (way_data.way_id,) + _way_data_value_params(way_data)


def way_data_update_params(way_id: int, way_data: WayData) -> Tuple:
    """(raw_data, navi_number, navi_table_id, way_id)"""
    return _way_data_value_params(way_data) + (way_id,)


def _way_data_value_params(way_data: WayData) -> Tuple:
    return (encode_blob(way_data.raw_data), way_data.navi_number, way_data.navi_table_id)


def way_data_from_row(row: sqlite3.Row) -> WayData:
    return WayData(
        way_id=row["way_id"],
        raw_data=decode_blob(row["raw_data"]),
        navi_number=row["navi_number"],
        navi_table_id=row["navi_table_id"],
    )


# ========== NAVI DATA ==========

def navi_data_params(way_id: int, navi_data: NaviData) -> Tuple:
    """(way_id, navi_index, data)"""
    return (way_id, navi_data.navi_index, encode_blob(navi_data.data))


def navi_data_from_row(row: sqlite3.Row) -> NaviData:
    return NaviData(navi_index=row["navi_index"], data=decode_blob(row["data"]))
