"""
Pytest configuration for the navistore test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temp directory and config fixtures isolated from ~/.navistore
- An initialized store and a few ready-made records
"""

import os
import shutil
import sqlite3
import tempfile
from pathlib import Path

import pytest

from navistore.logging_config import reset_logging, setup_logging


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep the console quiet during test runs."""
    os.environ.setdefault("NAVISTORE_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    reset_logging()
    setup_logging(level="DEBUG", suppress_console=True)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="navistore_test_")).resolve()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def user_config(temp_dir):
    """
    UserConfig rooted in the temp dir, with its own global config dir.

    Keeps tests independent of ~/.navistore/config.json.
    """
    from navistore.user_config import UserConfig

    return UserConfig(project_root=temp_dir, global_dir=temp_dir / "global")


# ============================================================================
# STORE FIXTURES
# ============================================================================

@pytest.fixture
def store(temp_dir, user_config):
    """
    An initialized NaviStore backed by temp_dir/navi.sqlite.

    Returns:
        NaviStore instance
    """
    from navistore.storage import NaviStore

    store = NaviStore(temp_dir, config=user_config)
    yield store
    store.close()


@pytest.fixture
def raw_conn(store):
    """
    Second connection to the store's file for inspecting stored values.
    """
    conn = sqlite3.connect(str(store.db_path))
    yield conn
    conn.close()


@pytest.fixture
def saved_way(store):
    """A way with id 1 and a 30..60 speed range, already saved."""
    from navistore.schemas import Way

    way = Way(way_id=1, speed_min=1, speed_max=4)
    assert store.save_way(way)
    return way


@pytest.fixture
def make_nodes():
    """Factory for WayNodes with `count` sequential nodes."""
    return _make_nodes


def _make_nodes(way_id, count):
    from navistore.schemas import Node, WayNodes

    return WayNodes(
        way_id=way_id,
        nodes=[
            Node(node_index=i, data_line_number=100 + i, node_value=f"{i * 0.5},{i * 0.25}")
            for i in range(count)
        ],
    )


@pytest.fixture
def make_navi_info():
    """Factory for NaviInfo with `count` entries carrying small binary payloads."""
    return _make_navi_info


def _make_navi_info(way_id, count):
    from navistore.schemas import NaviData, NaviInfo

    return NaviInfo(
        way_id=way_id,
        navi_data=[NaviData(navi_index=i, data=bytes([i, 0, 255 - i])) for i in range(count)],
    )
