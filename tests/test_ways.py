"""
Tests for way, way node and way data writes, lookups and cascading delete.
"""

import pytest

from navistore.schemas import LookupStatus, Node, Way, WayData, WayNodes

pytestmark = pytest.mark.integration


def _count(conn, table, way_id):
    return conn.execute(f"SELECT count(*) FROM {table} WHERE way_id = ?", (way_id,)).fetchone()[0]


class TestWayRoundTrip:
    """Saving and reading ways, including the NULL sentinel."""

    def test_absent_links_stored_as_null(self, store, raw_conn):
        """pre_way_id=0 is written as NULL and reads back as 0."""
        assert store.save_way(Way(way_id=1, pre_way_id=0, next_way_id=0))

        stored = raw_conn.execute(
            "SELECT pre_way_id IS NULL, next_way_id IS NULL, speed_min IS NULL FROM way WHERE way_id = 1"
        ).fetchone()
        assert stored == (1, 1, 1)

        result = store.query_way(1)
        assert result.status is LookupStatus.FOUND
        assert result.record.pre_way_id == 0
        assert result.record.next_way_id == 0

    def test_present_links_round_trip(self, store):
        way = Way(way_id=2, pre_way_id=5, next_way_id=9, speed_min=2, speed_max=13)
        assert store.save_way(way)
        assert store.query_way(2).record == way

    def test_duplicate_way_id_fails(self, store, saved_way):
        assert not store.save_way(Way(way_id=saved_way.way_id))

    def test_unknown_speed_limit_fails(self, store):
        """speed_min/speed_max reference speed_limit ids 1..13."""
        assert not store.save_way(Way(way_id=3, speed_min=14))
        assert not store.query_way(3)

    def test_update_way(self, store, saved_way):
        assert store.update_way(1, Way(way_id=1, pre_way_id=8, speed_min=2, speed_max=3))
        assert store.query_way(1).record == Way(way_id=1, pre_way_id=8, speed_min=2, speed_max=3)

    def test_update_way_clears_links_with_sentinel(self, store, raw_conn):
        assert store.save_way(Way(way_id=4, pre_way_id=3, next_way_id=5))
        assert store.update_way(4, Way(way_id=4))
        assert raw_conn.execute("SELECT pre_way_id, next_way_id FROM way WHERE way_id = 4").fetchone() == (None, None)

    def test_update_speed_limit(self, store, saved_way):
        assert store.update_way_speed_limit(1, 5, 0)
        way = store.query_way(1).record
        assert (way.speed_min, way.speed_max) == (5, 0)


class TestLookupSemantics:
    """Three-state lookup results."""

    def test_missing_way_is_not_found(self, store):
        result = store.query_way(404)
        assert result.status is LookupStatus.NOT_FOUND
        assert result.record is None
        assert result.error is None
        assert not result

    def test_statement_error_is_distinct(self, store):
        """A failing query reports ERROR, not NOT_FOUND."""
        store.close()
        result = store.query_way(1)
        assert result.status is LookupStatus.ERROR
        assert result.is_error
        assert result.error
        assert not result

    def test_found_is_truthy(self, store, saved_way):
        assert store.query_way(1)
        assert store.query_way(1).found


class TestWayNodes:
    """Batch node writes."""

    def test_save_and_query_in_order(self, store, saved_way, make_nodes):
        nodes = make_nodes(1, 5)
        nodes.nodes.reverse()
        assert store.save_way_nodes(nodes)

        result = store.query_way_nodes(1)
        assert result.found
        assert result.record == nodes

    def test_missing_nodes_not_found(self, store, saved_way):
        assert store.query_way_nodes(1).status is LookupStatus.NOT_FOUND

    def test_empty_batch_succeeds(self, store, saved_way):
        assert store.save_way_nodes(WayNodes(way_id=1))
        assert not store.query_way_nodes(1)

    def test_forced_failure_midway_rolls_back_everything(self, store, saved_way, raw_conn, make_nodes):
        """With row N/2 failing, none of the N rows remain."""
        store.persistence.connection.execute(
            "CREATE TRIGGER fail_half BEFORE INSERT ON way_nodes WHEN NEW.node_index = 5 "
            "BEGIN SELECT RAISE(ABORT, 'forced failure'); END"
        )
        assert not store.save_way_nodes(make_nodes(1, 10))
        assert _count(raw_conn, "way_nodes", 1) == 0

    def test_duplicate_index_rolls_back_batch(self, store, saved_way, raw_conn):
        nodes = WayNodes(way_id=1, nodes=[
            Node(node_index=0, data_line_number=1, node_value="a"),
            Node(node_index=1, data_line_number=2, node_value="b"),
            Node(node_index=0, data_line_number=3, node_value="c"),
        ])
        assert not store.save_way_nodes(nodes)
        assert _count(raw_conn, "way_nodes", 1) == 0

    def test_nodes_for_unknown_way_fail(self, store, make_nodes):
        assert not store.save_way_nodes(make_nodes(77, 3))

    def test_update_replaces_sequence(self, store, saved_way, make_nodes):
        assert store.save_way_nodes(make_nodes(1, 6))
        replacement = make_nodes(1, 2)
        assert store.update_way_nodes(1, replacement)
        assert store.query_way_nodes(1).record == replacement

    def test_failed_update_keeps_previous_nodes(self, store, saved_way, make_nodes):
        """Delete and re-insert are one transaction."""
        original = make_nodes(1, 3)
        assert store.save_way_nodes(original)

        broken = WayNodes(way_id=1, nodes=[
            Node(node_index=9, data_line_number=1, node_value="x"),
            Node(node_index=9, data_line_number=2, node_value="y"),
        ])
        assert not store.update_way_nodes(1, broken)
        assert store.query_way_nodes(1).record == original

    def test_update_rejects_mismatched_way(self, store, saved_way, make_nodes):
        assert store.save_way_nodes(make_nodes(1, 2))
        assert not store.update_way_nodes(1, make_nodes(2, 2))
        assert len(store.query_way_nodes(1).record.nodes) == 2

    def test_delete_way_nodes(self, store, saved_way, make_nodes):
        assert store.save_way_nodes(make_nodes(1, 4))
        assert store.delete_way_nodes(1)
        assert not store.query_way_nodes(1)


class TestWayData:
    """Raw data rows."""

    def test_save_and_query(self, store, saved_way):
        data = WayData(way_id=1, raw_data=bytes(range(256)), navi_number=12, navi_table_id=3)
        assert store.save_way_data(data)
        assert store.query_way_data(1).record == data

    def test_one_row_per_way(self, store, saved_way):
        assert store.save_way_data(WayData(way_id=1))
        assert not store.save_way_data(WayData(way_id=1))

    def test_data_for_unknown_way_fails(self, store):
        assert not store.save_way_data(WayData(way_id=5))

    def test_update(self, store, saved_way):
        assert store.save_way_data(WayData(way_id=1, raw_data=b"old"))
        updated = WayData(way_id=1, raw_data=b"new", navi_number=4, navi_table_id=1)
        assert store.update_way_data(1, updated)
        assert store.query_way_data(1).record == updated

    def test_missing_data_not_found(self, store, saved_way):
        assert store.query_way_data(1).status is LookupStatus.NOT_FOUND

    def test_delete_way_data(self, store, saved_way):
        assert store.save_way_data(WayData(way_id=1))
        assert store.delete_way_data(1)
        assert not store.query_way_data(1)


class TestDeleteWay:
    """Cascading delete."""

    @pytest.fixture
    def populated(self, store, saved_way, make_nodes, make_navi_info):
        assert store.save_way(Way(way_id=2))
        for way_id in (1, 2):
            assert store.save_way_nodes(make_nodes(way_id, 3))
            assert store.save_way_data(WayData(way_id=way_id, raw_data=b"raw", navi_number=2, navi_table_id=0))
            assert store.save_navi_data(make_navi_info(way_id, 2))
        assert store.create_navi_partition(0)
        assert store.save_navi_data(make_navi_info(1, 2), table_id=0)
        return store

    def test_removes_way_and_all_dependents(self, populated, raw_conn):
        assert populated.delete_way(1)

        for table in ("way", "way_nodes", "way_data", "navi_data", "navi_data_0"):
            assert _count(raw_conn, table, 1) == 0, table

    def test_other_ways_untouched(self, populated, raw_conn):
        assert populated.delete_way(1)

        for table in ("way", "way_nodes", "way_data", "navi_data"):
            assert _count(raw_conn, table, 2) > 0, table

    def test_failure_leaves_everything_in_place(self, populated, raw_conn):
        """One failing delete rolls back the whole cascade."""
        populated.persistence.connection.execute(
            "CREATE TRIGGER keep_navi BEFORE DELETE ON navi_data "
            "BEGIN SELECT RAISE(ABORT, 'navi rows are locked'); END"
        )
        assert not populated.delete_way(1)

        for table in ("way", "way_nodes", "way_data", "navi_data", "navi_data_0"):
            assert _count(raw_conn, table, 1) > 0, table

    def test_delete_unknown_way_succeeds(self, store):
        assert store.delete_way(999)
