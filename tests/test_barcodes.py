"""
==============================================================================
Barcode Domain Tests
==============================================================================

Tests for the carrier classifier, the record store and list views.

==============================================================================
"""

from datetime import datetime

import pytest

from scanlist.barcodes import (
    BarcodeRecord,
    Category,
    InvalidIndexError,
    RecordStore,
    ViewState,
    category_by_name,
    classify,
    group_items,
    group_view,
    resolve_view,
    search,
)
from scanlist.barcodes.models import format_timestamp
from scanlist.barcodes.store import DEFAULT_TIMESTAMP_FORMAT
from scanlist.barcodes.views import (
    EMPTY_GROUP_MESSAGE,
    EMPTY_LIST_MESSAGE,
    EMPTY_SEARCH_MESSAGE,
)


def _record(code: str) -> BarcodeRecord:
    return BarcodeRecord(code=code, timestamp="01/02/2025, 10:00:00 AM")


class TestClassifier:
    """Tests for prefix classification."""

    @pytest.mark.parametrize("code, expected, order", [
        ("FM123", Category.FLIPKART, 1),
        ("VL9", Category.VALMO, 2),
        ("SF001", Category.SHADOWFAX, 3),
        ("1300", Category.XPRESSBEES, 4),
        ("14ZZ", Category.DELHIVERY, 5),
        ("36AB", Category.AMAZON, 6),
        ("AB12", Category.OTHERS, 7),
    ])
    def test_prefixes(self, code, expected, order):
        """Test each carrier prefix maps to its category and rank."""
        category = classify(code)
        assert category is expected
        assert category.order == order

    def test_prefix_is_case_sensitive(self):
        """Test lowercase prefixes do not match."""
        assert classify("fm123") is Category.OTHERS

    def test_first_rule_wins(self):
        """Test only the start of the code is considered."""
        assert classify("FM13") is Category.FLIPKART
        assert classify("13FM") is Category.XPRESSBEES

    def test_too_short_for_prefix(self):
        """Test a one-character code falls through to Others."""
        assert classify("F") is Category.OTHERS

    def test_category_by_name(self):
        """Test display names resolve and unknown names do not."""
        assert category_by_name("Amazon") is Category.AMAZON
        assert category_by_name("amazon") is None
        assert category_by_name("") is None


class TestRecordStore:
    """Tests for the deduplicating record store."""

    def test_insert_prepends(self):
        """Test newest records come first."""
        store = RecordStore()
        store.insert("AAA1")
        store.insert("BBB2")
        assert [r.code for r in store.records] == ["BBB2", "AAA1"]

    def test_insert_sets_timestamp_format(self):
        """Test new records use the configured timestamp format."""
        store = RecordStore(timestamp_format="%Y")
        result = store.insert("AAA1")
        assert result.accepted
        assert result.record.timestamp.isdigit()
        assert len(result.record.timestamp) == 4

    def test_default_timestamp_is_unpadded(self):
        """Test the default format matches the en-US locale string."""
        moment = datetime(2026, 3, 7, 21, 5, 0)
        assert format_timestamp(moment, DEFAULT_TIMESTAMP_FORMAT) == "3/7/2026, 9:05:00 PM"

    @pytest.mark.parametrize("moment,expected", [
        (datetime(2026, 12, 25, 0, 0, 9), "12/25/2026, 12:00:09 AM"),
        (datetime(2026, 1, 1, 12, 30, 0), "1/1/2026, 12:30:00 PM"),
    ])
    def test_default_timestamp_hour_edges(self, moment, expected):
        """Test midnight and noon render as 12."""
        assert format_timestamp(moment, DEFAULT_TIMESTAMP_FORMAT) == expected

    def test_padded_directives_unchanged(self):
        """Test plain strftime directives keep their padding."""
        moment = datetime(2026, 3, 7, 9, 5, 0)
        assert format_timestamp(moment, "%m/%d %H:%-M") == "03/07 09:5"

    def test_duplicate_rejected_without_change(self):
        """Test a second insert of a code is rejected."""
        store = RecordStore()
        first = store.insert("FM123")
        second = store.insert("FM123")

        assert first.accepted
        assert not second.accepted
        assert second.record is None
        assert len(store) == 1
        assert store[0] == first.record

    def test_records_returns_copy(self):
        """Test callers cannot mutate the store through records."""
        store = RecordStore()
        store.insert("AAA1")
        store.records.clear()
        assert len(store) == 1

    def test_delete_at(self):
        """Test deleting by position returns the removed record."""
        store = RecordStore([_record("A01"), _record("B02"), _record("C03")])
        removed = store.delete_at(1)
        assert removed.code == "B02"
        assert [r.code for r in store] == ["A01", "C03"]

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_delete_at_out_of_range(self, index):
        """Test out-of-range deletes raise and change nothing."""
        store = RecordStore([_record("A01"), _record("B02"), _record("C03")])
        with pytest.raises(InvalidIndexError):
            store.delete_at(index)
        assert len(store) == 3

    def test_delete_many_highest_first(self):
        """Test multi-delete removes exactly the named positions."""
        store = RecordStore([_record(c) for c in ("A01", "B02", "C03", "D04")])
        removed = store.delete_many([0, 2, 2])
        assert [r.code for r in removed] == ["C03", "A01"]
        assert [r.code for r in store] == ["B02", "D04"]

    def test_delete_many_skips_out_of_range(self):
        """Test invalid positions are skipped."""
        store = RecordStore([_record("A01"), _record("B02")])
        removed = store.delete_many([1, 7])
        assert [r.code for r in removed] == ["B02"]
        assert len(store) == 1

    def test_delete_codes(self):
        """Test deleting by code ignores unknown codes."""
        store = RecordStore([_record("A01"), _record("B02")])
        removed = store.delete_codes(["B02", "ZZZ"])
        assert [r.code for r in removed] == ["B02"]
        assert not store.contains("B02")

    def test_clear(self):
        """Test clear empties the store."""
        store = RecordStore([_record("A01")])
        store.clear()
        assert len(store) == 0

    def test_replace_all_keeps_first_duplicate(self):
        """Test a pulled list with repeated codes stays unique."""
        store = RecordStore()
        store.replace_all([
            BarcodeRecord(code="A01", timestamp="first"),
            _record("B02"),
            BarcodeRecord(code="A01", timestamp="second"),
        ])
        assert [r.code for r in store] == ["A01", "B02"]
        assert store[0].timestamp == "first"

    def test_snapshot_wire_form(self):
        """Test snapshot emits code and timestamp only."""
        store = RecordStore([_record("A01")])
        assert store.snapshot() == [
            {"code": "A01", "timestamp": "01/02/2025, 10:00:00 AM"}
        ]

    def test_index_of(self):
        """Test positions are looked up by code."""
        store = RecordStore([_record("A01"), _record("B02")])
        assert store.index_of("B02") == 1
        assert store.index_of("ZZZ") is None


class TestViews:
    """Tests for grouping, search and view resolution."""

    def test_group_view_order_and_counts(self, mixed_records):
        """Test groups are ordered by rank and counts sum to the list size."""
        groups = group_view(mixed_records)
        assert [g.name for g in groups] == ["Flipkart", "Delhivery", "Amazon", "Others"]
        assert sum(g.count for g in groups) == len(mixed_records)

    def test_group_view_omits_empty_categories(self, mixed_records):
        """Test categories without records are absent."""
        names = {g.name for g in group_view(mixed_records)}
        assert "Valmo" not in names

    def test_original_index_points_at_record(self, mixed_records):
        """Test every view entry maps back to its list position."""
        for group in group_view(mixed_records):
            for item in group.items:
                assert mixed_records[item.original_index] == item.record

    def test_group_items_keep_list_order(self, mixed_records):
        """Test items inside a group stay newest first."""
        items = group_items(mixed_records, "Flipkart")
        assert [(i.code, i.original_index) for i in items] == [("FM111", 0), ("FM222", 2)]

    def test_search_case_insensitive(self, mixed_records):
        """Test search matches substrings ignoring case."""
        items = search(mixed_records, "abc")
        assert [(i.code, i.original_index) for i in items] == [("36ABC", 1)]

    def test_search_blank_term_is_no_filter(self, mixed_records):
        """Test a blank term yields no search results."""
        assert search(mixed_records, "   ") == []

    def test_search_scoped_to_group(self, mixed_records):
        """Test group scope narrows before matching."""
        items = search(mixed_records, "2", scope_group="Flipkart")
        assert [i.code for i in items] == ["FM222"]

    def test_delete_from_filtered_view(self, mixed_records):
        """Test deleting a search hit removes the intended record."""
        store = RecordStore(mixed_records)
        hit = search(store.records, "zz")[0]
        store.delete_at(hit.original_index)
        assert not store.contains("ZZ999")
        assert len(store) == len(mixed_records) - 1

    def test_resolve_empty_list(self):
        """Test the empty list message."""
        view = resolve_view([], ViewState())
        assert view.mode == "groups"
        assert view.title == "Scanned Barcodes (0)"
        assert view.empty_message == EMPTY_LIST_MESSAGE

    def test_resolve_groups(self, mixed_records):
        """Test the default view lists groups."""
        view = resolve_view(mixed_records, ViewState())
        assert view.mode == "groups"
        assert view.title == "Scanned Barcodes (5)"
        assert not view.is_empty

    def test_resolve_group_drill_down(self, mixed_records):
        """Test a current group shows its items."""
        view = resolve_view(mixed_records, ViewState(current_group="Amazon"))
        assert view.mode == "group"
        assert view.title == "Amazon Group"
        assert [i.code for i in view.items] == ["36ABC"]

    def test_resolve_empty_group(self, mixed_records):
        """Test a group with no records shows the empty group text."""
        view = resolve_view(mixed_records, ViewState(current_group="Valmo"))
        assert view.empty_message == EMPTY_GROUP_MESSAGE

    def test_resolve_search_takes_priority(self, mixed_records):
        """Test an active search wins over the group drill-down."""
        view = resolve_view(
            mixed_records,
            ViewState(current_group="Flipkart", search_term="nothing")
        )
        assert view.mode == "search"
        assert view.title == "Flipkart Group"
        assert view.empty_message == EMPTY_SEARCH_MESSAGE

    def test_view_state_is_searching(self):
        """Test whitespace does not count as a search."""
        assert not ViewState(search_term="  ").is_searching
        assert ViewState(search_term="fm").is_searching


class TestListProperties:
    """End-to-end properties of the list and its views."""

    def test_delete_many_removes_exactly_named_positions(self):
        """Test removing positions 0, 2 and 4 of five leaves 1 and 3."""
        store = RecordStore([_record(f"C{i:02d}") for i in range(5)])
        store.delete_many({0, 2, 4})
        assert [r.code for r in store] == ["C01", "C03"]

    def test_group_counts_for_mixed_list(self):
        """Test a mixed list groups into ranked carriers."""
        records = [_record(c) for c in ("FM1", "SF1", "FM2", "ZZ1")]
        assert [(g.name, g.count) for g in group_view(records)] == [
            ("Flipkart", 2),
            ("Shadowfax", 1),
            ("Others", 1),
        ]
