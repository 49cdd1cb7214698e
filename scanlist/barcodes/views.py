"""
==============================================================================
Grouping and Search Views
==============================================================================

Read-only views over a list of barcode records.

Views never mutate the list. Every record in a view carries its original
index (its position in the unfiltered list), so a deletion issued from a
filtered view removes the intended record rather than the Nth item of the
view.

View Resolution:
---------------
    search term set       → search results (scoped to current group if any)
    current group set     → items of that group
    otherwise             → groups ordered by carrier rank

==============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .classifier import Category, classify
from .models import BarcodeRecord, IndexedRecord, ListView, RecordGroup


EMPTY_LIST_MESSAGE = "No barcodes scanned yet. Start scanning to add items!"
EMPTY_GROUP_MESSAGE = "No barcodes in this group."
EMPTY_SEARCH_MESSAGE = "No barcodes found matching your search."


@dataclass
class ViewState:
    """
    Which view a client is looking at.

    Ephemeral; mirrored best-effort in the view cache for continuity.
    """

    active_tab: str = "scan"
    current_group: Optional[str] = None
    search_term: str = ""

    @property
    def is_searching(self) -> bool:
        return bool(self.search_term.strip())


def _indexed(records: Sequence[BarcodeRecord]) -> List[IndexedRecord]:
    return [
        IndexedRecord(record=record, original_index=index)
        for index, record in enumerate(records)
    ]


def group_view(records: Sequence[BarcodeRecord]) -> List[RecordGroup]:
    """
    Partition records by carrier category.

    Groups are sorted by category order; records keep list order
    (newest first) within a group; empty categories are omitted.
    """
    groups: Dict[Category, RecordGroup] = {}

    for item in _indexed(records):
        category = classify(item.code)
        if category not in groups:
            groups[category] = RecordGroup(name=category.value, order=category.order)
        groups[category].items.append(item)

    return sorted(groups.values(), key=lambda group: group.order)


def group_items(
    records: Sequence[BarcodeRecord],
    group_name: str
) -> List[IndexedRecord]:
    """Get the records of one category in list order, with original indices."""
    return [
        item for item in _indexed(records)
        if classify(item.code).value == group_name
    ]


def search(
    records: Sequence[BarcodeRecord],
    term: str,
    scope_group: Optional[str] = None
) -> List[IndexedRecord]:
    """
    Case-insensitive substring search on codes.

    Args:
        records: Full list
        term: Search text; empty means "no filter" and yields []
        scope_group: Limit the search to this category first

    Returns:
        Matching records with original indices
    """
    needle = term.strip().lower()
    if not needle:
        return []

    candidates = group_items(records, scope_group) if scope_group else _indexed(records)
    return [item for item in candidates if needle in item.code.lower()]


def resolve_view(records: Sequence[BarcodeRecord], state: ViewState) -> ListView:
    """
    Build the list view a client should display for a view state.

    Args:
        records: Full list
        state: Current group and search term

    Returns:
        ListView with title, entries and empty-state text
    """
    total = len(records)
    term = state.search_term.strip()
    group = state.current_group

    if term:
        items = search(records, term, scope_group=group)
        return ListView(
            mode="search",
            title=f"{group} Group" if group else f"Scanned Barcodes ({total})",
            total=total,
            items=items,
            current_group=group,
            search_term=term,
            empty_message=None if items else EMPTY_SEARCH_MESSAGE,
        )

    if group:
        items = group_items(records, group)
        return ListView(
            mode="group",
            title=f"{group} Group",
            total=total,
            items=items,
            current_group=group,
            empty_message=None if items else EMPTY_GROUP_MESSAGE,
        )

    return ListView(
        mode="groups",
        title=f"Scanned Barcodes ({total})",
        total=total,
        groups=group_view(records),
        empty_message=None if total else EMPTY_LIST_MESSAGE,
    )
