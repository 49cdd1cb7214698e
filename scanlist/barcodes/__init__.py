"""
==============================================================================
Barcodes Package - Record Model and Views
==============================================================================

Scanned barcode records, carrier classification and the grouped/search
views built on top of them.

Classes:
--------
- Category: Carrier category with display order
- BarcodeRecord: Pydantic model for one scanned code
- RecordStore: Newest-first list with dedup-on-insert
- ViewState: Current tab, group and search term

==============================================================================
"""

from .classifier import Category, category_by_name, classify
from .models import BarcodeRecord, IndexedRecord, ListView, RecordGroup
from .store import InsertResult, InvalidIndexError, RecordStore
from .views import ViewState, group_items, group_view, resolve_view, search

__all__ = [
    "Category",
    "category_by_name",
    "classify",
    "BarcodeRecord",
    "IndexedRecord",
    "ListView",
    "RecordGroup",
    "InsertResult",
    "InvalidIndexError",
    "RecordStore",
    "ViewState",
    "group_items",
    "group_view",
    "resolve_view",
    "search",
]
