"""
==============================================================================
Barcode Record Store
==============================================================================

In-memory, newest-first list of scanned records.

Invariants:
----------
- No two records share the same code (exact, case-sensitive match)
- New records are inserted at index 0
- Timestamps are set once at insertion

Lifecycle:
---------
    pull ──▶ replace_all() ──▶ insert / delete_* / clear ──▶ push
      ▲                                                       │
      └──────────────────── next refresh ◀────────────────────┘

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Set

from .models import BarcodeRecord


# Module logger
logger = logging.getLogger(__name__)

DEFAULT_TIMESTAMP_FORMAT = "%-m/%-d/%Y, %-I:%M:%S %p"


class InvalidIndexError(LookupError):
    """Raised when a position does not exist in the store."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"Index {index} out of range for {size} records")


@dataclass(frozen=True)
class InsertResult:
    """Outcome of an insert: a duplicate is reported, not raised."""

    accepted: bool
    record: Optional[BarcodeRecord] = None


class RecordStore:
    """
    Ordered collection of barcode records with dedup-on-insert.

    The store owns its records exclusively; accessors return copies.

    Example:
        >>> store = RecordStore()
        >>> store.insert("FM123").accepted
        True
        >>> store.insert("FM123").accepted
        False
        >>> len(store)
        1
    """

    def __init__(
        self,
        records: Optional[Iterable[BarcodeRecord]] = None,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    ) -> None:
        self._records: List[BarcodeRecord] = []
        self._timestamp_format = timestamp_format
        if records is not None:
            self.replace_all(records)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def records(self) -> List[BarcodeRecord]:
        """Get all records, newest first."""
        return self._records.copy()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[BarcodeRecord]:
        return iter(self._records.copy())

    def __getitem__(self, index: int) -> BarcodeRecord:
        return self._records[index]

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def contains(self, code: str) -> bool:
        """Check whether a code is already recorded."""
        return any(record.code == code for record in self._records)

    def index_of(self, code: str) -> Optional[int]:
        """Get the current position of a code, or None."""
        for index, record in enumerate(self._records):
            if record.code == code:
                return index
        return None

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def insert(self, code: str) -> InsertResult:
        """
        Record a newly scanned code at the front of the list.

        Args:
            code: Decoded barcode payload (already filtered by the adapter)

        Returns:
            InsertResult with accepted=False if the code is already present
        """
        if self.contains(code):
            logger.debug(f"Duplicate rejected: {code}")
            return InsertResult(accepted=False)

        record = BarcodeRecord.create(code, self._timestamp_format)
        self._records.insert(0, record)
        logger.debug(f"Recorded: {code}")
        return InsertResult(accepted=True, record=record)

    def delete_at(self, index: int) -> BarcodeRecord:
        """
        Remove the record at a position.

        Args:
            index: Position in the unfiltered list

        Returns:
            The removed record

        Raises:
            InvalidIndexError: If index is out of range
        """
        if index < 0 or index >= len(self._records):
            raise InvalidIndexError(index, len(self._records))
        return self._records.pop(index)

    def delete_many(self, indices: Iterable[int]) -> List[BarcodeRecord]:
        """
        Remove every record at the given positions.

        Positions are removed from highest to lowest so earlier removals
        never shift positions still pending. Out-of-range positions are
        skipped.

        Returns:
            Removed records, in removal order
        """
        removed = []
        for index in sorted(set(indices), reverse=True):
            if 0 <= index < len(self._records):
                removed.append(self._records.pop(index))
            else:
                logger.warning(f"⚠️ Skipping out-of-range index {index}")
        return removed

    def delete_codes(self, codes: Iterable[str]) -> List[BarcodeRecord]:
        """Remove records by code (their stable id). Unknown codes are ignored."""
        targets: Set[str] = set(codes)
        removed = [record for record in self._records if record.code in targets]
        self._records = [
            record for record in self._records if record.code not in targets
        ]
        return removed

    def clear(self) -> None:
        """Remove every record."""
        self._records = []

    def replace_all(self, records: Iterable[BarcodeRecord]) -> None:
        """
        Overwrite the store wholesale (used after a pull).

        Repeated codes keep their first occurrence so the uniqueness
        invariant survives malformed remote data.
        """
        seen: Set[str] = set()
        replacement = []
        for record in records:
            if record.code in seen:
                logger.warning(f"⚠️ Dropping repeated code from list: {record.code}")
                continue
            seen.add(record.code)
            replacement.append(record)
        self._records = replacement

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def snapshot(self) -> List[dict]:
        """Serialize the list in wire form: [{code, timestamp}, ...]."""
        return [record.model_dump() for record in self._records]

    def __repr__(self) -> str:
        return f"RecordStore(size={len(self._records)})"
