"""
==============================================================================
Scan Session Service Module
==============================================================================

Application context for one scanning client.

A ScanSession owns the record list, the view state and the sync client for
one client; nothing lives in module globals. Every operation goes through
the session.

Data Flow:
---------
    scan adapter ──▶ handle_scan(code)
                         │ invalid  → rejected (adapter filter)
                         │ duplicate→ reported, list unchanged
                         ▼ accepted
                    list.insert ──▶ push(full list)   (write queue)

    refresh() ──▶ pull ──▶ replace_all   (skipped if superseded)

Superseded Pulls:
----------------
A pull that was started before a local mutation, or that lands while a
write is still queued, would overwrite newer local data. Such results are
dropped on arrival; the next refresh picks up the stored list.

==============================================================================
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from scanlist.barcodes.classifier import category_by_name
from scanlist.barcodes.models import BarcodeRecord, ListView
from scanlist.barcodes.store import DEFAULT_TIMESTAMP_FORMAT, RecordStore
from scanlist.barcodes.views import ViewState, resolve_view
from scanlist.config import Settings
from scanlist.services.repositories import BarcodeRepository
from scanlist.services.sync_client import SyncClient
from scanlist.services.view_cache import VALID_TABS, ViewStateCache
from scanlist.utils.validators import CodeValidator


# Module logger
logger = logging.getLogger(__name__)

SAVED_MESSAGE = '✅ Barcode Saved! Click "Scan Next" to continue.'
DUPLICATE_MESSAGE = "❌ ALREADY SCANNED! This barcode is already in your list."
ALREADY_EMPTY_MESSAGE = "List is already empty!"


class ScanStatus(str, enum.Enum):
    """Outcome of offering a code to the session."""

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    INVALID = "invalid"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScanOutcome:
    """Result of handle_scan, with the notification text to show."""

    status: ScanStatus
    code: str
    message: str
    record: Optional[BarcodeRecord] = None

    @property
    def accepted(self) -> bool:
        return self.status == ScanStatus.ACCEPTED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "accepted": self.accepted,
            "code": self.code,
            "message": self.message,
            "timestamp": self.record.timestamp if self.record else None,
        }


class ScanSession:
    """
    One client's record list, view state and sync.

    Attributes:
        store: The in-memory record list
        sync: Sync client pushing/pulling the full list
        view_state: Current tab, drill-down group and search term

    Example:
        >>> session = ScanSession(SyncClient(repository))
        >>> await session.start()
        >>> outcome = await session.handle_scan("FM1234567")
        >>> outcome.accepted
        True
        >>> session.current_view().groups[0].name
        'Flipkart'
    """

    def __init__(
        self,
        sync: SyncClient,
        view_cache: Optional[ViewStateCache] = None,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
        validator: Optional[CodeValidator] = None
    ) -> None:
        self._store = RecordStore(timestamp_format=timestamp_format)
        self._sync = sync
        self._view_cache = view_cache or ViewStateCache(None)
        self._view = ViewState()
        self._validator = validator or CodeValidator()
        self._capturing = False
        self._generation = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repository: BarcodeRepository,
        view_cache: Optional[ViewStateCache] = None
    ) -> ScanSession:
        """Create a session wired according to application settings."""
        return cls(
            SyncClient(repository),
            view_cache=view_cache or ViewStateCache(settings.view_cache_path),
            timestamp_format=settings.timestamp_format,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def sync(self) -> SyncClient:
        return self._sync

    @property
    def view_state(self) -> ViewState:
        return self._view

    @property
    def capturing(self) -> bool:
        return self._capturing

    @property
    def should_auto_refresh(self) -> bool:
        """Periodic pulls pause during a search or an active capture."""
        return not self._view.is_searching and not self._capturing

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> bool:
        """
        Restore the last view and load the list.

        Returns:
            True if the initial pull succeeded
        """
        self._view = self._view_cache.load()
        loaded = await self.refresh()
        logger.info(f"✅ Session started with {len(self._store)} barcodes")
        return loaded

    async def close(self) -> None:
        """Finish queued writes and release the repository."""
        await self._sync.aclose()

    async def flush(self) -> None:
        """Wait for queued writes."""
        await self._sync.flush()

    # =========================================================================
    # SCANNING
    # =========================================================================

    async def handle_scan(self, code: str, wait: bool = False) -> ScanOutcome:
        """
        Offer a decoded code to the list.

        Args:
            code: Decoded payload
            wait: Await the resulting push before returning

        Returns:
            ScanOutcome (accepted, duplicate or invalid)
        """
        is_valid, error = self._validator.validate(code)
        if not is_valid:
            logger.debug(f"Ignoring invalid code {code!r}: {error}")
            return ScanOutcome(ScanStatus.INVALID, code or "", error)

        result = self._store.insert(code)
        if not result.accepted:
            logger.info(f"⚠️ Duplicate scan: {code}")
            return ScanOutcome(ScanStatus.DUPLICATE, code, DUPLICATE_MESSAGE)

        logger.info(f"✅ Saved barcode: {code}")
        await self._after_mutation(wait)
        return ScanOutcome(ScanStatus.ACCEPTED, code, SAVED_MESSAGE, result.record)

    def begin_capture(self) -> None:
        """Mark a capture as running (pauses periodic pulls)."""
        self._capturing = True

    def end_capture(self) -> None:
        self._capturing = False

    # =========================================================================
    # DELETION
    # =========================================================================

    async def delete_at(self, index: int, wait: bool = False) -> BarcodeRecord:
        """
        Delete the record at an original index.

        Raises:
            InvalidIndexError: If index is out of range
        """
        removed = self._store.delete_at(index)
        await self._after_mutation(wait)
        return removed

    async def delete_many(self, indices: Iterable[int], wait: bool = False) -> List[BarcodeRecord]:
        """Delete records at several original indices."""
        removed = self._store.delete_many(indices)
        if removed:
            await self._after_mutation(wait)
        return removed

    async def delete_codes(self, codes: Iterable[str], wait: bool = False) -> List[BarcodeRecord]:
        """Delete records by code."""
        removed = self._store.delete_codes(codes)
        if removed:
            await self._after_mutation(wait)
        return removed

    async def clear(self, wait: bool = False) -> bool:
        """
        Empty the list.

        Returns:
            False if the list was already empty (nothing pushed)
        """
        if not len(self._store):
            return False
        self._store.clear()
        await self._after_mutation(wait)
        return True

    async def clear_remote(self) -> bool:
        """
        Empty the list and delete the stored copy instead of storing [].

        Queued writes are finished first so none of them recreates the
        stored list afterwards.

        Returns:
            True if the stored list was deleted
        """
        await self._sync.flush()
        self._generation += 1
        self._store.clear()
        self._view.current_group = None
        self._view.search_term = ""
        self._view_cache.save(self._view)
        return await self._sync.clear_remote()

    async def _after_mutation(self, wait: bool) -> None:
        # Mutations return the client to the top-level grouped view
        self._generation += 1
        self._view.current_group = None
        self._view.search_term = ""
        self._view_cache.save(self._view)

        future = self._sync.push(self._store.records)
        if wait:
            await future

    # =========================================================================
    # SYNC
    # =========================================================================

    async def refresh(self) -> bool:
        """
        Pull the stored list and replace the local one.

        Returns:
            True if the local list was replaced
        """
        generation = self._generation
        records = await self._sync.pull()

        if records is None:
            return False

        if generation != self._generation or self._sync.has_pending_writes:
            logger.debug("Discarding superseded pull")
            return False

        self._store.replace_all(records)
        return True

    # =========================================================================
    # VIEWS
    # =========================================================================

    def open_group(self, name: str) -> ListView:
        """
        Drill into one carrier group (clears the search).

        Raises:
            ValueError: If name is not a known category
        """
        if category_by_name(name) is None:
            raise ValueError(f"Unknown group: {name}")
        self._view.current_group = name
        self._view.search_term = ""
        self._view_cache.save(self._view)
        return self.current_view()

    def back_to_groups(self) -> ListView:
        """Return to the grouped view, clearing group and search."""
        self._view.current_group = None
        self._view.search_term = ""
        self._view_cache.save(self._view)
        return self.current_view()

    def set_search(self, term: Optional[str]) -> ListView:
        """Filter by a search term within the current group (if any)."""
        self._view.search_term = (term or "").strip()
        self._view_cache.save(self._view)
        return self.current_view()

    def set_active_tab(self, tab: str) -> None:
        """
        Switch between the scan and list tabs.

        Raises:
            ValueError: If tab is not "scan" or "list"
        """
        if tab not in VALID_TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self._view.active_tab = tab
        self._view_cache.save(self._view)

    def current_view(self) -> ListView:
        """Resolve the view for the current state."""
        return resolve_view(self._store.records, self._view)
