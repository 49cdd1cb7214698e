"""
==============================================================================
Sync Client Module
==============================================================================

Keeps a session's in-memory list and the stored list in step.

Contract:
--------
- push(records): replace the stored list with a full snapshot. No merge,
  no version check. Failures are logged and reported through the returned
  future; nothing is rolled back or retried.
- pull(): fetch the full stored list, or None on failure (logged).

Write Queue:
-----------
At most one write is in flight. Pushes made while a write is running
collapse into one pending snapshot (the latest), written as soon as the
running write finishes. Every push returns a future resolving to True/False
once its snapshot (or a later one that replaced it) has been written, so
callers can await it or leave it alone.

    push(A) ──▶ [writing A]
    push(B) ──▶ pending = B ──┐
    push(C) ──▶ pending = C ──┤   futures of B and C resolve together
                              ▼
                         [writing C]

States:
------
    IDLE ──(push / pull starts)──▶ SYNCING ──(all calls done)──▶ IDLE

==============================================================================
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import List, Optional

from scanlist.barcodes.models import BarcodeRecord
from scanlist.services.repositories import BarcodeRepository, RepositoryError


# Module logger
logger = logging.getLogger(__name__)


class SyncState(str, enum.Enum):
    """Whether any repository call is in flight."""

    IDLE = "idle"
    SYNCING = "syncing"

    def __str__(self) -> str:
        return self.value


class SyncClient:
    """
    Full-list push/pull against a BarcodeRepository.

    Example:
        >>> sync = SyncClient(HttpBarcodeRepository(url))
        >>> records = await sync.pull()
        >>> ok = await sync.push(records)
    """

    def __init__(self, repository: BarcodeRepository) -> None:
        self._repository = repository
        self._active_calls = 0
        self._pending: Optional[List[BarcodeRecord]] = None
        self._waiters: List[asyncio.Future] = []
        self._writer: Optional[asyncio.Task] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> SyncState:
        """Current sync state."""
        return SyncState.SYNCING if self._active_calls else SyncState.IDLE

    @property
    def has_pending_writes(self) -> bool:
        """Check if a write is running or queued."""
        return self._writer is not None and not self._writer.done()

    @property
    def repository(self) -> BarcodeRepository:
        return self._repository

    # =========================================================================
    # WRITE PATH
    # =========================================================================

    def push(self, records: List[BarcodeRecord]) -> asyncio.Future:
        """
        Queue a full-list write.

        Must be called from a running event loop.

        Args:
            records: Complete list to store

        Returns:
            Future resolving to True on success, False on failure
        """
        future = asyncio.get_running_loop().create_future()
        self._pending = list(records)
        self._waiters.append(future)

        if not self.has_pending_writes:
            self._writer = asyncio.create_task(self._drain())

        return future

    async def _drain(self) -> None:
        """Write pending snapshots one at a time until none remain."""
        while self._pending is not None:
            snapshot, waiters = self._pending, self._waiters
            self._pending, self._waiters = None, []

            ok = await self._write(snapshot)

            for waiter in waiters:
                if not waiter.done():
                    waiter.set_result(ok)

    async def _write(self, snapshot: List[BarcodeRecord]) -> bool:
        self._active_calls += 1
        try:
            await self._repository.save(snapshot)
            logger.debug(f"Pushed {len(snapshot)} barcodes")
            return True
        except RepositoryError as e:
            logger.error(f"❌ Error saving barcodes: {e}")
            return False
        except Exception as e:
            logger.exception(f"❌ Unexpected error saving barcodes: {e}")
            return False
        finally:
            self._active_calls -= 1

    async def flush(self) -> None:
        """Wait until every queued write has finished."""
        while self.has_pending_writes:
            await asyncio.shield(self._writer)

    # =========================================================================
    # READ PATH
    # =========================================================================

    async def pull(self) -> Optional[List[BarcodeRecord]]:
        """
        Fetch the full stored list.

        Returns:
            Records, or None if the fetch failed
        """
        self._active_calls += 1
        try:
            records = await self._repository.load()
            logger.debug(f"Pulled {len(records)} barcodes")
            return records
        except RepositoryError as e:
            logger.error(f"❌ Error loading barcodes: {e}")
            return None
        except Exception as e:
            logger.exception(f"❌ Unexpected error loading barcodes: {e}")
            return None
        finally:
            self._active_calls -= 1

    async def clear_remote(self) -> bool:
        """Delete the stored list. Returns False on failure (logged)."""
        self._active_calls += 1
        try:
            await self._repository.clear()
            return True
        except RepositoryError as e:
            logger.error(f"❌ Error clearing barcodes: {e}")
            return False
        except Exception as e:
            logger.exception(f"❌ Unexpected error clearing barcodes: {e}")
            return False
        finally:
            self._active_calls -= 1

    async def aclose(self) -> None:
        """Finish queued writes and release the repository."""
        await self.flush()
        await self._repository.aclose()
