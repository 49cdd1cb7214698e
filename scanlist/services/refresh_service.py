"""
==============================================================================
Refresh Service Module
==============================================================================

Background task pulling the shared list into a live session on a fixed
interval.

Background Task:
---------------
Every `refresh_interval_seconds` (3 by default) the task calls
`session.refresh()`, except while:
1. the session has a non-empty search term (a pull would re-render under
   the user's search), or
2. a capture is in progress.

Stopping the task cancels the loop only; a pull that is already running is
not aborted and its result is discarded by the session if superseded.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from scanlist.services.scan_session import ScanSession


# Module logger
logger = logging.getLogger(__name__)


class RefreshTaskManager:
    """
    Manager for one session's periodic pull task.

    Example:
        >>> manager = RefreshTaskManager(session, interval_seconds=3)
        >>> manager.start()
        >>> # ... session runs ...
        >>> manager.stop()
    """

    def __init__(
        self,
        session: ScanSession,
        interval_seconds: float = 3.0,
        on_refresh: Optional[Callable[[], Awaitable[None]]] = None
    ) -> None:
        """
        Args:
            session: Session to refresh
            interval_seconds: Delay between pulls
            on_refresh: Awaited after a pull replaced the session list
        """
        self._session = session
        self._on_refresh = on_refresh
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._ticks = 0
        self._skipped = 0

    async def _refresh_loop(self) -> None:
        """Background refresh loop."""
        logger.debug("🔄 Refresh task started")

        while self._running:
            try:
                await asyncio.sleep(self._interval)
                await self.tick()
            except asyncio.CancelledError:
                logger.debug("🛑 Refresh task cancelled")
                break
            except Exception as e:
                logger.error(f"Refresh task error: {e}")

    async def tick(self) -> bool:
        """
        Run one scheduled refresh.

        Returns:
            True if a pull was attempted
        """
        self._ticks += 1
        if not self._session.should_auto_refresh:
            self._skipped += 1
            return False
        if await self._session.refresh() and self._on_refresh is not None:
            await self._on_refresh()
        return True

    def start(self) -> asyncio.Task:
        """
        Start the background refresh task.

        Returns:
            The asyncio Task object
        """
        if self._task is None or self._task.done():
            self._running = True
            self._task = asyncio.create_task(self._refresh_loop())
            logger.debug(f"✅ Refresh task started ({self._interval}s)")
        return self._task

    def stop(self) -> None:
        """Stop the background refresh task."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()

    @property
    def is_running(self) -> bool:
        """Check if task is running."""
        return self._running and self._task is not None and not self._task.done()

    @property
    def stats(self) -> dict:
        return {"ticks": self._ticks, "skipped": self._skipped}
