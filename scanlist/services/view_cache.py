"""
==============================================================================
View State Cache Module
==============================================================================

Best-effort mirror of the last view (tab, search term, drill-down group) so
a restarted client comes back to the same screen.

The cache never holds the barcode list itself and is never authoritative:
unreadable or unwritable files are logged and ignored.

File Format:
-----------
    {"activeTab": "list", "searchTerm": "fm", "currentGroup": "Flipkart"}

==============================================================================
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from scanlist.barcodes.views import ViewState


# Module logger
logger = logging.getLogger(__name__)

VALID_TABS = ("scan", "list")


class ViewStateCache:
    """
    JSON-file store for ViewState.

    Example:
        >>> cache = ViewStateCache(Path("storage/cache/view_state.json"))
        >>> cache.save(ViewState(active_tab="list"))
        >>> cache.load().active_tab
        'list'
    """

    def __init__(self, path: Optional[Path]) -> None:
        """
        Args:
            path: Cache file, or None to disable the cache
        """
        self._path = Path(path) if path else None

    def load(self) -> ViewState:
        """Read the last view state; defaults if missing or unreadable."""
        if self._path is None or not self._path.exists():
            return ViewState()

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Ignoring unreadable view cache {self._path}: {e}")
            return ViewState()

        if not isinstance(data, dict):
            return ViewState()

        tab = data.get("activeTab") or "scan"
        return ViewState(
            active_tab=tab if tab in VALID_TABS else "scan",
            current_group=data.get("currentGroup") or None,
            search_term=data.get("searchTerm") or "",
        )

    def save(self, state: ViewState) -> None:
        """Write the view state; failures are logged only."""
        if self._path is None:
            return

        data = {"activeTab": state.active_tab}
        if state.search_term:
            data["searchTerm"] = state.search_term
        if state.current_group:
            data["currentGroup"] = state.current_group

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as e:
            logger.warning(f"⚠️ Could not write view cache {self._path}: {e}")
