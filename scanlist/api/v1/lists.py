"""
==============================================================================
List View Endpoints
==============================================================================

Read-only grouped, drill-down and search views of the stored list.

Every entry carries its original index (position in the full list) and its
id (the code), so a client can delete exactly what it shows.

==============================================================================
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from scanlist.barcodes import BarcodeRecord, ViewState, category_by_name
from scanlist.barcodes import group_items, group_view, resolve_view, search
from scanlist.config import get_settings
from scanlist.core import exceptions
from scanlist.db.database import get_db
from scanlist.schemas.barcode import parse_barcode_list
from scanlist.services.blob_store import BlobStore, list_key_for


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lists", tags=["Lists"])


class ListViewController:
    """Controller for list view operations."""

    def __init__(self, db: Session, request: Request):
        settings = get_settings()
        client_host = request.client.host if request.client else None
        self._store = BlobStore(db)
        self._key = list_key_for(settings.blob_key_scope, client_host)

    def _records(self) -> List[BarcodeRecord]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            return parse_barcode_list(json.loads(raw))
        except ValueError as e:
            logger.error(f"❌ Stored list {self._key} is invalid: {e}")
            raise exceptions.internal_error("Stored barcode list is invalid")

    def _require_group(self, name: Optional[str]) -> None:
        if name and category_by_name(name) is None:
            raise exceptions.group_not_found(name)

    def get_groups(self, include_items: bool) -> dict:
        """Grouped view of the whole list."""
        records = self._records()
        return {
            "success": True,
            "total": len(records),
            "groups": [
                group.to_dict(include_items=include_items)
                for group in group_view(records)
            ]
        }

    def get_group(self, name: str) -> dict:
        """Items of one carrier group."""
        self._require_group(name)
        items = group_items(self._records(), name)
        return {
            "success": True,
            "group": name,
            "total": len(items),
            "items": [item.to_dict() for item in items]
        }

    def search(self, term: str, group: Optional[str]) -> dict:
        """Search codes, optionally within a group."""
        self._require_group(group)
        items = search(self._records(), term, scope_group=group)
        return {
            "success": True,
            "query": term.strip(),
            "group": group,
            "total": len(items),
            "items": [item.to_dict() for item in items]
        }

    def get_view(self, group: Optional[str], term: str) -> dict:
        """Resolve the view a client would display for a group/search."""
        self._require_group(group)
        view = resolve_view(
            self._records(),
            ViewState(current_group=group, search_term=term)
        )
        return {"success": True, "view": view.to_dict()}


@router.get("/groups")
async def get_groups(
    request: Request,
    include_items: bool = Query(False),
    db: Session = Depends(get_db)
):
    """Get the stored list grouped by carrier."""
    return ListViewController(db, request).get_groups(include_items)


@router.get("/groups/{name}")
async def get_group(name: str, request: Request, db: Session = Depends(get_db)):
    """Get the items of one carrier group."""
    return ListViewController(db, request).get_group(name)


@router.get("/search")
async def search_list(
    request: Request,
    q: str = Query(""),
    group: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """Case-insensitive substring search over codes."""
    return ListViewController(db, request).search(q, group)


@router.get("/view")
async def get_view(
    request: Request,
    group: Optional[str] = Query(None),
    q: str = Query(""),
    db: Session = Depends(get_db)
):
    """Get the resolved view (groups, drill-down or search)."""
    return ListViewController(db, request).get_view(group, q)
