"""
==============================================================================
Barcode Storage Endpoint
==============================================================================

The remote storage endpoint shared by every scanning device.

Contract:
--------
    GET     /api/barcodes  → stored list as a JSON array ([] if none)
    POST    /api/barcodes  → replace the stored list with the body array
    DELETE  /api/barcodes  → remove the stored list
    other                  → 405 Method not allowed

Writes overwrite unconditionally (last write wins). The key is either one
global list or one list per caller address, per `blob_key_scope`.

==============================================================================
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from scanlist.config import get_settings
from scanlist.core import exceptions
from scanlist.db.database import get_db
from scanlist.schemas.barcode import dump_barcode_list, parse_barcode_list
from scanlist.schemas.common import AckResponse
from scanlist.services.blob_store import BlobStore, list_key_for


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/barcodes", tags=["Barcodes"])


class BarcodeStorageController:
    """Controller for whole-list storage operations."""

    def __init__(self, db: Session, request: Request):
        settings = get_settings()
        client_host = request.client.host if request.client else None
        self._store = BlobStore(db)
        self._key = list_key_for(settings.blob_key_scope, client_host)

    def read(self) -> Response:
        """Return the stored list verbatim."""
        raw = self._store.get(self._key)
        return Response(content=raw or "[]", media_type="application/json")

    def write(self, body: bytes) -> AckResponse:
        """Validate and store a full list."""
        try:
            data = json.loads(body or b"null")
        except ValueError:
            raise exceptions.invalid_payload("body is not valid JSON")

        if data is None:
            raise exceptions.invalid_payload("expected a JSON array")

        try:
            records = parse_barcode_list(data)
        except ValueError as e:
            raise exceptions.invalid_payload(str(e))

        self._store.set(self._key, json.dumps(dump_barcode_list(records)))
        logger.info(f"💾 Stored {len(records)} barcodes under {self._key}")
        return AckResponse()

    def clear(self) -> AckResponse:
        """Remove the stored list."""
        existed = self._store.delete(self._key)
        if existed:
            logger.info(f"🗑️ Cleared barcode list {self._key}")
        return AckResponse()


@router.get("")
async def get_barcodes(request: Request, db: Session = Depends(get_db)):
    """Get the full stored barcode list."""
    return BarcodeStorageController(db, request).read()


@router.post("", response_model=AckResponse)
async def save_barcodes(request: Request, db: Session = Depends(get_db)):
    """Replace the stored barcode list."""
    body = await request.body()
    return BarcodeStorageController(db, request).write(body)


@router.delete("", response_model=AckResponse)
async def clear_barcodes(request: Request, db: Session = Depends(get_db)):
    """Clear the stored barcode list."""
    return BarcodeStorageController(db, request).clear()


@router.api_route("", methods=["PUT", "PATCH"], include_in_schema=False)
async def reject_method(request: Request):
    """Reject every other method."""
    raise exceptions.method_not_allowed(request.method)
