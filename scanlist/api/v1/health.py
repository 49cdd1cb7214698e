"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

The full check also reads the shared list so a corrupt stored value shows
up as "degraded" rather than only when a client pulls.

==============================================================================
"""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scanlist.config import get_settings
from scanlist.db.database import get_db
from scanlist.schemas.barcode import parse_barcode_list
from scanlist.services.blob_store import BlobStore, list_key_for


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, db: Session, client_host: Optional[str] = None):
        self._db = db
        self._settings = get_settings()
        self._key = list_key_for(self._settings.blob_key_scope, client_host)

    def check_database(self) -> str:
        """Check database connectivity."""
        try:
            self._db.execute(text("SELECT 1"))
            return "healthy"
        except SQLAlchemyError:
            return "unhealthy"

    def check_list(self) -> dict:
        """Check the caller's stored list can be parsed."""
        try:
            raw = BlobStore(self._db).get(self._key)
            records = parse_barcode_list(json.loads(raw)) if raw else []
            return {"status": "healthy", "barcodes": len(records)}
        except (SQLAlchemyError, ValueError):
            return {"status": "unhealthy", "barcodes": 0}

    def get_health(self) -> dict:
        """Get full health status."""
        db_status = self.check_database()
        list_info = self.check_list() if db_status == "healthy" else {
            "status": "unknown", "barcodes": 0
        }

        healthy = db_status == "healthy" and list_info["status"] == "healthy"
        return {
            "status": "healthy" if healthy else "degraded",
            "components": {
                "api": "healthy",
                "database": db_status,
                "list": list_info["status"]
            },
            "details": {
                "list_key": self._key,
                "barcodes_stored": list_info["barcodes"],
                "blob_key_scope": self._settings.blob_key_scope,
                "sync_backend": self._settings.sync_backend
            }
        }


@router.get("")
async def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns API, database and stored list status.
    """
    client_host = request.client.host if request.client else None
    return HealthController(db, client_host).get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness check for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness check for container orchestration."""
    return {"alive": True}
