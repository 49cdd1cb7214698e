"""
==============================================================================
Main API Router
==============================================================================

Combines the storage endpoint (/api/barcodes) with all v1 routes under the
/api/v1 prefix.

==============================================================================
"""

from fastapi import APIRouter

from scanlist.api import barcodes
from scanlist.api.v1 import health, lists


class MainAPIRouter:
    """
    Main API router combining all routes.

    Provides a single entry point for all API endpoints.
    """

    def __init__(self):
        """Initialize the main router with all sub-routers."""
        self._router = APIRouter()
        self._v1 = APIRouter(prefix="/api/v1")
        self._include_routers()

    def _include_routers(self) -> None:
        """Include the storage endpoint and all v1 routers."""
        self._v1.include_router(health.router)
        self._v1.include_router(lists.router)

        self._router.include_router(barcodes.router)
        self._router.include_router(self._v1)

    @property
    def router(self):
        """Get the FastAPI router instance."""
        return self._router


# Create main API router instance
api_router = MainAPIRouter().router
