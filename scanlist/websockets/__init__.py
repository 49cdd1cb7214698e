"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for barcode scanning.

Handlers:
---------
- scanner: Live scanning session on the shared list

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
