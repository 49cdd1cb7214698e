"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes implementing list storage and synchronization.

This package provides:
- BlobStore: Key-value blob storage behind the remote endpoint
- BarcodeRepository: Whole-list persistence (http, blob, file)
- SyncClient: Full-list push/pull with a single-flight write queue
- ScanSession: Per-client application context
- RefreshTaskManager: Periodic pull task
- ViewStateCache: Best-effort view continuity

Architecture:
------------

    ┌─────────────────┐
    │  WebSocket/API  │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   ScanSession   │  ← list + view state
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   SyncClient    │  ← push / pull
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   Repository    │  ← http / blob table / file
    └─────────────────┘

==============================================================================
"""

from .blob_store import BlobStore, list_key_for
from .repositories import (
    BarcodeRepository,
    BlobBarcodeRepository,
    FileBarcodeRepository,
    HttpBarcodeRepository,
    RepositoryError,
    create_repository,
)
from .sync_client import SyncClient, SyncState
from .view_cache import ViewStateCache
from .scan_session import ScanOutcome, ScanSession, ScanStatus
from .refresh_service import RefreshTaskManager

__all__ = [
    "BlobStore",
    "list_key_for",
    "BarcodeRepository",
    "BlobBarcodeRepository",
    "FileBarcodeRepository",
    "HttpBarcodeRepository",
    "RepositoryError",
    "create_repository",
    "SyncClient",
    "SyncState",
    "ViewStateCache",
    "ScanOutcome",
    "ScanSession",
    "ScanStatus",
    "RefreshTaskManager",
]
