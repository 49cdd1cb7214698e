"""
==============================================================================
Blob Store Service Module
==============================================================================

Minimal key-value blob store on top of the blob_entries table.

This module implements:
- BlobStore: get / set / delete of raw text values by key
- list_key_for: Key selection for the barcode list

Key Scope:
---------
    global  → "global-barcode-list"       (one list shared by every caller)
    client  → "barcodes:<client address>" (one list per caller address)

Both scopes expose the same endpoint contract; the choice is a deployment
setting.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from scanlist.db.models import BlobEntry


# Module logger
logger = logging.getLogger(__name__)

BARCODE_NAMESPACE = "barcodes"
GLOBAL_LIST_KEY = "global-barcode-list"


def list_key_for(scope: str, client_host: Optional[str] = None) -> str:
    """
    Get the blob key holding a caller's barcode list.

    Args:
        scope: "global" or "client"
        client_host: Caller network address (used by the client scope)

    Returns:
        Blob key
    """
    if scope == "client":
        return f"{BARCODE_NAMESPACE}:{client_host or 'unknown'}"
    return GLOBAL_LIST_KEY


class BlobStore:
    """
    Key-value store for raw text blobs within one namespace.

    Writes overwrite unconditionally; there is no version check.

    Example:
        >>> store = BlobStore(session)
        >>> store.set("global-barcode-list", "[]")
        >>> store.get("global-barcode-list")
        '[]'
        >>> store.delete("global-barcode-list")
    """

    def __init__(self, db: Session, namespace: str = BARCODE_NAMESPACE) -> None:
        """
        Initialize blob store.

        Args:
            db: SQLAlchemy database session
            namespace: Store name
        """
        self._db = db
        self._namespace = namespace

    def _find(self, key: str) -> Optional[BlobEntry]:
        return self._db.query(BlobEntry).filter(
            BlobEntry.namespace == self._namespace,
            BlobEntry.key == key
        ).first()

    def get(self, key: str) -> Optional[str]:
        """Get a blob value, or None if the key does not exist."""
        entry = self._find(key)
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        """Create or overwrite a blob value."""
        entry = self._find(key)

        if entry is None:
            entry = BlobEntry(namespace=self._namespace, key=key, value=value)
            self._db.add(entry)
        else:
            entry.value = value

        self._db.commit()
        logger.debug(f"Stored blob {self._namespace}/{key} ({len(value)} bytes)")

    def delete(self, key: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if a value existed
        """
        entry = self._find(key)
        if entry is None:
            return False

        self._db.delete(entry)
        self._db.commit()
        logger.debug(f"Deleted blob {self._namespace}/{key}")
        return True
