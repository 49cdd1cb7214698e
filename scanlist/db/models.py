"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM model for the key-value blob store behind the remote storage endpoint.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                         blob_entries                             │
    ├─────────────────────────────────────────────────────────────────┤
    │ namespace (VARCHAR, PK)   e.g. "barcodes"                       │
    │ key (VARCHAR, PK)         e.g. "global-barcode-list"            │
    │ value (TEXT, NOT NULL)    raw JSON body as written              │
    │ created_at (DATETIME)                                           │
    │ updated_at (DATETIME, AUTO UPDATE)                              │
    └─────────────────────────────────────────────────────────────────┘

A key holds one whole list. Writes replace the value; there is no
versioning, so the last writer wins.

=============================================================================
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, func

from scanlist.db.database import Base


class BlobEntry(Base):
    """
    One stored blob.

    Attributes:
        namespace: Store name grouping related keys
        key: Blob key within the namespace
        value: Raw text value (a JSON array for barcode lists)
        created_at: First write timestamp
        updated_at: Last write timestamp

    Example:
        >>> entry = BlobEntry(namespace="barcodes", key="global-barcode-list", value="[]")
        >>> session.add(entry)
        >>> session.commit()
    """

    __tablename__ = "blob_entries"

    # =========================================================================
    # COLUMNS
    # =========================================================================

    namespace: str = Column(
        String(64),
        primary_key=True,
        doc="Store name"
    )

    key: str = Column(
        String(255),
        primary_key=True,
        doc="Blob key within the namespace"
    )

    value: str = Column(
        Text,
        nullable=False,
        doc="Raw stored value"
    )

    created_at: datetime = Column(
        DateTime,
        default=func.now(),
        nullable=False,
        doc="First write timestamp"
    )

    updated_at: datetime = Column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Last write timestamp"
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"BlobEntry(namespace={self.namespace!r}, key={self.key!r}, "
            f"size={len(self.value or '')})"
        )
