"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy infrastructure for the key-value blob store.

Architecture:
------------
├── database.py   - DatabaseManager, get_db dependency
├── models.py     - BlobEntry ORM model
└── init_db.py    - table creation on startup

==============================================================================
"""

from .database import DatabaseManager, Base, get_db, get_database_manager
from .models import BlobEntry
from .init_db import init_db

__all__ = [
    "DatabaseManager",
    "Base",
    "get_db",
    "get_database_manager",
    "BlobEntry",
    "init_db",
]
