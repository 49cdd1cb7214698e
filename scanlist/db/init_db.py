"""
==============================================================================
Database Initialization Module
==============================================================================

Creates the blob table on startup.

Usage:
------
    from scanlist.db import init_db

    init_db()

==============================================================================
"""

import logging
from typing import Optional

from scanlist.db.database import DatabaseManager, get_database_manager


# Module logger
logger = logging.getLogger(__name__)


def init_db(db_manager: Optional[DatabaseManager] = None) -> None:
    """Create the blob table if it does not exist."""
    logger.info("Creating database tables...")
    (db_manager or get_database_manager()).create_tables()
    logger.info("✅ Database tables created successfully")
