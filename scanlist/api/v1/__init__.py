"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- lists: Grouped, drill-down and search views of the stored list

==============================================================================
"""

from . import health, lists

__all__ = ["health", "lists"]
