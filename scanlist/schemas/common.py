"""
==============================================================================
Common Schemas Module
==============================================================================

Shared response schemas used across API endpoints.

==============================================================================
"""

from pydantic import BaseModel, Field


class AckResponse(BaseModel):
    """Acknowledgement of a storage write or delete."""
    success: bool = Field(default=True)
