"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Barcode: Barcode list wire format and live-scan messages

==============================================================================
"""

from .common import AckResponse
from .barcode import (
    BarcodeListAdapter,
    ScanMessage,
    dump_barcode_list,
    parse_barcode_list,
)

__all__ = [
    # Common
    "AckResponse",
    # Barcode
    "BarcodeListAdapter",
    "ScanMessage",
    "dump_barcode_list",
    "parse_barcode_list",
]
