"""
==============================================================================
Barcode List Schemas Module
==============================================================================

Wire format of the shared barcode list and the live-scan messages.

List Format:
-----------
    [
      {"code": "FM123456789", "timestamp": "10/18/2026, 09:14:02 PM"},
      ...
    ]

==============================================================================
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from scanlist.barcodes.models import BarcodeRecord


BarcodeListAdapter = TypeAdapter(List[BarcodeRecord])


def parse_barcode_list(data: Any) -> List[BarcodeRecord]:
    """
    Validate a decoded JSON value as a barcode list.

    Args:
        data: Decoded JSON (None is treated as an empty list)

    Returns:
        List of records

    Raises:
        ValueError: If data is not a list of {code, timestamp} objects
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    try:
        return BarcodeListAdapter.validate_python(data)
    except ValidationError as e:
        raise ValueError(f"{e.error_count()} invalid record(s)") from e


def dump_barcode_list(records: List[BarcodeRecord]) -> List[dict]:
    """Serialize records to plain dicts for JSON encoding."""
    return [record.model_dump() for record in records]


# =============================================================================
# LIVE SCAN MESSAGES
# =============================================================================

class ScanMessage(BaseModel):
    """
    Message sent by a live-scan client.

    Types:
        code     - a code decoded client-side ("code")
        frame    - a base64 image for server-side decoding ("frame")
        delete   - remove records by "codes" or by "indices"
        clear    - empty the list
        view     - change "group", "search" and/or "tab"
        capture  - "action": start | stop
        refresh  - pull the shared list now
        stop     - end the session
    """

    type: Literal[
        "code", "frame", "delete", "clear", "view", "capture", "refresh", "stop"
    ]
    code: Optional[str] = None
    frame: Optional[str] = None
    codes: List[str] = Field(default_factory=list)
    indices: List[int] = Field(default_factory=list)
    group: Optional[str] = None
    search: Optional[str] = None
    tab: Optional[Literal["scan", "list"]] = None
    action: Optional[Literal["start", "stop"]] = None
