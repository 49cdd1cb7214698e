"""
==============================================================================
Barcode Record Models
==============================================================================

Pydantic models for scanned barcode records and the views derived from them.

==============================================================================
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# glibc-only unpadded directives, expanded before strftime
_UNPADDED_DIRECTIVE = re.compile(r"%-([mdIHMS])")


def format_timestamp(moment: datetime, fmt: str) -> str:
    """
    strftime with support for unpadded "%-m", "%-d", "%-I", "%-H", "%-M"
    and "%-S" directives.
    """
    def unpadded(match: "re.Match") -> str:
        directive = match.group(1)
        if directive == "I":
            return str(moment.hour % 12 or 12)
        return str(int(moment.strftime("%" + directive)))

    return moment.strftime(_UNPADDED_DIRECTIVE.sub(unpadded, fmt))


class BarcodeRecord(BaseModel):
    """
    A scanned code with the time it was first recorded.

    Records are immutable once created; the timestamp is set at insertion
    and never changes.

    Attributes:
        code: Decoded barcode payload (unique within a list)
        timestamp: Human-readable creation time
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    code: str = Field(..., min_length=1, description="Decoded barcode payload")
    timestamp: str = Field(..., description="Human-readable creation time")

    @classmethod
    def create(cls, code: str, timestamp_format: str) -> "BarcodeRecord":
        """Create a record stamped with the current local time."""
        return cls(code=code, timestamp=format_timestamp(datetime.now(), timestamp_format))


class IndexedRecord(BaseModel):
    """
    A record as seen through a filtered or grouped view.

    `original_index` is the record's position in the unfiltered list when the
    view was built, so deletions issued from the view hit the right record.
    `record_id` is the code itself, which is stable across list changes.
    """

    model_config = ConfigDict(frozen=True)

    record: BarcodeRecord
    original_index: int = Field(..., ge=0)

    @property
    def record_id(self) -> str:
        return self.record.code

    @property
    def code(self) -> str:
        return self.record.code

    @property
    def timestamp(self) -> str:
        return self.record.timestamp

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "code": self.record.code,
            "timestamp": self.record.timestamp,
            "original_index": self.original_index,
        }


class RecordGroup(BaseModel):
    """One carrier group in the grouped view."""

    name: str
    order: int
    items: List[IndexedRecord] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dict(self, include_items: bool = False) -> dict:
        data = {"name": self.name, "order": self.order, "count": self.count}
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class ListView(BaseModel):
    """
    The view a client should currently display.

    Attributes:
        mode: "groups", "group" (drill-down) or "search"
        title: Heading text for the list
        total: Number of records in the whole list
        groups: Group summaries (groups mode only)
        items: Records to show (group and search modes)
        current_group: Group drilled into, if any
        search_term: Active search filter, if any
        empty_message: Text to show when nothing matches, else None
    """

    mode: str
    title: str
    total: int = 0
    groups: List[RecordGroup] = Field(default_factory=list)
    items: List[IndexedRecord] = Field(default_factory=list)
    current_group: Optional[str] = None
    search_term: str = ""
    empty_message: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.empty_message is not None

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "title": self.title,
            "total": self.total,
            "current_group": self.current_group,
            "search_term": self.search_term,
            "empty_message": self.empty_message,
            "groups": [group.to_dict() for group in self.groups],
            "items": [item.to_dict() for item in self.items],
        }
