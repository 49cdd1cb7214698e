"""
==============================================================================
Carrier Category Classifier
==============================================================================

Maps a scanned code to the carrier that issued it, using the carriers'
prefix conventions.

Prefix Rules (first match wins, case-sensitive):
-----------------------------------------------
    FM  → Flipkart    (order 1)
    VL  → Valmo       (order 2)
    SF  → Shadowfax   (order 3)
    13  → XpressBees  (order 4)
    14  → Delhivery   (order 5)
    36  → Amazon      (order 6)
    *   → Others      (order 7)

The order is a display rank only; it is derived on demand and never stored
on a record.

==============================================================================
"""

from __future__ import annotations

import enum
from typing import Optional, Tuple


class Category(str, enum.Enum):
    """
    Carrier category enumeration.

    The enum value is the display name; `order` gives the group rank.
    """

    FLIPKART = "Flipkart"
    VALMO = "Valmo"
    SHADOWFAX = "Shadowfax"
    XPRESSBEES = "XpressBees"
    DELHIVERY = "Delhivery"
    AMAZON = "Amazon"
    OTHERS = "Others"

    @property
    def order(self) -> int:
        """Display rank, 1 (Flipkart) through 7 (Others)."""
        return _ORDER[self]


_ORDER = {category: rank for rank, category in enumerate(Category, start=1)}

# Checked in this exact sequence
PREFIX_RULES: Tuple[Tuple[str, Category], ...] = (
    ("FM", Category.FLIPKART),
    ("VL", Category.VALMO),
    ("SF", Category.SHADOWFAX),
    ("13", Category.XPRESSBEES),
    ("14", Category.DELHIVERY),
    ("36", Category.AMAZON),
)


def classify(code: str) -> Category:
    """
    Classify a code by carrier prefix.

    Args:
        code: Decoded barcode payload

    Returns:
        Matching Category, or Category.OTHERS when no prefix matches

    Example:
        >>> classify("FM13").value
        'Flipkart'
        >>> classify("13XX").order
        4
    """
    for prefix, category in PREFIX_RULES:
        if code.startswith(prefix):
            return category
    return Category.OTHERS


def category_by_name(name: Optional[str]) -> Optional[Category]:
    """Resolve a category from its display name, or None if unknown."""
    if not name:
        return None
    try:
        return Category(name)
    except ValueError:
        return None
