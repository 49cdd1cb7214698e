"""
==============================================================================
Validation Utilities Module
==============================================================================

Validation classes for input data.

This module implements:
- CodeValidator: The scan adapter's filter for decoded payloads

Validation Rules for Scanned Codes:
----------------------------------
- Must be a non-empty string
- Length: at least 3 characters
- Must not contain a literal "."

Decoders occasionally emit short fragments or dotted values (URLs, decimal
readings); those are dropped before they reach the record list.

==============================================================================
"""

from __future__ import annotations

from typing import Optional, Tuple


class CodeValidator:
    """
    Validator for decoded barcode payloads.

    Example:
        >>> validator = CodeValidator()
        >>> validator.is_valid("FM1234")
        True
        >>> validator.validate("1.5")
        (False, 'Code must not contain "."')
    """

    MIN_LENGTH = 3
    FORBIDDEN = "."

    def validate(self, code: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Validate a decoded code.

        Args:
            code: Decoded payload

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not code or not isinstance(code, str):
            return False, "Code is required"

        if len(code) < self.MIN_LENGTH:
            return False, f"Code must be at least {self.MIN_LENGTH} characters"

        if self.FORBIDDEN in code:
            return False, f'Code must not contain "{self.FORBIDDEN}"'

        return True, None

    def is_valid(self, code: Optional[str]) -> bool:
        """Quick validation check."""
        is_valid, _ = self.validate(code)
        return is_valid
