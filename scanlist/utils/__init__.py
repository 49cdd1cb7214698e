"""
==============================================================================
Utilities Package
==============================================================================

Utility classes for the application.

Modules:
--------
- validators: Scanned code validation

==============================================================================
"""

from .validators import CodeValidator

__all__ = [
    "CodeValidator",
]
