"""
==============================================================================
Core Package
==============================================================================

Core infrastructure for the application.

Modules:
--------
- exceptions: AppException class and error factory functions

Usage:
------
    from scanlist.core import AppException

    # Or use exception factory functions via module
    from scanlist.core import exceptions
    raise exceptions.group_not_found("Foo")

==============================================================================
"""

from .exceptions import (
    AppException,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "register_exception_handlers",
]
