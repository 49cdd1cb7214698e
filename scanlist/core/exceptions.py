"""
Application Exception Handling

Single AppException class for all API errors with FastAPI integration.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for API error scenarios.

    Provides a consistent error response format across the API.

    Usage:
        raise AppException("Body must be a JSON array", "INVALID_PAYLOAD", 400)
        raise AppException("Unknown group", "GROUP_NOT_FOUND", 404, {"group": "Foo"})

    Error Codes:
        Storage endpoint:
            - INVALID_PAYLOAD (400)
            - METHOD_NOT_ALLOWED (405)

        Lists:
            - GROUP_NOT_FOUND (404)

        General:
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "GROUP_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException to a JSON error response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def invalid_payload(reason: str) -> AppException:
    """Create invalid request body exception."""
    return AppException(
        f"Invalid barcode list: {reason}",
        "INVALID_PAYLOAD",
        400,
        {"reason": reason}
    )


def method_not_allowed(method: str) -> AppException:
    """Create method not allowed exception."""
    return AppException("Method not allowed", "METHOD_NOT_ALLOWED", 405, {"method": method})


def group_not_found(name: str) -> AppException:
    """Create unknown group exception."""
    return AppException(
        f"Group '{name}' not found",
        "GROUP_NOT_FOUND",
        404,
        {"group": name}
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
