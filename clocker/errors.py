"""
Errors reported by the sync service to its callers.
"""
from typing import Any, Dict, Optional

from clocker.bamboohr.client import BambooHRError, HttpError


class ClockerError(Exception):
    """Base exception for errors surfaced to the presentation layer."""
    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class MissingCredentials(ClockerError):
    """API key, company domain or employee id is not stored."""
    def __init__(self):
        super().__init__("missing_credentials", "Credentials not configured")


class ApiError(ClockerError):
    """Wraps a client-level failure; code mirrors the underlying kind."""
    def __init__(self, cause: BambooHRError):
        self.cause = cause
        status = cause.status if isinstance(cause, HttpError) else None
        super().__init__(cause.code, cause.message, status)
