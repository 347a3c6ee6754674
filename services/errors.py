# services/errors.py
"""
Domain errors raised by the services layer.

Controllers never build HTTP errors for these by hand: ``app.py`` registers
one handler that turns a ``TrackerError`` into ``{"error": message}`` with
the matching status code.
"""

from typing import Any, Dict, Optional


class TrackerError(Exception):
    """Base exception for all task tracker errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(TrackerError):
    """Request data failed validation"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class AuthenticationError(TrackerError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTH_FAILED")


class PermissionDeniedError(TrackerError):
    """User not allowed to perform this action"""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN")


class NotFoundError(TrackerError):
    """Requested record does not exist"""

    status_code = 404

    def __init__(self, entity: str):
        super().__init__("{0} not found".format(entity), code="NOT_FOUND")


class ConflictError(TrackerError):
    """Write would violate a uniqueness or integrity rule"""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")
