"""
Prayer Wall Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the three failure classes of the
       prayers API.
How:   Each exception carries a client-facing message and an optional
       details string. Global exception handlers (registered in main.py)
       catch these and return `{"error": ..., "details": ...}` JSON with the
       matching HTTP status code.
Who:   Raised by the service layer and by database.get_engine().

Exception Hierarchy:
    PrayerWallError (base)
    ├── ValidationError   → 400 Bad Request (empty text, missing id)
    ├── NotFoundError     → 404 Not Found (no row with that id)
    └── DatabaseError     → 500 Internal Server Error (store unreachable/failed)

Timestamp formatting errors are not part of this hierarchy: the formatter
recovers from them locally and never raises.
"""

from typing import Optional


class PrayerWallError(Exception):
    """
    Base exception for all Prayer Wall application errors.

    Attributes:
        message:  Client-facing error description (the `error` field)
        details:  Underlying error text for diagnostics (the `details` field)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Response body for this error; `details` only when there is one."""
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(PrayerWallError):
    """
    Raised when client input fails a precondition.

    When:    Empty/whitespace-only prayer text, missing deletion id,
             malformed request body.
    HTTP:    400 Bad Request

    Always raised before the store is touched.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message=message, details=details)
        self.field = field


class NotFoundError(PrayerWallError):
    """
    Raised when the deletion target does not exist.

    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Prayer",
        resource_id: Optional[str] = None,
    ):
        super().__init__(message=f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(PrayerWallError):
    """
    Raised when the store cannot be reached or a query fails.

    HTTP:    500 Internal Server Error

    The message is the operation's generic text ("Failed to fetch prayers",
    ...); `details` carries the underlying error message so the page can show
    it in its debug panel.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred",
        details: Optional[str] = None,
    ):
        super().__init__(message=message, details=details)
