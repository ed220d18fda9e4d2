# app/core/exceptions.py
"""
Typed errors raised by the StaffDesk services.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer answers with, so routers never translate messages by hand:

    StaffDeskError
    +-- ValidationError      400  malformed input, no state change
    +-- AuthorizationError   403  caller may not perform this transition
    +-- NotFoundError        404  referenced user/division/record missing
    +-- ConflictError        409  stored status moved on before our write
    +-- DependencyError      503  store unreachable or timed out
"""

from typing import Any, Dict, Optional


class StaffDeskError(Exception):
    code: str = "STAFFDESK_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {"detail": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(StaffDeskError):
    code = "VALIDATION_ERROR"
    status_code = 400


class AuthorizationError(StaffDeskError):
    code = "ACCESS_DENIED"
    status_code = 403


class NotFoundError(StaffDeskError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(StaffDeskError):
    """The record was already acted upon; the caller must refetch."""

    code = "CONFLICT"
    status_code = 409

    def __init__(self, message: str, expected_status: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected_status = expected_status


class DependencyError(StaffDeskError):
    code = "DEPENDENCY_UNAVAILABLE"
    status_code = 503
