# daycare/core/exceptions.py
from typing import Any, Dict, Optional
from fastapi import status


class DaycareError(Exception):
    """Base class for expected, caller-recoverable failures.

    Every subclass carries a stable machine-readable ``reason`` tag and the
    HTTP status code the API layer renders it with.
    """
    reason: str = "internal"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "success": False,
            "reason": self.reason,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class UnauthenticatedError(DaycareError):
    """Raised when there is no valid actor context"""
    reason = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, no valid credentials"


class ForbiddenError(DaycareError):
    """Raised when an authenticated actor is denied by policy"""
    reason = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Operation not permitted"


class NotFoundError(DaycareError):
    """Raised when an id does not resolve"""
    reason = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ValidationError(DaycareError):
    """Raised when a payload fails structural or semantic checks"""
    reason = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class CapacityExceededError(DaycareError):
    reason = "capacity_exceeded"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Activity has reached maximum participants"


class DuplicateParticipantError(DaycareError):
    reason = "duplicate_participant"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Child is already participating in this activity"


class NotParticipatingError(DaycareError):
    reason = "not_participating"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Child is not participating in this activity"


class InactiveError(DaycareError):
    """Raised when a referenced record exists but is inactive"""
    reason = "inactive"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Referenced record is inactive"


class ImmutableError(DaycareError):
    """Raised when a state-locked record is mutated"""
    reason = "immutable"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record cannot be modified in its current state"


class InternalError(DaycareError):
    """Raised for unexpected storage failures; never carries internal detail"""
    reason = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
