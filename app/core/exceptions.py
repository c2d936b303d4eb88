"""
Typed application errors.

Services raise these; the exception handler registered in ``app.main``
turns them into the ``{"success": false, "message": ..., "code": ...}``
envelope. Nothing below the router layer writes HTTP responses.
"""
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    # Lookups
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    RSVP_NOT_FOUND = "RSVP_NOT_FOUND"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    POST_NOT_FOUND = "POST_NOT_FOUND"
    REPLY_NOT_FOUND = "REPLY_NOT_FOUND"
    MESSAGE_NOT_FOUND = "MESSAGE_NOT_FOUND"

    # Capability checks
    FORBIDDEN = "FORBIDDEN"
    ACCESS_DENIED = "ACCESS_DENIED"
    EVENT_CLOSED = "EVENT_CLOSED"

    # State conflicts
    ALREADY_JOINED = "ALREADY_JOINED"
    ORGANIZER_CANNOT_JOIN = "ORGANIZER_CANNOT_JOIN"
    ALREADY_RESPONDED = "ALREADY_RESPONDED"
    EVENT_FULL = "EVENT_FULL"
    INVALID_INVITEE = "INVALID_INVITEE"
    INVITATION_EXISTS = "INVITATION_EXISTS"
    RSVP_EXISTS = "RSVP_EXISTS"
    EMAIL_TAKEN = "EMAIL_TAKEN"

    # Input / auth
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"


class AppError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    status_code: int = 500
    default_code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value}, status={self.status_code})"


class NotFoundError(AppError):
    status_code = 404
    default_code = ErrorCode.EVENT_NOT_FOUND


class ForbiddenError(AppError):
    status_code = 403
    default_code = ErrorCode.FORBIDDEN


class ConflictError(AppError):
    """Action against an object in a terminal or incompatible state."""

    status_code = 400
    default_code = ErrorCode.ALREADY_RESPONDED


class ValidationError(AppError):
    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR


class UnauthorizedError(AppError):
    status_code = 401
    default_code = ErrorCode.INVALID_CREDENTIALS
