"""
Error taxonomy shared by all services.

Services raise these; the API layer maps them to HTTP responses.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    code: str = "internal"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(ServiceError):
    """Missing, invalid or expired token, or bad credentials."""

    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidArgument(ServiceError):
    """Missing or malformed fields, invalid enum values."""

    code = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDenied(ServiceError):
    """Role insufficient or caller is not a member."""

    code = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyExists(ServiceError):
    code = "already_exists"
    status_code = status.HTTP_409_CONFLICT


class FailedPrecondition(ServiceError):
    """Operation rejected because of current state (terminal invitation, last Admin)."""

    code = "failed_precondition"
    status_code = status.HTTP_400_BAD_REQUEST


class Internal(ServiceError):
    """Storage or transport failure."""

    code = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
