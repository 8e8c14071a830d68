"""
Typed errors raised by services and mapped to the response envelope
by the exception handlers registered in ``turiapp.main``.

``error`` carries the specific reason (e.g. "Place not found") and
``message`` a generic sentence for the failure class.
"""

from typing import List, Optional

from fastapi import status

DEFAULT_ERROR_MESSAGE = "An error occurred while processing the request"


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = DEFAULT_ERROR_MESSAGE

    def __init__(self, error: str, message: Optional[str] = None, details: Optional[List[str]] = None):
        super().__init__(error)
        self.error = error
        if message is not None:
            self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
