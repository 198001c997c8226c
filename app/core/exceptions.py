# app/core/exceptions.py
"""
Business-level exceptions.

Services raise these; a single handler registered in `app/main.py`
converts them into `{"detail": message}` JSON responses using the
status code carried by each class.
"""

from fastapi import status


class WarungError(Exception):
    """Base exception for all business logic errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Something went wrong"):
        self.message = message
        super().__init__(self.message)


class ValidationError(WarungError):
    """Input rejected before any backend call (empty cart, blank name...)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(WarungError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(WarungError):
    """Operation refused because of related rows (e.g. category in use)."""

    status_code = status.HTTP_409_CONFLICT


class CheckoutStateError(WarungError):
    """Checkout action not allowed in the current flow state."""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(WarungError):
    """Writing to the database failed; nothing was committed."""

    status_code = status.HTTP_502_BAD_GATEWAY


class StorageError(WarungError):
    """Upload to / removal from the storage bucket failed."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ImageCompressionError(WarungError):
    status_code = status.HTTP_400_BAD_REQUEST
