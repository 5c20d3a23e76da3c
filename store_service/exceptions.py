# store_service/exceptions.py

"""
Business errors raised by the service layer.

Each error carries a human-readable message and the HTTP status the API
layer answers with, so endpoints never build error responses themselves.
"""
from fastapi import status


class StoreError(Exception):
    """Base class for all business errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StoreError):
    """A requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class AlreadyExistsError(StoreError):
    """A unique key (slug, name, username, ...) is already taken."""

    status_code = status.HTTP_409_CONFLICT


class BadRequestError(StoreError):
    """The request breaks a validation rule."""

    status_code = status.HTTP_400_BAD_REQUEST
