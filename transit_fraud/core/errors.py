"""
Domain-specific exceptions for the fraud review service.

These exceptions represent input and persistence failures and are mapped
to appropriate HTTP status codes in the API layer. The scorer and the
classifier never raise them.
"""

from typing import Any


class FraudServiceError(Exception):
    """Base exception for all fraud review domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(FraudServiceError):
    """
    Raised when a request payload fails validation at the boundary.

    Examples:
    - ticketId, station or amount missing or blank
    - amount is not a number
    - timestamp is not ISO-8601
    - unknown status value

    HTTP Status: 400 Bad Request
    """

    pass


class StoreError(FraudServiceError):
    """
    Raised when the transaction record store fails.

    HTTP Status: 500 Internal Server Error
    """

    pass


class WriteError(StoreError):
    """
    Raised when the store backend rejects or cannot complete a write or read.

    Examples:
    - Database unavailable
    - Connection dropped mid-statement

    HTTP Status: 503 Service Unavailable
    """

    pass


class NotFoundError(StoreError):
    """
    Raised when a ticket id has no stored record.

    HTTP Status: 404 Not Found
    """

    pass


class DuplicateKeyError(StoreError):
    """
    Raised when a ticket id has already been analyzed and stored.

    HTTP Status: 409 Conflict
    """

    pass


class TransportError(FraudServiceError):
    """
    Raised by callers when the backend cannot be reached at all.

    HTTP Status: 503 Service Unavailable
    """

    pass


ERROR_STATUS_MAP = {
    ValidationError: 400,
    StoreError: 500,
    WriteError: 503,
    NotFoundError: 404,
    DuplicateKeyError: 409,
    TransportError: 503,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
