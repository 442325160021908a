# services/errors.py
from __future__ import annotations


class CashbookError(Exception):
    """
    Base for every failure the API reports as a structured result.
    `code` is stable and machine-readable, `message` is for humans.
    """

    status_code = 500
    default_code = "ERROR"
    default_message = "Request failed"

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.code = code or self.default_code
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "detail": self.message}


class AuthenticationError(CashbookError):
    status_code = 401
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ValidationError(CashbookError):
    status_code = 400
    default_code = "VALIDATION_FAILED"
    default_message = "Invalid request"


class AuthorizationError(CashbookError):
    status_code = 403
    default_code = "ADMIN_REQUIRED"
    default_message = "Access denied. Admin role required."


class NotFoundError(CashbookError):
    status_code = 404
    default_code = "NOT_FOUND"
    default_message = "Not found"


class InvalidStateError(CashbookError):
    status_code = 409
    default_code = "INVALID_STATE"
    default_message = "Operation not allowed in the current state"


class StorageError(CashbookError):
    status_code = 500
    default_code = "STORAGE_ERROR"
    default_message = "Internal server error"


def storage_error_from(exc: Exception) -> StorageError:
    """
    Wrap a driver exception. The driver text stays on __cause__ for logs
    and never reaches the response body.
    """
    if isinstance(exc, StorageError):
        return exc
    err = StorageError()
    err.__cause__ = exc
    return err
