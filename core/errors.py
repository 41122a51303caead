"""Error kinds raised by the assignment & logging services.

Each carries a stable ``code`` and the HTTP status the API layer maps it to.
"""

from __future__ import annotations


class DomainError(Exception):
    code = "ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class Forbidden(DomainError):
    code = "FORBIDDEN"
    status_code = 403


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"
    status_code = 400


class InternalError(DomainError):
    code = "INTERNAL"
    status_code = 500
