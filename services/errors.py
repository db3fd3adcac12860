"""
Service error types for CulinariaLegacy application.

Every failure a service reports carries one ErrorKind so pages can branch on
the cause instead of the message text.
"""

from enum import Enum


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ALREADY_EXISTS = "already_exists"
    UNAUTHORIZED = "unauthorized"
    INVALID = "invalid"
    UNKNOWN = "unknown"


class ServiceError(Exception):
    """Base error raised by services and the data store"""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str = "", kind: ErrorKind = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ExpiredError(ServiceError):
    kind = ErrorKind.EXPIRED


class AlreadyExistsError(ServiceError):
    kind = ErrorKind.ALREADY_EXISTS


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class InvalidInputError(ServiceError):
    kind = ErrorKind.INVALID
