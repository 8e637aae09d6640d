"""
Structured errors raised across the service boundary.

Services raise ``ServiceError`` with an ``ErrorKind``; the API layer maps
each kind to an envelope code in exactly one place.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failed operation."""

    INVALID = "invalid"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ServiceError(Exception):
    """A failed service operation with a human-readable message."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {self.message!r})"

    @classmethod
    def not_found(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def forbidden(cls, message: str = "Permission denied") -> "ServiceError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def conflict(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def invalid(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.INVALID, message)

    @classmethod
    def internal(cls, message: str = "Internal server error") -> "ServiceError":
        return cls(ErrorKind.INTERNAL, message)


class APIError(ServiceError):
    """Raised by the HTTP layer itself, before any service is reached."""

    @classmethod
    def unauthorized(cls, message: str = "Not authenticated") -> "APIError":
        return cls(ErrorKind.UNAUTHORIZED, message)
