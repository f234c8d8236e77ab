"""Typed errors raised by the portal store.

Every mutation either succeeds completely or raises one of these before any
table is touched, so callers can render the message inline and carry on.
"""

from __future__ import annotations

from typing import Any, Mapping


class StoreError(RuntimeError):
    """Base error for store operations."""

    error_code: str = "STORE_ERROR"
    http_status: int = 400

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(StoreError):
    """Raised when required input is missing or malformed."""

    error_code = "VALIDATION_ERROR"
    http_status = 400


class AuthenticationError(StoreError):
    """Raised when a request carries no identity the store recognises."""

    error_code = "AUTHENTICATION_ERROR"
    http_status = 401


class AuthorizationError(StoreError):
    """Raised when the acting user may not perform the requested mutation."""

    error_code = "AUTHORIZATION_ERROR"
    http_status = 403


class NotFoundError(StoreError):
    """Raised when an operation references an id with no matching record."""

    error_code = "NOT_FOUND"
    http_status = 404


class ConflictError(StoreError):
    """Raised when a record that must be unique already exists."""

    error_code = "CONFLICT"
    http_status = 409


class InvalidTransitionError(StoreError):
    """Raised when a status change is not allowed from the current state."""

    error_code = "INVALID_TRANSITION"
    http_status = 409


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InvalidTransitionError",
    "NotFoundError",
    "StoreError",
    "ValidationError",
]
