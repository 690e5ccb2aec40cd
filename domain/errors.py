"""
Domain: error taxonomy for the sales core.

Every failure raised by the domain, the authorization policy, the service
layer or a repository is one of these. The API layer maps them to HTTP
responses; nothing else should need to know about status codes.

Each class also derives from the closest builtin so callers that only care
about the broad category (ValueError, PermissionError, ...) can catch that.
"""

from __future__ import annotations

from typing import Optional


class SalesError(Exception):
    """Base class for all sales errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SalesError, ValueError):
    """
    Malformed, missing or out-of-range input.

    Item-level errors carry the 1-based `position` of the offending item.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        position: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.position = position


class AuthorizationError(SalesError, PermissionError):
    """The acting principal's role or ownership disallows the operation."""


class NotFoundError(SalesError, LookupError):
    """Well-formed identifier with no matching sale, or an unknown owner."""


class PersistenceError(SalesError, RuntimeError):
    """The storage collaborator failed. The cause is logged, never shown to callers."""


__all__ = [
    "SalesError",
    "ValidationError",
    "AuthorizationError",
    "NotFoundError",
    "PersistenceError",
]
