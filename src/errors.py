"""
Error types shared by the resolver, the feed and the API layer.

Every error carries a short user-facing title and, where available,
the underlying message as description.
"""
from typing import Optional


class AppError(Exception):
    def __init__(self, title: str, description: Optional[str] = None):
        super().__init__(description or title)
        self.title = title
        self.description = description


class NotFoundError(AppError):
    """Lookup or row yielded no result."""


class InvalidInputError(AppError):
    """A required field is missing before a write."""


class RemoteFailure(AppError):
    """Network or database error while talking to a remote service."""


class PermissionDenied(AppError):
    """The acting profile may not perform the action."""


class QuotaExceeded(PermissionDenied):
    """Weekly post limit reached."""
