"""
connecthub.errors — Domain exceptions
======================================

Raised by the service layer, translated to HTTP responses by the API exception handler.
"""

from __future__ import annotations


class ConnectHubError(Exception):
    """Base class for expected domain failures."""


class NotFoundError(ConnectHubError):
    """The referenced row does not exist (or is not visible to the caller)."""


class DuplicateError(ConnectHubError):
    """The row would violate a uniqueness rule (pair, junction, name)."""


class InvalidStateError(ConnectHubError):
    """The operation is not allowed from the row's current state."""


class PermissionDeniedError(ConnectHubError):
    """The caller is not the party allowed to perform the operation."""
