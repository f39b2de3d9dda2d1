"""Error taxonomy shared by the graph engine and the workspace services."""
from __future__ import annotations


class GraphServiceError(Exception):
    """Base class for every error raised by the service layer."""


class InvalidArgument(GraphServiceError, ValueError):
    """Raised for blank required fields, malformed ids or unsupported styles."""


class InvalidIdentifier(InvalidArgument):
    """Raised when a document or workspace id is not a valid object id."""


class NotFound(GraphServiceError):
    """Raised when a workspace or job does not exist for the caller."""


class CollaboratorError(GraphServiceError):
    """Raised when an external collaborator is unreachable or misbehaves."""


class StoreError(GraphServiceError):
    """Raised when the persistent store rejects or fails an operation."""


__all__ = [
    "CollaboratorError",
    "GraphServiceError",
    "InvalidArgument",
    "InvalidIdentifier",
    "NotFound",
    "StoreError",
]
