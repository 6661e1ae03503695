"""
Error types raised by DocSync.

Only two failures originate here: the caller is not signed in, or a required
argument is missing or malformed. Everything else comes straight from the
document store.
"""

from typing import Optional


class DocSyncError(Exception):
    """Base class for DocSync errors."""
    pass


class NotAuthenticatedError(DocSyncError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "No user is signed in"):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(DocSyncError):
    """Raised when a required key, id or name argument is missing or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class DocumentNotFoundError(DocSyncError):
    """Raised by local stores when updating a document that does not exist."""

    def __init__(self, path: tuple):
        self.path = path
        super().__init__(f"Document not found: {'/'.join(path)}")
