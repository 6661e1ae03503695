"""
Document Store Protocol for DocSync.

Defines the interface for document database backends (Firestore, local files).

Paths are tuples of alternating collection and document ids, e.g.
``("users", uid, "history", entry_id)``. Document paths have an even number
of segments, collection paths an odd number.
"""

from typing import List, Optional, Protocol, Tuple

DocumentPath = Tuple[str, ...]


def is_valid_segment(segment: str) -> bool:
    """A single collection or document id: non-empty, no "/", not "." or ".."."""
    return (
        isinstance(segment, str)
        and bool(segment)
        and "/" not in segment
        and segment not in (".", "..")
    )


def check_document_path(path: DocumentPath) -> None:
    """Raise ValueError unless ``path`` names a document."""
    if not path or len(path) % 2 != 0 or not all(is_valid_segment(s) for s in path):
        raise ValueError(f"Not a document path: {path!r}")


def check_collection_path(path: DocumentPath) -> None:
    """Raise ValueError unless ``path`` names a collection."""
    if not path or len(path) % 2 != 1 or not all(is_valid_segment(s) for s in path):
        raise ValueError(f"Not a collection path: {path!r}")


class DocumentStoreProtocol(Protocol):
    """Interface for document database backends."""

    def initialize(self) -> None:
        """Prepare the backend (create directories, check connectivity, etc.)."""
        ...

    def get(self, path: DocumentPath) -> Optional[dict]:
        """
        Read a document.

        Returns:
            The document data, or None if it does not exist
        """
        ...

    def set(self, path: DocumentPath, data: dict, merge: bool = False) -> None:
        """
        Write a document.

        Args:
            path: Document path
            data: Document fields
            merge: Merge into an existing document instead of replacing it
        """
        ...

    def add(self, path: DocumentPath, data: dict) -> str:
        """Create a document with a generated id in a collection and return the id."""
        ...

    def update(self, path: DocumentPath, data: dict) -> None:
        """Update fields of an existing document. Fails if it does not exist."""
        ...

    def delete(self, path: DocumentPath) -> None:
        """Delete a document. Deleting a missing document is not an error."""
        ...

    def list_documents(
        self,
        path: DocumentPath,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Tuple[str, dict]]:
        """
        List the documents of a collection as ``(id, data)`` pairs.

        When ``order_by`` is given, documents lacking that field are left out.
        """
        ...
