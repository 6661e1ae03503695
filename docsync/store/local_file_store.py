"""
Local File Document Store.

Keeps documents as JSON files in a local directory tree, laid out like the
database itself: ``users/{uid}/history/{id}.json``. Useful offline and in tests.
"""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple

from docsync.errors import DocumentNotFoundError
from docsync.store.adapter import DocumentPath, check_collection_path, check_document_path

logger = logging.getLogger(__name__)

# Marker used to keep timestamps as timestamps across a JSON round trip.
# Namespaced so client data is very unlikely to carry it.
_TIMESTAMP_KEY = "$docsync:timestamp"


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_TIMESTAMP_KEY: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(obj: dict) -> Any:
    if len(obj) != 1 or not isinstance(obj.get(_TIMESTAMP_KEY), str):
        return obj
    try:
        return datetime.fromisoformat(obj[_TIMESTAMP_KEY])
    except ValueError:
        return obj  # Client data that happens to use the marker key


def generate_document_id() -> str:
    """Random 20 character id, the same shape the hosted database generates."""
    return uuid.uuid4().hex[:20]


class LocalFileStore:
    """Implementation of DocumentStore for the local filesystem."""

    def __init__(self, root_path: Path):
        """
        Initialize local file store.

        Args:
            root_path: Directory holding the document tree
        """
        self.root_path = Path(root_path).resolve()

    def initialize(self) -> None:
        """Create the root directory if it doesn't exist."""
        self.root_path.mkdir(parents=True, exist_ok=True)

    def _file(self, path: DocumentPath) -> Path:
        check_document_path(path)
        return self.root_path.joinpath(*path[:-1]) / f"{path[-1]}.json"

    def _read(self, file_path: Path) -> dict:
        return json.loads(file_path.read_text(encoding="utf-8"), object_hook=_decode)

    def _write(self, file_path: Path, data: dict) -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(json.dumps(data, default=_encode, indent=2), encoding="utf-8")

    def get(self, path: DocumentPath) -> Optional[dict]:
        """Read a document."""
        file_path = self._file(path)
        if not file_path.exists():
            return None
        return self._read(file_path)

    def set(self, path: DocumentPath, data: dict, merge: bool = False) -> None:
        """Write a document, replacing it unless ``merge`` is set."""
        file_path = self._file(path)
        if merge and file_path.exists():
            data = {**self._read(file_path), **data}
        self._write(file_path, data)

    def add(self, path: DocumentPath, data: dict) -> str:
        """Create a document with a generated id."""
        check_collection_path(path)
        doc_id = generate_document_id()
        self._write(self._file((*path, doc_id)), data)
        logger.debug(f"Added document {'/'.join(path)}/{doc_id}")
        return doc_id

    def update(self, path: DocumentPath, data: dict) -> None:
        """Update fields of an existing document."""
        file_path = self._file(path)
        if not file_path.exists():
            raise DocumentNotFoundError(path)
        self._write(file_path, {**self._read(file_path), **data})

    def delete(self, path: DocumentPath) -> None:
        """Delete a document."""
        file_path = self._file(path)
        if file_path.exists():
            file_path.unlink()

    def list_documents(
        self,
        path: DocumentPath,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Tuple[str, dict]]:
        """List the documents of a collection."""
        check_collection_path(path)
        directory = self.root_path.joinpath(*path)
        if not directory.exists():
            return []

        documents = [
            (f.stem, self._read(f))
            for f in sorted(directory.glob("*.json"))
            if f.is_file()
        ]

        if order_by:
            documents = [d for d in documents if order_by in d[1]]
            documents.sort(key=lambda d: d[1][order_by], reverse=descending)

        return documents
