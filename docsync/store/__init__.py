"""Document store backends for DocSync."""

from docsync.store.adapter import DocumentStoreProtocol
from docsync.store.local_file_store import LocalFileStore

__all__ = ["DocumentStoreProtocol", "LocalFileStore"]
