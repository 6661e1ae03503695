"""
Firestore Document Store.

Thin adapter from the DocumentStore interface onto a google-cloud-firestore
client. Errors raised by the client are passed through unchanged; retries and
backoff are whatever the client library already does.
"""

import logging
from typing import List, Optional, Tuple

from google.cloud import firestore

from docsync.store.adapter import DocumentPath, check_collection_path, check_document_path

logger = logging.getLogger(__name__)


class FirestoreStore:
    """Implementation of DocumentStore for Cloud Firestore."""

    def __init__(self, client: firestore.Client):
        """
        Initialize Firestore store.

        Args:
            client: A Firestore client (plain or from ``firebase_admin.firestore.client()``)
        """
        self.client = client

    @classmethod
    def from_firebase_app(cls, app=None) -> "FirestoreStore":
        """Create a store using the Firestore client of an initialized Firebase app."""
        from firebase_admin import firestore as admin_firestore

        return cls(admin_firestore.client(app))

    def initialize(self) -> None:
        """Nothing to prepare, collections are created on first write."""
        logger.debug(f"Using Firestore project {getattr(self.client, 'project', None)}")

    def _document(self, path: DocumentPath):
        check_document_path(path)
        return self.client.document(*path)

    def _collection(self, path: DocumentPath):
        check_collection_path(path)
        return self.client.collection(*path)

    def get(self, path: DocumentPath) -> Optional[dict]:
        """Read a document."""
        snapshot = self._document(path).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def set(self, path: DocumentPath, data: dict, merge: bool = False) -> None:
        """Write a document."""
        self._document(path).set(data, merge=merge)

    def add(self, path: DocumentPath, data: dict) -> str:
        """Create a document with a generated id."""
        _, doc_ref = self._collection(path).add(data)
        return doc_ref.id

    def update(self, path: DocumentPath, data: dict) -> None:
        """Update fields of an existing document."""
        self._document(path).update(data)

    def delete(self, path: DocumentPath) -> None:
        """Delete a document."""
        self._document(path).delete()

    def list_documents(
        self,
        path: DocumentPath,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Tuple[str, dict]]:
        """List the documents of a collection."""
        query = self._collection(path)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)

        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]
