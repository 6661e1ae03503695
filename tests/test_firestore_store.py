"""
Tests for the Firestore document store, against a mocked client.
"""

from unittest.mock import MagicMock

import pytest
from google.cloud import firestore

from docsync.store.firestore_store import FirestoreStore


@pytest.fixture
def client():
    """A mocked Firestore client."""
    return MagicMock()


@pytest.fixture
def firestore_store(client):
    return FirestoreStore(client)


def make_snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data
    return snapshot


class TestFirestoreDocuments:
    """Tests for single-document calls."""

    def test_get_existing(self, firestore_store, client):
        """Test reading an existing document."""
        client.document.return_value.get.return_value = make_snapshot("sync", {"team": []})

        assert firestore_store.get(("users", "u1", "teams", "sync")) == {"team": []}
        client.document.assert_called_once_with("users", "u1", "teams", "sync")

    def test_get_missing(self, firestore_store, client):
        """Test a missing document reads as None."""
        client.document.return_value.get.return_value = make_snapshot("x", None, exists=False)

        assert firestore_store.get(("users", "u1", "teams", "sync")) is None

    def test_set(self, firestore_store, client):
        """Test set passes data and merge through."""
        firestore_store.set(("users", "u1"), {"name": "Ada"}, merge=True)

        client.document.assert_called_once_with("users", "u1")
        client.document.return_value.set.assert_called_once_with({"name": "Ada"}, merge=True)

    def test_update(self, firestore_store, client):
        """Test update targets one document."""
        firestore_store.update(("users", "u1", "history", "h1"), {"star": True})

        client.document.return_value.update.assert_called_once_with({"star": True})

    def test_delete(self, firestore_store, client):
        """Test delete targets one document."""
        firestore_store.delete(("users", "u1", "feeds", "f1"))

        client.document.assert_called_once_with("users", "u1", "feeds", "f1")
        client.document.return_value.delete.assert_called_once_with()

    def test_client_errors_propagate(self, firestore_store, client):
        """Test client exceptions are not wrapped."""
        client.document.return_value.update.side_effect = KeyError("missing")

        with pytest.raises(KeyError):
            firestore_store.update(("users", "u1", "history", "h1"), {"star": True})

    def test_rejects_collection_path(self, firestore_store, client):
        """Test a collection path is refused for document calls."""
        with pytest.raises(ValueError):
            firestore_store.get(("users", "u1", "feeds"))
        client.document.assert_not_called()


class TestFirestoreCollections:
    """Tests for collection calls."""

    def test_add_returns_new_id(self, firestore_store, client):
        """Test add returns the generated document id."""
        doc_ref = MagicMock()
        doc_ref.id = "generated123"
        client.collection.return_value.add.return_value = (MagicMock(), doc_ref)

        assert firestore_store.add(("users", "u1", "feeds"), {"message": "hi"}) == "generated123"
        client.collection.assert_called_once_with("users", "u1", "feeds")

    def test_list_documents(self, firestore_store, client):
        """Test listing streams the collection."""
        client.collection.return_value.stream.return_value = [
            make_snapshot("a", {"n": 1}),
            make_snapshot("b", {"n": 2}),
        ]

        assert firestore_store.list_documents(("users", "u1", "history")) == [("a", {"n": 1}), ("b", {"n": 2})]

    def test_list_documents_ordered(self, firestore_store, client):
        """Test ordering is delegated to the query."""
        query = client.collection.return_value.order_by.return_value
        query.stream.return_value = [make_snapshot("a", {"createdOn": 1})]

        docs = firestore_store.list_documents(("users", "u1", "feeds"), order_by="createdOn", descending=True)

        assert docs == [("a", {"createdOn": 1})]
        client.collection.return_value.order_by.assert_called_once_with(
            "createdOn", direction=firestore.Query.DESCENDING
        )
