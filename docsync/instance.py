"""
Sync instance for DocSync.

Per-user data synchronization over a document store:
- Feeds (create, delete)
- Settings (upsert by name)
- History (create, star, delete, clear)
- Collections / environments / teams (whole-array sync documents)

Every operation checks that a user is signed in, then performs one store
call under ``users/{uid}``. Store failures are logged and re-raised as-is.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Optional, Union

from docsync.auth import AuthProviderProtocol
from docsync.errors import InvalidArgumentError, NotAuthenticatedError
from docsync.models import (
    AuthUser,
    FeedEntry,
    HistoryEntry,
    Setting,
    SyncDocument,
    SyncResource,
    SYNC_DOCUMENT_ID,
    UserProfile,
    utc_now,
)
from docsync.store.adapter import DocumentPath, DocumentStoreProtocol, is_valid_segment

logger = logging.getLogger(__name__)

DEFAULT_USERS_COLLECTION = "users"

HistoryRef = Union[HistoryEntry, dict, str]

# Client-side format of the `date` and `time` fields of history entries
HISTORY_DATETIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"


def _entry_id(entry: Optional[HistoryRef]) -> Optional[str]:
    """Document id of a history entry given as a model, a dict or a bare id."""
    if entry is None or isinstance(entry, str):
        return entry
    if isinstance(entry, HistoryEntry):
        return entry.id
    return entry.get("id")


def _check_segment(value: Optional[str], message: str, field: str) -> str:
    """Reject missing ids and names, and ones that would escape their collection."""
    if not value:
        raise InvalidArgumentError(message, field=field)
    if not is_valid_segment(value):
        raise InvalidArgumentError(f"Invalid {field}: {value!r}", field=field)
    return value


def _history_timestamp(entry: HistoryEntry) -> Optional[float]:
    """When a history entry was recorded, as a POSIX timestamp, if known."""
    if isinstance(entry.updated_on, datetime):
        stamp = entry.updated_on
    else:
        try:
            stamp = datetime.strptime(f"{entry.date} {entry.time}", HISTORY_DATETIME_FORMAT)
        except (TypeError, ValueError):
            return None

    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.timestamp()


def _history_sort_key(entry: HistoryEntry) -> tuple:
    timestamp = _history_timestamp(entry)
    return (timestamp is None, -(timestamp or 0.0))


class SyncInstance:
    """
    Authentication-gated access to one user's synced data.

    The store and auth provider are owned by the caller; the instance only
    holds references to them.
    """

    def __init__(
        self,
        store: DocumentStoreProtocol,
        auth: AuthProviderProtocol,
        users_collection: str = DEFAULT_USERS_COLLECTION,
    ):
        """Initialize the instance and start tracking sign-ins."""
        self.store = store
        self.auth = auth
        self.users_collection = users_collection
        self.auth.add_listener(self._on_auth_state_changed)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self.auth.current_user

    def _require_user(self) -> AuthUser:
        user = self.auth.current_user
        if user is None:
            raise NotAuthenticatedError()
        return user

    def _on_auth_state_changed(self, user: Optional[AuthUser]) -> None:
        """Merge the signed-in user's profile into ``users/{uid}``."""
        if user is None:
            return

        profile = UserProfile.from_user(user)
        try:
            self.store.set(self._user_path(user), profile.to_document(), merge=True)
        except Exception as e:
            # A failed profile refresh must not undo the sign-in itself
            logger.error(f"Error updating profile for {user.uid}: {e}")

    def sign_out(self) -> None:
        """Sign the current user out."""
        self._require_user()
        self.auth.sign_out()

    def set_provider_info(self, provider_id: str, access_token: str) -> None:
        """Record the sign-in provider and its access token on the user profile."""
        user = self._require_user()
        if not provider_id:
            raise InvalidArgumentError("Provider id is required", field="provider_id")

        data = {
            "updatedOn": utc_now(),
            "provider": provider_id,
            "accessToken": access_token,
        }
        with self._logged("updating provider info", data):
            self.store.set(self._user_path(user), data, merge=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _user_path(self, user: AuthUser, *segments: str) -> DocumentPath:
        return (self.users_collection, user.uid, *segments)

    @contextmanager
    def _logged(self, action: str, data: Any = None) -> Iterator[None]:
        """Log a failed store call with the data involved, then re-raise."""
        try:
            yield
        except Exception as e:
            logger.error(f"Error {action}: {data!r}: {e}")
            raise

    # ------------------------------------------------------------------
    # Feeds
    # ------------------------------------------------------------------

    def write_feed(self, message: Optional[str], label: Optional[str]) -> None:
        """Add a feed entry authored by the current user."""
        user = self._require_user()

        entry = FeedEntry(message=message, label=label, **user.author_fields())
        document = entry.to_document()
        with self._logged("inserting feed", document):
            self.store.add(self._user_path(user, "feeds"), document)

    def delete_feed(self, feed_id: Optional[str]) -> None:
        """Delete a feed entry by id."""
        user = self._require_user()
        _check_segment(feed_id, "Feed id is required", "feed_id")

        with self._logged("deleting feed", feed_id):
            self.store.delete(self._user_path(user, "feeds", feed_id))

    def list_feeds(self) -> list[FeedEntry]:
        """Feed entries, newest first."""
        user = self._require_user()
        documents = self.store.list_documents(
            self._user_path(user, "feeds"),
            order_by="createdOn",
            descending=True,
        )
        return [FeedEntry.model_validate({**data, "id": doc_id}) for doc_id, data in documents]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def write_settings(self, name: Optional[str], value: Any) -> None:
        """
        Create or overwrite a named setting.

        ``value`` may be None; ``name`` may not.
        """
        user = self._require_user()
        _check_segment(name, "Setting name is required", "name")

        setting = Setting(name=name, value=value, **user.author_fields())
        document = setting.to_document()
        with self._logged("writing setting", document):
            self.store.set(self._user_path(user, "settings", name), document)

    def get_setting(self, name: str) -> Optional[Setting]:
        user = self._require_user()
        _check_segment(name, "Setting name is required", "name")

        data = self.store.get(self._user_path(user, "settings", name))
        return Setting.model_validate(data) if data is not None else None

    def list_settings(self) -> list[Setting]:
        user = self._require_user()
        documents = self.store.list_documents(self._user_path(user, "settings"))
        return [Setting.model_validate(data) for _, data in documents]

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def write_history(self, entry: Union[HistoryEntry, dict, None]) -> None:
        """Store a history entry exactly as given."""
        user = self._require_user()
        if entry is None:
            raise InvalidArgumentError("History entry is required", field="entry")

        if isinstance(entry, HistoryEntry):
            document = entry.to_document()
        elif not isinstance(entry, dict):
            raise InvalidArgumentError("History entry must be a mapping", field="entry")
        else:
            document = {key: value for key, value in entry.items() if key != "id"}
        with self._logged("inserting history", document):
            self.store.add(self._user_path(user, "history"), document)

    def delete_history(self, entry: Optional[HistoryRef]) -> None:
        """Delete one history entry."""
        user = self._require_user()
        entry_id = _check_segment(_entry_id(entry), "History entry id is required", "id")

        with self._logged("deleting history", entry_id):
            self.store.delete(self._user_path(user, "history", entry_id))

    def clear_history(self) -> None:
        """Delete every history entry of the current user."""
        user = self._require_user()
        documents = self.store.list_documents(self._user_path(user, "history"))
        for doc_id, _ in documents:
            self.delete_history(doc_id)
        logger.info(f"Cleared {len(documents)} history entries for {user.uid}")

    def toggle_star(self, entry: Optional[HistoryRef], value: bool) -> None:
        """Set the star flag of one history entry, leaving its other fields alone."""
        user = self._require_user()
        entry_id = _check_segment(_entry_id(entry), "History entry id is required", "id")

        with self._logged("updating history star", entry_id):
            self.store.update(self._user_path(user, "history", entry_id), {"star": value})

    def list_history(self) -> list[HistoryEntry]:
        """
        History entries, newest first, each carrying its document id.

        Entries are ordered by ``updatedOn``, falling back to their ``date`` and
        ``time`` fields. Entries with neither come last, in store order.
        """
        user = self._require_user()
        documents = self.store.list_documents(self._user_path(user, "history"))
        entries = [HistoryEntry.model_validate({**data, "id": doc_id}) for doc_id, data in documents]
        return sorted(entries, key=_history_sort_key)

    # ------------------------------------------------------------------
    # Sync documents
    # ------------------------------------------------------------------

    def _write_sync_document(self, resource: SyncResource, items: Optional[Iterable[Any]]) -> None:
        user = self._require_user()
        if items is None:
            raise InvalidArgumentError(f"{resource.value.capitalize()} are required", field=resource.field)

        document = SyncDocument(resource=resource, items=list(items), **user.author_fields()).to_document()
        with self._logged(f"writing {resource.value}", document):
            self.store.set(self._user_path(user, resource.value, SYNC_DOCUMENT_ID), document)

    def _read_sync_document(self, resource: SyncResource) -> list[Any]:
        user = self._require_user()
        data = self.store.get(self._user_path(user, resource.value, SYNC_DOCUMENT_ID))
        if data is None:
            return []
        return SyncDocument.from_document(resource, data).items

    def write_collections(self, collections: Optional[Iterable[Any]]) -> None:
        """Overwrite the collections sync document with the whole array."""
        self._write_sync_document(SyncResource.COLLECTIONS, collections)

    def write_environments(self, environments: Optional[Iterable[Any]]) -> None:
        """Overwrite the environments sync document with the whole array."""
        self._write_sync_document(SyncResource.ENVIRONMENTS, environments)

    def write_teams(self, teams: Optional[Iterable[Any]]) -> None:
        """Overwrite the teams sync document with the whole array."""
        self._write_sync_document(SyncResource.TEAMS, teams)

    def read_collections(self) -> list[Any]:
        return self._read_sync_document(SyncResource.COLLECTIONS)

    def read_environments(self) -> list[Any]:
        return self._read_sync_document(SyncResource.ENVIRONMENTS)

    def read_teams(self) -> list[Any]:
        return self._read_sync_document(SyncResource.TEAMS)

    def write_sync(self, resource: SyncResource, items: Optional[Iterable[Any]]) -> None:
        """Write any sync document by resource (used by the CLI)."""
        self._write_sync_document(SyncResource(resource), items)

    def read_sync(self, resource: SyncResource) -> list[Any]:
        return self._read_sync_document(SyncResource(resource))
