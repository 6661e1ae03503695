"""
DocSync - Per-user data synchronization over a hosted document database.

Keeps a signed-in user's history, settings, activity feed, collections,
environments and teams under ``users/{uid}`` in Firestore (or a local
directory of JSON documents).
"""

from docsync.models import AuthUser, FeedEntry, HistoryEntry, Setting, SyncResource
from docsync.auth import StaticAuthProvider, FirebaseTokenAuthProvider
from docsync.errors import DocSyncError, NotAuthenticatedError, InvalidArgumentError
from docsync.instance import SyncInstance
from docsync.config import Config

__version__ = "0.3.0"
__all__ = [
    "AuthUser",
    "FeedEntry",
    "HistoryEntry",
    "Setting",
    "SyncResource",
    "StaticAuthProvider",
    "FirebaseTokenAuthProvider",
    "DocSyncError",
    "NotAuthenticatedError",
    "InvalidArgumentError",
    "SyncInstance",
    "Config",
]
