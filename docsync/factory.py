"""
Factory for DocSync.

Creates the document store, auth provider and sync instance based on
configuration. Supports Firestore (hosted) and local JSON files.
"""

import logging

from docsync.auth import AuthProviderProtocol, FirebaseTokenAuthProvider, StaticAuthProvider
from docsync.config import Config, StoreBackend
from docsync.instance import SyncInstance
from docsync.models import AuthUser
from docsync.store.adapter import DocumentStoreProtocol

logger = logging.getLogger(__name__)


def get_firebase_app(config: Config):
    """Return the default Firebase app, initializing it from configuration if needed."""
    import firebase_admin
    from firebase_admin import credentials

    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # Not initialized yet

    cred = credentials.Certificate(str(config.credentials_path)) if config.credentials_path else None
    options = {"projectId": config.gcp_project} if config.gcp_project else None
    logger.info(f"Initializing Firebase app (project: {config.gcp_project or 'from environment'})")
    return firebase_admin.initialize_app(cred, options)


def create_store(config: Config) -> DocumentStoreProtocol:
    """
    Create a document store based on configuration.

    Args:
        config: DocSync configuration

    Returns:
        A document store (Firestore or local files)
    """
    if config.backend == StoreBackend.FIRESTORE:
        return _create_firestore_store(config)
    else:
        return _create_local_store(config)


def _create_firestore_store(config: Config) -> DocumentStoreProtocol:
    """Create Firestore-backed store."""
    from docsync.store.firestore_store import FirestoreStore

    logger.info("Using Firestore document store")
    return FirestoreStore.from_firebase_app(get_firebase_app(config))


def _create_local_store(config: Config) -> DocumentStoreProtocol:
    """Create local file store."""
    from docsync.store.local_file_store import LocalFileStore

    logger.info(f"Using local document store: {config.local_store_path}")
    store = LocalFileStore(config.local_store_path)
    store.initialize()
    return store


def create_auth_provider(config: Config) -> AuthProviderProtocol:
    """
    Create an auth provider based on configuration.

    An ID token takes precedence over a configured local uid. With neither,
    the provider starts signed out and every operation is rejected.
    """
    if config.id_token:
        if config.backend != StoreBackend.FIRESTORE:
            raise ValueError(
                "ID token sign-in needs the 'firestore' backend. "
                "Set a local uid instead for the 'local' backend."
            )
        provider = FirebaseTokenAuthProvider(app=get_firebase_app(config))
        provider.sign_in_with_id_token(config.id_token)
        return provider

    if config.uid:
        return StaticAuthProvider(AuthUser(
            uid=config.uid,
            display_name=config.display_name,
            email=config.email,
            photo_url=config.photo_url,
        ))

    logger.warning("No identity configured, sync operations will be rejected")
    return StaticAuthProvider()


def create_instance(config: Config) -> SyncInstance:
    """Create a SyncInstance wired to the configured store and identity."""
    store = create_store(config)
    auth = create_auth_provider(config)
    return SyncInstance(store=store, auth=auth, users_collection=config.users_collection)
