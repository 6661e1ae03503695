"""
Authentication providers for DocSync.

A provider answers one question, "who is signed in right now?", and tells
listeners when the answer changes. Sign-in UI is not handled here.
"""

import logging
from typing import Callable, List, Optional, Protocol

from firebase_admin import auth

from docsync.errors import NotAuthenticatedError
from docsync.models import AuthUser, ProviderInfo

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[AuthUser]], None]


class AuthProviderProtocol(Protocol):
    """Interface for authentication providers."""

    @property
    def current_user(self) -> Optional[AuthUser]:
        """The signed-in user, or None."""
        ...

    def add_listener(self, listener: AuthListener) -> None:
        """Register a callback invoked with the new user on every auth state change."""
        ...

    def sign_out(self) -> None:
        """Forget the signed-in user."""
        ...


class StaticAuthProvider:
    """Auth provider whose identity is set explicitly by the caller."""

    def __init__(self, user: Optional[AuthUser] = None):
        self._user = user
        self._listeners: List[AuthListener] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._user

    def add_listener(self, listener: AuthListener) -> None:
        """
        Register an auth state listener.

        A listener added while a user is signed in is called right away.
        """
        self._listeners.append(listener)
        if self._user is not None:
            listener(self._user)

    def sign_in(self, user: AuthUser) -> None:
        self._user = user
        logger.info(f"Signed in as {user.uid}")
        self._notify()

    def sign_out(self) -> None:
        if self._user is None:
            raise NotAuthenticatedError("No user has signed in")
        logger.info(f"Signed out {self._user.uid}")
        self._user = None
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)


def user_from_record(record: auth.UserRecord) -> AuthUser:
    """Convert a firebase_admin UserRecord into an AuthUser."""
    return AuthUser(
        uid=record.uid,
        display_name=record.display_name,
        email=record.email,
        photo_url=record.photo_url,
        provider_data=[
            ProviderInfo(
                provider_id=info.provider_id,
                uid=info.uid,
                display_name=info.display_name,
                email=info.email,
                photo_url=info.photo_url,
            )
            for info in record.provider_data
        ],
    )


class FirebaseTokenAuthProvider(StaticAuthProvider):
    """
    Auth provider backed by Firebase Authentication ID tokens.

    The token is verified with the Firebase Admin SDK and the full user record
    is fetched, so the identity carries display name, photo and providers.
    """

    def __init__(self, app=None, check_revoked: bool = False):
        super().__init__()
        self.app = app
        self.check_revoked = check_revoked

    def sign_in_with_id_token(self, id_token: str) -> AuthUser:
        """
        Verify an ID token and sign its user in.

        Raises:
            NotAuthenticatedError: If the token is missing or rejected
        """
        if not id_token:
            raise NotAuthenticatedError("No ID token given")

        try:
            claims = auth.verify_id_token(id_token, app=self.app, check_revoked=self.check_revoked)
        except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
            raise NotAuthenticatedError(f"Invalid ID token: {e}") from e

        record = auth.get_user(claims["uid"], app=self.app)
        user = user_from_record(record)
        self.sign_in(user)
        return user
