"""
Data models for DocSync.

These Pydantic models mirror the documents stored under each user's subtree.
Field aliases are the names used inside the database, so every model dumps
straight to a document with ``model_dump(by_alias=True)``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# Document id of the aggregate collections/environments/teams documents
SYNC_DOCUMENT_ID = "sync"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class SyncResource(str, Enum):
    """Resources mirrored as a single aggregate document per user."""

    COLLECTIONS = "collections"
    ENVIRONMENTS = "environments"
    TEAMS = "teams"

    @property
    def field(self) -> str:
        """Name of the document field holding the array ("collection", ...)."""
        return self.value[:-1]


class ProviderInfo(BaseModel):
    """Sign-in provider data attached to a user."""

    provider_id: str = Field(..., alias="providerId")
    uid: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    email: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoURL")

    class Config:
        populate_by_name = True


class AuthUser(BaseModel):
    """The authenticated identity operations are performed as."""

    uid: str = Field(..., min_length=1)
    display_name: Optional[str] = Field(default=None, alias="displayName")
    email: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    provider_data: list[ProviderInfo] = Field(default_factory=list, alias="providerData")

    class Config:
        populate_by_name = True

    @property
    def provider_id(self) -> Optional[str]:
        """Id of the first sign-in provider, if any."""
        if not self.provider_data:
            return None
        return self.provider_data[0].provider_id

    def author_fields(self) -> dict:
        """Author stamp written into settings, feeds and sync documents."""
        return {
            "author": self.uid,
            "author_name": self.display_name,
            "author_image": self.photo_url,
        }


class UserProfile(BaseModel):
    """Top-level ``users/{uid}`` document, merged on every sign-in."""

    uid: str
    name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    provider: Optional[str] = None
    updated_on: datetime = Field(default_factory=utc_now, alias="updatedOn")

    class Config:
        populate_by_name = True

    @classmethod
    def from_user(cls, user: AuthUser) -> "UserProfile":
        return cls(
            uid=user.uid,
            name=user.display_name,
            email=user.email,
            photo_url=user.photo_url,
            provider=user.provider_id,
        )

    def to_document(self) -> dict:
        # Unknown values are left out so a merge never blanks stored ones
        return self.model_dump(by_alias=True, exclude_none=True)


class Setting(BaseModel):
    """A named user setting, upserted by name."""

    name: str = Field(..., min_length=1)
    value: Any = None
    author: str
    author_name: Optional[str] = None
    author_image: Optional[str] = None
    updated_on: datetime = Field(default_factory=utc_now, alias="updatedOn")

    class Config:
        populate_by_name = True

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class FeedEntry(BaseModel):
    """An activity-feed message."""

    id: Optional[str] = None  # Document id, never stored in the document
    message: Optional[str] = None
    label: Optional[str] = None
    author: str
    author_name: Optional[str] = None
    author_image: Optional[str] = None
    created_on: datetime = Field(default_factory=utc_now, alias="createdOn")

    class Config:
        populate_by_name = True

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})


class HistoryEntry(BaseModel):
    """
    A request history entry.

    Field values are client data and are never coerced or rejected: every
    known field accepts any value. Unknown fields are kept, and only fields
    the caller actually set are written, so a stored entry is exactly what
    was handed in.
    """

    id: Optional[str] = None  # Document id, never stored in the document
    method: Any = None
    url: Any = None
    path: Any = None
    label: Any = None
    headers: Any = Field(default_factory=list)
    params: Any = Field(default_factory=list)
    body_params: Any = Field(default_factory=list, alias="bodyParams")
    raw_params: Any = Field(default=None, alias="rawParams")
    raw_input: Any = Field(default=None, alias="rawInput")
    content_type: Any = Field(default=None, alias="contentType")
    request_type: Any = Field(default=None, alias="requestType")
    auth: Any = None
    http_user: Any = Field(default=None, alias="httpUser")
    http_password: Any = Field(default=None, alias="httpPassword")
    bearer_token: Any = Field(default=None, alias="bearerToken")
    pre_request_script: Any = Field(default=None, alias="preRequestScript")
    test_script: Any = Field(default=None, alias="testScript")
    uses_pre_scripts: Any = Field(default=None, alias="usesPreScripts")
    uses_post_scripts: Any = Field(default=None, alias="usesPostScripts")
    status: Any = None
    duration: Any = None
    date: Any = None
    time: Any = None
    star: Any = False
    updated_on: Any = Field(default=None, alias="updatedOn")

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude={"id"})


class SyncDocument(BaseModel):
    """Aggregate document mirroring a whole client-side array."""

    resource: SyncResource
    items: list[Any] = Field(default_factory=list)
    author: Optional[str] = None
    author_name: Optional[str] = None
    author_image: Optional[str] = None
    updated_on: datetime = Field(default_factory=utc_now, alias="updatedOn")

    class Config:
        populate_by_name = True

    def to_document(self) -> dict:
        return {
            "author": self.author,
            "author_name": self.author_name,
            "author_image": self.author_image,
            "updatedOn": self.updated_on,
            self.resource.field: list(self.items),
        }

    @classmethod
    def from_document(cls, resource: SyncResource, data: dict) -> "SyncDocument":
        return cls(
            resource=resource,
            items=data.get(resource.field) or [],
            author=data.get("author"),
            author_name=data.get("author_name"),
            author_image=data.get("author_image"),
            updated_on=data.get("updatedOn") or utc_now(),
        )
