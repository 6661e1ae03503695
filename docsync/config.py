"""
Configuration management for DocSync.

Handles loading, validating, and persisting configuration from YAML files.
Default location: ~/.docsync/config.yaml
"""

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings


def get_default_storage_path() -> Path:
    """Get the default storage path for DocSync."""
    return Path.home() / ".docsync"


class StoreBackend(str, Enum):
    """Available document store backends."""
    FIRESTORE = "firestore"
    LOCAL = "local"  # JSON files on disk


class Config(BaseSettings):
    """DocSync configuration settings."""

    # Storage settings
    backend: StoreBackend = Field(default=StoreBackend.LOCAL)
    storage_path: Path = Field(default_factory=get_default_storage_path)
    users_collection: str = Field(default="users", min_length=1)

    # Firestore settings (used when backend = "firestore")
    gcp_project: Optional[str] = None
    credentials_path: Optional[Path] = None

    # Identity: a Firebase ID token, or a fixed local user
    id_token: Optional[str] = None
    uid: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None

    log_level: str = Field(default="INFO")

    class Config:
        env_prefix = "DOCSYNC_"
        env_file = ".env"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = get_default_storage_path() / "config.yaml"

        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)

        return cls()

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to YAML file."""
        if config_path is None:
            config_path = self.storage_path / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        # The ID token is short-lived and never written to disk
        data = {
            "backend": self.backend.value,
            "storage_path": str(self.storage_path),
            "users_collection": self.users_collection,
            "gcp_project": self.gcp_project,
            "credentials_path": str(self.credentials_path) if self.credentials_path else None,
            "uid": self.uid,
            "display_name": self.display_name,
            "email": self.email,
            "photo_url": self.photo_url,
            "log_level": self.log_level,
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)

    @property
    def local_store_path(self) -> Path:
        """Get the local document store directory."""
        return self.storage_path / "documents"

    def ensure_directories(self) -> None:
        """Create all necessary directories."""
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.local_store_path.mkdir(parents=True, exist_ok=True)
