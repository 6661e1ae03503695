"""
Tests for configuration loading and the component factory.
"""

from unittest.mock import patch

import pytest

from docsync.auth import FirebaseTokenAuthProvider, StaticAuthProvider
from docsync.config import Config, StoreBackend
from docsync.factory import create_auth_provider, create_instance, create_store
from docsync.store.local_file_store import LocalFileStore


@pytest.fixture
def config(tmp_path):
    return Config(storage_path=tmp_path / "docsync", uid="u1", display_name="Ada")


class TestConfig:
    """Tests for Config persistence."""

    def test_defaults(self, tmp_path):
        """Test a fresh config uses the local backend."""
        config = Config.load(tmp_path / "missing.yaml")

        assert config.backend == StoreBackend.LOCAL
        assert config.users_collection == "users"

    def test_save_and_load(self, config, tmp_path):
        """Test a saved config loads back."""
        config.backend = StoreBackend.FIRESTORE
        config.gcp_project = "my-project"
        path = tmp_path / "config.yaml"

        config.save(path)
        loaded = Config.load(path)

        assert loaded.backend == StoreBackend.FIRESTORE
        assert loaded.gcp_project == "my-project"
        assert loaded.uid == "u1"
        assert loaded.storage_path == config.storage_path

    def test_id_token_not_saved(self, config, tmp_path):
        """Test the ID token never lands on disk."""
        config.id_token = "secret-token"
        path = tmp_path / "config.yaml"

        config.save(path)

        assert "secret-token" not in path.read_text()

    def test_env_override(self, tmp_path, monkeypatch):
        """Test DOCSYNC_ environment variables are honoured."""
        monkeypatch.setenv("DOCSYNC_USERS_COLLECTION", "accounts")

        assert Config.load(tmp_path / "missing.yaml").users_collection == "accounts"


class TestFactory:
    """Tests for building components from config."""

    def test_local_store(self, config):
        """Test the local backend creates its directory."""
        store = create_store(config)

        assert isinstance(store, LocalFileStore)
        assert config.local_store_path.exists()

    def test_static_identity(self, config):
        """Test a configured uid signs that user in."""
        provider = create_auth_provider(config)

        assert isinstance(provider, StaticAuthProvider)
        assert provider.current_user.uid == "u1"
        assert provider.current_user.display_name == "Ada"

    def test_no_identity(self, tmp_path):
        """Test no identity leaves the provider signed out."""
        provider = create_auth_provider(Config(storage_path=tmp_path))

        assert provider.current_user is None

    def test_id_token_requires_firestore(self, config):
        """Test ID token sign-in is refused for the local backend."""
        config.id_token = "token"

        with pytest.raises(ValueError):
            create_auth_provider(config)

    @patch("docsync.factory.get_firebase_app")
    @patch.object(FirebaseTokenAuthProvider, "sign_in_with_id_token")
    def test_id_token_sign_in(self, mock_sign_in, mock_get_app, config):
        """Test an ID token is verified through Firebase."""
        config.backend = StoreBackend.FIRESTORE
        config.id_token = "token"

        provider = create_auth_provider(config)

        assert isinstance(provider, FirebaseTokenAuthProvider)
        assert provider.app is mock_get_app.return_value
        mock_sign_in.assert_called_once_with("token")

    def test_create_instance(self, config):
        """Test a full local instance works end to end."""
        instance = create_instance(config)
        instance.write_settings("syncHistory", True)

        assert instance.get_setting("syncHistory").value is True
        assert instance.store.get(("users", "u1"))["name"] == "Ada"
