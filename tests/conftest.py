"""
Shared pytest fixtures for DocSync tests.
"""

from datetime import datetime, timezone

import pytest

from docsync.auth import StaticAuthProvider
from docsync.instance import SyncInstance
from docsync.models import AuthUser, ProviderInfo
from docsync.store.local_file_store import LocalFileStore


SEEDED_ON = datetime.fromtimestamp(1598703948, tz=timezone.utc)


def make_history_entry(**overrides) -> dict:
    """A history entry as a client would send it."""
    entry = {
        "auth": "None",
        "bearerToken": "",
        "bodyParams": [],
        "contentType": "",
        "date": "8/29/2021",
        "duration": 708,
        "headers": [],
        "httpPassword": "",
        "httpUser": "",
        "label": "",
        "method": "GET",
        "params": [],
        "path": "/status/200",
        "preRequestScript": "// pw.env.set('variable', 'value');",
        "rawInput": True,
        "rawParams": "",
        "requestType": "",
        "star": False,
        "status": 200,
        "testScript": "// pw.expect('variable').toBe('value');",
        "time": "12:12:28 PM",
        "url": "https://test-entry.test",
        "usesPostScripts": True,
        "usesPreScripts": True,
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def test_user():
    """The user operations run as."""
    return AuthUser(
        uid="testuid",
        display_name="Test User",
        email="test@docsync.dev",
        photo_url="testphotourl",
        provider_data=[
            ProviderInfo(
                provider_id="google.com",
                uid="testprovideruid",
                display_name="Test User",
                email="test@docsync.dev",
                photo_url="testphotourl",
            )
        ],
    )


@pytest.fixture
def store(tmp_path):
    """LocalFileStore at a temp path."""
    store = LocalFileStore(tmp_path / "documents")
    store.initialize()
    return store


@pytest.fixture
def seeded_store(store, test_user):
    """Store pre-populated with one user's history, settings, teams and feed."""
    user_root = ("users", test_user.uid)
    store.set(user_root, {
        "updatedOn": SEEDED_ON,
        "provider": "google.com",
        "name": test_user.display_name,
        "email": test_user.email,
        "uid": test_user.uid,
    })

    store.add((*user_root, "history"), make_history_entry(
        date="8/29/2020",
        time="12:12:27 PM",
        url="https://postman-echo.com",
    ))

    for name in ("syncCollections", "syncEnvironments", "syncHistory", "syncTeams"):
        store.set((*user_root, "settings", name), {
            "author": test_user.uid,
            "author_image": test_user.photo_url,
            "author_name": test_user.display_name,
            "name": name,
            "updatedOn": SEEDED_ON,
            "value": True,
        })

    store.set((*user_root, "teams", "sync"), {
        "author": test_user.uid,
        "author_image": test_user.photo_url,
        "author_name": test_user.display_name,
        "team": [],
        "updatedOn": SEEDED_ON,
    })

    store.add((*user_root, "feeds"), {
        "author": test_user.uid,
        "author_image": test_user.photo_url,
        "author_name": test_user.display_name,
        "createdOn": SEEDED_ON,
        "label": "Test Feed Entry",
        "message": "Testing is awesome",
    })
    return store


@pytest.fixture
def auth():
    """A signed-out auth provider."""
    return StaticAuthProvider()


@pytest.fixture
def instance(seeded_store, auth):
    """SyncInstance over the seeded store."""
    return SyncInstance(store=seeded_store, auth=auth)


@pytest.fixture
def signed_in(auth, test_user):
    """Sign the test user in."""
    auth.sign_in(test_user)
    return test_user


@pytest.fixture
def history_entry():
    """A fresh history entry dict."""
    return make_history_entry()
