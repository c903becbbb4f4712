"""Tests for session persistence."""

import json
import os
import stat

import pytest

from wpcloud.errors import AuthError
from wpcloud.models import Identity, Session
from wpcloud.session_store import SessionStore


@pytest.fixture(params=["file", "memory"])
def store(request, tmp_path):
    if request.param == "file":
        return SessionStore(str(tmp_path / "nested" / "session.json"))
    return SessionStore()


class TestSaveAndLoad:
    """Round trip through both backends."""

    def test_load_without_session_is_absent(self, store):
        """Nothing saved yet means logged out."""
        assert store.load() is None

    def test_save_then_load(self, store, alice):
        """Saved token and identity come back unchanged."""
        store.save(alice)

        loaded = store.load()

        assert loaded == alice

    def test_save_overwrites_previous_session(self, store, alice):
        """A second login replaces the first session entirely."""
        store.save(alice)
        bob = Session(token="tok-bob", identity=Identity(owner_id="bob@example.com", email="bob@example.com"))

        store.save(bob)

        assert store.load() == bob

    def test_owner_falls_back_to_user_id(self, store):
        """Without an email the user id scopes the files."""
        store.save(Session(token="t", identity=Identity(owner_id="u-42", user_id="u-42")))

        assert store.load().identity.owner_id == "u-42"


class TestClear:
    """Logout removes token and identity together."""

    def test_clear_then_load_is_absent(self, store, alice):
        """clear() always leads to an absent session."""
        store.save(alice)

        store.clear()

        assert store.load() is None

    def test_clear_without_session(self, store):
        """Clearing an empty store is harmless."""
        store.clear()

        assert store.load() is None

    def test_require_after_clear_raises(self, store, alice):
        """Components asking for a session get an AuthError."""
        store.save(alice)
        store.clear()

        with pytest.raises(AuthError):
            store.require()


class TestFileBackend:
    """Behaviour specific to the JSON file."""

    def test_file_is_private(self, tmp_path, alice):
        """The session file is readable by the owner only."""
        path = tmp_path / "session.json"
        SessionStore(str(path)).save(alice)

        mode = stat.S_IMODE(os.stat(path).st_mode)

        assert mode == 0o600

    def test_corrupt_json_is_absent(self, tmp_path):
        """Garbage on disk does not crash load()."""
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")

        assert SessionStore(str(path)).load() is None

    def test_token_without_identity_is_absent(self, tmp_path):
        """An unparsable identity resolves to no session."""
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"token": "abc", "user": "oops"}), encoding="utf-8")

        assert SessionStore(str(path)).load() is None

    def test_identity_without_token_is_absent(self, tmp_path):
        """Missing token is the unauthenticated signal."""
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"user": {"email": "alice@example.com"}}), encoding="utf-8")

        assert SessionStore(str(path)).load() is None

    def test_clear_removes_file(self, tmp_path, alice):
        """Token and identity share one file, removed at once."""
        path = tmp_path / "session.json"
        store = SessionStore(str(path))
        store.save(alice)

        store.clear()

        assert not path.exists()
