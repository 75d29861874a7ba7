"""Unit tests for token stores."""
import json

import pytest
from unittest.mock import patch

from eventportal.config import _clear_settings_cache
from eventportal.services.token_store import (
    ACCESS_KEY,
    REFRESH_KEY,
    FileTokenStore,
    SessionTokenStore,
    get_token_store,
)


class TestSessionTokenStore:
    """Test SessionTokenStore."""

    def test_set_and_read(self):
        state = {}
        store = SessionTokenStore(state)

        store.set_tokens(access="acc", refresh="ref")

        assert store.access == "acc"
        assert store.refresh == "ref"
        assert state == {ACCESS_KEY: "acc", REFRESH_KEY: "ref"}

    def test_empty_values_ignored(self):
        store = SessionTokenStore({})
        store.set_tokens(access="acc")

        store.set_tokens(access="", refresh=None)

        assert store.access == "acc"
        assert store.refresh is None

    def test_set_from_payload(self):
        store = SessionTokenStore({})

        assert store.set_from_payload({"access": "acc"}) is True
        assert store.set_from_payload({}) is False
        assert store.set_from_payload(None) is False
        assert store.access == "acc"

    def test_drop_access_keeps_refresh(self):
        store = SessionTokenStore({})
        store.set_tokens(access="acc", refresh="ref")

        store.drop_access()

        assert store.access is None
        assert store.refresh == "ref"

    def test_clear(self):
        state = {"other": 1}
        store = SessionTokenStore(state)
        store.set_tokens(access="acc", refresh="ref")

        store.clear()

        assert state == {"other": 1}


class TestFileTokenStore:
    """Test FileTokenStore."""

    def test_missing_file(self, tmp_path):
        store = FileTokenStore(str(tmp_path / "tokens.json"))

        assert store.access is None
        assert store.refresh is None

    def test_tokens_survive_new_instance(self, tmp_path):
        path = tmp_path / "data" / "tokens.json"
        FileTokenStore(str(path)).set_tokens(access="acc", refresh="ref")

        store = FileTokenStore(str(path))

        assert store.access == "acc"
        assert store.refresh == "ref"
        assert json.loads(path.read_text(encoding="utf-8")) == {ACCESS_KEY: "acc", REFRESH_KEY: "ref"}

    def test_drop_access(self, tmp_path):
        store = FileTokenStore(str(tmp_path / "tokens.json"))
        store.set_tokens(access="acc", refresh="ref")

        store.drop_access()

        assert store.access is None
        assert store.refresh == "ref"

    def test_clear_on_missing_file_does_not_create_it(self, tmp_path):
        path = tmp_path / "tokens.json"

        FileTokenStore(str(path)).clear()

        assert not path.exists()


class TestGetTokenStore:
    """Test get_token_store selection."""

    @pytest.fixture(autouse=True)
    def isolated_settings(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for key in ("TOKEN_STORE", "TOKEN_FILE"):
            monkeypatch.delenv(key, raising=False)
        _clear_settings_cache()
        yield
        _clear_settings_cache()

    def test_file_store(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TOKEN_STORE", "file")
        monkeypatch.setenv("TOKEN_FILE", str(tmp_path / "t.json"))

        store = get_token_store()

        assert isinstance(store, FileTokenStore)
        assert store.file_path == str(tmp_path / "t.json")

    @patch("eventportal.services.token_store.st")
    def test_session_store_by_default(self, mock_st):
        mock_st.session_state = {}

        assert isinstance(get_token_store(), SessionTokenStore)
