"""Persistence for the access/refresh token pair."""
from typing import MutableMapping, Optional

import streamlit as st

from eventportal.config import get_settings
from eventportal.services.storage_service import lock_file, read_json, write_json

ACCESS_KEY = "access_token"
REFRESH_KEY = "refresh_token"


class TokenStore:
    """Base class; subclasses provide `_read`, `_write` and `_delete`."""

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, values: dict) -> None:
        raise NotImplementedError

    def _delete(self, *keys: str) -> None:
        raise NotImplementedError

    @property
    def access(self) -> Optional[str]:
        return self._read(ACCESS_KEY)

    @property
    def refresh(self) -> Optional[str]:
        return self._read(REFRESH_KEY)

    def set_tokens(self, access: Optional[str] = None, refresh: Optional[str] = None) -> None:
        """Store whichever of the two tokens is given; empty values are ignored."""
        values = {}
        if access:
            values[ACCESS_KEY] = access
        if refresh:
            values[REFRESH_KEY] = refresh
        if values:
            self._write(values)

    def set_from_payload(self, payload: Optional[dict]) -> bool:
        """
        Store tokens from an API payload shaped {"access": ..., "refresh": ...}.

        Returns:
            True if at least one token was stored
        """
        if not isinstance(payload, dict):
            return False
        access = payload.get("access")
        refresh = payload.get("refresh")
        self.set_tokens(access=access, refresh=refresh)
        return bool(access or refresh)

    def drop_access(self) -> None:
        """Forget the access token only (e.g. after it expired)."""
        self._delete(ACCESS_KEY)

    def clear(self) -> None:
        """Forget both tokens."""
        self._delete(ACCESS_KEY, REFRESH_KEY)


class SessionTokenStore(TokenStore):
    """Tokens kept in a mapping, normally the browser session's `st.session_state`."""

    def __init__(self, state: MutableMapping):
        self._state = state

    def _read(self, key: str) -> Optional[str]:
        return self._state.get(key) or None

    def _write(self, values: dict) -> None:
        for key, value in values.items():
            self._state[key] = value

    def _delete(self, *keys: str) -> None:
        for key in keys:
            if key in self._state:
                del self._state[key]


class FileTokenStore(TokenStore):
    """Tokens kept in a JSON file so they survive restarts (single-operator use)."""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def _read(self, key: str) -> Optional[str]:
        return read_json(self.file_path).get(key) or None

    def _write(self, values: dict) -> None:
        with lock_file(self.file_path):
            data = read_json(self.file_path)
            data.update(values)
            write_json(self.file_path, data)

    def _delete(self, *keys: str) -> None:
        with lock_file(self.file_path):
            data = read_json(self.file_path)
            if not any(key in data for key in keys):
                return
            for key in keys:
                data.pop(key, None)
            write_json(self.file_path, data)


def get_token_store() -> TokenStore:
    """Return the token store selected by the TOKEN_STORE setting."""
    settings = get_settings()
    if settings.token_store == "file":
        return FileTokenStore(settings.token_file)
    return SessionTokenStore(st.session_state)
