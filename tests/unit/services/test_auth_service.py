"""Unit tests for auth_service."""
import time

import jwt
import pytest
from unittest.mock import MagicMock

from eventportal.services.api_client import ApiResponse, NetworkFailure
from eventportal.services.auth_service import (
    LOGIN_FAILED,
    MISSING_CREDENTIALS,
    build_credentials,
    current_username,
    is_authenticated,
    login,
    login_admin,
    logout,
    refresh_access,
    register_account,
    verify_session,
)
from eventportal.services.token_store import SessionTokenStore
from eventportal.utils.exceptions import AuthRejection

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture
def client():
    mock_client = MagicMock()
    mock_client.token_store = SessionTokenStore({})
    return mock_client


class TestBuildCredentials:
    """Test build_credentials function."""

    def test_email_detected(self):
        assert build_credentials(" asha@example.com ", "pw") == {"email": "asha@example.com", "password": "pw"}

    def test_username_detected(self):
        assert build_credentials("asha", "pw") == {"username": "asha", "password": "pw"}

    def test_explicit_mode_wins(self):
        assert build_credentials("asha@example.com", "pw", "username") == {
            "username": "asha@example.com",
            "password": "pw",
        }

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            build_credentials("asha", "pw", "phone")


class TestLogin:
    """Test login and login_admin."""

    def test_missing_credentials(self, client):
        with pytest.raises(AuthRejection, match=MISSING_CREDENTIALS):
            login(client, "  ", "pw")

        client.obtain_token.assert_not_called()

    def test_refused_uses_api_detail(self, client):
        client.obtain_token.return_value = ApiResponse(401, {"detail": "No active account found"})

        with pytest.raises(AuthRejection, match="No active account found"):
            login(client, "asha", "wrong")

    def test_network_failure_uses_fallback(self, client):
        client.obtain_token.return_value = NetworkFailure("down")

        with pytest.raises(AuthRejection, match=LOGIN_FAILED):
            login(client, "asha", "pw")

    def test_ok_without_access_token(self, client):
        client.obtain_token.return_value = ApiResponse(200, {})

        with pytest.raises(AuthRejection, match=LOGIN_FAILED):
            login(client, "asha", "pw")

    def test_success_stores_tokens(self, client):
        client.obtain_token.return_value = ApiResponse(200, {"access": "acc", "refresh": "ref"})

        tokens = login(client, "asha", "pw")

        assert tokens["access"] == "acc"
        assert client.token_store.access == "acc"
        assert client.token_store.refresh == "ref"

    def test_login_admin_success(self, client):
        client.obtain_token.return_value = ApiResponse(200, {"access": "acc"})

        assert login_admin(client, "asha", "pw") == (True, "Login successful")

    def test_login_admin_failure(self, client):
        client.obtain_token.return_value = ApiResponse(400, {"non_field_errors": ["Unable to log in"]})

        assert login_admin(client, "asha", "pw", "username") == (False, "Unable to log in")


class TestRegisterAccount:
    """Test staff sign-up."""

    def test_password_mismatch_sends_nothing(self, client):
        result = register_account(client, "asha", "asha@example.com", "pw1", "pw2")

        assert result == (False, "Passwords do not match.", False)
        client.register_account.assert_not_called()

    def test_success_with_tokens_logs_in(self, client):
        client.register_account.return_value = ApiResponse(201, {"access": "acc", "refresh": "ref"})

        result = register_account(client, "asha", "asha@example.com", "pw", "pw", name="Asha Rao")

        assert result == (True, "Registration successful.", True)
        assert client.token_store.access == "acc"
        payload = client.register_account.call_args[0][0]
        assert payload["name"] == "Asha Rao"

    def test_success_without_tokens_asks_to_log_in(self, client):
        client.register_account.return_value = ApiResponse(201, {"id": 3})

        result = register_account(client, "asha", "asha@example.com", "pw", "pw")

        assert result == (True, "Registration successful. Please log in.", False)
        assert "name" not in client.register_account.call_args[0][0]

    def test_failure_message(self, client):
        client.register_account.return_value = ApiResponse(400, {"username": ["already taken"]})

        assert register_account(client, "asha", "asha@example.com", "pw", "pw") == (
            False,
            "Registration failed.",
            False,
        )


class TestSession:
    """Test session verification, refresh and logout."""

    def test_is_authenticated(self, client):
        store = client.token_store
        assert is_authenticated(store) is False

        store.set_tokens(access=jwt.encode({"exp": int(time.time()) + 600}, SECRET, algorithm="HS256"))
        assert is_authenticated(store) is True

    def test_expired_token_is_not_authenticated(self, client):
        client.token_store.set_tokens(access=jwt.encode({"exp": int(time.time()) - 5}, SECRET, algorithm="HS256"))

        assert is_authenticated(client.token_store) is False

    def test_verify_without_token(self, client):
        assert verify_session(client) is False
        client.verify_token.assert_not_called()

    def test_verify_ok(self, client):
        client.token_store.set_tokens(access="acc", refresh="ref")
        client.verify_token.return_value = ApiResponse(200, {})

        assert verify_session(client) is True
        client.verify_token.assert_called_once_with("acc")

    def test_verify_failure_clears_tokens(self, client):
        client.token_store.set_tokens(access="acc", refresh="ref")
        client.verify_token.return_value = ApiResponse(401, {"detail": "Token is invalid"})

        assert verify_session(client) is False
        assert client.token_store.access is None
        assert client.token_store.refresh is None

    def test_refresh_without_refresh_token(self, client):
        assert refresh_access(client) is False
        client.refresh_token.assert_not_called()

    def test_refresh_success(self, client):
        client.token_store.set_tokens(refresh="ref")
        client.refresh_token.return_value = ApiResponse(200, {"access": "new"})

        assert refresh_access(client) is True
        assert client.token_store.access == "new"

    def test_refresh_failure(self, client):
        client.token_store.set_tokens(refresh="ref")
        client.refresh_token.return_value = ApiResponse(401, {})

        assert refresh_access(client) is False
        assert client.token_store.access is None

    def test_logout_clears_both(self, client):
        client.token_store.set_tokens(access="acc", refresh="ref")

        logout(client.token_store)

        assert client.token_store.access is None
        assert client.token_store.refresh is None

    def test_current_username(self, client):
        client.current_user.return_value = ApiResponse(200, {"username": "asha", "email": "asha@example.com"})

        assert current_username(client) == "asha"

    def test_current_username_unavailable(self, client):
        client.current_user.return_value = ApiResponse(401, {})

        assert current_username(client) is None
