"""Unit tests for the HTTP client wrapper."""
import time

import jwt
import pytest
import requests
from unittest.mock import MagicMock

from eventportal.services.api_client import (
    ApiClient,
    ApiResponse,
    NetworkFailure,
    error_message,
    is_jwt_expired,
    require_ok,
)
from eventportal.services.token_store import SessionTokenStore
from eventportal.utils.exceptions import ApiError

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


def make_token(exp_offset: float) -> str:
    return jwt.encode({"exp": int(time.time() + exp_offset), "user_id": 1}, SECRET, algorithm="HS256")


def make_response(status_code=200, body=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    if text is not None:
        response.content = text.encode()
        response.text = text
        response.json.side_effect = ValueError("not json")
    elif body is None:
        response.content = b""
        response.json.side_effect = ValueError("empty")
    else:
        response.content = b"{...}"
        response.json.return_value = body
    return response


@pytest.fixture
def store():
    return SessionTokenStore({})


@pytest.fixture
def session():
    mock_session = MagicMock(spec=requests.Session)
    mock_session.request.return_value = make_response(200, {"ok": True})
    return mock_session


@pytest.fixture
def client(store, session):
    return ApiClient("http://api.test/", store, timeout=5, session=session)


class TestRequest:
    """Test ApiClient.request normalization."""

    def test_success_response(self, client, session):
        result = client.get_event("HF2025")

        assert isinstance(result, ApiResponse)
        assert result.ok is True
        assert result.data == {"ok": True}
        args, kwargs = session.request.call_args
        assert args == ("GET", "http://api.test/api/events/HF2025/")
        assert kwargs["timeout"] == 5

    def test_http_error_status_is_returned_not_raised(self, client, session):
        session.request.return_value = make_response(403, {"message": "Too early"})

        result = client.join("HF2025")

        assert result.status == 403
        assert result.ok is False
        assert result.data["message"] == "Too early"

    def test_network_failure(self, client, session):
        session.request.side_effect = requests.ConnectionError("connection refused")

        result = client.get_event("HF2025")

        assert isinstance(result, NetworkFailure)
        assert result.ok is False
        assert result.status == 0
        assert result.data == {}
        assert "connection refused" in result.reason

    def test_timeout_is_network_failure(self, client, session):
        session.request.side_effect = requests.Timeout("timed out")

        assert isinstance(client.get_event("HF2025"), NetworkFailure)

    def test_non_json_body(self, client, session):
        session.request.return_value = make_response(502, text="Bad Gateway")

        result = client.get_event("HF2025")

        assert result.status == 502
        assert result.data == {"detail": "Bad Gateway"}

    def test_empty_body(self, client, session):
        session.request.return_value = make_response(204)

        result = client.delete_event("HF2025")

        assert result.ok is True
        assert result.body == {}

    def test_list_body_data_is_empty_dict(self, client, session):
        session.request.return_value = make_response(200, [{"code": "HF2025"}])

        result = client.list_events()

        assert result.body == [{"code": "HF2025"}]
        assert result.data == {}

    def test_code_is_url_quoted(self, client, session):
        client.get_event("HF 2025/x")

        assert session.request.call_args[0][1] == "http://api.test/api/events/HF%202025%2Fx/"

    def test_blank_params_dropped(self, client, session):
        client.list_joins({"event": "", "date_from": "2025-11-01", "date_to": None})

        assert session.request.call_args.kwargs["params"] == {"date_from": "2025-11-01"}

    def test_all_blank_params_become_none(self, client, session):
        client.list_joins({"event": ""})

        assert session.request.call_args.kwargs["params"] is None


class TestAuthorization:
    """Test bearer token handling."""

    def test_bearer_attached_when_not_public(self, client, session, store):
        token = make_token(3600)
        store.set_tokens(access=token)

        client.join("HF2025")

        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == f"Bearer {token}"

    def test_no_bearer_on_public_requests(self, client, session, store):
        store.set_tokens(access=make_token(3600))

        client.register_and_join("HF2025", {"name": "Asha"})

        assert "Authorization" not in session.request.call_args.kwargs["headers"]

    def test_no_bearer_without_token(self, client, session):
        client.list_joins()

        assert "Authorization" not in session.request.call_args.kwargs["headers"]

    def test_expired_token_dropped(self, client, session, store):
        store.set_tokens(access=make_token(-60), refresh="refresh-token")

        client.list_joins()

        assert "Authorization" not in session.request.call_args.kwargs["headers"]
        assert store.access is None
        assert store.refresh == "refresh-token"


class TestIsJwtExpired:
    """Test is_jwt_expired function."""

    def test_future_exp(self):
        assert is_jwt_expired(make_token(3600)) is False

    def test_past_exp(self):
        assert is_jwt_expired(make_token(-1)) is True

    def test_explicit_now(self):
        token = jwt.encode({"exp": 1000}, SECRET, algorithm="HS256")

        assert is_jwt_expired(token, now=999) is False
        assert is_jwt_expired(token, now=1000) is True

    def test_missing_exp(self):
        assert is_jwt_expired(jwt.encode({"user_id": 1}, SECRET, algorithm="HS256")) is True

    def test_garbage(self):
        assert is_jwt_expired("not-a-jwt") is True


class TestErrorMessage:
    """Test error_message and require_ok."""

    def test_message_preferred(self):
        result = ApiResponse(400, {"message": "Too early", "detail": "Other"})

        assert error_message(result, "fallback") == "Too early"

    def test_detail(self):
        assert error_message(ApiResponse(401, {"detail": "No active account"}), "fallback") == "No active account"

    def test_non_field_errors(self):
        result = ApiResponse(400, {"non_field_errors": ["Invalid credentials"]})

        assert error_message(result, "fallback") == "Invalid credentials"

    def test_fallback_on_empty_body(self):
        assert error_message(ApiResponse(500, {}), "fallback") == "fallback"

    def test_fallback_on_network_failure(self):
        assert error_message(NetworkFailure("down"), "fallback") == "fallback"

    def test_require_ok_returns_body(self):
        assert require_ok(ApiResponse(200, [1, 2]), "fallback") == [1, 2]

    def test_require_ok_raises(self):
        with pytest.raises(ApiError) as excinfo:
            require_ok(ApiResponse(404, {"detail": "Not found."}), "fallback")

        assert excinfo.value.message == "Not found."
        assert excinfo.value.status == 404

    def test_require_ok_network_failure_has_no_status(self):
        with pytest.raises(ApiError) as excinfo:
            require_ok(NetworkFailure("down"), "Failed to fetch")

        assert excinfo.value.status is None
        assert str(excinfo.value) == "Failed to fetch"
