"""
HTTP client for the event API.

Every call returns either an `ApiResponse` (any HTTP status, with the decoded
body) or a `NetworkFailure`. HTTP error statuses are never raised, so callers
branch on one shape regardless of how the transport failed.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import jwt
import requests

from eventportal.config import get_settings
from eventportal.services.token_store import TokenStore, get_token_store
from eventportal.utils.exceptions import ApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """An HTTP response that arrived, whatever its status."""

    status: int
    body: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def data(self) -> Dict[str, Any]:
        """Body as a dict ({} when the body is a list, text or empty)."""
        return self.body if isinstance(self.body, dict) else {}


@dataclass(frozen=True)
class NetworkFailure:
    """No response arrived (connection refused, timeout, DNS, ...)."""

    reason: str
    status: int = 0
    body: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    @property
    def data(self) -> Dict[str, Any]:
        return {}


ApiResult = Union[ApiResponse, NetworkFailure]


def is_jwt_expired(token: str, now: Optional[float] = None) -> bool:
    """
    Check a JWT's `exp` claim without verifying its signature.

    Tokens that cannot be decoded or carry no `exp` count as expired.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return True

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return True
    current = time.time() if now is None else now
    return current >= exp


def error_message(result: ApiResult, fallback: str) -> str:
    """Pick the most useful error text out of an API result."""
    if isinstance(result, NetworkFailure):
        return fallback

    data = result.data
    for key in ("message", "detail", "error"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    non_field = data.get("non_field_errors")
    if isinstance(non_field, list) and non_field:
        return str(non_field[0])
    return fallback


def require_ok(result: ApiResult, fallback: str) -> Any:
    """
    Return the body of a successful result.

    Raises:
        ApiError: If the result is a network failure or a non-2xx response
    """
    if result.ok:
        return result.body
    raise ApiError(error_message(result, fallback), status=result.status or None)


def _event_path(code: str, suffix: str = "") -> str:
    return f"/api/events/{quote(code, safe='')}/{suffix}"


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    cleaned = {k: v for k, v in params.items() if v not in (None, "")}
    return cleaned or None


class ApiClient:
    """
    Thin wrapper around `requests.Session` for the event API.

    Usage:
        client = ApiClient("http://127.0.0.1:8000", token_store)
        result = client.get_event("HF2025")
        if result.ok:
            event = Event.from_dict(result.data)
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #
    def _auth_headers(self) -> Dict[str, str]:
        token = self.token_store.access
        if not token:
            return {}
        if is_jwt_expired(token):
            # Stale tokens are dropped so anonymous reads still work.
            logger.info("Dropping expired access token")
            self.token_store.drop_access()
            return {}
        return {"Authorization": f"Bearer {token}"}

    def request(
        self,
        method: str,
        path: str,
        *,
        public: bool = False,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> ApiResult:
        """
        Send one request and normalize the outcome.

        Args:
            method: HTTP verb
            path: Path beginning with "/api/"
            public: If True, no Authorization header is attached
            json: JSON body
            params: Query parameters (None/"" values are dropped)
            data: Form fields (multipart together with `files`)
            files: Files for a multipart upload

        Returns:
            ApiResponse for any HTTP status, NetworkFailure if nothing arrived
        """
        headers = {"Accept": "application/json"}
        if not public:
            headers.update(self._auth_headers())

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=_clean_params(params),
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return NetworkFailure(reason=str(e))

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"detail": response.text}

        if response.status_code >= 500:
            logger.warning("%s %s returned %s", method, path, response.status_code)
        return ApiResponse(status=response.status_code, body=body)

    # ------------------------------------------------------------------ #
    # Public event endpoints
    # ------------------------------------------------------------------ #
    def get_event(self, code: str) -> ApiResult:
        return self.request("GET", _event_path(code), public=True)

    def register_and_join(self, code: str, payload: Dict[str, Any]) -> ApiResult:
        return self.request("POST", _event_path(code, "register/"), public=True, json=payload)

    def join(self, code: str) -> ApiResult:
        return self.request("POST", _event_path(code, "join/"), json={})

    def upcoming_events(self, limit: Optional[int] = None) -> ApiResult:
        return self.request("GET", "/api/events/upcoming/", public=True, params={"limit": limit})

    # ------------------------------------------------------------------ #
    # Auth
    # ------------------------------------------------------------------ #
    def obtain_token(self, credentials: Dict[str, str]) -> ApiResult:
        return self.request("POST", "/api/auth/token/", public=True, json=credentials)

    def refresh_token(self, refresh: str) -> ApiResult:
        return self.request("POST", "/api/auth/token/refresh/", public=True, json={"refresh": refresh})

    def verify_token(self, token: str) -> ApiResult:
        return self.request("POST", "/api/auth/token/verify/", public=True, json={"token": token})

    def register_account(self, payload: Dict[str, str]) -> ApiResult:
        return self.request("POST", "/api/auth/register/", public=True, json=payload)

    def current_user(self) -> ApiResult:
        return self.request("GET", "/api/auth/me/")

    # ------------------------------------------------------------------ #
    # Admin: events and experts
    # ------------------------------------------------------------------ #
    def list_events(self, params: Optional[Dict[str, Any]] = None) -> ApiResult:
        return self.request("GET", "/api/events/", public=True, params=params)

    def create_event(self, payload: Dict[str, Any]) -> ApiResult:
        return self.request("POST", "/api/events/", json=payload)

    def update_event(self, code: str, payload: Dict[str, Any]) -> ApiResult:
        return self.request("PATCH", _event_path(code), json=payload)

    def delete_event(self, code: str) -> ApiResult:
        return self.request("DELETE", _event_path(code))

    def upload_banner(self, code: str, filename: str, content: bytes) -> ApiResult:
        return self.request("PATCH", _event_path(code), files={"banner": (filename, content)})

    def event_analytics(self, code: str) -> ApiResult:
        return self.request("GET", _event_path(code, "analytics/"))

    def create_expert(self, fields: Dict[str, Any], photo: Optional[tuple] = None) -> ApiResult:
        files = {"photo": photo} if photo else None
        return self.request("POST", "/api/experts/", data=fields, files=files)

    def update_expert(self, expert_id: str, payload: Dict[str, Any]) -> ApiResult:
        return self.request("PATCH", f"/api/experts/{quote(str(expert_id), safe='')}/", json=payload)

    def delete_expert(self, expert_id: str) -> ApiResult:
        return self.request("DELETE", f"/api/experts/{quote(str(expert_id), safe='')}/")

    # ------------------------------------------------------------------ #
    # Admin: registrations and analytics
    # ------------------------------------------------------------------ #
    def list_joins(self, params: Optional[Dict[str, Any]] = None) -> ApiResult:
        return self.request("GET", "/api/joins/", params=params)

    def delete_join(self, join_id: str) -> ApiResult:
        return self.request("DELETE", f"/api/joins/{quote(str(join_id), safe='')}/")

    def dashboard_metrics(self) -> ApiResult:
        return self.request("GET", "/api/analytics/dashboard/")

    def non_staff_users(self) -> ApiResult:
        return self.request("GET", "/api/user-non-staff/")


def get_api_client(token_store: Optional[TokenStore] = None) -> ApiClient:
    """Build a client from settings and the configured token store."""
    settings = get_settings()
    return ApiClient(
        settings.api_url,
        token_store or get_token_store(),
        timeout=settings.request_timeout,
    )
