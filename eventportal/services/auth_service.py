"""Auth service: token login, staff sign-up, session verification and logout."""
import logging
from typing import Dict, Optional, Tuple

from eventportal.services.api_client import ApiClient, error_message, is_jwt_expired
from eventportal.services.token_store import TokenStore
from eventportal.utils.exceptions import AuthRejection
from eventportal.utils.validation import validate_signup

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed."
MISSING_CREDENTIALS = "Please enter your credentials."


def build_credentials(identifier: str, password: str, login_with: Optional[str] = None) -> Dict[str, str]:
    """
    Build the token request body.

    Args:
        identifier: Username or email address
        password: Password
        login_with: "username" or "email"; when None, an identifier
            containing "@" is treated as an email

    Returns:
        {"email": ..., "password": ...} or {"username": ..., "password": ...}
    """
    identifier = identifier.strip()
    if login_with is None:
        login_with = "email" if "@" in identifier else "username"
    if login_with not in ("username", "email"):
        raise ValueError(f"login_with must be 'username' or 'email', got: {login_with}")
    return {login_with: identifier, "password": password}


def login(client: ApiClient, identifier: str, password: str, login_with: Optional[str] = None) -> Dict[str, str]:
    """
    Exchange credentials for tokens and store them.

    Args:
        client: API client whose token store receives the tokens
        identifier: Username or email
        password: Password
        login_with: Force "username" or "email" (auto-detected when None)

    Returns:
        The token payload ({"access": ..., "refresh": ...})

    Raises:
        AuthRejection: If credentials are missing, refused, or the API is unreachable
    """
    if not identifier or not identifier.strip() or not password:
        raise AuthRejection(MISSING_CREDENTIALS)

    result = client.obtain_token(build_credentials(identifier, password, login_with))
    if not result.ok:
        logger.info("Login refused for %s (status %s)", identifier.strip(), result.status)
        raise AuthRejection(error_message(result, LOGIN_FAILED))

    tokens = result.data
    if not tokens.get("access"):
        raise AuthRejection(LOGIN_FAILED)

    client.token_store.set_from_payload(tokens)
    return tokens


def login_admin(client: ApiClient, identifier: str, password: str, login_with: Optional[str] = None) -> Tuple[bool, str]:
    """
    Log in a staff user.

    Returns:
        Tuple of (success: bool, message: str)
        - (True, "Login successful") on success
        - (False, reason) on failure
    """
    try:
        login(client, identifier, password, login_with)
    except AuthRejection as e:
        return False, str(e)
    return True, "Login successful"


def register_account(
    client: ApiClient,
    username: str,
    email: str,
    password: str,
    confirm: str,
    name: str = "",
) -> Tuple[bool, str, bool]:
    """
    Create a staff account.

    Returns:
        Tuple of (success, message, logged_in). `logged_in` is True when the
        API returned tokens and they were stored.
    """
    is_valid, message = validate_signup(username, email, password, confirm)
    if not is_valid:
        return False, message, False

    payload = {
        "username": username.strip(),
        "email": email.strip(),
        "password": password,
    }
    if name.strip():
        payload["name"] = name.strip()

    result = client.register_account(payload)
    if not result.ok:
        return False, error_message(result, "Registration failed."), False

    if client.token_store.set_from_payload(result.data):
        return True, "Registration successful.", True
    return True, "Registration successful. Please log in.", False


def is_authenticated(token_store: TokenStore) -> bool:
    """True when an unexpired access token is stored."""
    token = token_store.access
    return bool(token) and not is_jwt_expired(token)


def verify_session(client: ApiClient) -> bool:
    """
    Ask the API whether the stored access token is still valid.

    Behavior:
        - Returns False without a request when no token is stored
        - Clears both tokens when verification fails
    """
    token = client.token_store.access
    if not token:
        return False

    result = client.verify_token(token)
    if result.ok:
        return True

    logger.info("Stored access token failed verification (status %s)", result.status)
    client.token_store.clear()
    return False


def refresh_access(client: ApiClient) -> bool:
    """Swap the refresh token for a new access token; True on success."""
    refresh = client.token_store.refresh
    if not refresh:
        return False

    result = client.refresh_token(refresh)
    access = result.data.get("access") if result.ok else None
    if not access:
        return False

    client.token_store.set_tokens(access=access)
    return True


def logout(token_store: TokenStore) -> None:
    """Forget both tokens."""
    token_store.clear()


def current_username(client: ApiClient) -> Optional[str]:
    """Display name of the signed-in user, or None if the API will not say."""
    result = client.current_user()
    if not result.ok:
        return None
    data = result.data
    return data.get("username") or data.get("email") or None
