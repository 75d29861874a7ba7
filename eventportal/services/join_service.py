"""
Registration and join flow for the public event page.

The API decides whether a join is allowed; this module only interprets the
`{status, body}` it gets back and turns it into one of a handful of outcomes:

- SUCCESS: body.ok is true and a link came back -> open the meeting
- ACCOUNT_EXISTS: 409 or body.reason == "account_exists" -> ask to log in
- REJECTED: any other 4xx (usually outside the join window) -> inline notice
- ERROR: 5xx, network failure or anything unexpected -> error notice
- REFUSED: consent boxes not ticked; nothing was sent
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from eventportal.models.registration import RegistrationForm
from eventportal.services.api_client import ApiClient, ApiResult
from eventportal.services.auth_service import login
from eventportal.utils.notices import NoticeBoard

logger = logging.getLogger(__name__)

SUCCESS = "success"
ACCOUNT_EXISTS = "account_exists"
REJECTED = "rejected"
ERROR = "error"
REFUSED = "refused"

JOINING_MESSAGE = "Joining now…"
ACCOUNT_EXISTS_MESSAGE = "Account exists. Please login to continue."
WINDOW_MESSAGE = "You can join from 15 minutes before the start time until the event ends."
REGISTRATION_ERROR_MESSAGE = "Error during registration."
JOIN_ERROR_MESSAGE = "Unable to join right now."
CONSENT_MESSAGE = "Please accept both consent statements to continue."


@dataclass(frozen=True)
class JoinOutcome:
    """Result of a join attempt."""

    kind: str
    message: str = ""
    link: Optional[str] = None
    status: int = 0

    @property
    def joined(self) -> bool:
        return self.kind == SUCCESS


def classify_join_response(result: ApiResult, error_fallback: str = REGISTRATION_ERROR_MESSAGE) -> JoinOutcome:
    """
    Map a register/join result onto a JoinOutcome. First match wins.

    Args:
        result: Normalized API result (response of any status, or network failure)
        error_fallback: Message for ERROR when the body carries none

    Returns:
        JoinOutcome
    """
    status = result.status
    data = result.data
    message = data.get("message") if isinstance(data.get("message"), str) else ""

    if data.get("ok") is True and data.get("link"):
        return JoinOutcome(SUCCESS, JOINING_MESSAGE, link=data["link"], status=status)

    if status == 409 or data.get("reason") == "account_exists":
        return JoinOutcome(ACCOUNT_EXISTS, ACCOUNT_EXISTS_MESSAGE, status=status)

    if 400 <= status < 500:
        return JoinOutcome(REJECTED, message or WINDOW_MESSAGE, status=status)

    return JoinOutcome(ERROR, message or error_fallback, status=status)


class JoinFlow:
    """
    Runs the register-and-join and login-and-join sequences.

    Args:
        client: API client (its token store receives any returned tokens)
        notices: Board that receives the transient notice for each outcome
        open_link: Called with the meeting URL on success
    """

    def __init__(self, client: ApiClient, notices: NoticeBoard, open_link: Callable[[str], None]):
        self.client = client
        self.notices = notices
        self.open_link = open_link
        self.inline_notice = ""

    def register_and_join(self, code: str, form: RegistrationForm) -> JoinOutcome:
        """
        Register the attendee and join the meeting in one call.

        Nothing is sent unless both consents are given.

        Returns:
            JoinOutcome describing what happened
        """
        self.inline_notice = ""

        if not form.has_consent():
            logger.info("Join for %s refused locally: consent missing", code)
            self.notices.push("info", CONSENT_MESSAGE)
            return JoinOutcome(REFUSED, CONSENT_MESSAGE)

        result = self.client.register_and_join(code, form.to_payload())

        tokens = result.data.get("tokens")
        if isinstance(tokens, dict) and self.client.token_store.set_from_payload(tokens):
            logger.info("Stored session tokens returned by registration for %s", code)

        outcome = classify_join_response(result)
        logger.info("Register-and-join for %s -> %s (status %s)", code, outcome.kind, outcome.status)

        if outcome.kind == SUCCESS:
            self.notices.push("success", outcome.message)
            self.open_link(outcome.link)
        elif outcome.kind == ACCOUNT_EXISTS:
            self.notices.push("info", outcome.message)
        elif outcome.kind == REJECTED:
            self.inline_notice = outcome.message
            self.notices.push("info", outcome.message)
        else:
            self.notices.push("error", outcome.message)

        return outcome

    def login_and_join(self, code: str, identifier: str, password: str) -> JoinOutcome:
        """
        Log in, then join without re-registering.

        Only the login can fail hard: a refused or failed join after a
        successful login is reported as an informational notice.

        Raises:
            AuthRejection: If the credentials are refused
        """
        self.inline_notice = ""

        login(self.client, identifier, password)

        result = self.client.join(code)
        outcome = classify_join_response(result, error_fallback=JOIN_ERROR_MESSAGE)
        logger.info("Login-and-join for %s -> %s (status %s)", code, outcome.kind, outcome.status)

        if outcome.kind == SUCCESS:
            self.notices.push("success", outcome.message)
            self.open_link(outcome.link)
        else:
            if outcome.kind == REJECTED:
                self.inline_notice = outcome.message
            self.notices.push("info", outcome.message)

        return outcome
