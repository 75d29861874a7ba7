"""Integration tests for the public register-and-join flow."""
import json
import time

import jwt
import pytest
import requests
from unittest.mock import MagicMock

from eventportal.models.registration import RegistrationForm
from eventportal.services.api_client import ApiClient
from eventportal.services.event_service import get_event
from eventportal.services.join_service import ACCOUNT_EXISTS, ERROR, REJECTED, SUCCESS, JoinFlow
from eventportal.services.token_store import FileTokenStore
from eventportal.utils.notices import NoticeBoard

LINK = "https://meet.example.com/hf2025"
SECRET = "test-secret-key-that-is-long-enough-for-hs256"


def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.content = json.dumps(body).encode()
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def token_file(tmp_path):
    return str(tmp_path / "tokens.json")


@pytest.fixture
def client(session, token_file):
    return ApiClient("http://api.test", FileTokenStore(token_file), session=session)


@pytest.fixture
def opened():
    return []


@pytest.fixture
def flow(client, opened):
    return JoinFlow(client, NoticeBoard(duration=4.2, clock=lambda: 0.0), opened.append)


@pytest.fixture
def form():
    return RegistrationForm(
        name="Asha Rao",
        mobile="9876543210",
        email="asha@example.com",
        hospital="St. Cardio Center",
        speciality="Cardiology",
        accept_policy=True,
        accept_recording=True,
    )


def test_event_page_then_successful_join(client, session, flow, form, opened, token_file):
    """Load the event, register, store tokens and open the meeting once."""
    session.request.side_effect = [
        _response(200, {
            "code": "HF2025",
            "link": LINK,
            "start_at": "2025-11-15T14:00:00Z",
            "end_at": "2025-11-15T15:00:00Z",
            "window_opens_at": "2025-11-15T13:45:00Z",
        }),
        _response(200, {"ok": True, "link": LINK, "tokens": {"access": "acc", "refresh": "ref"}}),
    ]

    event = get_event(client, "HF2025")
    outcome = flow.register_and_join(event.code, form)

    assert outcome.kind == SUCCESS
    assert opened == [LINK]

    method, url = session.request.call_args_list[1][0]
    assert method == "POST"
    assert url == "http://api.test/api/events/HF2025/register/"
    assert session.request.call_args_list[1].kwargs["json"]["hospital"] == "St. Cardio Center"

    reloaded = FileTokenStore(token_file)
    assert reloaded.access == "acc"
    assert reloaded.refresh == "ref"


def test_returning_attendee_is_told_to_sign_in(session, flow, form, opened):
    session.request.return_value = _response(409, {"reason": "account_exists"})

    outcome = flow.register_and_join("HF2025", form)

    assert outcome.kind == ACCOUNT_EXISTS
    assert opened == []


def test_too_early_then_sign_in_and_join(session, flow, form, opened):
    """A refused registration is followed by a sign-in join that succeeds."""
    access = jwt.encode({"exp": int(time.time()) + 600}, SECRET, algorithm="HS256")
    session.request.side_effect = [
        _response(403, {"message": "Too early. Join opens at 13:45."}),
        _response(200, {"access": access, "refresh": "ref"}),
        _response(200, {"ok": True, "link": LINK}),
    ]

    first = flow.register_and_join("HF2025", form)
    assert first.kind == REJECTED
    assert flow.inline_notice == "Too early. Join opens at 13:45."

    second = flow.login_and_join("HF2025", "asha@example.com", "secret")

    assert second.kind == SUCCESS
    assert opened == [LINK]
    join_call = session.request.call_args_list[2]
    assert join_call[0][1] == "http://api.test/api/events/HF2025/join/"
    assert join_call.kwargs["headers"]["Authorization"] == f"Bearer {access}"


def test_unreachable_api(session, flow, form, opened):
    session.request.side_effect = requests.ConnectionError("connection refused")

    outcome = flow.register_and_join("HF2025", form)

    assert outcome.kind == ERROR
    assert opened == []
