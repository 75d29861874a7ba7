"""Integration tests for staff login, registration listing and export."""
import csv
import io
import json
import time

import jwt
import pytest
import requests
from unittest.mock import MagicMock

from eventportal.services.api_client import ApiClient
from eventportal.services.auth_service import is_authenticated, login_admin
from eventportal.services.export_service import REGISTRATION_COLUMNS, export_registrations
from eventportal.services.registration_service import (
    RegistrationFilters,
    fetch_registrations,
    filter_registrations,
)
from eventportal.services.token_store import SessionTokenStore
from eventportal.utils.listing import PageCursor, paginate

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.content = json.dumps(body).encode()
    response.json.return_value = body
    return response


def _join_row(row_id, first, email, hospital, speciality):
    return {
        "id": row_id,
        "user": {"first_name": first, "last_name": "", "email": email},
        "profile": {"phone": "9876543210", "hospital": hospital, "speciality": speciality},
        "event": 7,
        "event_code": "HF2025",
        "event_title": "Heart Failure Update",
        "joined_at": "2025-11-15T14:02:00Z",
    }


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ApiClient("http://api.test", SessionTokenStore({}), session=session)


def test_login_filter_and_export(client, session):
    access = jwt.encode({"exp": int(time.time()) + 600}, SECRET, algorithm="HS256")
    rows = [
        _join_row(1, "Asha", "asha@example.com", 'St. "Cardio", Center', "Cardiology"),
        _join_row(2, "Ravi", "ravi@example.com", "City Neuro", "Neurology"),
        _join_row(3, "Meena", "meena@example.com", "Cardio Plus", "Cardiology"),
    ]
    session.request.side_effect = [
        _response(200, {"access": access, "refresh": "ref"}),
        _response(200, {"results": rows}),
    ]

    assert login_admin(client, "admin", "secret") == (True, "Login successful")
    assert is_authenticated(client.token_store)

    filters = RegistrationFilters(search="cardio", event_id="7", date_from="2025-11-01")
    fetched = fetch_registrations(client, filters.server_params())
    visible = filter_registrations(fetched, filters.search, filters.specialty)

    list_call = session.request.call_args_list[1]
    assert list_call[0] == ("GET", "http://api.test/api/joins/")
    assert list_call.kwargs["params"] == {"event": "7", "date_from": "2025-11-01"}
    assert list_call.kwargs["headers"]["Authorization"] == f"Bearer {access}"
    assert [row.id for row in visible] == ["1", "3"]

    parsed = list(csv.reader(io.StringIO(export_registrations(visible, "csv"))))
    assert parsed[0] == REGISTRATION_COLUMNS
    assert parsed[1][3] == 'St. "Cardio", Center'
    assert len(parsed) == 3


def test_pagination_resets_when_filters_change(client, session):
    session.request.return_value = _response(
        200, [_join_row(i, f"User{i}", f"u{i}@example.com", "General", "Surgery") for i in range(25)]
    )
    fetched = fetch_registrations(client)
    cursor = PageCursor()

    cursor.sync("", "All Specialties", len(fetched))
    cursor.go_to(3, paginate(fetched, 1, 10).total_pages)
    last_page = paginate(fetched, cursor.page, 10)
    assert [row.id for row in last_page.items] == [str(i) for i in range(20, 25)]
    assert last_page.has_next is False

    narrowed = filter_registrations(fetched, search="user1")
    cursor.sync("user1", "All Specialties", len(narrowed))

    assert cursor.page == 1
    page = paginate(narrowed, cursor.page, 10)
    assert [row.id for row in page.items] == ["1"] + [str(i) for i in range(10, 19)]
    assert page.total_pages == 2
