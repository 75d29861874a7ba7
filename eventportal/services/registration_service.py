"""Registration listing service for the admin registrations table."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from eventportal.models.registration import RegistrationRow
from eventportal.services.api_client import ApiClient, require_ok
from eventportal.utils.validation import normalize_text

logger = logging.getLogger(__name__)

ALL_SPECIALTIES = "All Specialties"
ALL_MEETINGS = "All Meetings"

SPECIALTIES = [
    ALL_SPECIALTIES,
    "Cardiology",
    "Neurology",
    "Pediatrics",
    "Oncology",
    "Dermatology",
    "Surgery",
    "Internal Medicine",
    "Emergency Medicine",
    "Radiology",
]


@dataclass
class RegistrationFilters:
    """Filters on the registrations page.

    `event_id`, `date_from` and `date_to` go to the API; `search` and
    `specialty` are applied to the fetched rows.
    """

    search: str = ""
    specialty: str = ALL_SPECIALTIES
    event_id: str = ALL_MEETINGS
    date_from: str = ""
    date_to: str = ""

    def server_params(self) -> Dict[str, str]:
        """Query parameters for GET /api/joins/."""
        params = {}
        if self.event_id and self.event_id != ALL_MEETINGS:
            params["event"] = self.event_id
        if self.date_from:
            params["date_from"] = self.date_from
        if self.date_to:
            params["date_to"] = self.date_to
        return params

    def fingerprint(self) -> tuple:
        return (self.search, self.specialty, self.event_id, self.date_from, self.date_to)


def fetch_registrations(client: ApiClient, params: Optional[Dict[str, Any]] = None) -> List[RegistrationRow]:
    """
    Fetch join rows from the API and map them for the table.

    Args:
        client: API client
        params: Server-side filters (event, date_from, date_to)

    Returns:
        Rows in server order

    Raises:
        ApiError: If the request fails
    """
    body = require_ok(client.list_joins(params), "Failed to fetch registrations")
    if isinstance(body, dict):
        items = body.get("results") or []
    else:
        items = body or []
    return [RegistrationRow.from_api(item) for item in items if isinstance(item, dict)]


def matches_search(row: RegistrationRow, term: str) -> bool:
    """Case-insensitive substring match over name, email, hospital, event title and code."""
    needle = normalize_text(term)
    if not needle:
        return True
    return any(needle in normalize_text(value) for value in row.searchable_fields())


def filter_registrations(
    rows: Iterable[RegistrationRow],
    search: str = "",
    specialty: str = ALL_SPECIALTIES,
) -> List[RegistrationRow]:
    """
    Apply the client-side search and specialty filters.

    Args:
        rows: Rows as returned by the server
        search: Free-text term ("" matches everything)
        specialty: Exact specialty, or ALL_SPECIALTIES to disable

    Returns:
        Matching rows, order preserved
    """
    return [
        row
        for row in rows
        if matches_search(row, search)
        and (not specialty or specialty == ALL_SPECIALTIES or row.speciality == specialty)
    ]


def delete_registration(client: ApiClient, registration_id: str) -> None:
    """
    Delete one join record.

    Raises:
        ApiError: If the API refuses
    """
    require_ok(client.delete_join(registration_id), "Error deleting registration")
    logger.info("Deleted registration %s", registration_id)
