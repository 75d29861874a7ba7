"""Meeting management service: event and expert CRUD for staff."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from eventportal.models.event import Event
from eventportal.services.api_client import ApiClient, error_message, require_ok
from eventportal.utils.exceptions import ApiError, ValidationRefused
from eventportal.utils.time_utils import parse_iso
from eventportal.utils.validation import hex_to_int, validate_event

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#2563eb"


@dataclass
class ExpertDraft:
    """Expert row typed into the meeting form."""

    name: str
    role: str = ""
    description: str = ""
    order: Optional[int] = None
    photo: Optional[tuple] = None  # (filename, bytes)


def _as_list(body: Any) -> List[Dict[str, Any]]:
    """Accept either a bare list or a paginated {"results": [...]} body."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        return list(body.get("results") or [])
    return []


def _parse_events(body: Any) -> List[Event]:
    events = []
    for item in _as_list(body):
        if not isinstance(item, dict):
            continue
        try:
            events.append(Event.from_dict(item))
        except ValueError as e:
            logger.warning("Skipping malformed event %r: %s", item.get("code"), e)
    return events


def get_event(client: ApiClient, code: str) -> Event:
    """
    Fetch one event for the public page.

    Raises:
        ApiError: If the event cannot be loaded ("Event not found." by default)
    """
    result = client.get_event(code)
    if not result.ok:
        raise ApiError(error_message(result, "Event not found."), status=result.status or None)
    return Event.from_dict(result.data)


def list_events(client: ApiClient) -> List[Event]:
    """
    Fetch all events, skipping rows that fail to parse.

    Raises:
        ApiError: If the list request fails
    """
    return _parse_events(require_ok(client.list_events(), "Failed to fetch meetings"))


def build_event_payload(form: Dict[str, Any], creating: bool) -> Dict[str, Any]:
    """
    Turn the meeting form into the API payload.

    Args:
        form: code, title, description, link, start_at, end_at, color_hex
        creating: The event code is only sent (and required) when creating

    Returns:
        JSON payload with ISO 8601 timestamps and an integer colour

    Raises:
        ValidationRefused: If the form is invalid
    """
    try:
        validate_event(form, creating=creating)
    except ValueError as e:
        raise ValidationRefused(str(e)) from e

    color_hex = form.get("color_hex") or DEFAULT_COLOR
    payload = {
        "title": (form.get("title") or "").strip() or None,
        "description": (form.get("description") or "").strip(),
        "link": form["link"].strip(),
        "start_at": parse_iso(form["start_at"]).isoformat(),
        "end_at": parse_iso(form["end_at"]).isoformat(),
        "color": hex_to_int(color_hex),
        "color_hex": color_hex,
    }
    if creating:
        payload["code"] = form["code"].strip()
    return payload


def save_event(
    client: ApiClient,
    form: Dict[str, Any],
    existing_code: Optional[str] = None,
    banner: Optional[tuple] = None,
    experts: Optional[List[ExpertDraft]] = None,
) -> Event:
    """
    Create or update a meeting, then upload its banner and add experts.

    Args:
        client: API client
        form: Meeting form values
        existing_code: Code of the event being edited (None to create)
        banner: Optional (filename, bytes) banner image
        experts: Expert rows to create; blank names are skipped

    Returns:
        The saved Event

    Raises:
        ValidationRefused: If the form is invalid
        ApiError: If any API call fails
    """
    creating = existing_code is None
    payload = build_event_payload(form, creating=creating)

    if creating:
        body = require_ok(client.create_event(payload), "Error creating meeting")
    else:
        body = require_ok(client.update_event(existing_code, payload), "Error updating meeting")
    event = Event.from_dict(body)

    if banner:
        filename, content = banner
        require_ok(client.upload_banner(event.code, filename, content), "Error uploading banner")

    for index, draft in enumerate(experts or []):
        if not draft.name.strip():
            continue
        fields = {
            "event": event.id or "",
            "name": draft.name.strip(),
            "order": str(draft.order if isinstance(draft.order, int) else index),
        }
        if draft.role.strip():
            fields["role"] = draft.role.strip()
        if draft.description.strip():
            fields["description"] = draft.description.strip()
        require_ok(client.create_expert(fields, photo=draft.photo), f"Error adding expert {draft.name}")

    logger.info("%s meeting %s", "Created" if creating else "Updated", event.code)
    return event


def delete_event(client: ApiClient, code: str) -> None:
    """
    Delete a meeting by code.

    Raises:
        ApiError: If the API refuses
    """
    require_ok(client.delete_event(code), "Error deleting meeting")
    logger.info("Deleted meeting %s", code)


def delete_expert(client: ApiClient, expert_id: str) -> None:
    """Delete one expert from a meeting."""
    require_ok(client.delete_expert(expert_id), "Error deleting expert")


def update_expert(client: ApiClient, expert_id: str, role: str, description: str, order: int) -> None:
    """
    Edit an existing expert's role, description and display order.

    Raises:
        ApiError: If the API refuses
    """
    payload = {
        "role": role.strip() or None,
        "description": description.strip(),
        "order": int(order),
    }
    require_ok(client.update_expert(expert_id, payload), "Error updating expert")


def upcoming_events(client: ApiClient, limit: int = 5) -> List[Event]:
    """
    Next meetings by start time, skipping rows that fail to parse.

    Raises:
        ApiError: If the request fails
    """
    return _parse_events(require_ok(client.upcoming_events(limit), "Failed to fetch upcoming meetings"))


def to_form(event: Event) -> Dict[str, Any]:
    """Pre-fill the meeting form from an existing event."""
    return {
        "code": event.code,
        "title": event.title or "",
        "description": event.description or "",
        "link": event.link,
        "start_at": parse_iso(event.start_at),
        "end_at": parse_iso(event.end_at),
        "color_hex": event.color_hex or DEFAULT_COLOR,
    }


def public_link(base_url: str, code: str) -> str:
    """Shareable registration page URL for an event."""
    return f"{base_url.rstrip('/')}/?code={code}"


def combine_local(date_value, time_value) -> datetime:
    """Combine date and time widget values into an aware datetime in local time."""
    return datetime.combine(date_value, time_value).astimezone()
