"""Data validation utilities."""
import re
from typing import Any, Dict, Optional, Tuple

from eventportal.utils.time_utils import parse_iso

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MOBILE_PATTERN = re.compile(r"^\+?[0-9][0-9 \-]{6,18}[0-9]$")
HEX_COLOR_PATTERN = re.compile(r"^#?[0-9a-fA-F]{6}$")
EVENT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_event(event_data: Dict[str, Any], creating: bool = True) -> bool:
    """
    Validate a meeting form before it is sent to the API.

    Args:
        event_data: Dictionary with code, title, link, start_at, end_at, color_hex
        creating: If True, the event code is required

    Returns:
        True if valid

    Raises:
        ValueError: If validation fails with detailed message
    """
    if not isinstance(event_data, dict):
        raise ValueError("Event data must be a dictionary")

    code = (event_data.get("code") or "").strip()
    if creating:
        if not code:
            raise ValueError("Event code is required")
        if not EVENT_CODE_PATTERN.match(code):
            raise ValueError(f"Event code may only contain letters, digits, '-' and '_': {code}")

    link = (event_data.get("link") or "").strip()
    if not link:
        raise ValueError("Meeting link is required")
    if not (link.startswith("http://") or link.startswith("https://")):
        raise ValueError(f"Meeting link must start with http:// or https://: {link}")

    for field in ("start_at", "end_at"):
        if not event_data.get(field):
            raise ValueError(f"Missing required field: {field}")

    try:
        start_at = parse_iso(event_data["start_at"])
        end_at = parse_iso(event_data["end_at"])
    except ValueError as e:
        raise ValueError(f"Invalid date value: {e}") from e

    if start_at >= end_at:
        raise ValueError("Start time must be before end time")

    color_hex = event_data.get("color_hex")
    if color_hex:
        validate_hex_color(color_hex)

    return True


def validate_hex_color(color_hex: str) -> bool:
    """
    Validate a #RRGGBB colour string.

    Raises:
        ValueError: If the colour is malformed
    """
    if not isinstance(color_hex, str) or not HEX_COLOR_PATTERN.match(color_hex.strip()):
        raise ValueError(f"Colour must be in #RRGGBB format: {color_hex}")
    return True


def hex_to_int(color_hex: Optional[str]) -> Optional[int]:
    """Convert '#2563eb' to its integer value; None when not a valid colour."""
    if not color_hex:
        return None
    try:
        return int(color_hex.strip().lstrip("#"), 16)
    except ValueError:
        return None


def validate_name(name: str) -> Tuple[bool, str]:
    """
    Validate attendee name.

    Args:
        name: Name to validate

    Returns:
        Tuple of (is_valid: bool, error_message: str)
        - (True, "") if valid
        - (False, "Name is required") if empty
        - (False, "Name cannot exceed 100 characters") if too long
    """
    if not name or not name.strip():
        return False, "Name is required"
    if len(name.strip()) > 100:
        return False, "Name cannot exceed 100 characters"
    return True, ""


def validate_email(email: str) -> Tuple[bool, str]:
    """Validate an email address (shape only)."""
    if not email or not email.strip():
        return False, "Email is required"
    if not EMAIL_PATTERN.match(email.strip()):
        return False, "Enter a valid email address"
    return True, ""


def validate_mobile(mobile: str) -> Tuple[bool, str]:
    """Validate a mobile number: digits, optional leading '+', spaces or dashes."""
    if not mobile or not mobile.strip():
        return False, "Mobile number is required"
    if not MOBILE_PATTERN.match(mobile.strip()):
        return False, "Enter a valid mobile number"
    return True, ""


def validate_signup(username: str, email: str, password: str, confirm: str) -> Tuple[bool, str]:
    """
    Validate the staff sign-up form.

    Returns:
        Tuple of (is_valid: bool, error_message: str)
    """
    if not username or not email or not password:
        return False, "Please complete all required fields."
    if password != confirm:
        return False, "Passwords do not match."
    return True, ""


def normalize_text(value: Optional[str]) -> str:
    """
    Normalize text for case-insensitive matching.

    Behavior:
        - None becomes ""
        - Trims leading/trailing whitespace
        - Lowercases (casefold)
    """
    return (value or "").strip().casefold()
