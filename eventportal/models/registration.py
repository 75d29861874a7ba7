"""Registration form and admin registration row models."""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Tuple

from eventportal.utils.validation import validate_email, validate_mobile, validate_name

CONTACT_OPTIONS = ("Yes", "No")


@dataclass
class RegistrationForm:
    """Attendee details submitted from the public event page (never stored)."""

    name: str = ""
    mobile: str = ""
    email: str = ""
    hospital: str = ""
    speciality: str = ""
    accept_policy: bool = False
    accept_recording: bool = False
    contact_optin: str = "No"

    def __post_init__(self):
        """Validate form data after initialization."""
        if self.contact_optin not in CONTACT_OPTIONS:
            raise ValueError(f"contact_optin must be one of {CONTACT_OPTIONS}, got: {self.contact_optin}")

    def has_consent(self) -> bool:
        """Both mandatory consent boxes are ticked."""
        return self.accept_policy is True and self.accept_recording is True

    def field_errors(self) -> List[str]:
        """Messages for invalid contact fields (empty list when all valid)."""
        errors = []
        for check, value in (
            (validate_name, self.name),
            (validate_mobile, self.mobile),
            (validate_email, self.email),
        ):
            is_valid, message = check(value)
            if not is_valid:
                errors.append(message)
        return errors

    def to_payload(self) -> Dict[str, Any]:
        """Body for POST /api/events/{code}/register/."""
        payload = asdict(self)
        for key in ("name", "mobile", "email", "hospital", "speciality"):
            payload[key] = payload[key].strip()
        return payload


@dataclass
class RegistrationRow:
    """One attendee/event join as shown in the admin registrations table."""

    id: str
    name: str
    mobile: str
    email: str
    hospital: str
    speciality: str
    event_id: str
    event_code: str
    event_title: str
    timestamp: str

    def searchable_fields(self) -> Tuple[str, ...]:
        return (self.name, self.email, self.hospital, self.event_title, self.event_code)

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "RegistrationRow":
        """Map an API join row (user + profile + event) onto the table model."""
        user = row.get("user") or {}
        profile = row.get("profile") or {}

        first = (user.get("first_name") or "").strip()
        last = (user.get("last_name") or "").strip()
        full_name = " ".join(part for part in (first, last) if part)
        event_code = row.get("event_code") or ""

        return cls(
            id=str(row.get("id", "")),
            name=full_name or user.get("email") or "—",
            mobile=profile.get("phone") or "",
            email=user.get("email") or "",
            hospital=profile.get("hospital") or "",
            speciality=profile.get("speciality") or "",
            event_id=str(row.get("event") or ""),
            event_code=event_code,
            event_title=row.get("event_title") or event_code,
            timestamp=row.get("joined_at") or "",
        )
