"""Event and expert data models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from eventportal.utils.time_utils import can_join, parse_iso, utc_now

DEFAULT_ACCENT = "#1e90ff"
ROLE_ORDER = ["Speaker", "Moderator", "Chairperson", "Chairpersons"]
DEFAULT_ROLE = "Experts"


@dataclass
class Expert:
    """Speaker, moderator or chair attached to one event."""

    name: str
    id: Optional[str] = None
    role: Optional[str] = None
    description: str = ""
    photo_url: Optional[str] = None
    order: int = 0

    def __post_init__(self):
        """Validate expert data after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Expert name cannot be empty")

    @property
    def initial(self) -> str:
        return self.name.strip()[:1].upper() or "E"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expert":
        order = data.get("order")
        return cls(
            id=None if data.get("id") is None else str(data["id"]),
            name=data.get("name") or "",
            role=data.get("role"),
            description=data.get("description") or "",
            photo_url=data.get("photo_url"),
            order=order if isinstance(order, int) else 0,
        )


def group_experts(experts: List[Expert]) -> List[Tuple[str, List[Expert]]]:
    """
    Group experts by role for display.

    Returns:
        List of (ROLE TITLE, experts) pairs. Known roles come first in
        ROLE_ORDER, the rest alphabetically; experts inside a group are
        sorted by (order, name). A missing role groups under "Experts".
    """
    groups: Dict[str, List[Expert]] = {}
    for expert in sorted(experts, key=lambda e: (e.order, e.name)):
        key = (expert.role or DEFAULT_ROLE).strip() or DEFAULT_ROLE
        groups.setdefault(key, []).append(expert)

    def _group_key(role: str) -> tuple:
        if role in ROLE_ORDER:
            return (0, ROLE_ORDER.index(role), "")
        return (1, 0, role)

    return [(role.upper(), groups[role]) for role in sorted(groups, key=_group_key)]


@dataclass
class Event:
    """A scheduled meeting with its join window."""

    code: str
    link: str
    start_at: str
    end_at: str
    window_opens_at: str
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    color: Optional[int] = None
    color_hex: Optional[str] = None
    banner_url: Optional[str] = None
    is_current: bool = False
    is_live_now: bool = False
    experts: List[Expert] = field(default_factory=list)

    def __post_init__(self):
        """Validate event data after initialization."""
        if not self.code or not self.code.strip():
            raise ValueError("Event code cannot be empty")

        for name in ("start_at", "end_at", "window_opens_at"):
            try:
                parse_iso(getattr(self, name))
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid {name}: {getattr(self, name)!r}") from e

    @property
    def display_title(self) -> str:
        return self.title or self.code

    @property
    def accent(self) -> str:
        """Accent colour for buttons and headings."""
        if self.color_hex:
            return self.color_hex
        if isinstance(self.color, int) and 0 <= self.color <= 0xFFFFFF:
            return f"#{self.color:06x}"
        return DEFAULT_ACCENT

    def can_join(self, now: Optional[datetime] = None) -> bool:
        """True while the join window is open (display hint only)."""
        return can_join(now or utc_now(), self.window_opens_at, self.end_at)

    def has_started(self, now: Optional[datetime] = None) -> bool:
        return parse_iso(now or utc_now()) >= parse_iso(self.start_at)

    def has_ended(self, now: Optional[datetime] = None) -> bool:
        return parse_iso(now or utc_now()) > parse_iso(self.end_at)

    def grouped_experts(self) -> List[Tuple[str, List[Expert]]]:
        return group_experts(self.experts)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Build an Event from the API's event DTO."""
        experts = [
            Expert.from_dict(item)
            for item in data.get("experts") or []
            if isinstance(item, dict) and (item.get("name") or "").strip()
        ]
        start_at = data.get("start_at") or ""
        return cls(
            id=None if data.get("id") is None else str(data["id"]),
            code=data.get("code") or "",
            title=data.get("title"),
            description=data.get("description"),
            link=data.get("link") or "",
            color=data.get("color"),
            color_hex=data.get("color_hex"),
            banner_url=data.get("banner_url"),
            start_at=start_at,
            end_at=data.get("end_at") or "",
            window_opens_at=data.get("window_opens_at") or start_at,
            is_current=bool(data.get("is_current")),
            is_live_now=bool(data.get("is_live_now")),
            experts=experts,
        )
