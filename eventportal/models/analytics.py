"""Analytics data models for the admin dashboard and event analytics page."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

LOG_STATUSES = ("SUCCESS", "REFUSED", "ERROR")


def _series(data: Optional[Dict[str, Any]], key: str = "counts") -> Tuple[List[str], List[int]]:
    """Split a {labels: [...], counts: [...]} block into two aligned lists."""
    data = data or {}
    labels = [str(label) for label in data.get("labels") or []]
    values = list(data.get(key) or [])
    counts = [int(values[i]) if i < len(values) and values[i] is not None else 0 for i in range(len(labels))]
    return labels, counts


@dataclass
class DashboardMetrics:
    """Headline numbers and series for the admin dashboard."""

    total_registrations: int = 0
    upcoming_meetings: int = 0
    registrations_last_7_days: int = 0
    reports_last_month: int = 0
    daily_labels: List[str] = field(default_factory=list)
    daily_counts: List[int] = field(default_factory=list)
    speciality_labels: List[str] = field(default_factory=list)
    speciality_counts: List[int] = field(default_factory=list)
    users_total: int = 0
    users_last_7_days: int = 0
    users_last_30_days: int = 0
    joins_total: int = 0
    joins_last_7_days: int = 0
    joins_last_30_days: int = 0
    live_now: int = 0

    @classmethod
    def from_api(cls, dashboard: Dict[str, Any], non_staff: Optional[Dict[str, Any]] = None) -> "DashboardMetrics":
        cards = dashboard.get("cards") or {}
        daily_labels, daily_counts = _series(dashboard.get("daily"))
        spec_labels, spec_counts = _series(dashboard.get("speciality"))

        non_staff = non_staff or {}
        users = non_staff.get("users") or {}
        joins = non_staff.get("joins") or {}
        events = non_staff.get("events") or {}

        return cls(
            total_registrations=int(cards.get("total_registrations") or 0),
            upcoming_meetings=int(cards.get("upcoming_meetings") or 0),
            registrations_last_7_days=int(cards.get("registrations_last_7_days") or 0),
            reports_last_month=int(cards.get("reports_last_month") or 0),
            daily_labels=daily_labels,
            daily_counts=daily_counts,
            speciality_labels=spec_labels,
            speciality_counts=spec_counts,
            users_total=int(users.get("count_total") or 0),
            users_last_7_days=int(users.get("last_7_days") or 0),
            users_last_30_days=int(users.get("last_30_days") or 0),
            joins_total=int(joins.get("total") or 0),
            joins_last_7_days=int(joins.get("last_7_days") or 0),
            joins_last_30_days=int(joins.get("last_30_days") or 0),
            live_now=int(events.get("live_now") or 0),
        )


@dataclass
class AttemptLog:
    """One recorded join attempt."""

    id: str
    status: str
    message: str
    occurred_at: str
    user: Optional[int] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AttemptLog":
        return cls(
            id=str(data.get("id", "")),
            status=str(data.get("status") or "").upper(),
            message=data.get("message") or "",
            occurred_at=data.get("occurred_at") or "",
            user=data.get("user"),
            ip=data.get("ip"),
            user_agent=data.get("user_agent"),
        )


@dataclass
class EventAnalytics:
    """Per-event registration and join-attempt statistics."""

    event: Dict[str, Any]
    registrations_total: int = 0
    attempts_total: int = 0
    attempts_success: int = 0
    attempts_refused: int = 0
    attempts_error: int = 0
    daily_labels: List[str] = field(default_factory=list)
    daily_success: List[int] = field(default_factory=list)
    daily_refused: List[int] = field(default_factory=list)
    daily_error: List[int] = field(default_factory=list)
    speciality: List[Tuple[str, int]] = field(default_factory=list)
    hospitals_top10: List[Tuple[str, int]] = field(default_factory=list)
    recent_logs: List[AttemptLog] = field(default_factory=list)

    @property
    def event_code(self) -> str:
        return self.event.get("code") or ""

    def success_rate(self) -> int:
        """Successful attempts as a rounded percentage (0 with no attempts)."""
        if self.attempts_total <= 0:
            return 0
        return round(self.attempts_success / self.attempts_total * 100)

    def success_trend(self) -> Tuple[int, bool]:
        """
        Compare the last three days of successful joins with the three before.

        Returns:
            Tuple of (absolute percentage change, is_positive). (0, True) when
            there are fewer than six days or the earlier average is zero.
        """
        if len(self.daily_success) < 6:
            return 0, True

        recent = self.daily_success[-3:]
        previous = self.daily_success[-6:-3]
        recent_avg = sum(recent) / len(recent)
        previous_avg = sum(previous) / len(previous)
        if previous_avg == 0:
            return 0, True

        trend = round((recent_avg - previous_avg) / previous_avg * 100)
        return abs(trend), trend >= 0

    def logs_with_status(self, status: Optional[str] = None) -> List[AttemptLog]:
        """Recent logs, optionally restricted to one status."""
        if not status:
            return list(self.recent_logs)
        if status not in LOG_STATUSES:
            raise ValueError(f"Status must be one of {LOG_STATUSES}, got: {status}")
        return [log for log in self.recent_logs if log.status == status]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "EventAnalytics":
        attempts = data.get("attempts") or {}
        daily = data.get("daily") or {}
        labels = [str(label) for label in daily.get("labels") or []]

        def _aligned(key: str) -> List[int]:
            values = list(daily.get(key) or [])
            return [int(values[i] or 0) if i < len(values) else 0 for i in range(len(labels))]

        return cls(
            event=data.get("event") or {},
            registrations_total=int((data.get("registrations") or {}).get("total") or 0),
            attempts_total=int(attempts.get("total") or 0),
            attempts_success=int(attempts.get("success") or 0),
            attempts_refused=int(attempts.get("refused") or 0),
            attempts_error=int(attempts.get("error") or 0),
            daily_labels=labels,
            daily_success=_aligned("success"),
            daily_refused=_aligned("refused"),
            daily_error=_aligned("error"),
            speciality=[
                (item.get("speciality") or "Unknown", int(item.get("count") or 0))
                for item in data.get("speciality") or []
            ],
            hospitals_top10=[
                (item.get("hospital") or "Unknown", int(item.get("count") or 0))
                for item in data.get("hospitals_top10") or []
            ],
            recent_logs=[AttemptLog.from_api(item) for item in data.get("recent_logs") or []],
        )
