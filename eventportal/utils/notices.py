"""Transient notices with an explicit expiry deadline."""
import time
from dataclasses import dataclass
from typing import Callable, Optional

NOTICE_LEVELS = ("success", "info", "error")


@dataclass(frozen=True)
class Notice:
    """A single user-facing message."""

    level: str
    message: str
    expires_at: float


class NoticeBoard:
    """
    Holds at most one notice and the deadline at which it disappears.

    Pushing a new notice replaces the previous one together with its
    deadline, so there is never more than one pending expiry.

    Usage:
        board = NoticeBoard(duration=4.2)
        board.push("success", "Joining now…")
        notice = board.current()   # None once 4.2s have passed
    """

    def __init__(self, duration: float = 4.2, clock: Callable[[], float] = time.monotonic):
        if duration <= 0:
            raise ValueError("Notice duration must be positive")
        self.duration = duration
        self._clock = clock
        self._notice: Optional[Notice] = None

    def push(self, level: str, message: str) -> Notice:
        """Show `message`, replacing any current notice."""
        if level not in NOTICE_LEVELS:
            raise ValueError(f"Notice level must be one of {NOTICE_LEVELS}, got: {level}")
        self._notice = Notice(level=level, message=message, expires_at=self._clock() + self.duration)
        return self._notice

    def current(self) -> Optional[Notice]:
        """Return the live notice, clearing it once its deadline has passed."""
        if self._notice is None:
            return None
        if self._clock() >= self._notice.expires_at:
            self._notice = None
            return None
        return self._notice

    def dismiss(self) -> None:
        """Drop the current notice and its deadline."""
        self._notice = None

    def remaining(self) -> float:
        """Seconds until the current notice expires (0 when none)."""
        notice = self.current()
        if notice is None:
            return 0.0
        return max(0.0, notice.expires_at - self._clock())
