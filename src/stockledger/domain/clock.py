"""Injectable clock so ledger entries carry a controllable logical date."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware time."""


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
