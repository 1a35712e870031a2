from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from utils.config import ANYONE


def is_anyone(sender_filter: str | None) -> bool:
    return not sender_filter or sender_filter.strip().lower() == ANYONE


def start_of_day(now: datetime) -> int:
    """Unix timestamp of 00:00:00 on the day of ``now``, in ``now``'s timezone.

    Naive datetimes are interpreted as local time.
    """

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())


@dataclass(slots=True, frozen=True)
class SearchQuery:
    """Which threads a scan should look at."""

    sender: str | None
    after: int

    @classmethod
    def for_day(cls, sender_filter: str | None, now: datetime) -> "SearchQuery":
        sender = None if is_anyone(sender_filter) else sender_filter.strip()
        return cls(sender=sender, after=start_of_day(now))

    def to_gmail_query(self) -> str:
        parts = []
        if self.sender:
            parts.append(f"from:{self.sender}")
        parts.append(f"after:{self.after}")
        return " ".join(parts)
