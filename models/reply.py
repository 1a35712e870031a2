from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from utils.errors import AutoReplyError


@dataclass(slots=True)
class ReplyResult:
    """A thread that is (now) handled by the auto-responder."""

    thread_id: str
    sender_email: str
    received_time: str
    received_at: datetime | None = None
    replied: bool = False


@dataclass(slots=True)
class ScanResult:
    """Outcome of one pass over the mailbox."""

    sender_filter: str
    thread_ids: List[str] = field(default_factory=list)
    handled: List[ReplyResult] = field(default_factory=list)
    not_replied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: AutoReplyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def sent_count(self) -> int:
        return sum(1 for result in self.handled if result.replied)
