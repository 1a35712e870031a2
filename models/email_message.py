from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Dict, List

from utils.errors import DataShapeError


@dataclass(slots=True)
class EmailMessage:
    """Simplified representation of a Gmail message.

    Header names are stored lower-cased. When Gmail reports the same header
    more than once, the first (topmost) value is kept, which for ``Received``
    is the hop closest to the mailbox.
    """

    id: str
    thread_id: str | None
    headers: Dict[str, str] = field(default_factory=dict)
    label_ids: List[str] = field(default_factory=list)

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def sender(self) -> str | None:
        return self.header("from")

    @property
    def recipient(self) -> str:
        return self.header("to", "")

    @property
    def subject(self) -> str:
        return self.header("subject", "")

    @property
    def received_time(self) -> str:
        """Timestamp portion of the Received header (after the first ';')."""

        received = self.header("received")
        if received is None:
            raise DataShapeError(f"Message {self.id} has no Received header")
        _, sep, timestamp = received.partition(";")
        if not sep:
            raise DataShapeError(f"Received header of message {self.id} has no timestamp: {received!r}")
        return timestamp.strip()

    @property
    def received_at(self) -> datetime | None:
        try:
            return parsedate_to_datetime(self.received_time)
        except (TypeError, ValueError):
            return None

    def has_label(self, label_id: str) -> bool:
        return label_id in self.label_ids
