from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from models.email_message import EmailMessage
from utils.errors import DataShapeError


@dataclass(slots=True)
class EmailThread:
    """A Gmail conversation; messages are in chronological order."""

    id: str
    messages: List[EmailMessage] = field(default_factory=list)

    @property
    def original(self) -> EmailMessage:
        if not self.messages:
            raise DataShapeError(f"Thread {self.id} has no messages")
        return self.messages[0]

    @property
    def replies(self) -> List[EmailMessage]:
        return self.messages[1:]
