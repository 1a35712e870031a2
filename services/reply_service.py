from __future__ import annotations

import base64
import logging

from models.email_message import EmailMessage
from models.label import Label
from models.reply import ReplyResult
from services.gmail_service import GmailService
from utils.errors import DataShapeError

LOGGER = logging.getLogger(__name__)


def compose_reply(original: EmailMessage, body: str) -> str:
    """Build the raw RFC 5322 text of the auto-reply.

    From and To are copied from the original message as they are, not
    swapped; Gmail sends from the authenticated account regardless.
    """

    headers = {
        "From": original.sender or "",
        "To": original.recipient,
        "Subject": original.subject,
    }
    head = "\r\n".join(f"{name}: {value}" for name, value in headers.items())
    return f"{head}\r\n\r\n{body}"


def encode_raw(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


class ReplyService:
    """Reply once to threads nobody has answered, then mark them."""

    def __init__(self, gmail: GmailService, reply_body: str):
        self._gmail = gmail
        self._reply_body = reply_body

    def process_thread(self, thread_id: str, label: Label) -> ReplyResult | None:
        """Auto-reply to ``thread_id`` if it has no replies yet.

        Returns a :class:`ReplyResult` when the thread is handled (replied to
        now, or labelled by an earlier run) and ``None`` when somebody else
        already answered it. Raises :class:`DataShapeError` before sending
        anything if the original message lacks a sender or Received header.
        """

        thread = self._gmail.get_thread(thread_id)
        original = thread.original
        sender = original.sender
        if not sender:
            raise DataShapeError(f"Original message {original.id} of thread {thread_id} has no From header")
        received_time = original.received_time

        replies = thread.replies
        labelled = original.has_label(label.id)
        replied = False

        if not replies:
            raw = compose_reply(original, self._reply_body)
            self._gmail.send_message(encode_raw(raw), thread_id=thread_id)
            self._gmail.apply_labels(original.id, [label.id])
            labelled = True
            replied = True
            LOGGER.debug("Sent auto-reply to %s in thread %s", sender, thread_id)

        if not replies or labelled:
            return ReplyResult(
                thread_id=thread_id,
                sender_email=sender,
                received_time=received_time,
                received_at=original.received_at,
                replied=replied,
            )

        LOGGER.debug("Thread %s already has %s reply(ies); leaving it alone", thread_id, len(replies))
        return None
