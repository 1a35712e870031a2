"""Shared fakes for the Gmail API."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Dict, List

import pytest

from models.email_message import EmailMessage
from models.email_thread import EmailThread
from models.label import Label
from utils.config import AppConfig, default_reply_body
from utils.errors import RemoteAPIError

RECEIVED = "from mx.example.com by mail.example.com; Fri, 03 May 2024 09:15:00 -0700"


def make_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        credentials_file=tmp_path / "credentials.json",
        token_file=tmp_path / "token.json",
        user_id="me",
        log_dir=tmp_path / "logs",
        log_level="INFO",
        label_name="AUTOMATED_REPLY",
        default_sender="anyone",
        reply_body=default_reply_body("Test"),
        min_interval=45,
        max_interval=120,
        on_error="halt",
    )


def make_message(
    message_id: str,
    thread_id: str,
    sender: str = "alice@example.com",
    to: str = "me@example.com",
    subject: str = "Hello",
    received: str | None = RECEIVED,
    label_ids: List[str] | None = None,
) -> EmailMessage:
    headers = {"from": sender, "to": to, "subject": subject}
    if received is not None:
        headers["received"] = received
    return EmailMessage(id=message_id, thread_id=thread_id, headers=headers, label_ids=list(label_ids or []))


class FakeMailbox:
    """In-memory stand-in for GmailService that records every write."""

    def __init__(self) -> None:
        self.labels: List[Label] = []
        self.threads: Dict[str, EmailThread] = {}
        self.queries: List[str] = []
        self.sent: List[Dict[str, str]] = []
        self.modified: List[tuple[str, List[str]]] = []
        self.label_lists = 0
        self.fail_on: Dict[str, Exception] = {}
        self.profile_email = "me@example.com"

    def add_thread(self, thread_id: str, *messages: EmailMessage) -> EmailThread:
        thread = EmailThread(id=thread_id, messages=list(messages))
        self.threads[thread_id] = thread
        return thread

    def _maybe_fail(self, action: str) -> None:
        if action in self.fail_on:
            raise self.fail_on[action]

    def get_profile_email(self) -> str:
        self._maybe_fail("get_profile_email")
        return self.profile_email

    def list_labels(self) -> List[Label]:
        self._maybe_fail("list_labels")
        self.label_lists += 1
        return list(self.labels)

    def create_label(self, name: str) -> Label:
        self._maybe_fail("create_label")
        label = Label(id=f"Label_{len(self.labels) + 1}", name=name)
        self.labels.append(label)
        return label

    def list_thread_ids(self, query: str) -> List[str]:
        self._maybe_fail("list_thread_ids")
        self.queries.append(query)
        return list(self.threads)

    def get_thread(self, thread_id: str) -> EmailThread:
        self._maybe_fail("get_thread")
        return copy.deepcopy(self.threads[thread_id])

    def send_message(self, raw: str, thread_id: str | None = None) -> str:
        self._maybe_fail("send_message")
        self.sent.append({"raw": raw, "threadId": thread_id})
        message_id = f"sent-{len(self.sent)}"
        if thread_id in self.threads:
            self.threads[thread_id].messages.append(
                make_message(message_id, thread_id, received=None, label_ids=["SENT"])
            )
        return message_id

    def apply_labels(self, message_id: str, labels_to_add: List[str]) -> Dict:
        self._maybe_fail("apply_labels")
        self.modified.append((message_id, list(labels_to_add)))
        for thread in self.threads.values():
            for message in thread.messages:
                if message.id == message_id:
                    message.label_ids.extend(labels_to_add)
        return {"id": message_id}


class FakeRequest:
    def __init__(self, response=None, error: Exception | None = None):
        self._response = response
        self._error = error

    def execute(self):
        if self._error is not None:
            raise self._error
        return self._response


class FakeResource:
    """Mimics chained googleapiclient resources such as users().threads().list(...).

    ``responses`` maps dotted method paths (``users.threads.list``) to a
    response dict, an exception to raise, or a callable taking the call's
    keyword arguments.
    """

    def __init__(self, responses: Dict[str, object], calls: List[tuple[str, dict]] | None = None, path=()):
        self._responses = responses
        self.calls = [] if calls is None else calls
        self._path = tuple(path)

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        path = self._path + (name,)
        key = ".".join(path)

        def method(**kwargs):
            if key not in self._responses:
                return FakeResource(self._responses, self.calls, path)
            self.calls.append((key, kwargs))
            response = self._responses[key]
            if isinstance(response, Exception):
                return FakeRequest(error=response)
            if callable(response):
                response = response(**kwargs)
            return FakeRequest(response)

        return method


@pytest.fixture
def mailbox() -> FakeMailbox:
    return FakeMailbox()


@pytest.fixture
def api_error():
    def _make(status: int | None = 500) -> RemoteAPIError:
        return RemoteAPIError("test call", "boom", status=status)

    return _make
