from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import httplib2
from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError, RefreshError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from models.email_message import EmailMessage
from models.email_thread import EmailThread
from models.label import Label
from utils.errors import AuthenticationError, DataShapeError, RemoteAPIError

LOGGER = logging.getLogger(__name__)


class GmailService:
    """Wrapper around the Gmail API for the operations we need.

    Every call goes through :meth:`_execute`, so callers only ever see
    :class:`RemoteAPIError` for transport or API failures, or
    :class:`AuthenticationError` when a token refresh is rejected. Responses
    are parsed into model objects before they leave this class.
    """

    def __init__(self, client: Any, user_id: str = "me"):
        self._client = client
        self._user_id = user_id

    @classmethod
    def from_credentials(cls, credentials: Credentials, user_id: str = "me") -> "GmailService":
        client = build("gmail", "v1", credentials=credentials, cache_discovery=False)
        return cls(client, user_id)

    @property
    def user_id(self) -> str:
        return self._user_id

    def _execute(self, request: Any, action: str) -> Dict:
        try:
            return request.execute()
        except HttpError as exc:
            status = getattr(exc.resp, "status", None)
            LOGGER.debug("Gmail API error during %s: %s", action, exc)
            raise RemoteAPIError(action, str(exc), status=int(status) if status else None) from exc
        except RefreshError as exc:
            raise AuthenticationError(f"{action} failed: token was rejected: {exc}") from exc
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            raise RemoteAPIError(action, str(exc)) from exc

    def get_profile_email(self) -> str:
        response = self._execute(self._client.users().getProfile(userId=self.user_id), "get profile")
        if "emailAddress" not in response:
            raise DataShapeError("Profile response has no emailAddress")
        return response["emailAddress"]

    def list_labels(self) -> List[Label]:
        response = self._execute(self._client.users().labels().list(userId=self.user_id), "list labels")
        return [_parse_label(item) for item in response.get("labels", [])]

    def create_label(self, name: str) -> Label:
        body = {"name": name, "labelListVisibility": "labelShow", "messageListVisibility": "show"}
        response = self._execute(
            self._client.users().labels().create(userId=self.user_id, body=body),
            f"create label {name}",
        )
        label = _parse_label(response)
        LOGGER.info("Created label %s with id %s", label.name, label.id)
        return label

    def list_thread_ids(self, query: str) -> List[str]:
        thread_ids: List[str] = []
        page_token = None
        while True:
            params = {"userId": self.user_id, "q": query}
            if page_token:
                params["pageToken"] = page_token
            response = self._execute(self._client.users().threads().list(**params), "list threads")
            for item in response.get("threads", []):
                if "id" not in item:
                    raise DataShapeError("Thread listing entry has no id")
                thread_ids.append(item["id"])
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        LOGGER.debug("Query %r matched %s thread(s)", query, len(thread_ids))
        return thread_ids

    def get_thread(self, thread_id: str) -> EmailThread:
        response = self._execute(
            self._client.users().threads().get(userId=self.user_id, id=thread_id, format="metadata"),
            f"get thread {thread_id}",
        )
        return _parse_thread(response)

    def send_message(self, raw: str, thread_id: str | None = None) -> str:
        body: Dict[str, str] = {"raw": raw}
        if thread_id:
            body["threadId"] = thread_id
        response = self._execute(
            self._client.users().messages().send(userId=self.user_id, body=body),
            f"send message in thread {thread_id}",
        )
        LOGGER.debug("Sent message %s in thread %s", response.get("id"), thread_id)
        return response.get("id", "")

    def apply_labels(self, message_id: str, labels_to_add: Sequence[str]) -> Dict:
        if not labels_to_add:
            LOGGER.debug("No labels supplied for message %s", message_id)
            return {}
        body = {"addLabelIds": list(labels_to_add)}
        response = self._execute(
            self._client.users().messages().modify(userId=self.user_id, id=message_id, body=body),
            f"label message {message_id}",
        )
        LOGGER.info("Applied labels %s to message %s", list(labels_to_add), message_id)
        return response


def _parse_label(data: Dict) -> Label:
    if "id" not in data or "name" not in data:
        raise DataShapeError(f"Label response is missing id or name: {data!r}")
    return Label(id=data["id"], name=data["name"])


def _parse_thread(data: Dict) -> EmailThread:
    if "id" not in data:
        raise DataShapeError("Thread response has no id")
    messages = [_parse_message(item) for item in data.get("messages", []) or []]
    return EmailThread(id=data["id"], messages=messages)


def _parse_message(data: Dict) -> EmailMessage:
    if "id" not in data:
        raise DataShapeError("Message in thread response has no id")
    payload = data.get("payload", {}) or {}
    return EmailMessage(
        id=data["id"],
        thread_id=data.get("threadId"),
        headers=_headers_to_dict(payload.get("headers", [])),
        label_ids=list(data.get("labelIds", []) or []),
    )


def _headers_to_dict(headers: Sequence[Dict[str, str]]) -> Dict[str, str]:
    mapped: Dict[str, str] = {}
    for header in headers:
        name = header.get("name", "").lower()
        if not name:
            continue
        mapped.setdefault(name, header.get("value", ""))
    return mapped

