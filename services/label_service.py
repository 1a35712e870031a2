from __future__ import annotations

import logging

from models.label import Label
from services.gmail_service import GmailService
from utils.config import DEFAULT_LABEL_NAME
from utils.errors import RemoteAPIError

LOGGER = logging.getLogger(__name__)
CONFLICT = 409


class LabelService:
    """Lookup-or-create for the marker label that records an auto-reply."""

    def __init__(self, gmail: GmailService, label_name: str = DEFAULT_LABEL_NAME):
        self._gmail = gmail
        self._label_name = label_name

    @property
    def label_name(self) -> str:
        return self._label_name

    def _find_existing(self) -> Label | None:
        for label in self._gmail.list_labels():
            if label.matches(self._label_name):
                return label
        return None

    def ensure_label(self) -> Label:
        """Return the marker label, creating it when the mailbox has none.

        Labels are listed on every call, so a label that was renamed or
        deleted between scans is picked up again.
        """

        label = self._find_existing()
        if label is not None:
            LOGGER.debug("Label %s already exists as %s", self._label_name, label.id)
        else:
            try:
                label = self._gmail.create_label(self._label_name)
            except RemoteAPIError as exc:
                if exc.status != CONFLICT:
                    raise
                # someone else created it between our list and create calls
                label = self._find_existing()
                if label is None:
                    raise
                LOGGER.info("Label %s was created concurrently, reusing %s", self._label_name, label.id)

        return label
