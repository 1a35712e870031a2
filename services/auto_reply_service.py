from __future__ import annotations

import logging

from models.reply import ScanResult
from models.search_query import is_anyone
from services.label_service import LabelService
from services.reply_service import ReplyService
from services.thread_scanner import ThreadScanner
from utils.errors import AutoReplyError, DataShapeError

LOGGER = logging.getLogger(__name__)


class AutoReplyService:
    """One scan: list today's threads and auto-reply where needed."""

    def __init__(self, scanner: ThreadScanner, labels: LabelService, replies: ReplyService):
        self._scanner = scanner
        self._labels = labels
        self._replies = replies

    def run_scan(self, sender_filter: str) -> ScanResult:
        LOGGER.info("Checking for %s", "incoming emails" if is_anyone(sender_filter) else sender_filter)
        result = ScanResult(sender_filter=sender_filter)

        try:
            result.thread_ids = self._scanner.scan(sender_filter)
            if not result.thread_ids:
                LOGGER.info("No threads found.")
                return result

            label = self._labels.ensure_label()
            for thread_id in result.thread_ids:
                try:
                    replied = self._replies.process_thread(thread_id, label)
                except DataShapeError as exc:
                    LOGGER.warning("Skipping thread %s: %s", thread_id, exc)
                    result.skipped.append(thread_id)
                    continue

                if replied is None:
                    result.not_replied.append(thread_id)
                    continue
                result.handled.append(replied)
                LOGGER.info(
                    "%s - %s - %s auto replied", thread_id, replied.sender_email, replied.received_time
                )
        except AutoReplyError as exc:
            LOGGER.exception("Scan for %s failed", sender_filter)
            result.error = exc

        return result
