from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List

from models.search_query import SearchQuery
from services.gmail_service import GmailService

LOGGER = logging.getLogger(__name__)


class ThreadScanner:
    """Find today's threads, optionally restricted to one sender."""

    def __init__(self, gmail: GmailService, clock: Callable[[], datetime] = datetime.now):
        self._gmail = gmail
        self._clock = clock

    def build_query(self, sender_filter: str | None) -> SearchQuery:
        return SearchQuery.for_day(sender_filter, self._clock())

    def scan(self, sender_filter: str | None) -> List[str]:
        query = self.build_query(sender_filter).to_gmail_query()
        LOGGER.debug("Listing threads with query %r", query)
        return self._gmail.list_thread_ids(query)
