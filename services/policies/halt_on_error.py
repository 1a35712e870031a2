from __future__ import annotations

import logging

from models.reply import ScanResult

from .base import Decision, ScanPolicy

LOGGER = logging.getLogger(__name__)


class HaltOnErrorPolicy(ScanPolicy):
    """Stop polling as soon as a scan fails."""

    def decide(self, result: ScanResult) -> Decision:
        if result.ok:
            return Decision.CONTINUE
        LOGGER.error("Stopping: scan for %s failed with %s", result.sender_filter, result.error)
        return Decision.HALT
