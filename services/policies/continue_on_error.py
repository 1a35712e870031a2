from __future__ import annotations

import logging

from models.reply import ScanResult

from .base import Decision, ScanPolicy

LOGGER = logging.getLogger(__name__)


class ContinueOnErrorPolicy(ScanPolicy):
    """Keep polling at the usual interval even when a scan fails."""

    def decide(self, result: ScanResult) -> Decision:
        if not result.ok:
            LOGGER.warning("Scan failed with %s; polling continues", result.error)
        return Decision.CONTINUE
