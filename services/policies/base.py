from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from models.reply import ScanResult


class Decision(Enum):
    CONTINUE = "continue"
    HALT = "halt"


class ScanPolicy(ABC):
    """Strategy interface for what the scheduler does after a scan."""

    @abstractmethod
    def decide(self, result: ScanResult) -> Decision:
        """Return whether polling should continue after ``result``."""
        raise NotImplementedError
