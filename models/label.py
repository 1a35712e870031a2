from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Label:
    """A Gmail label as returned by users.labels."""

    id: str
    name: str

    def matches(self, name: str) -> bool:
        # Gmail treats label names case-insensitively
        return self.name.lower() == name.lower()
