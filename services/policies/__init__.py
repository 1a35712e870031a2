"""Policies deciding whether polling goes on after a scan."""

from .base import Decision, ScanPolicy
from .continue_on_error import ContinueOnErrorPolicy
from .halt_on_error import HaltOnErrorPolicy

__all__ = [
    "Decision",
    "ScanPolicy",
    "HaltOnErrorPolicy",
    "ContinueOnErrorPolicy",
    "policy_for",
]


def policy_for(name: str) -> ScanPolicy:
    policies = {"halt": HaltOnErrorPolicy, "continue": ContinueOnErrorPolicy}
    try:
        return policies[name.lower()]()
    except KeyError as exc:
        raise ValueError(f"Unknown error policy {name!r}") from exc
