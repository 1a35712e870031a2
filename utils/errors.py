from __future__ import annotations


class AutoReplyError(Exception):
    """Base class for every failure the auto-responder knows how to report."""


class AuthenticationError(AutoReplyError):
    """Credentials are missing, unreadable, or consent was denied."""


class RemoteAPIError(AutoReplyError):
    """A Gmail API call failed (network, quota, permission, bad response)."""

    def __init__(self, action: str, message: str, status: int | None = None):
        super().__init__(f"{action} failed: {message}")
        self.action = action
        self.status = status


class DataShapeError(AutoReplyError):
    """An API response lacks a field or header the reply logic needs."""
