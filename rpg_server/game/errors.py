"""Error taxonomy shared by the stores and the HTTP layer."""

from __future__ import annotations


class RpgError(Exception):
    pass


class NotFound(RpgError):
    """Lookup by id/username matched nothing."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class StorageFailure(RpgError):
    """Backend unavailable or write rejected. Never retried here."""
