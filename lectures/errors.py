# lectures/errors.py
from __future__ import annotations

from typing import List, Tuple


class LecturesError(Exception):
    """Base class for every error raised by this package."""


class UpstreamError(LecturesError):
    """One candidate endpoint failed; the next one may still work."""


class ContentError(UpstreamError):
    """Valid JSON, but nothing usable once normalized."""


class UpstreamUnavailable(LecturesError):
    """Every candidate endpoint failed."""

    def __init__(self, message: str, attempts: List[Tuple[str, str]] | None = None):
        super().__init__(message)
        self.message = message
        self.attempts = list(attempts or [])

    @property
    def last_error(self) -> str | None:
        return self.attempts[-1][1] if self.attempts else None


class StaleResultError(LecturesError):
    """The selection moved on while a fetch was in flight."""
