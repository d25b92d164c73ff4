"""Errors raised while ingesting provider payloads and loading state."""

from __future__ import annotations


class DailyParlayError(Exception):
    """Base error for parlay tracker operations."""


class MalformedPayloadError(DailyParlayError, ValueError):
    """Raised when a provider payload does not have the expected shape."""


class ScoreParseError(DailyParlayError, ValueError):
    """Raised when a final score cannot be read as an integer."""


class TiedScoreError(DailyParlayError, ValueError):
    """Raised when a completed game reports equal scores."""


class StateFileError(DailyParlayError):
    """Raised when the state file exists but cannot be read."""
