"""Exceptions shared by frigo services."""

from typing import Iterable, List, Optional


class FrigoError(Exception):
    """Base class for all frigo errors."""


class StoreError(FrigoError):
    """A document store read or write failed."""


class TelemetryError(FrigoError):
    """A telemetry provider could not be reached or returned an error."""


class ValidationError(FrigoError):
    """An entity failed validation. Carries every message, not only the first."""

    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class DuplicateError(ValidationError):
    """A uniqueness check failed before a write."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__([message])
