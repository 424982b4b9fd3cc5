"""Error taxonomy and the deduplicating error log."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional


class MigrationError(Exception):
    """Base class for all migration errors."""


class DecodeError(MigrationError):
    """A legacy component's extra payload could not be decoded."""

    def __init__(self, message: str, field_key: Optional[str] = None, legacy_id: Optional[int] = None):
        self.field_key = field_key
        self.legacy_id = legacy_id
        if field_key is not None:
            message = f"Component {field_key} (cid {legacy_id}): {message}"
        super().__init__(message)


class MissingDataError(MigrationError):
    """Legacy data that should exist is absent."""


class ConnectivityError(MigrationError):
    """A collaborator (database, target API) could not be reached."""


class ValidationError(MigrationError):
    """An assembled form cannot be persisted as-is."""


@dataclass
class ErrorLog:
    """
    Error messages collected during a run, deduplicated by content.

    Each form gets its own log; the driver merges them, so parallel form
    processing never writes to a shared collection.
    """
    _messages: Dict[str, None] = field(default_factory=dict)

    def add(self, message: str) -> None:
        """Add an error message; identical messages collapse to one."""
        self._messages.setdefault(message, None)

    def extend(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.add(message)

    def merge(self, other: "ErrorLog") -> None:
        self.extend(other.messages)

    @property
    def messages(self) -> List[str]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __bool__(self) -> bool:
        return bool(self._messages)
