"""Key/value storage scopes used by the dashboard components.

Two scopes exist. The session scope lives as long as the application
process and holds the current identity. The durable scope survives restarts
and holds credentials and alert lists (see ``gateway.db.DurableStore``).
Values are plain JSON-compatible Python objects.
"""
import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class KeyValueStore(ABC):
    """Abstract key/value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Overwrite the value stored under key."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key; missing keys are ignored."""
        pass


class SessionStore(KeyValueStore):
    """In-process store scoped to the lifetime of the running app."""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
