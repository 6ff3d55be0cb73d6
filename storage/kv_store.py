"""
Local Key-Value Storage

String-to-string stores modelled on browser local storage: values are opaque
strings (callers serialize JSON themselves), reads of a missing key return
None, and writes are synchronous.

Implementations:
    - JsonFileStore: persists all keys in one JSON object on disk, survives restarts
    - MemoryStore: plain dict, used by tests and when persistence is not wanted
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from core.logging import get_logger


class KeyValueStore(ABC):
    """Contract shared by all key-value stores."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


class MemoryStore(KeyValueStore):
    """In-process store backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """
    Persistent store keeping every key in a single JSON file.

    The whole file is read on each access and rewritten on each change. A file
    that is missing, unreadable or not a JSON object reads as empty, so a
    corrupted cache degrades to a cache miss instead of an error.

    Example:
        >>> store = JsonFileStore(".cache/local_storage.json")
        >>> store.set_item("usdRubRateCache", '{"rate": 92.5, "timestamp": 1704110400000}')
        >>> store.get_item("usdRubRateCache")
        '{"rate": 92.5, "timestamp": 1704110400000}'
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.logger = get_logger(__name__)

    def _load(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            self.logger.warning(f"Ignoring storage file {self.path}: top level is not an object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)
