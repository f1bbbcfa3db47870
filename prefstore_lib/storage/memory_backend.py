"""Simple memory-backed adapter.

Fields are kept in a dict for the life of the process. Useful for tests
and for callers that only want the buffering and typing layer.
"""
from threading import RLock
from typing import Dict, Iterable, Mapping

from .base import BackingAdapter


class MemoryBackingAdapter(BackingAdapter):
    def __init__(self) -> None:
        self._lock = RLock()
        self._store: Dict[str, str] = {}

    def get_saved_string(self, name: str) -> str:
        with self._lock:
            return self._store.get(name, "")

    def set_saved_string(self, name: str, value: str) -> None:
        with self._lock:
            self._store[name] = value

    def set_saved_strings(self, values: Mapping[str, str]) -> None:
        with self._lock:
            self._store.update(values)

    def delete_saved_string(self, name: str) -> None:
        with self._lock:
            self._store.pop(name, None)

    def list_saved_names(self) -> Iterable[str]:
        with self._lock:
            return sorted(self._store.keys())
