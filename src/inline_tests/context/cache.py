"""Memoization of synthesized adapters."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar


T = TypeVar("T")


class ArtifactCache(Generic[T]):
    """Thread-safe map from group key to artifact.

    Population is guarded per key, so concurrent callers asking for the same
    key wait for a single synthesis and never observe a partial artifact.
    Entries are never invalidated.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, T] = {}
        self._key_locks: dict[Hashable, threading.Lock] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: Hashable, factory: Callable[[], T]) -> T:
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                if key in self._entries:
                    return self._entries[key]
            artifact = factory()
            with self._lock:
                self._entries[key] = artifact
                self._key_locks.pop(key, None)
            return artifact

    def get(self, key: Hashable) -> T | None:
        with self._lock:
            return self._entries.get(key)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
