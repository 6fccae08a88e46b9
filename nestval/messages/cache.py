"""Message cache with per-key locking.

Resolved messages are stored for the lifetime of the owning backend. A
populated key is read without locking; computing a missing key locks only
that key, so unrelated lookups from other threads never wait on each other.
"""
from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Callable, Hashable

_MISSING = object()


def cache_key(value: Any) -> Hashable:
    """Hashable, order-stable stand-in for a lookup argument."""
    if isinstance(value, Mapping):
        return tuple(sorted(((str(k), cache_key(v)) for k, v in value.items()), key=lambda kv: kv[0]))
    if isinstance(value, (list, tuple)):
        return tuple(cache_key(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(cache_key(v) for v in value)
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


class MessageCache:
    """Never-evicting memo table shared by every validation using one backend.

    ``clear()`` starts a new generation. A value computed while a clear
    happened is still returned to its caller but is not stored, so a source
    merged mid-resolution is never shadowed by a message resolved from the
    old sources.
    """

    def __init__(self):
        self._entries: dict[Hashable, Any] = {}
        self._locks: dict[Hashable, threading.Lock] = {}
        self._lock = threading.Lock()
        self._generation = 0
        self.hits = 0
        self.misses = 0

    def _count(self, *, hit: bool) -> None:
        with self._lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1

    def fetch_or_store(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        if (value := self._entries.get(key, _MISSING)) is not _MISSING:
            self._count(hit=True)
            return value
        # dict.setdefault is atomic, so two threads racing on a new key share one lock
        with self._locks.setdefault(key, threading.Lock()):
            if (value := self._entries.get(key, _MISSING)) is not _MISSING:
                self._count(hit=True)
                return value
            self._count(hit=False)
            generation = self._generation
            value = compute()
            with self._lock:
                if generation == self._generation:
                    self._entries[key] = value
            return value

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()
            self._locks.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
