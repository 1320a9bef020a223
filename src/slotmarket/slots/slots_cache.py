"""Read-only convenience cache for slot listings."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Hashable, Sequence

from .slots_models import Slot


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SlotListCache:
    """In-memory TTL cache for list queries.

    Never a source of truth: the transition guard always reads the store. An
    entry is served only while the store's change token equals the token it was
    stored under, so writes committed by other processes are seen on the next
    read; in-process commits also clear the cache through :meth:`invalidate`.
    """

    ttl_seconds: int = 30
    clock: Callable[[], datetime] = utcnow
    _entries: dict[Hashable, tuple[datetime, Hashable, Sequence[Slot]]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, key: Hashable, *, token: Hashable) -> Sequence[Slot] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, stored_token, slots = entry
            expired = (self.clock() - stored_at).total_seconds() > self.ttl_seconds
            if expired or stored_token != token:
                del self._entries[key]
                return None
            return slots

    def set(self, key: Hashable, slots: Sequence[Slot], *, token: Hashable) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = (self.clock(), token, tuple(slots))

    def invalidate(self, _: Slot | None = None) -> None:
        with self._lock:
            self._entries.clear()


__all__ = ["SlotListCache"]
