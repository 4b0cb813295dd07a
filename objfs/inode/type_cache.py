"""A time-limited LRU cache from child names to inode types."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta

from objfs.inode.inode import InodeType


@dataclass(frozen=True)
class _CacheEntry:
    expiry: datetime
    inode_type: InodeType


class TypeCache:
    """Remembers the type of each name until its entry expires.

    A zero TTL disables caching. Requires external synchronization.
    """

    def __init__(self, capacity: int, ttl: timedelta) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._ttl = ttl
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def check_invariants(self) -> None:
        """Raise if the internal state is inconsistent."""
        if len(self._entries) > self._capacity:
            raise AssertionError(
                f"cache holds {len(self._entries)} entries, capacity {self._capacity}"
            )
        for name, entry in self._entries.items():
            if not isinstance(entry, _CacheEntry):
                raise AssertionError(f"bad cache entry for {name!r}: {entry!r}")

    def insert(self, now: datetime, name: str, inode_type: InodeType) -> None:
        """Record the type of ``name`` as seen at ``now``."""
        if not self._ttl:
            return
        self._entries[name] = _CacheEntry(now + self._ttl, inode_type)
        self._entries.move_to_end(name)
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)

    def erase(self, name: str) -> None:
        """Forget everything about ``name``."""
        self._entries.pop(name, None)

    def get(self, now: datetime, name: str) -> InodeType:
        """The cached type of ``name``, or UNKNOWN if absent or expired."""
        entry = self._entries.get(name)
        if entry is None:
            return InodeType.UNKNOWN
        if entry.expiry < now:
            del self._entries[name]
            return InodeType.UNKNOWN
        self._entries.move_to_end(name)
        return entry.inode_type