"""Shared inode types: generations, attributes, object records and lookup counts."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class InodeType(enum.IntEnum):
    """What kind of inode an object or name stands for."""

    UNKNOWN = 0
    SYMLINK = 1
    REGULAR_FILE = 2
    EXPLICIT_DIR = 3
    IMPLICIT_DIR = 4


@dataclass(frozen=True)
class Generation:
    """An object generation and meta-generation, ordered lexicographically."""

    object: int
    metadata: int

    def compare(self, other: Generation) -> int:
        """Return -1, 0 or 1 as this generation is less than, equal to or greater than ``other``."""
        mine = (self.object, self.metadata)
        theirs = (other.object, other.metadata)
        return (mine > theirs) - (mine < theirs)


@dataclass
class InodeAttributes:
    """Attributes reported for an inode."""

    size: int = 0
    nlink: int = 0
    mode: int = 0
    atime: datetime | None = None
    mtime: datetime | None = None
    ctime: datetime | None = None
    uid: int = 0
    gid: int = 0


@dataclass
class StorageObject:
    """A record describing an object stored in a bucket."""

    name: str
    generation: int = 0
    meta_generation: int = 0
    size: int = 0
    updated: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class Listing:
    """One page of results from listing a bucket."""

    objects: list[StorageObject] = field(default_factory=list)
    collapsed_runs: list[str] = field(default_factory=list)
    continuation_token: str = ""


class NotFoundError(Exception):
    """The requested object does not exist."""


class PreconditionError(Exception):
    """A generation or meta-generation precondition was not met."""


class InodeDestroyedError(RuntimeError):
    """An operation was attempted on an inode that has been destroyed."""


class LookupCount:
    """Lookup count bookkeeping for an inode. Requires external synchronization."""

    def __init__(self, inode_id: int) -> None:
        self.id = inode_id
        self.count = 0
        self.destroyed = False

    def _check_alive(self) -> None:
        if self.destroyed:
            raise InodeDestroyedError(f"Inode {self.id} has already been destroyed")

    def inc(self) -> None:
        """Increase the count by one."""
        self._check_alive()
        self.count += 1

    def dec(self, n: int) -> bool:
        """Decrease the count by ``n``; return True when it reaches zero."""
        self._check_alive()
        if n > self.count:
            raise ValueError(
                f"n is greater than lookup count: {n} vs. {self.count}"
            )
        self.count -= n
        return self.count == 0