"""Inodes for symbolic links stored as objects carrying a target in metadata."""

from __future__ import annotations

import dataclasses
import threading

from objfs.inode.inode import (
    Generation,
    InodeAttributes,
    LookupCount,
    StorageObject,
)
from objfs.inode.name import Name

# Objects carrying this metadata key are symlinks whose target is its value.
SYMLINK_METADATA_KEY = "gcsfuse_symlink_target"


def is_symlink(o: StorageObject) -> bool:
    """Does the object represent a symlink?"""
    return SYMLINK_METADATA_KEY in o.metadata


class SymlinkInode:
    """A symlink inode built from an object record."""

    def __init__(
        self,
        inode_id: int,
        name: Name,
        o: StorageObject,
        attrs: InodeAttributes,
    ) -> None:
        self.id = inode_id
        self.name = name
        self._source_generation = Generation(o.generation, o.meta_generation)
        self._attrs = InodeAttributes(
            nlink=1,
            uid=attrs.uid,
            gid=attrs.gid,
            mode=attrs.mode,
            atime=o.updated,
            ctime=o.updated,
            mtime=o.updated,
        )
        self._target = o.metadata.get(SYMLINK_METADATA_KEY, "")
        self._mu = threading.Lock()
        self._lc = LookupCount(inode_id)
        self.destroyed = False

    def lock(self) -> None:
        self._mu.acquire()

    def unlock(self) -> None:
        self._mu.release()

    def __enter__(self) -> SymlinkInode:
        self.lock()
        return self

    def __exit__(self, *args) -> None:
        self.unlock()

    def source_generation(self) -> Generation:
        """The object generation this inode was created from."""
        return self._source_generation

    def increment_lookup_count(self) -> None:
        self._lc.inc()

    def decrement_lookup_count(self, n: int) -> bool:
        """Decrement the lookup count; True means the inode should be destroyed."""
        return self._lc.dec(n)

    def destroy(self) -> None:
        """Mark the inode destroyed; a symlink holds no local resources."""
        self.destroyed = True

    def attributes(self) -> InodeAttributes:
        """A copy of the inode's attributes."""
        return dataclasses.replace(self._attrs)

    def target(self) -> str:
        """The target of the symlink."""
        return self._target