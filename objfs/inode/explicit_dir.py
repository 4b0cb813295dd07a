"""Directory inodes backed by a specific generation of a directory object."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from objfs.inode.dir import DirInode
from objfs.inode.inode import Generation, InodeAttributes, StorageObject
from objfs.inode.name import Name


class ExplicitDirInode(DirInode):
    """A directory inode backed by an object with a particular generation."""

    def __init__(
        self,
        inode_id: int,
        name: Name,
        o: StorageObject,
        attrs: InodeAttributes,
        implicit_dirs: bool,
        type_cache_ttl: timedelta,
        bucket: Any,
        mtime_clock: Any,
        cache_clock: Any,
    ) -> None:
        super().__init__(
            inode_id,
            name,
            attrs,
            implicit_dirs,
            type_cache_ttl,
            bucket,
            mtime_clock,
            cache_clock,
        )
        self._generation = Generation(o.generation, o.meta_generation)

    def source_generation(self) -> Generation:
        """The generation of the object backing this directory."""
        return self._generation