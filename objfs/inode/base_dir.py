"""The base directory holding one subdirectory per mounted bucket."""

from __future__ import annotations

import dataclasses
import errno
import os
import threading
from typing import Any, NoReturn

from objfs.inode.core import Core
from objfs.inode.dir import Dirent, DirentType
from objfs.inode.inode import InodeAttributes, LookupCount, StorageObject
from objfs.inode.name import Name, new_root_name


def _not_supported() -> NoReturn:
    raise OSError(errno.ENOSYS, os.strerror(errno.ENOSYS))


class BaseDirInode:
    """A read-only directory whose children are the roots of buckets.

    Buckets are set up on first lookup through ``bucket_manager`` and kept
    for later lookups. Operations that would create or delete buckets raise
    OSError with ENOSYS.
    """

    def __init__(
        self,
        inode_id: int,
        name: Name,
        attrs: InodeAttributes,
        bucket_manager: Any,
    ) -> None:
        self.id = inode_id
        self.name = new_root_name("")
        self._attrs = attrs
        self._bucket_manager = bucket_manager
        self._buckets: dict[str, Any] = {}
        self._mu = threading.Lock()
        self._lc = LookupCount(inode_id)

    def _look_up_or_set_up_bucket(self, name: str) -> Any:
        bucket = self._buckets.get(name)
        if bucket is None:
            bucket = self._bucket_manager.set_up_bucket(name)
            self._buckets[name] = bucket
        return bucket

    def lock(self) -> None:
        self._mu.acquire()

    def unlock(self) -> None:
        self._mu.release()

    def __enter__(self) -> BaseDirInode:
        self.lock()
        return self

    def __exit__(self, *args) -> None:
        self.unlock()

    def increment_lookup_count(self) -> None:
        self._lc.inc()

    def decrement_lookup_count(self, n: int) -> bool:
        """Decrement the lookup count; True means the inode should be destroyed."""
        return self._lc.dec(n)

    def destroy(self) -> None:
        """Release local resources; the base directory holds none."""

    def attributes(self) -> InodeAttributes:
        """The directory's attributes, with a link count of one."""
        return dataclasses.replace(self._attrs, nlink=1)

    def look_up_child(self, name: str) -> Core:
        """The root directory of the bucket called ``name``, setting it up if needed."""
        bucket = self._look_up_or_set_up_bucket(name)
        return Core(full_name=new_root_name(bucket.name), bucket=bucket, object=None)

    def read_descendants(self, limit: int) -> dict[Name, Core]:
        _not_supported()

    def read_entries(self, tok: str) -> tuple[list[Dirent], str]:
        """One directory entry per bucket; the whole listing comes in one batch."""
        entries = [
            Dirent(name=bucket_name, type=DirentType.DIRECTORY)
            for bucket_name in self._bucket_manager.list_buckets()
        ]
        return entries, ""

    def create_child_file(self, name: str) -> Core:
        _not_supported()

    def clone_to_child_file(self, name: str, src: StorageObject) -> Core:
        _not_supported()

    def create_child_symlink(self, name: str, target: str) -> Core:
        _not_supported()

    def create_child_dir(self, name: str) -> Core:
        _not_supported()

    def delete_child_file(
        self, name: str, generation: int, meta_generation: int | None
    ) -> None:
        _not_supported()

    def delete_child_dir(self, name: str) -> None:
        _not_supported()