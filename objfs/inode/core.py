"""What is known about an inode before it is created."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from objfs.inode.inode import InodeType, StorageObject
from objfs.inode.name import Name
from objfs.inode.symlink import is_symlink


@dataclass
class Core:
    """The name, bucket and backing object of an inode.

    ``bucket`` is required for every inode except the base directory that
    holds the mounted buckets. ``object`` is None for the base directory and
    for implicit directories.
    """

    full_name: Name
    bucket: Any = None
    object: StorageObject | None = None

    def type(self) -> InodeType:
        """The kind of inode this core describes."""
        if self.object is None:
            return InodeType.IMPLICIT_DIR
        if self.full_name.is_dir():
            return InodeType.EXPLICIT_DIR
        if is_symlink(self.object):
            return InodeType.SYMLINK
        return InodeType.REGULAR_FILE

    def sanity_check(self) -> None:
        """Raise ValueError if the core contradicts itself."""
        if (
            self.object is not None
            and self.full_name.gcs_object_name() != self.object.name
        ):
            raise ValueError(
                f"inode name {str(self.full_name)!r} mismatches "
                f"object name {self.object.name!r}"
            )
        if self.object is None and not self.full_name.is_dir():
            raise ValueError(f"object missing for {str(self.full_name)!r}")


def type_of(core: Core | None) -> InodeType:
    """The type of ``core``, or UNKNOWN when there is none."""
    if core is None:
        return InodeType.UNKNOWN
    return core.type()


def exists(core: Core | None) -> bool:
    """True iff the backing object exists, implicitly or explicitly."""
    return core is not None