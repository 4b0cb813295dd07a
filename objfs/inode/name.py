"""Names of inodes, seen both locally and as object names in a bucket."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Name:
    """An inode name.

    ``bucket_name`` is empty when a single bucket is mounted, and holds the
    bucket's name when several buckets are mounted as subdirectories of the
    file system root. ``object_name`` is the object's name in its bucket.
    """

    bucket_name: str
    object_name: str

    def is_bucket_root(self) -> bool:
        """True if the name is the root directory of a bucket."""
        return self.object_name == ""

    def is_dir(self) -> bool:
        """True if the name is a directory."""
        return self.is_bucket_root() or self.object_name.endswith("/")

    def is_file(self) -> bool:
        """True if the name is a file."""
        return not self.is_dir()

    def gcs_object_name(self) -> str:
        """The name of the object backing the inode."""
        return self.object_name

    def local_name(self) -> str:
        """The name of the file or directory in the local file system."""
        if not self.bucket_name:
            return self.object_name
        return f"{self.bucket_name}/{self.object_name}"

    def is_direct_child_of(self, parent: Name) -> bool:
        """True if this name is a direct child file or directory of ``parent``."""
        if not parent.is_dir() and self.is_bucket_root():
            return False
        if self.bucket_name != parent.bucket_name:
            return False
        if not self.object_name.startswith(parent.object_name):
            return False
        diff = self.object_name[len(parent.object_name):]
        if not diff:
            return False
        return "/" not in diff.removesuffix("/")

    def __str__(self) -> str:
        return self.local_name()


def new_root_name(bucket_name: str) -> Name:
    """The name of the root directory of a bucket."""
    return Name(bucket_name, "")


def new_dir_name(parent_name: Name, dir_name: str) -> Name:
    """The name of a subdirectory of ``parent_name``."""
    if parent_name.is_file() or not dir_name:
        raise ValueError(
            f"Inode '{parent_name}' cannot have child subdirectory '{dir_name}'"
        )
    if not dir_name.endswith("/"):
        dir_name += "/"
    return Name(parent_name.bucket_name, parent_name.object_name + dir_name)


def new_file_name(parent_name: Name, file_name: str) -> Name:
    """The name of a file inside ``parent_name``."""
    if parent_name.is_file() or not file_name:
        raise ValueError(
            f"Inode '{parent_name}' cannot have child file '{file_name}'"
        )
    return Name(parent_name.bucket_name, parent_name.object_name + file_name)


def new_descendant_name(ancestor: Name, descendant_object_name: str) -> Name:
    """The name of an object that lies somewhere beneath ``ancestor``."""
    return Name(ancestor.bucket_name, descendant_object_name)