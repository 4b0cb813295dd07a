"""Directory inodes backed by a prefix of object names in a bucket."""

from __future__ import annotations

import dataclasses
import enum
import posixpath
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from objfs.inode.core import Core
from objfs.inode.inode import (
    InodeAttributes,
    InodeType,
    Listing,
    LookupCount,
    NotFoundError,
    StorageObject,
)
from objfs.inode.name import (
    Name,
    new_descendant_name,
    new_dir_name,
    new_file_name,
)
from objfs.inode.symlink import SYMLINK_METADATA_KEY
from objfs.inode.type_cache import TypeCache

# Metadata key holding a file's mtime, in UTC, formatted as RFC 3339 with
# nanosecond precision and trailing zeros dropped.
FILE_MTIME_METADATA_KEY = "gcsfuse_mtime"

# Suffix tagging the file/symlink of a (file, directory) pair whose names
# conflict. Unambiguous because U+000A is not allowed in object names.
CONFLICTING_FILE_NAME_SUFFIX = "\n"

_TYPE_CACHE_CAPACITY = 1 << 16


class _Clock(Protocol):
    def now(self) -> datetime: ...


class _Bucket(Protocol):
    name: str

    def stat_object(self, name: str) -> StorageObject: ...

    def list_objects(
        self,
        prefix: str,
        *,
        delimiter: str = "",
        include_trailing_delimiter: bool = False,
        continuation_token: str = "",
        max_results: int = 0,
    ) -> Listing: ...

    def create_object(
        self,
        name: str,
        contents: bytes,
        *,
        generation_precondition: int | None = None,
        metadata: dict[str, str] | None = None,
    ) -> StorageObject: ...

    def copy_object(
        self,
        src_name: str,
        dst_name: str,
        *,
        src_generation: int = 0,
        src_meta_generation_precondition: int | None = None,
    ) -> StorageObject: ...

    def delete_object(
        self,
        name: str,
        *,
        generation: int = 0,
        meta_generation_precondition: int | None = None,
    ) -> None: ...


class DirentType(enum.IntEnum):
    """The type of a directory entry."""

    UNKNOWN = 0
    DIRECTORY = 4
    FILE = 8
    LINK = 10


@dataclass
class Dirent:
    """One entry of a directory listing."""

    name: str
    type: DirentType = DirentType.UNKNOWN
    offset: int = 0
    inode: int = 0


def _format_mtime(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def _base(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else "."
    return posixpath.basename(stripped)


def find_explicit_inode(bucket: Any, name: Name) -> Core | None:
    """The core backed by an explicit object called ``name``, or None if absent."""
    try:
        o = bucket.stat_object(name.gcs_object_name())
    except NotFoundError:
        return None
    return Core(full_name=name, bucket=bucket, object=o)


def find_dir_inode(bucket: Any, name: Name) -> Core | None:
    """The core of an explicit or implicit directory, or None if neither exists."""
    if not name.is_dir():
        raise ValueError(f"{str(name)!r} is not directory")
    listing = bucket.list_objects(name.gcs_object_name(), max_results=1)
    if not listing.objects:
        return None
    result = Core(full_name=name, bucket=bucket)
    first = listing.objects[0]
    if first.name == name.gcs_object_name():
        result.object = first
    return result


class DirInode:
    """A directory inode listing, looking up, creating and deleting children.

    With ``implicit_dirs`` set, directories implied by the existence of
    descendant objects are reported. A non-zero ``type_cache_ttl`` keeps a
    cache of child types, trading consistency for fewer round trips.
    """

    def __init__(
        self,
        inode_id: int,
        name: Name,
        attrs: InodeAttributes,
        implicit_dirs: bool,
        type_cache_ttl: timedelta,
        bucket: Any,
        mtime_clock: Any,
        cache_clock: Any,
    ) -> None:
        if not name.is_dir():
            raise ValueError(f"Unexpected name: {name}")
        self.id = inode_id
        self.name = name
        self.bucket = bucket
        self.implicit_dirs = implicit_dirs
        self._attrs = attrs
        self._mtime_clock = mtime_clock
        self._cache_clock = cache_clock
        self._mu = threading.Lock()
        self._lc = LookupCount(inode_id)
        self._cache = TypeCache(_TYPE_CACHE_CAPACITY // 2, type_cache_ttl)

    def _check_invariants(self) -> None:
        if not self.name.is_dir():
            raise AssertionError(f"Unexpected name: {self.name}")
        self._cache.check_invariants()

    def lock(self) -> None:
        self._mu.acquire()
        self._check_invariants()

    def unlock(self) -> None:
        self._check_invariants()
        self._mu.release()

    def __enter__(self) -> DirInode:
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
        """Release local resources; a directory holds none."""

    def attributes(self) -> InodeAttributes:
        """The directory's attributes, with a link count of one."""
        return dataclasses.replace(self._attrs, nlink=1)

    def _now(self) -> datetime:
        return self._cache_clock.now()

    def _look_up_child_file(self, name: str) -> Core | None:
        return find_explicit_inode(self.bucket, new_file_name(self.name, name))

    def _look_up_child_dir(self, name: str) -> Core | None:
        child = new_dir_name(self.name, name)
        if self.implicit_dirs:
            return find_dir_inode(self.bucket, child)
        return find_explicit_inode(self.bucket, child)

    def _look_up_conflicting(self, name: str) -> Core | None:
        stripped = name.removesuffix(CONFLICTING_FILE_NAME_SUFFIX)
        # A marked name is accepted only if the conflicting directory exists.
        if self._look_up_child_dir(stripped) is None:
            return None
        return self._look_up_child_file(stripped)

    def look_up_child(self, name: str) -> Core | None:
        """Find the direct child ``name``, preferring a directory over a file.

        A name ending in the conflict suffix refers to the file of a
        (file, directory) pair and is found only if the directory exists.
        """
        if name.endswith(CONFLICTING_FILE_NAME_SUFFIX):
            return self._look_up_conflicting(name)

        file_result: Core | None = None
        dir_result: Core | None = None
        dir_name = new_dir_name(self.name, name)

        cached = self._cache.get(self._now(), name)
        if cached is InodeType.IMPLICIT_DIR:
            dir_result = Core(full_name=dir_name, bucket=self.bucket, object=None)
        elif cached is InodeType.EXPLICIT_DIR:
            dir_result = find_explicit_inode(self.bucket, dir_name)
        elif cached in (InodeType.REGULAR_FILE, InodeType.SYMLINK):
            file_result = self._look_up_child_file(name)
        else:
            file_result = self._look_up_child_file(name)
            if self.implicit_dirs:
                dir_result = find_dir_inode(self.bucket, dir_name)
            else:
                dir_result = find_explicit_inode(self.bucket, dir_name)

        result = dir_result if dir_result is not None else file_result
        if result is not None:
            self._cache.insert(self._now(), name, result.type())
        return result

    def read_descendants(self, limit: int) -> dict[Name, Core]:
        """All objects below this directory, recursively, at most ``limit`` of them."""
        own = self.name.gcs_object_name()
        descendants: dict[Name, Core] = {}
        tok = ""
        while True:
            listing = self.bucket.list_objects(
                own,
                delimiter="",
                continuation_token=tok,
                max_results=limit + 1,
            )
            for o in listing.objects:
                if len(descendants) >= limit:
                    return descendants
                if o.name == own:
                    continue
                name = new_descendant_name(self.name, o.name)
                descendants[name] = Core(full_name=name, bucket=self.bucket, object=o)
            tok = listing.continuation_token
            if not tok:
                return descendants

    def _read_objects(self, tok: str) -> tuple[dict[Name, Core], str]:
        own = self.name.gcs_object_name()
        listing = self.bucket.list_objects(
            own,
            delimiter="/",
            include_trailing_delimiter=True,
            continuation_token=tok,
        )

        cores: dict[Name, Core] = {}
        for o in listing.objects:
            if o.name == own or not o.name:
                continue
            base = _base(o.name)
            # Objects come in name order, so a directory "foo/" replaces a
            # file "foo" only under its own (distinct) directory name.
            if o.name.endswith("/"):
                child = new_dir_name(self.name, base)
            else:
                child = new_file_name(self.name, base)
            cores[child] = Core(full_name=child, bucket=self.bucket, object=o)

        if self.implicit_dirs:
            for run in listing.collapsed_runs:
                child = new_dir_name(self.name, _base(run))
                existing = cores.get(child)
                if existing is not None and existing.type() is InodeType.EXPLICIT_DIR:
                    continue
                cores[child] = Core(full_name=child, bucket=self.bucket, object=None)

        now = self._now()
        for full_name, core in cores.items():
            self._cache.insert(now, _base(full_name.local_name()), core.type())
        return cores, listing.continuation_token

    def read_entries(self, tok: str) -> tuple[list[Dirent], str]:
        """Read a batch of entries; returns them with the token for the next batch.

        Start with the empty token; an empty returned token means the end.
        """
        cores, new_tok = self._read_objects(tok)
        entries = []
        for full_name, core in cores.items():
            kind = core.type()
            if kind is InodeType.SYMLINK:
                dirent_type = DirentType.LINK
            elif kind is InodeType.REGULAR_FILE:
                dirent_type = DirentType.FILE
            elif kind in (InodeType.IMPLICIT_DIR, InodeType.EXPLICIT_DIR):
                dirent_type = DirentType.DIRECTORY
            else:
                dirent_type = DirentType.UNKNOWN
            entries.append(Dirent(name=_base(full_name.local_name()), type=dirent_type))
        return entries, new_tok

    def _create_new_object(
        self, name: Name, metadata: dict[str, str] | None
    ) -> StorageObject:
        return self.bucket.create_object(
            name.gcs_object_name(),
            b"",
            generation_precondition=0,
            metadata=metadata,
        )

    def create_child_file(self, name: str) -> Core:
        """Create an empty child file, failing if its object already exists."""
        metadata = {FILE_MTIME_METADATA_KEY: _format_mtime(self._mtime_clock.now())}
        full_name = new_file_name(self.name, name)
        o = self._create_new_object(full_name, metadata)
        self._cache.insert(self._now(), name, InodeType.REGULAR_FILE)
        return Core(full_name=full_name, bucket=self.bucket, object=o)

    def clone_to_child_file(self, name: str, src: StorageObject) -> Core:
        """Copy ``src`` over the child file ``name``, replacing what is there."""
        self._cache.erase(name)
        full_name = new_file_name(self.name, name)
        o = self.bucket.copy_object(
            src.name,
            full_name.gcs_object_name(),
            src_generation=src.generation,
            src_meta_generation_precondition=src.meta_generation,
        )
        core = Core(full_name=full_name, bucket=self.bucket, object=o)
        self._cache.insert(self._now(), name, core.type())
        return core

    def create_child_symlink(self, name: str, target: str) -> Core:
        """Create a symlink object, failing if its object already exists."""
        full_name = new_file_name(self.name, name)
        o = self._create_new_object(full_name, {SYMLINK_METADATA_KEY: target})
        self._cache.insert(self._now(), name, InodeType.SYMLINK)
        return Core(full_name=full_name, bucket=self.bucket, object=o)

    def create_child_dir(self, name: str) -> Core:
        """Create the backing object of a child directory, failing if it exists."""
        full_name = new_dir_name(self.name, name)
        o = self._create_new_object(full_name, None)
        self._cache.insert(self._now(), name, InodeType.EXPLICIT_DIR)
        return Core(full_name=full_name, bucket=self.bucket, object=o)

    def delete_child_file(
        self, name: str, generation: int, meta_generation: int | None
    ) -> None:
        """Delete a child file or symlink; generation 0 means the latest."""
        self._cache.erase(name)
        child = new_file_name(self.name, name)
        self.bucket.delete_object(
            child.gcs_object_name(),
            generation=generation,
            meta_generation_precondition=meta_generation,
        )
        self._cache.erase(name)

    def delete_child_dir(self, name: str) -> None:
        """Delete the backing object of a child directory."""
        self._cache.erase(name)
        child = new_dir_name(self.name, name)
        self.bucket.delete_object(child.gcs_object_name())
        self._cache.erase(name)