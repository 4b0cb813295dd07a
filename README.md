# objfs

`objfs` models the inode layer of a file system whose contents live in
object storage buckets. Object names such as `foo/bar/baz` are presented as
directories and files. A directory is either explicit (backed by an object
whose name ends in `/`) or implicit (implied by the objects beneath it).

## Modules

- `objfs.inode.name`: `Name`, a frozen value holding a bucket name and an
  object name. It gives both the local path (`local_name()`) and the object
  name (`gcs_object_name()`), and answers `is_dir()`, `is_file()`,
  `is_bucket_root()` and `is_direct_child_of()`. Names are built with
  `new_root_name`, `new_dir_name`, `new_file_name` and
  `new_descendant_name`. The two child builders raise `ValueError` when the
  parent is a file or the child name is empty.
- `objfs.inode.inode`: shared types. These are `InodeType`, `Generation`
  (with `compare()`), `InodeAttributes`, `StorageObject` and `Listing`, the
  errors `NotFoundError`, `PreconditionError` and `InodeDestroyedError`, and
  `LookupCount`.
- `objfs.inode.type_cache`: `TypeCache`, a bounded LRU cache. It maps child
  names to an `InodeType` until a TTL expires. A zero TTL disables it.
- `objfs.inode.core`: `Core`, which holds the name, bucket and backing
  object of an inode, with `type()` and `sanity_check()`. `type_of` and
  `exists` accept a core that may be `None`.
- `objfs.inode.symlink`: `SymlinkInode` and `is_symlink`. A symlink is an
  object that carries the metadata key `gcsfuse_symlink_target`.
- `objfs.inode.dir`: `DirInode` looks up, lists, creates and deletes the
  children of a directory. The module also holds `Dirent`, `DirentType`,
  `find_explicit_inode` and `find_dir_inode`.
- `objfs.inode.explicit_dir`: `ExplicitDirInode` is a `DirInode` that also
  records the `Generation` of its backing object.
- `objfs.inode.base_dir`: `BaseDirInode` is a read-only directory whose
  children are the roots of buckets. Operations that would mutate it raise
  `OSError` with `ENOSYS`.
- `objfs.wrappers.error_mapping`: `with_error_mapping` / `ErrorMapping`
  wrap any object. Exceptions raised by its methods become `OSError`s that
  carry an errno:
  - an existing errno is kept;
  - cancellation becomes `EINTR`;
  - `ObjectNotExistError` becomes `ENOENT`;
  - `ApiError` 403 becomes `EACCES` and 404 becomes `ENOENT`;
  - anything else becomes `EIO`.

  `errno_for` performs the mapping on its own.
- `objfs.wrappers.monitoring`: `with_monitoring` / `Monitoring` count each
  call in the shared `op_counter` (an `OpCounter`), keyed by method name
  and error label. `fs_error_str` and `record_op` are the helpers behind
  this.
- `objfs.wrappers.debug_logging`: `with_debug_logging` / `DebugLogging` log
  every call, with its main arguments and outcome, at debug level. The
  logger is `objfs.debug_fs`.

## What you supply

The package does not talk to a storage service itself. Directory inodes
take a bucket object. It needs a `name` attribute and these methods:
`stat_object`, `list_objects`, `create_object`, `copy_object` and
`delete_object`. Its missing-object and failed-precondition errors should be
`NotFoundError` and `PreconditionError`.

Clocks are objects with a `now()` method that returns a `datetime`.
`BaseDirInode` takes a bucket manager that provides `set_up_bucket(name)`
and `list_buckets()`.

## What it does not do

`objfs` is a library with no command. It does not:

- mount anything or serve kernel file system requests;
- include a regular-file inode that reads, writes or syncs file contents;
- include a client for a real storage service.

## Example

```python
from objfs.inode.name import new_root_name, new_dir_name, new_file_name

root = new_root_name("bucketx")
docs = new_dir_name(root, "docs")
readme = new_file_name(docs, "readme.txt")

assert docs.gcs_object_name() == "docs/"
assert readme.local_name() == "bucketx/docs/readme.txt"
assert readme.is_direct_child_of(docs)
```

Inodes are locked while they are used. Call `lock()` and `unlock()`, or use
the inode as a context manager:

```python
with directory:
    core = directory.look_up_child("readme.txt")
```

## Installing and testing

```
pip install .[test]
pytest
```