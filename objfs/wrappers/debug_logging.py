"""Log every file system operation, with its main arguments and its outcome."""

from __future__ import annotations

import json
import logging
from typing import Any

_log = logging.getLogger("objfs.debug_fs")

_PREFIX = "debug_fs: "

# For each operation: the label it is logged under and the op fields shown,
# each with whether the value is quoted.
_OPERATIONS: dict[str, tuple[str, tuple[tuple[str, bool], ...]]] = {
    "stat_fs": ("StatFS", ()),
    "look_up_inode": ("LookUpInode", (("parent", False), ("name", True))),
    "get_inode_attributes": ("GetInodeAttributes", (("inode", False),)),
    "set_inode_attributes": ("SetInodeAttributes", (("inode", False),)),
    "forget_inode": ("ForgetInode", (("inode", False),)),
    "mk_dir": ("MkDir", (("parent", False), ("name", True))),
    "mk_node": ("MkNode", (("parent", False), ("name", True))),
    "create_file": ("CreateFile", (("parent", False), ("name", True))),
    "create_link": ("CreateLink", (("parent", False), ("name", True))),
    "create_symlink": ("CreateSymlink", (("parent", False), ("name", True))),
    "rename": ("Rename", (("old_parent", False), ("old_name", True))),
    "rm_dir": ("RmDir", (("parent", False), ("name", True))),
    "unlink": ("Unlink", (("parent", False), ("name", True))),
    "open_dir": ("OpenDir", (("inode", False),)),
    "read_dir": ("ReadDir", (("inode", False), ("offset", False))),
    "release_dir_handle": ("ReleaseDirHandle", (("handle", False),)),
    "open_file": ("OpenFile", (("inode", False),)),
    "read_file": ("ReadFile", (("inode", False), ("offset", False))),
    "write_file": ("WriteFile", (("inode", False), ("offset", False))),
    "sync_file": ("SyncFile", (("inode", False),)),
    "flush_file": ("FlushFile", (("inode", False),)),
    "release_file_handle": ("ReleaseFileHandle", (("handle", False),)),
    "read_symlink": ("ReadSymlink", (("inode", False),)),
    "remove_xattr": ("RemoveXattr", (("inode", False), ("name", False))),
    "get_xattr": ("GetXattr", (("inode", False), ("name", False))),
    "list_xattr": ("ListXattr", (("inode", False),)),
    "set_xattr": ("SetXattr", (("inode", False), ("name", False))),
    "fallocate": ("Fallocate", (("inode", False), ("offset", False))),
}


def _format_value(value: Any, quoted: bool) -> str:
    if quoted:
        return json.dumps(str(value), ensure_ascii=False)
    return str(value)


def _describe(method: str, args: tuple[Any, ...], kwargs: dict[str, Any],
              err: BaseException | None) -> str:
    label, fields = _OPERATIONS.get(method, (method, ()))
    op = args[0] if args else kwargs.get("op")
    shown = ", ".join(
        _format_value(getattr(op, field, None), quoted) for field, quoted in fields
    )
    outcome = "OK" if err is None else str(err)
    return f"{_PREFIX}{label}({shown}): {outcome}"


class DebugLogging:
    """Wraps a file system, logging each operation's input and outcome at debug level."""

    def __init__(self, wrapped: Any) -> None:
        self._wrapped = wrapped

    def destroy(self) -> None:
        self._wrapped.destroy()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        attr = getattr(self._wrapped, name)
        if not callable(attr):
            return attr

        def call(*args: Any, **kwargs: Any) -> Any:
            try:
                result = attr(*args, **kwargs)
            except Exception as err:
                _log.debug(_describe(name, args, kwargs, err))
                raise
            _log.debug(_describe(name, args, kwargs, None))
            return result

        return call


def with_debug_logging(wrapped: Any) -> DebugLogging:
    """Wrap ``wrapped`` so its operations are logged."""
    return DebugLogging(wrapped)