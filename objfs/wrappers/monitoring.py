"""Count the operations a file system serves, by operation and error."""

from __future__ import annotations

import os
import threading
from collections import Counter
from typing import Any

from objfs.wrappers.error_mapping import DEFAULT_FS_ERROR


class OpCounter:
    """A thread-safe cumulative count of operations keyed by (method, error)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[tuple[str, str]] = Counter()

    def record(self, method: str, error: str) -> None:
        """Count one operation ``method`` that ended with ``error`` ("" for success)."""
        with self._lock:
            self._counts[(method, error)] += 1

    def count(self, method: str, error: str) -> int:
        """How many ``method`` operations ended with ``error``."""
        with self._lock:
            return self._counts[(method, error)]

    def reset(self) -> None:
        """Forget all counts."""
        with self._lock:
            self._counts.clear()


op_counter = OpCounter()


def fs_error_str(err: BaseException | None) -> str:
    """A short label for ``err``; uncommon errors share the default label."""
    if err is None:
        return ""
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, OSError) and current.errno is not None:
            return os.strerror(current.errno)
        current = current.__cause__ or current.__context__
    return os.strerror(DEFAULT_FS_ERROR)


def record_op(method: str, fs_err: BaseException | None) -> None:
    """Count one operation in the shared counter."""
    op_counter.record(method, fs_error_str(fs_err))


class Monitoring:
    """Wraps a file system, counting each operation it serves."""

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
                record_op(name, err)
                raise
            record_op(name, None)
            return result

        return call


def with_monitoring(fs: Any) -> Monitoring:
    """Wrap ``fs`` so the operations it serves are counted."""
    return Monitoring(fs)