"""Map errors raised by a file system into OS errors the kernel understands."""

from __future__ import annotations

import concurrent.futures
import errno
import logging
import os
from collections.abc import Callable, Iterator
from typing import Any

DEFAULT_FS_ERROR = errno.EIO

_HTTP_STATUS_FORBIDDEN = 403
_HTTP_STATUS_NOT_FOUND = 404

_log = logging.getLogger("objfs.error_mapping")


class ApiError(Exception):
    """An error reported by the storage service's API, with an HTTP status code."""

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(f"API error {code}: {message}" if message else f"API error {code}")
        self.code = code
        self.message = message


class ObjectNotExistError(Exception):
    """The storage service reports that the object does not exist."""


def _os_error(code: int) -> OSError:
    return OSError(code, os.strerror(code))


def _chain(err: BaseException) -> Iterator[BaseException]:
    """The error followed by the errors it was raised from, without cycles."""
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def errno_for(err: BaseException | None) -> OSError | None:
    """The OSError that stands for ``err``, or None when there is no error.

    An OSError carrying an errno anywhere in the chain is used as it is;
    other known failures are translated, and everything else becomes EIO.
    """
    if err is None:
        return None

    chain = list(_chain(err))

    for e in chain:
        if isinstance(e, OSError) and e.errno is not None:
            return e

    # The operation was interrupted.
    if any(isinstance(e, concurrent.futures.CancelledError) for e in chain):
        return _os_error(errno.EINTR)
    if any(isinstance(e, ObjectNotExistError) for e in chain):
        return _os_error(errno.ENOENT)

    messages = [str(e) for e in chain]
    # The HTTP request was canceled.
    if any("net/http: request canceled" in m for m in messages):
        return _os_error(errno.ECANCELED)
    # Authentication failed.
    if any("oauth2: cannot fetch token" in m for m in messages):
        return _os_error(errno.EACCES)

    for e in chain:
        if isinstance(e, ApiError):
            if e.code == _HTTP_STATUS_FORBIDDEN:
                return _os_error(errno.EACCES)
            if e.code == _HTTP_STATUS_NOT_FOUND:
                return _os_error(errno.ENOENT)
            break

    return _os_error(DEFAULT_FS_ERROR)


class ErrorMapping:
    """Wraps a file system so every operation raises only errno-bearing OSErrors.

    When an error is translated, the original is logged and chained as the
    cause of the raised OSError.
    """

    def __init__(self, wrapped: Any) -> None:
        self._wrapped = wrapped

    def _map_error(self, op: str, err: BaseException) -> OSError:
        fs_err = errno_for(err)
        if fs_err is not err:
            _log.error("%s: %s, %s", op, fs_err, err)
        return fs_err

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
                return attr(*args, **kwargs)
            except Exception as err:
                fs_err = self._map_error(name, err)
                if fs_err is err:
                    raise
                raise fs_err from err

        return call


def with_error_mapping(wrapped: Any) -> ErrorMapping:
    """Wrap ``wrapped`` so its errors are mapped to OS errors."""
    return ErrorMapping(wrapped)


__all__: list[str] = [
    "ApiError",
    "DEFAULT_FS_ERROR",
    "ErrorMapping",
    "ObjectNotExistError",
    "errno_for",
    "with_error_mapping",
]

_: Callable[..., Any] = with_error_mapping