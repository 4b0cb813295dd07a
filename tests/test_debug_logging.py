import errno
import logging
import os
from types import SimpleNamespace

import pytest

from objfs.wrappers.debug_logging import DebugLogging, with_debug_logging

LOGGER = "objfs.debug_fs"


class FakeFS:
    def __init__(self):
        self.destroyed = False
        self.calls = []
        self.label = "fake"

    def destroy(self):
        self.destroyed = True

    def look_up_inode(self, op):
        self.calls.append(("look_up_inode", op))
        op.entry = 42
        return "found"

    def read_file(self, op):
        raise OSError(errno.ENOENT, os.strerror(errno.ENOENT))

    def rename(self, op):
        return None

    def custom_op(self, op):
        return op


def _messages(caplog):
    return [r.getMessage() for r in caplog.records if r.name == LOGGER]


def test_success_is_logged_with_fields(caplog):
    fs = with_debug_logging(FakeFS())
    op = SimpleNamespace(parent=1, name="foo")
    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        result = fs.look_up_inode(op)
    assert result == "found"
    assert op.entry == 42
    assert _messages(caplog) == ['debug_fs: LookUpInode(1, "foo"): OK']


def test_error_is_logged_and_reraised(caplog):
    fs = DebugLogging(FakeFS())
    op = SimpleNamespace(inode=7, offset=100)
    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        with pytest.raises(OSError) as info:
            fs.read_file(op)
    assert info.value.errno == errno.ENOENT
    messages = _messages(caplog)
    assert len(messages) == 1
    assert messages[0].startswith("debug_fs: ReadFile(7, 100): ")
    assert str(info.value) in messages[0]


def test_rename_shows_old_parent_and_name(caplog):
    fs = with_debug_logging(FakeFS())
    op = SimpleNamespace(old_parent=3, old_name="a b", new_parent=4, new_name="c")
    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        fs.rename(op)
    assert _messages(caplog) == ['debug_fs: Rename(3, "a b"): OK']


def test_unknown_operation_logged_by_name(caplog):
    fs = with_debug_logging(FakeFS())
    op = SimpleNamespace()
    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        assert fs.custom_op(op) is op
    assert _messages(caplog) == ["debug_fs: custom_op(): OK"]


def test_destroy_passes_through():
    inner = FakeFS()
    fs = with_debug_logging(inner)
    fs.destroy()
    assert inner.destroyed is True


def test_non_callable_attribute_passes_through():
    fs = with_debug_logging(FakeFS())
    assert fs.label == "fake"


def test_private_attribute_not_forwarded():
    inner = FakeFS()
    inner._hidden = "value"
    fs = with_debug_logging(inner)
    assert getattr(fs, "_hidden", "missing") == "missing"
    with pytest.raises(AttributeError):
        fs._hidden


def test_missing_operation_raises_attribute_error():
    fs = with_debug_logging(FakeFS())
    with pytest.raises(AttributeError):
        fs.mk_dir(SimpleNamespace(parent=1, name="x"))


def test_calls_reach_wrapped_once():
    inner = FakeFS()
    fs = with_debug_logging(inner)
    op = SimpleNamespace(parent=2, name="bar")
    fs.look_up_inode(op)
    assert inner.calls == [("look_up_inode", op)]