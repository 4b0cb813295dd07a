from datetime import datetime, timedelta, timezone

import pytest

from objfs.inode.core import Core
from objfs.inode.explicit_dir import ExplicitDirInode
from objfs.inode.inode import (
    Generation,
    InodeAttributes,
    InodeType,
    Listing,
    NotFoundError,
    PreconditionError,
    StorageObject,
)
from objfs.inode.name import new_dir_name, new_file_name, new_root_name

DIR_INODE_NAME = "foo/bar/"


class FakeClock:
    def __init__(self):
        self.current = datetime(2015, 4, 5, 2, 15, tzinfo=timezone.utc)

    def now(self):
        return self.current


class FakeBucket:
    def __init__(self, name):
        self.name = name
        self.objects = {}
        self._next_gen = 1

    def _put(self, name, contents=b"", metadata=None):
        o = StorageObject(
            name=name,
            generation=self._next_gen,
            meta_generation=1,
            size=len(contents),
            metadata=dict(metadata or {}),
        )
        self._next_gen += 1
        self.objects[name] = o
        return o

    def stat_object(self, name):
        try:
            return self.objects[name]
        except KeyError:
            raise NotFoundError(name) from None

    def list_objects(self, prefix, *, delimiter="", include_trailing_delimiter=False,
                     continuation_token="", max_results=0):
        names = sorted(n for n in self.objects if n.startswith(prefix))
        if max_results:
            names = names[:max_results]
        return Listing(objects=[self.objects[n] for n in names])

    def create_object(self, name, contents, *, generation_precondition=None, metadata=None):
        if generation_precondition == 0 and name in self.objects:
            raise PreconditionError(f"Precondition failed: {name} exists")
        return self._put(name, contents, metadata)


@pytest.fixture
def bucket():
    return FakeBucket("some_bucket")


def make_inode(bucket, o, implicit_dirs=False):
    clock = FakeClock()
    return ExplicitDirInode(
        17,
        new_dir_name(new_root_name(""), DIR_INODE_NAME),
        o,
        InodeAttributes(uid=123, gid=456, mode=0o712),
        implicit_dirs,
        timedelta(seconds=1),
        bucket,
        clock,
        clock,
    )


def test_source_generation_comes_from_object(bucket):
    o = StorageObject(name=DIR_INODE_NAME, generation=5, meta_generation=7)
    inode = make_inode(bucket, o)
    assert inode.source_generation() == Generation(5, 7)
    assert inode.source_generation().compare(Generation(5, 7)) == 0


def test_identity_and_attributes(bucket):
    o = bucket._put(DIR_INODE_NAME)
    inode = make_inode(bucket, o)
    assert inode.id == 17
    assert inode.name.gcs_object_name() == DIR_INODE_NAME
    attrs = inode.attributes()
    assert attrs.uid == 123
    assert attrs.gid == 456
    assert attrs.mode == 0o712
    assert attrs.nlink == 1


def test_rejects_file_name(bucket):
    o = StorageObject(name="foo", generation=1, meta_generation=1)
    with pytest.raises(ValueError):
        ExplicitDirInode(
            1,
            new_file_name(new_root_name(""), "foo"),
            o,
            InodeAttributes(),
            False,
            timedelta(seconds=1),
            bucket,
            FakeClock(),
            FakeClock(),
        )


def test_lookup_count(bucket):
    inode = make_inode(bucket, bucket._put(DIR_INODE_NAME))
    with inode:
        inode.increment_lookup_count()
        inode.increment_lookup_count()
        inode.increment_lookup_count()
        assert inode.decrement_lookup_count(2) is False
        assert inode.decrement_lookup_count(1) is True


def test_look_up_child_file(bucket):
    inode = make_inode(bucket, bucket._put(DIR_INODE_NAME))
    created = bucket._put(DIR_INODE_NAME + "qux", b"taco")
    result = inode.look_up_child("qux")
    assert isinstance(result, Core)
    assert result.object.name == DIR_INODE_NAME + "qux"
    assert result.object.generation == created.generation
    assert result.type() is InodeType.REGULAR_FILE


def test_look_up_missing_child(bucket):
    inode = make_inode(bucket, bucket._put(DIR_INODE_NAME))
    assert inode.look_up_child("qux") is None


def test_create_child_dir_then_exists(bucket):
    inode = make_inode(bucket, bucket._put(DIR_INODE_NAME))
    result = inode.create_child_dir("qux")
    assert result.object.name == DIR_INODE_NAME + "qux/"
    assert result.type() is InodeType.EXPLICIT_DIR
    with pytest.raises(PreconditionError):
        inode.create_child_dir("qux")


def test_source_generation_unchanged_by_children(bucket):
    o = bucket._put(DIR_INODE_NAME)
    inode = make_inode(bucket, o)
    inode.create_child_dir("qux")
    assert inode.source_generation() == Generation(o.generation, o.meta_generation)