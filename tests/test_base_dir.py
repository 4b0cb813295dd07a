import errno

import pytest

from objfs.inode.base_dir import BaseDirInode
from objfs.inode.dir import DirentType
from objfs.inode.inode import InodeAttributes, InodeType, StorageObject
from objfs.inode.name import new_root_name

DIR_INODE_ID = 17
UID = 123
GID = 456
DIR_MODE = 0o712


class FakeBucket:
    def __init__(self, name):
        self.name = name


class FakeBucketManager:
    def __init__(self, names):
        self.buckets = {name: FakeBucket(name) for name in names}
        self.setup_times = 0

    def set_up_bucket(self, name):
        self.setup_times += 1
        try:
            return self.buckets[name]
        except KeyError:
            raise RuntimeError(f"Cannot open bucket {name!r}") from None

    def list_buckets(self):
        return list(self.buckets)


@pytest.fixture
def bm():
    return FakeBucketManager(["bucketA", "bucketB"])


@pytest.fixture
def inode(bm):
    in_ = BaseDirInode(
        DIR_INODE_ID,
        new_root_name(""),
        InodeAttributes(uid=UID, gid=GID, mode=DIR_MODE),
        bm,
    )
    in_.lock()
    yield in_
    in_.unlock()


def test_id(inode):
    assert inode.id == DIR_INODE_ID


def test_name(inode):
    assert inode.name.local_name() == ""


def test_lookup_count(inode):
    inode.increment_lookup_count()
    inode.increment_lookup_count()
    inode.increment_lookup_count()
    assert inode.decrement_lookup_count(2) is False
    assert inode.decrement_lookup_count(1) is True


def test_attributes(inode):
    attrs = inode.attributes()
    assert attrs.uid == UID
    assert attrs.gid == GID
    assert attrs.mode == DIR_MODE
    assert attrs.nlink == 1


def test_look_up_child_non_existent(inode, bm):
    with pytest.raises(RuntimeError):
        inode.look_up_child("missing_bucket")
    assert bm.setup_times == 1


def test_look_up_child_bucket_found(inode):
    for name in ("bucketA", "bucketB"):
        result = inode.look_up_child(name)
        assert result.bucket.name == name
        assert result.full_name.is_bucket_root()
        assert result.full_name.local_name() == name + "/"
        assert result.full_name.gcs_object_name() == ""
        assert result.object is None
        assert result.type() is InodeType.IMPLICIT_DIR


def test_look_up_child_bucket_cached(inode, bm):
    inode.look_up_child("bucketA")
    assert bm.setup_times == 1
    inode.look_up_child("bucketA")
    assert bm.setup_times == 1
    inode.look_up_child("bucketB")
    assert bm.setup_times == 2
    inode.look_up_child("bucketB")
    assert bm.setup_times == 2
    with pytest.raises(RuntimeError):
        inode.look_up_child("missing_bucket")
    assert bm.setup_times == 3


def test_read_entries_lists_buckets(inode):
    entries, tok = inode.read_entries("")
    assert tok == ""
    assert sorted(e.name for e in entries) == ["bucketA", "bucketB"]
    assert all(e.type is DirentType.DIRECTORY for e in entries)


@pytest.mark.parametrize(
    "call",
    [
        lambda d: d.read_descendants(10),
        lambda d: d.create_child_file("x"),
        lambda d: d.clone_to_child_file("x", StorageObject(name="y")),
        lambda d: d.create_child_symlink("x", "t"),
        lambda d: d.create_child_dir("x"),
        lambda d: d.delete_child_file("x", 0, None),
        lambda d: d.delete_child_dir("x"),
    ],
)
def test_mutations_not_supported(inode, call):
    with pytest.raises(OSError) as exc:
        call(inode)
    assert exc.value.errno == errno.ENOSYS