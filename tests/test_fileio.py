import os
import time

import pytest

from reasons.fileio import (
    FileCache,
    FileIOError,
    FileLock,
    LockType,
    checksum,
    ensure_parent_dirs,
    file_exists,
    list_directory,
    map_file,
    modification_time,
    move_file,
    read_file,
    remove_file,
    write_file,
)


def test_checksum_standard_check_value():
    assert checksum(b"123456789") == 0xCBF43926


def test_checksum_accepts_text():
    assert checksum("abc") == checksum(b"abc")


def test_write_then_read_round_trip(tmp_path):
    target = tmp_path / "out.bin"
    write_file(target, b"hello\x00world")
    assert read_file(target) == b"hello\x00world"


def test_write_text_is_utf8(tmp_path):
    target = tmp_path / "t.txt"
    write_file(target, "héllo")
    assert read_file(target) == "héllo".encode("utf-8")


def test_write_creates_parent_directories(tmp_path):
    target = tmp_path / "a" / "b" / "c.txt"
    write_file(target, b"x")
    assert target.read_bytes() == b"x"


def test_atomic_write_leaves_no_temporary_files(tmp_path):
    target = tmp_path / "atomic.txt"
    write_file(target, b"first", atomic=True)
    write_file(target, b"second", atomic=True)
    assert read_file(target) == b"second"
    assert sorted(os.listdir(tmp_path)) == ["atomic.txt"]


def test_ensure_parent_dirs(tmp_path):
    ensure_parent_dirs(tmp_path / "x" / "y" / "file")
    assert (tmp_path / "x" / "y").is_dir()
    assert not (tmp_path / "x" / "y" / "file").exists()


def test_ensure_parent_dirs_blocked_by_file(tmp_path):
    (tmp_path / "blocker").write_bytes(b"")
    with pytest.raises(FileIOError):
        ensure_parent_dirs(tmp_path / "blocker" / "sub" / "file")


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(FileIOError):
        read_file(tmp_path / "missing")


def test_cache_serves_unchanged_file(tmp_path):
    target = tmp_path / "cached.txt"
    cache = FileCache()
    write_file(target, b"one", cache=cache)
    target.write_bytes(b"two")
    os.utime(target, (0, 0))
    assert read_file(target, cache=cache) == b"one"


def test_cache_refreshes_newer_file(tmp_path):
    target = tmp_path / "cached.txt"
    cache = FileCache()
    write_file(target, b"one", cache=cache)
    target.write_bytes(b"two")
    future = time.time() + 100
    os.utime(target, (future, future))
    assert read_file(target, cache=cache) == b"two"
    entry = cache.lookup(target)
    assert entry.data == b"two"
    assert entry.crc == checksum(b"two")


def test_cache_lookup_and_clear(tmp_path):
    cache = FileCache()
    cache.update(tmp_path / "f", b"data", 5.0)
    entry = cache.lookup(tmp_path / "f")
    assert entry.data == b"data"
    assert entry.mtime == 5.0
    cache.clear()
    assert cache.lookup(tmp_path / "f") is None


def test_cache_stat_failure_raises(tmp_path):
    target = tmp_path / "gone.txt"
    cache = FileCache()
    write_file(target, b"x", cache=cache)
    os.remove(target)
    with pytest.raises(FileIOError):
        read_file(target, cache=cache)


def test_map_file_contents(tmp_path):
    target = tmp_path / "m.bin"
    target.write_bytes(b"mapped data")
    with map_file(target) as mapped:
        assert mapped[:] == b"mapped data"
        assert len(mapped) == len(b"mapped data")


def test_map_empty_file_raises(tmp_path):
    target = tmp_path / "empty"
    target.write_bytes(b"")
    with pytest.raises(FileIOError):
        map_file(target)


def test_map_missing_file_raises(tmp_path):
    with pytest.raises(FileIOError):
        map_file(tmp_path / "nope")


def test_file_exists(tmp_path):
    target = tmp_path / "e"
    assert file_exists(target) is False
    target.write_bytes(b"")
    assert file_exists(target) is True


def test_modification_time(tmp_path):
    target = tmp_path / "m"
    target.write_bytes(b"")
    os.utime(target, (1000, 1000))
    assert modification_time(target) == 1000
    assert modification_time(tmp_path / "missing") == 0


def test_remove_file(tmp_path):
    target = tmp_path / "r"
    target.write_bytes(b"")
    remove_file(target)
    assert not target.exists()
    with pytest.raises(FileIOError):
        remove_file(target)


def _tree(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_bytes(b"")
    (tmp_path / "sub" / "deep").mkdir()
    (tmp_path / "sub" / "deep" / "c.txt").write_bytes(b"")


def test_list_directory_flat(tmp_path):
    _tree(tmp_path)
    listed = sorted(list_directory(tmp_path))
    assert listed == sorted([str(tmp_path / "a.txt"), str(tmp_path / "sub")])


def test_list_directory_recursive(tmp_path):
    _tree(tmp_path)
    listed = sorted(list_directory(tmp_path, recursive=True))
    expected = sorted(
        [
            str(tmp_path / "a.txt"),
            str(tmp_path / "sub" / "b.txt"),
            str(tmp_path / "sub" / "deep" / "c.txt"),
        ]
    )
    assert listed == expected


def test_list_missing_directory_is_empty(tmp_path):
    assert list_directory(tmp_path / "missing") == []


def test_move_file(tmp_path):
    src = tmp_path / "src.txt"
    dest = tmp_path / "dest.txt"
    src.write_bytes(b"payload")
    move_file(src, dest)
    assert not src.exists()
    assert dest.read_bytes() == b"payload"


def test_move_missing_file_raises(tmp_path):
    with pytest.raises(FileIOError):
        move_file(tmp_path / "nothing", tmp_path / "dest")


def test_lock_acquire_release(tmp_path):
    lock = FileLock(tmp_path / "lockfile", LockType.WRITE)
    assert lock.acquire() is True
    assert lock.locked is True
    lock.release()
    assert lock.locked is False
    assert (tmp_path / "lockfile").exists()


def test_lock_context_manager(tmp_path):
    lock = FileLock(tmp_path / "lockfile", LockType.READ)
    with lock as held:
        assert held.locked is True
    assert lock.locked is False


def test_exclusive_lock_contention(tmp_path):
    path = tmp_path / "lockfile"
    first = FileLock(path, LockType.WRITE)
    second = FileLock(path, LockType.WRITE)
    assert first.acquire() is True
    try:
        assert second.acquire() is False
        with pytest.raises(FileIOError):
            with second:
                pass
    finally:
        first.release()
    assert second.acquire() is True
    second.release()


def test_lock_unopenable_path_raises(tmp_path):
    lock = FileLock(tmp_path / "no_dir" / "lockfile")
    with pytest.raises(FileIOError):
        lock.acquire()