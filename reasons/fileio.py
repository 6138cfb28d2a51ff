"""File helpers: cached reads, atomic writes, locking, mapping and listing."""

from __future__ import annotations

import enum
import logging
import mmap
import os
import time
import zlib
from dataclasses import dataclass

try:
    import fcntl
except ImportError:  # pragma: no cover - Windows
    fcntl = None  # type: ignore[assignment]
    import msvcrt

logger = logging.getLogger(__name__)


class FileIOError(OSError):
    """Raised when a file operation cannot be completed."""


class LockType(enum.Enum):
    """Kind of advisory lock to take on a file."""

    READ = "read"
    WRITE = "write"


def _try_lock(fd: int, lock_type: LockType) -> None:
    if fcntl is not None:
        mode = fcntl.LOCK_EX if lock_type is LockType.WRITE else fcntl.LOCK_SH
        fcntl.flock(fd, mode | fcntl.LOCK_NB)
    else:  # pragma: no cover - Windows has only exclusive byte-range locks
        msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)


def _unlock(fd: int) -> None:
    if fcntl is not None:
        fcntl.flock(fd, fcntl.LOCK_UN)
    else:  # pragma: no cover
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)


class FileLock:
    """A non-blocking advisory lock on a file, usable as a context manager."""

    def __init__(self, path, lock_type=LockType.WRITE):
        self.path = os.fspath(path)
        self.lock_type = LockType(lock_type)
        self._fd: int | None = None

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def acquire(self) -> bool:
        """Try to take the lock; return False if another holder has it."""
        if self._fd is not None:
            return True
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o644)
        except OSError as exc:
            raise FileIOError(f"failed to open file for locking: {self.path}") from exc
        try:
            _try_lock(fd, self.lock_type)
        except OSError:
            os.close(fd)
            return False
        self._fd = fd
        return True

    def release(self) -> None:
        """Drop the lock if it is held."""
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            _unlock(fd)
        finally:
            os.close(fd)

    def __enter__(self) -> "FileLock":
        if not self.acquire():
            raise FileIOError(f"file is locked: {self.path}")
        return self

    def __exit__(self, *args) -> None:
        self.release()


@dataclass
class CacheEntry:
    """Cached contents of one file."""

    data: bytes
    mtime: float
    crc: int


class FileCache:
    """In-memory cache of file contents keyed by path."""

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def lookup(self, path) -> CacheEntry | None:
        return self._entries.get(os.fspath(path))

    def update(self, path, data, mtime) -> CacheEntry:
        entry = CacheEntry(bytes(data), float(mtime), checksum(data))
        self._entries[os.fspath(path)] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def checksum(data) -> int:
    """CRC-32 of the given bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return zlib.crc32(data) & 0xFFFFFFFF


def ensure_parent_dirs(path) -> None:
    """Create every directory leading up to ``path``."""
    parent = os.path.dirname(os.fspath(path))
    if not parent:
        return
    try:
        os.makedirs(parent, mode=0o755, exist_ok=True)
    except OSError as exc:
        raise FileIOError(f"failed to create directory for: {path}") from exc


def read_file(path, cache=None) -> bytes:
    """Read a whole file, serving it from ``cache`` while it is unchanged."""
    path = os.fspath(path)
    if cache is not None:
        entry = cache.lookup(path)
        if entry is not None:
            try:
                st = os.stat(path)
            except OSError as exc:
                raise FileIOError(f"failed to stat file: {path}") from exc
            if st.st_mtime <= entry.mtime:
                return entry.data
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise FileIOError(f"could not read file: {path}") from exc
    if cache is not None:
        try:
            mtime = os.stat(path).st_mtime
        except OSError:
            logger.warning("Failed to get file modification time: %s", path)
        else:
            cache.update(path, data, mtime)
    return data


def write_file(path, data, atomic=False, cache=None) -> None:
    """Write ``data`` to ``path``, through a temporary file when ``atomic``."""
    path = os.fspath(path)
    if isinstance(data, str):
        data = data.encode("utf-8")
    ensure_parent_dirs(path)

    target = path
    if atomic:
        directory = os.path.dirname(path) or os.curdir
        target = os.path.join(directory, f".tmp_{os.getpid()}_{int(time.time())}")

    try:
        with open(target, "wb") as handle:
            handle.write(data)
            handle.flush()
    except OSError as exc:
        if target != path:
            _silent_remove(target)
        raise FileIOError(f"failed to write file: {target}") from exc

    if target != path:
        try:
            os.replace(target, path)
        except OSError as exc:
            _silent_remove(target)
            raise FileIOError(f"failed to rename temporary file {target} to {path}") from exc

    if cache is not None:
        cache.update(path, data, time.time())


def _silent_remove(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


def map_file(path) -> mmap.mmap:
    """Map a file read-only into memory; the result is a context manager."""
    path = os.fspath(path)
    try:
        with open(path, "rb") as handle:
            return mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
    except (OSError, ValueError) as exc:
        raise FileIOError(f"failed to map file: {path}") from exc


def file_exists(path) -> bool:
    return path is not None and os.path.exists(path)


def modification_time(path) -> float:
    """Last modification time of ``path``, or 0 when it cannot be read."""
    try:
        return os.stat(path).st_mtime
    except OSError:
        return 0


def remove_file(path) -> None:
    try:
        os.remove(path)
    except OSError as exc:
        raise FileIOError(f"failed to remove file: {path}") from exc


def list_directory(path, recursive=False) -> list[str]:
    """List entries of a directory; recursively, directories are replaced by their files."""
    path = os.fspath(path)
    try:
        entries = list(os.scandir(path))
    except OSError:
        return []
    result: list[str] = []
    for entry in entries:
        full = os.path.join(path, entry.name)
        if recursive and entry.is_dir(follow_symlinks=False):
            result.extend(list_directory(full, True))
        else:
            result.append(full)
    return result


def move_file(src, dest) -> None:
    """Move a file, copying and deleting when a rename is not possible."""
    try:
        os.rename(src, dest)
        return
    except OSError:
        pass
    data = read_file(src)
    write_file(dest, data, atomic=True)
    try:
        os.remove(src)
    except OSError as exc:
        raise FileIOError(f"copied but could not remove source: {src}") from exc