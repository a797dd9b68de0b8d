"""In-memory filesystem implementation.

MemoryFS keeps a tree of directory and file nodes in process memory. It is
ephemeral: nothing is persisted and the whole tree goes away with the
instance.

Locking is per node and per call. Walking a path takes each directory's lock
only while looking up one child; a structural change (insert or remove an
entry) holds the parent directory's lock, plus the child's lock when the
child's own state must be checked. Locks are always taken parent before
child and are never held across calls.

File content follows snapshot-on-open / commit-on-write:

* ``open_file`` copies the current bytes into an independent read-only
  buffer. Later writes to the file, or its removal, never change that reader.
* Each ``write`` on a writer returned by ``create_file`` or ``append_file``
  is applied to the shared buffer under the file's lock before it returns,
  so readers and writers opened afterwards see it. Readers opened earlier
  never do.
"""

from __future__ import annotations

import io
import logging
import threading
from typing import Iterator, Union

from .base import VFileType, VMetadata
from .errors import FileNotFound, OtherError

logger = logging.getLogger(__name__)


class _Directory:
    __slots__ = ("lock", "children", "removed")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.children: dict[str, _Node] = {}
        # Set once detached from the tree; guarded by ``lock``.
        self.removed = False


class _File:
    __slots__ = ("lock", "content", "removed")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.content = bytearray()
        self.removed = False


_Node = Union[_Directory, _File]


def _split(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def _parent_path(path: str) -> str:
    return path.rstrip("/").rpartition("/")[0]


class MemoryFile:
    """Writable handle on a MemoryFS file.

    Every ``write`` commits immediately into the file's shared buffer at
    the handle's cursor. The handle itself is not meant to be shared
    between threads; concurrent handles on the same file are each applied
    atomically per ``write`` call.

    Attributes:
        path: The path the file was opened with (for error messages).
    """

    def __init__(self, fs: MemoryFS, node: _File, path: str, position: int):
        self._fs = fs
        self._node = node
        self._position = position
        self._closed = False
        self.path = path

    def write(self, data: bytes) -> int:
        """Write ``data`` at the cursor and commit it to the file.

        Returns:
            Number of bytes written.

        Raises:
            ValueError: If the handle is closed.
            OtherError: If the write would exceed the filesystem size limit.
        """
        self._check_open()
        data = memoryview(data).tobytes()
        node = self._node
        with node.lock:
            content = node.content
            end = self._position + len(data)
            growth = end - len(content)
            if growth > 0 and not node.removed:
                self._fs._reserve(growth, self.path)
            if self._position > len(content):
                content.extend(bytes(self._position - len(content)))
            content[self._position : end] = data
            self._position = end
        return len(data)

    def writelines(self, lines: list[bytes]) -> None:
        for line in lines:
            self.write(line)

    def read(self, size: int = -1) -> bytes:
        """Read is not supported for write-only files."""
        raise io.UnsupportedOperation("read")

    def readable(self) -> bool:
        return False

    def writable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the cursor; ``SEEK_END`` is relative to the current content."""
        self._check_open()
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            with self._node.lock:
                position = len(self._node.content) + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")
        if position < 0:
            raise ValueError(f"Negative seek position {position}")
        self._position = position
        return position

    def tell(self) -> int:
        self._check_open()
        return self._position

    def flush(self) -> None:
        """Flush is a no-op (every write is already committed)."""
        self._check_open()

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed file: {self.path}")

    def __enter__(self) -> MemoryFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class MemoryFS:
    """Ephemeral in-memory filesystem, safe for concurrent use.

    Example:
        >>> fs = MemoryFS()
        >>> fs.create_dir("/docs")
        >>> with fs.create_file("/docs/a.txt") as f:
        ...     f.write(b"hello")
        5
        >>> fs.open_file("/docs/a.txt").read()
        b'hello'
        >>> list(fs.read_dir("/docs"))
        ['a.txt']
    """

    def __init__(self, max_size_mb: int | None = None):
        """Initialize an empty tree holding only the root directory.

        Args:
            max_size_mb: Maximum total size of all file contents in
                megabytes. None means unlimited.
        """
        self._root = _Directory()
        self._max_size_bytes: int | None = (
            max_size_mb * 1024 * 1024 if max_size_mb is not None else None
        )
        self._size_lock = threading.Lock()
        self._total_size = 0

    def __repr__(self) -> str:
        return f"MemoryFS(max_size_bytes={self._max_size_bytes!r})"

    @property
    def total_size(self) -> int:
        """Bytes currently stored in files reachable from the root."""
        with self._size_lock:
            return self._total_size

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def read_dir(self, path: str) -> Iterator[str]:
        node = self._resolve(_split(path))
        if not isinstance(node, _Directory):
            raise FileNotFound(path)
        with node.lock:
            names = list(node.children)
        return iter(names)

    def create_dir(self, path: str) -> None:
        parts = _split(path)
        if not parts:
            raise OtherError(f"'{path}' already exists")
        parent = self._directory(parts[:-1], _parent_path(path))
        with parent.lock:
            if parent.removed:
                raise FileNotFound(_parent_path(path))
            if parts[-1] in parent.children:
                raise OtherError(f"'{path}' already exists")
            parent.children[parts[-1]] = _Directory()
        logger.debug("Created directory %r", path)

    def open_file(self, path: str) -> io.BufferedReader:
        node = self._resolve(_split(path))
        if not isinstance(node, _File):
            raise FileNotFound(path)
        with node.lock:
            snapshot = bytes(node.content)
        return io.BufferedReader(io.BytesIO(snapshot))

    def create_file(self, path: str) -> MemoryFile:
        return self._open_writer(path, truncate=True)

    def append_file(self, path: str) -> MemoryFile:
        return self._open_writer(path, truncate=False)

    def metadata(self, path: str) -> VMetadata:
        node = self._resolve(_split(path))
        if node is None:
            raise FileNotFound(path)
        if isinstance(node, _Directory):
            return VMetadata(VFileType.DIRECTORY, 0)
        with node.lock:
            length = len(node.content)
        return VMetadata(VFileType.FILE, length)

    def exists(self, path: str) -> bool:
        return self._resolve(_split(path)) is not None

    def remove_file(self, path: str) -> None:
        parts = _split(path)
        if not parts:
            raise OtherError(f"'{path}' is a directory")
        parent = self._directory(parts[:-1], _parent_path(path))
        with parent.lock:
            node = parent.children.get(parts[-1])
            if node is None:
                raise FileNotFound(path)
            if isinstance(node, _Directory):
                raise OtherError(f"'{path}' is a directory")
            del parent.children[parts[-1]]
            with node.lock:
                node.removed = True
                released = len(node.content)
        self._release(released)
        logger.debug("Removed file %r (%d bytes)", path, released)

    def remove_dir(self, path: str) -> None:
        parts = _split(path)
        if not parts:
            raise OtherError("the root directory cannot be removed")
        parent = self._directory(parts[:-1], _parent_path(path))
        with parent.lock:
            node = parent.children.get(parts[-1])
            if node is None:
                raise FileNotFound(path)
            if isinstance(node, _File):
                raise OtherError(f"'{path}' is not a directory")
            with node.lock:
                if node.children:
                    raise OtherError(f"directory '{path}' is not empty")
                node.removed = True
            del parent.children[parts[-1]]
        logger.debug("Removed directory %r", path)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _resolve(self, parts: list[str]) -> _Node | None:
        """Walk ``parts`` from the root; None if any segment is missing."""
        node: _Node = self._root
        for name in parts:
            if not isinstance(node, _Directory):
                return None
            with node.lock:
                child = node.children.get(name)
            if child is None:
                return None
            node = child
        return node

    def _directory(self, parts: list[str], path: str) -> _Directory:
        node = self._resolve(parts)
        if not isinstance(node, _Directory):
            raise FileNotFound(path)
        return node

    def _open_writer(self, path: str, truncate: bool) -> MemoryFile:
        parts = _split(path)
        if not parts:
            raise OtherError(f"'{path}' is a directory")
        parent = self._directory(parts[:-1], _parent_path(path))
        with parent.lock:
            if parent.removed:
                raise FileNotFound(_parent_path(path))
            node = parent.children.get(parts[-1])
            if node is None:
                node = _File()
                parent.children[parts[-1]] = node
                logger.debug("Created file %r", path)
            elif isinstance(node, _Directory):
                raise OtherError(f"'{path}' is a directory")
            with node.lock:
                if truncate and node.content:
                    released = len(node.content)
                    node.content.clear()
                    self._release(released)
                position = len(node.content)
        return MemoryFile(self, node, path, position)

    def _reserve(self, size: int, path: str) -> None:
        with self._size_lock:
            new_total = self._total_size + size
            if self._max_size_bytes is not None and new_total > self._max_size_bytes:
                raise OtherError(
                    f"size limit exceeded writing '{path}': "
                    f"{new_total / 1024 / 1024:.1f}MB > "
                    f"{self._max_size_bytes / 1024 / 1024:.1f}MB"
                )
            self._total_size = new_total

    def _release(self, size: int) -> None:
        with self._size_lock:
            self._total_size -= size
