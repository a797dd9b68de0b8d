"""Filesystem and path handles.

A ``FileSystem`` owns one backend. ``VPath`` pairs a path string with a
shared ``FileSystem`` and exposes the backend primitives (each failure
wrapped in one context frame naming the operation and path) plus the
composite operations ``create_dir_all`` and ``remove_dir_all``, which are
written purely against the primitives and so work for any backend.
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING, BinaryIO, Iterator

from .base import VFS, VMetadata
from .errors import VfsError, error_context

if TYPE_CHECKING:
    from .config import FSConfig

logger = logging.getLogger(__name__)


class FileSystem:
    """Owner of exactly one backend, shared by every derived VPath."""

    __slots__ = ("_vfs",)

    def __init__(self, vfs: VFS):
        self._vfs = vfs

    @property
    def vfs(self) -> VFS:
        return self._vfs

    def __repr__(self) -> str:
        return f"FileSystem({self._vfs!r})"


class VPath:
    """A path within a virtual filesystem.

    Handles are immutable and cheap to create; they hold no state about
    whether the path exists. The root handle has the path ``""`` and
    ``join`` appends ``/segment``.

    Example:
        >>> root = VPath.create(MemoryFS())
        >>> notes = root.join("notes")
        >>> notes.create_dir_all()
        >>> notes.join("todo.txt").write_bytes(b"buy milk")
        >>> [child.path for child in notes.read_dir()]
        ['/notes/todo.txt']
    """

    __slots__ = ("_path", "_fs")

    def __init__(self, path: str, fs: FileSystem):
        self._path = path
        self._fs = fs

    @classmethod
    def create(cls, vfs: VFS) -> VPath:
        """Root handle over a new FileSystem owning ``vfs``."""
        return cls("", FileSystem(vfs))

    @classmethod
    def from_config(cls, config: FSConfig) -> VPath:
        """Root handle over the backend described by ``config``."""
        from .config import create_backend

        return cls.create(create_backend(config))

    @property
    def path(self) -> str:
        return self._path

    @property
    def fs(self) -> FileSystem:
        return self._fs

    def join(self, segment: str) -> VPath:
        return VPath(f"{self._path}/{segment}", self._fs)

    def file_name(self) -> str | None:
        """Last segment of the path, or None for the root."""
        name = self._path.rpartition("/")[2]
        return name or None

    def extension(self) -> str | None:
        """Extension of the file name without the dot, if it has one."""
        name = self.file_name()
        if name is None:
            return None
        extension = posixpath.splitext(name)[1]
        return extension[1:] or None

    def parent(self) -> VPath | None:
        """Handle on the containing directory, or None for the root."""
        if not self._path:
            return None
        return VPath(self._path.rpartition("/")[0], self._fs)

    def __repr__(self) -> str:
        return f"VPath({self._path!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VPath):
            return NotImplemented
        return self._path == other._path and self._fs is other._fs

    def __hash__(self) -> int:
        return hash((self._path, id(self._fs)))

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def read_dir(self) -> Iterator[VPath]:
        """Handles on the immediate children of this directory.

        Failures raised by the backend while iterating lazily get the same
        context frame as failures raised by the call itself.
        """
        context = f"Could not read directory '{self._path}'"
        with error_context(context):
            names = self._fs.vfs.read_dir(self._path)
        return self._children(names, context)

    def _children(self, names: Iterator[str], context: str) -> Iterator[VPath]:
        with error_context(context):
            for name in names:
                yield self.join(name)

    def create_dir(self) -> None:
        with error_context(f"Could not create directory '{self._path}'"):
            self._fs.vfs.create_dir(self._path)

    def open_file(self) -> BinaryIO:
        with error_context(f"Could not open file '{self._path}'"):
            return self._fs.vfs.open_file(self._path)

    def create_file(self) -> BinaryIO:
        with error_context(f"Could not create file '{self._path}'"):
            return self._fs.vfs.create_file(self._path)

    def append_file(self) -> BinaryIO:
        with error_context(f"Could not open file '{self._path}' for appending"):
            return self._fs.vfs.append_file(self._path)

    def remove_file(self) -> None:
        with error_context(f"Could not remove file '{self._path}'"):
            self._fs.vfs.remove_file(self._path)

    def remove_dir(self) -> None:
        with error_context(f"Could not remove directory '{self._path}'"):
            self._fs.vfs.remove_dir(self._path)

    def metadata(self) -> VMetadata:
        with error_context(f"Could not get metadata for '{self._path}'"):
            return self._fs.vfs.metadata(self._path)

    def exists(self) -> bool:
        return self._fs.vfs.exists(self._path)

    # -------------------------------------------------------------------------
    # Composite operations
    # -------------------------------------------------------------------------

    def create_dir_all(self) -> None:
        """Create this directory and any missing ancestors.

        Each prefix of the path gets one existence check and, if missing,
        one ``create_dir`` call; the sequence is not atomic. When another
        actor creates the same prefix between the check and the create, the
        call still succeeds as long as the prefix ends up a directory.

        Raises:
            VfsError: The first ``create_dir`` failure that is not such a
                race, e.g. a missing or non-directory ancestor.
        """
        vfs = self._fs.vfs
        path = self._path
        position = 1
        while position <= len(path):
            end = path.find("/", position)
            if end == -1:
                end = len(path)
            prefix = path[:end]
            if not vfs.exists(prefix):
                try:
                    with error_context(f"Could not create directory '{prefix}'"):
                        vfs.create_dir(prefix)
                except VfsError:
                    if not self._is_directory(prefix):
                        raise
                    logger.debug("Directory %r was created concurrently", prefix)
            position = end + 1

    def remove_dir_all(self) -> None:
        """Remove this directory and everything below it.

        A path that does not exist is a no-op. On the root handle every
        entry is removed and the root itself stays. The subtree is removed
        depth first with one primitive call per entry, so a failure (for
        instance from a concurrent writer) can leave it partially removed;
        the first failure is raised as-is.
        """
        if not self.exists():
            return
        # Entries are (directory, children_removed); a directory is pushed
        # back once its children are scheduled so it is removed after them.
        stack: list[tuple[VPath, bool]] = [(self, False)]
        while stack:
            directory, children_removed = stack.pop()
            if children_removed:
                if directory.path:
                    directory.remove_dir()
                continue
            if directory is not self and not directory.exists():
                continue
            stack.append((directory, True))
            for child in directory.read_dir():
                if child.metadata().is_dir:
                    stack.append((child, False))
                else:
                    child.remove_file()
        logger.debug("Removed directory tree %r", self._path)

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------

    def read_bytes(self) -> bytes:
        """Entire content of the file."""
        with self.open_file() as reader:
            return reader.read()

    def write_bytes(self, data: bytes) -> None:
        """Replace the content of the file with ``data``."""
        with self.create_file() as writer:
            writer.write(data)

    def _is_directory(self, path: str) -> bool:
        try:
            return self._fs.vfs.metadata(path).is_dir
        except VfsError:
            return False
