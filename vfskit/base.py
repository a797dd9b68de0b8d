"""Backend interface and metadata types.

Defines the primitive contract every storage backend implements
(MemoryFS, PhysicalFS). Everything else, including recursive creation and
removal, is built on top of these nine operations by ``VPath``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Protocol, runtime_checkable


class VFileType(enum.Enum):
    """Kind of entry a path refers to."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class VMetadata:
    """Metadata for a single file or directory at query time.

    Attributes:
        file_type: Whether the path is a file or a directory.
        len: Content length in bytes (0 for directories).
    """

    file_type: VFileType
    len: int = 0

    @property
    def is_file(self) -> bool:
        return self.file_type is VFileType.FILE

    @property
    def is_dir(self) -> bool:
        return self.file_type is VFileType.DIRECTORY


@runtime_checkable
class VFS(Protocol):
    """Primitive operations a storage backend must provide.

    Paths are ``/``-separated strings; ``""`` is the root. A leading slash
    is optional. All methods must be safe to call concurrently from several
    threads. Failures are reported as ``VfsError`` subclasses:
    ``FileNotFound`` whenever a path cannot be resolved, ``OtherError`` for
    conflicts such as removing a non-empty directory, and ``IoError`` for
    host I/O failures.
    """

    def read_dir(self, path: str) -> Iterator[str]:
        """Names of the immediate children of a directory.

        The names are taken no later than the call; entries added or
        removed while iterating may or may not appear. Raises
        ``FileNotFound`` if ``path`` is missing or not a directory.
        """
        ...

    def create_dir(self, path: str) -> None:
        """Create exactly one directory.

        Fails if the parent does not exist or ``path`` already exists,
        whether as a file or as a directory.
        """
        ...

    def open_file(self, path: str) -> BinaryIO:
        """Open a file for reading.

        Raises ``FileNotFound`` if ``path`` is missing or a directory.
        """
        ...

    def create_file(self, path: str) -> BinaryIO:
        """Open a file for writing, truncating it (created if absent)."""
        ...

    def append_file(self, path: str) -> BinaryIO:
        """Open a file for writing at its end (created if absent)."""
        ...

    def metadata(self, path: str) -> VMetadata:
        """Type and length of ``path``; ``FileNotFound`` if missing."""
        ...

    def exists(self, path: str) -> bool:
        """Whether ``path`` exists. Never raises."""
        ...

    def remove_file(self, path: str) -> None:
        """Remove a file; fails if missing or a directory."""
        ...

    def remove_dir(self, path: str) -> None:
        """Remove an empty directory; fails if missing, a file, or non-empty."""
        ...
