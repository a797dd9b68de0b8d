"""Host filesystem backend restricted to a root directory.

Maps each primitive onto the corresponding ``os`` / ``pathlib`` call. Host
failures surface as ``IoError`` wrapping the original ``OSError``; virtual
paths are always interpreted relative to the root (chroot-like), and any
path that resolves outside it is rejected.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator

from .base import VFileType, VMetadata
from .errors import IoError, OtherError, VfsError

logger = logging.getLogger(__name__)


class PhysicalFS:
    """Backend over a directory of the real filesystem.

    Unlike MemoryFS, readers returned by ``open_file`` are ordinary file
    objects and observe later writes the way the host OS dictates.
    """

    def __init__(self, root: str | os.PathLike[str]):
        """Initialize the backend.

        Args:
            root: Directory that becomes the virtual root. Created if it
                does not exist.

        Raises:
            ValueError: If root exists but is not a directory.
        """
        root_path = Path(root)
        if not root_path.exists():
            root_path.mkdir(parents=True, exist_ok=True)
        self.root = root_path.resolve()
        if not self.root.is_dir():
            raise ValueError(f"Root must be a directory: {root}")

    def __repr__(self) -> str:
        return f"PhysicalFS(root={str(self.root)!r})"

    def read_dir(self, path: str) -> Iterator[str]:
        real = self._real_path(path)
        try:
            names = os.listdir(real)
        except OSError as error:
            raise IoError(error) from error
        return iter(names)

    def create_dir(self, path: str) -> None:
        real = self._real_path(path)
        try:
            real.mkdir()
        except OSError as error:
            raise IoError(error) from error
        logger.debug("Created directory %s", real)

    def open_file(self, path: str) -> BinaryIO:
        return self._open(path, "rb")

    def create_file(self, path: str) -> BinaryIO:
        return self._open(path, "wb")

    def append_file(self, path: str) -> BinaryIO:
        return self._open(path, "ab")

    def metadata(self, path: str) -> VMetadata:
        real = self._real_path(path)
        try:
            stat = real.stat()
        except OSError as error:
            raise IoError(error) from error
        if real.is_dir():
            return VMetadata(VFileType.DIRECTORY, 0)
        return VMetadata(VFileType.FILE, stat.st_size)

    def exists(self, path: str) -> bool:
        try:
            return self._real_path(path).exists()
        except (VfsError, OSError):
            return False

    def remove_file(self, path: str) -> None:
        real = self._real_path(path)
        try:
            real.unlink()
        except OSError as error:
            raise IoError(error) from error
        logger.debug("Removed file %s", real)

    def remove_dir(self, path: str) -> None:
        real = self._real_path(path)
        if real == self.root:
            raise OtherError("the root directory cannot be removed")
        try:
            real.rmdir()
        except OSError as error:
            raise IoError(error) from error
        logger.debug("Removed directory %s", real)

    def _open(self, path: str, mode: str) -> BinaryIO:
        real = self._real_path(path)
        try:
            return io.open(real, mode)  # type: ignore[return-value]
        except OSError as error:
            raise IoError(error) from error

    def _real_path(self, path: str) -> Path:
        """Map a virtual path to a host path inside the root.

        Raises:
            OtherError: If the path escapes the root directory or cannot be
                resolved (symlink loop).
            IoError: If the host fails while resolving the path.
        """
        try:
            resolved = (self.root / path.lstrip("/")).resolve()
        except OSError as error:
            raise IoError(error) from error
        except RuntimeError as error:
            raise OtherError(f"Could not resolve '{path}': {error}") from error
        try:
            resolved.relative_to(self.root)
        except ValueError as error:
            raise OtherError(
                f"Path outside root: '{path}' (root: {self.root})"
            ) from error
        return resolved
