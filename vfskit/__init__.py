"""vfskit: Backend-agnostic virtual filesystem with an in-memory reference backend."""

from .base import VFS, VFileType, VMetadata
from .config import (
    FSConfig,
    MemoryFSConfig,
    PhysicalFSConfig,
    connect_fs,
    create_backend,
)
from .errors import (
    FileNotFound,
    IoError,
    OtherError,
    VfsError,
    WithContext,
    error_context,
)
from .memory import MemoryFile, MemoryFS
from .path import FileSystem, VPath
from .physical import PhysicalFS

__all__ = [
    "connect_fs",
    "create_backend",
    "error_context",
    "FileNotFound",
    "FileSystem",
    "FSConfig",
    "IoError",
    "MemoryFile",
    "MemoryFS",
    "MemoryFSConfig",
    "OtherError",
    "PhysicalFS",
    "PhysicalFSConfig",
    "VFileType",
    "VFS",
    "VfsError",
    "VMetadata",
    "VPath",
    "WithContext",
]
