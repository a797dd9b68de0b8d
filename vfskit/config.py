"""Configuration for filesystem backends.

Each backend has a config dataclass that validates its own fields.
connect_fs picks the dataclass by backend name, and create_backend turns a
config into a backend instance (memory or physical).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal, Union

from .base import VFS
from .memory import MemoryFS
from .physical import PhysicalFS


@dataclass
class MemoryFSConfig:
    """Configuration for the in-memory filesystem.

    Attributes:
        type: Always "memory".
        max_size_mb: Maximum total size of all files in megabytes.
            None means unlimited.
    """

    type: Literal["memory"] = "memory"
    max_size_mb: int | None = None

    def __post_init__(self) -> None:
        if self.max_size_mb is not None and self.max_size_mb < 0:
            raise ValueError(f"max_size_mb must not be negative: {self.max_size_mb}")

    def create_backend(self) -> MemoryFS:
        return MemoryFS(max_size_mb=self.max_size_mb)


@dataclass
class PhysicalFSConfig:
    """Configuration for the host filesystem restricted to a directory.

    Attributes:
        type: Always "physical".
        root: Path of the directory used as the virtual root.
    """

    type: Literal["physical"] = "physical"
    root: str = ""

    def __post_init__(self) -> None:
        if not self.root:
            raise ValueError("Physical filesystem requires 'root' parameter")
        self.root = str(self.root)

    def create_backend(self) -> PhysicalFS:
        return PhysicalFS(self.root)


# Type alias for all filesystem configs
FSConfig = Union[MemoryFSConfig, PhysicalFSConfig]

_CONFIG_TYPES: dict[str, type[MemoryFSConfig] | type[PhysicalFSConfig]] = {
    "memory": MemoryFSConfig,
    "physical": PhysicalFSConfig,
}


def connect_fs(type: Literal["memory", "physical"] = "memory", **kwargs) -> FSConfig:
    """Configure filesystem access.

    Keyword arguments are the fields of the chosen config dataclass:
    ``max_size_mb`` for "memory", ``root`` (required) for "physical".

    Examples:
        >>> connect_fs(type="memory")
        MemoryFSConfig(type='memory', max_size_mb=None)

        >>> connect_fs(type="physical", root="/srv/data")
        PhysicalFSConfig(type='physical', root='/srv/data')

    Raises:
        ValueError: For an unknown backend type, an argument the backend
            does not take, or an invalid value.
    """
    config_type = _CONFIG_TYPES.get(type)
    if config_type is None:
        raise ValueError(
            f"Unsupported filesystem type: {type}. "
            f"Use one of: {', '.join(sorted(_CONFIG_TYPES))}."
        )
    accepted = {field.name for field in fields(config_type)} - {"type"}
    unexpected = sorted(set(kwargs) - accepted)
    if unexpected:
        raise ValueError(f"Unexpected arguments for {type} fs: {unexpected}")
    return config_type(**kwargs)


def create_backend(config: FSConfig) -> VFS:
    """Instantiate the backend described by ``config``."""
    if not isinstance(config, (MemoryFSConfig, PhysicalFSConfig)):
        raise TypeError(f"Unsupported filesystem config: {config!r}")
    return config.create_backend()
