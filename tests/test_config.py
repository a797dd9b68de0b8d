"""Tests for backend configuration."""

import pytest

from vfskit import (
    MemoryFS,
    MemoryFSConfig,
    OtherError,
    PhysicalFS,
    PhysicalFSConfig,
    VPath,
    connect_fs,
    create_backend,
)


class TestConnectFS:
    """Test the connect_fs factory."""

    def test_memory_default(self):
        assert connect_fs() == MemoryFSConfig(type="memory", max_size_mb=None)

    def test_memory_with_limit(self):
        assert connect_fs(type="memory", max_size_mb=5).max_size_mb == 5

    def test_memory_rejects_negative_limit(self):
        with pytest.raises(ValueError, match="must not be negative"):
            connect_fs(type="memory", max_size_mb=-1)

    def test_memory_rejects_unknown_arguments(self):
        with pytest.raises(ValueError, match="Unexpected arguments for memory fs"):
            connect_fs(type="memory", root="/tmp")

    def test_physical(self, tmp_path):
        config = connect_fs(type="physical", root=str(tmp_path))
        assert config == PhysicalFSConfig(root=str(tmp_path))

    def test_physical_requires_root(self):
        with pytest.raises(ValueError, match="requires 'root'"):
            connect_fs(type="physical")

    def test_physical_rejects_unknown_arguments(self, tmp_path):
        with pytest.raises(ValueError, match="Unexpected arguments for physical fs"):
            connect_fs(type="physical", root=str(tmp_path), max_size_mb=1)

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unsupported filesystem type"):
            connect_fs(type="s3")


class TestCreateBackend:
    """Test turning configurations into backends."""

    def test_memory_backend(self):
        backend = create_backend(MemoryFSConfig(max_size_mb=1))
        assert isinstance(backend, MemoryFS)

        root = VPath.create(backend)
        with pytest.raises(OtherError, match="size limit exceeded"):
            root.join("big").write_bytes(b"x" * (2 * 1024 * 1024))

    def test_physical_backend(self, tmp_path):
        backend = create_backend(PhysicalFSConfig(root=str(tmp_path)))
        assert isinstance(backend, PhysicalFS)
        assert backend.root == tmp_path.resolve()

    def test_physical_backend_requires_root(self):
        with pytest.raises(ValueError):
            create_backend(PhysicalFSConfig())

    def test_config_builds_its_backend(self, tmp_path):
        assert isinstance(MemoryFSConfig().create_backend(), MemoryFS)
        assert isinstance(PhysicalFSConfig(root=str(tmp_path)).create_backend(), PhysicalFS)

    def test_unsupported_config(self):
        with pytest.raises(TypeError):
            create_backend(object())
