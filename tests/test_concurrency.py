"""Tests for MemoryFS under concurrent use from several threads."""

import threading
from concurrent.futures import ThreadPoolExecutor

from vfskit import MemoryFS, OtherError, VPath


class TestConcurrentStructure:
    """Test structural changes racing each other."""

    def test_parallel_create_dir_all_converges(self):
        """Racing create_dir_all calls on shared prefixes all succeed."""
        root = VPath.create(MemoryFS())
        barrier = threading.Barrier(8)

        def create(index):
            barrier.wait()
            root.join("shared").join("tree").join(f"leaf{index}").create_dir_all()

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(create, range(8)))

        names = {child.file_name() for child in root.join("shared").join("tree").read_dir()}
        assert names == {f"leaf{i}" for i in range(8)}

    def test_exactly_one_create_dir_wins(self):
        """create_dir on the same path from many threads succeeds once."""
        fs = MemoryFS()
        barrier = threading.Barrier(10)
        results = []
        lock = threading.Lock()

        def create():
            barrier.wait()
            try:
                fs.create_dir("/contested")
                outcome = "created"
            except OtherError as error:
                outcome = type(error).__name__
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=create) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count("created") == 1
        assert results.count("OtherError") == 9

    def test_parallel_file_creation_in_one_directory(self):
        fs = MemoryFS()
        fs.create_dir("/d")

        def create(index):
            with fs.create_file(f"/d/f{index}") as writer:
                writer.write(str(index).encode())

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(create, range(100)))

        assert set(fs.read_dir("/d")) == {f"f{i}" for i in range(100)}
        assert fs.open_file("/d/f42").read() == b"42"


class TestConcurrentContent:
    """Test the read snapshot and write commit guarantees across threads."""

    def test_open_reader_unaffected_by_concurrent_writer(self):
        fs = MemoryFS()
        with fs.create_file("/f") as writer:
            writer.write(b"original")
        reader = fs.open_file("/f")

        def rewrite():
            with fs.create_file("/f") as writer:
                writer.write(b"replaced content")

        thread = threading.Thread(target=rewrite)
        thread.start()
        thread.join()

        assert reader.read() == b"original"
        assert fs.open_file("/f").read() == b"replaced content"

    def test_concurrent_appends_are_not_torn(self):
        """Each write call lands whole, even with several writers at the end."""
        fs = MemoryFS()
        fs.create_file("/log").close()
        line = b"x" * 64 + b"\n"

        def append(_):
            for _ in range(50):
                with fs.append_file("/log") as writer:
                    writer.write(line)

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(append, range(4)))

        content = fs.open_file("/log").read()
        assert len(content) % len(line) == 0
        assert set(content.splitlines()) == {line.strip()}

    def test_readers_during_writes_see_prefixes(self):
        """A reader opened mid-stream sees whole committed writes only."""
        fs = MemoryFS()
        writer = fs.create_file("/stream")
        chunk = b"0123456789"
        seen = []
        done = threading.Event()

        def read_loop():
            while not done.is_set():
                seen.append(fs.open_file("/stream").read())

        thread = threading.Thread(target=read_loop)
        thread.start()
        for _ in range(200):
            writer.write(chunk)
        done.set()
        thread.join()
        writer.close()

        assert all(len(snapshot) % len(chunk) == 0 for snapshot in seen)
        assert fs.open_file("/stream").read() == chunk * 200
