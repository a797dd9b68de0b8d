"""Error types and context chaining.

Every failure raised by a backend is a ``VfsError``. The path layer adds one
human-readable frame per primitive call with ``error_context()``, so an error
rendered to a user reads outermost-first::

    Could not open file '/missing/path', cause: the file or directory
    `/missing/path` could not be found

while the innermost error stays available as ``error.root_cause``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class VfsError(Exception):
    """Base class for all virtual filesystem errors."""

    @property
    def root_cause(self) -> VfsError:
        """Innermost error of the chain (``self`` for leaf errors)."""
        return self

    def chain(self) -> Iterator[VfsError]:
        """Iterate over the chain, outermost error first."""
        yield self


class IoError(VfsError):
    """An I/O failure reported by the underlying storage.

    Attributes:
        error: The original ``OSError``.
    """

    def __init__(self, error: OSError):
        self.error = error
        super().__init__(f"I/O error: {error}")
        self.__cause__ = error


class FileNotFound(VfsError):
    """A path did not exist where existence was required.

    Attributes:
        path: The path that could not be resolved.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"the file or directory `{path}` could not be found")


class OtherError(VfsError):
    """A backend-specific failure not covered by the other kinds.

    Attributes:
        message: Description of the failure.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"other VFS error: {message}")


class WithContext(VfsError):
    """A description layered over a preceding error.

    Attributes:
        context: What was being attempted.
        cause: The error that made it fail.
    """

    def __init__(self, context: str, cause: VfsError):
        self.context = context
        self.cause = cause
        super().__init__(f"{context}, cause: {cause}")

    @property
    def root_cause(self) -> VfsError:
        error: VfsError = self
        while isinstance(error, WithContext):
            error = error.cause
        return error

    def chain(self) -> Iterator[VfsError]:
        error: VfsError = self
        while isinstance(error, WithContext):
            yield error
            error = error.cause
        yield error


@contextmanager
def error_context(context: str) -> Iterator[None]:
    """Attach ``context`` to any ``VfsError`` raised inside the block.

    Bare ``OSError``s (from backends that do not translate host failures
    themselves) are wrapped in ``IoError`` first. Nothing happens when the
    block succeeds.

    Example::

        with error_context(f"Could not open file '{path}'"):
            return backend.open_file(path)
    """
    try:
        yield
    except VfsError as error:
        raise WithContext(context, error) from error
    except OSError as error:
        raise WithContext(context, IoError(error)) from error
