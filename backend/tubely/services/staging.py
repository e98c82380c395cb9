"""
Request-scoped temporary files for the upload pipeline
"""

import os
import tempfile
from contextlib import contextmanager
from typing import BinaryIO, Iterator, List, Optional

from tubely.errors import StagingFailure, UploadTooLarge
from tubely.utils.logger import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


class StagedFile:
    """A temp file owned by exactly one staging session"""

    def __init__(self, path: str, handle: BinaryIO):
        self.path = path
        self.handle = handle
        self.size = 0

    def write_from(self, stream: BinaryIO, limit: Optional[int] = None) -> int:
        """Stream-copy `stream` into this file, enforcing an optional byte limit"""
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            self.size += len(chunk)
            if limit is not None and self.size > limit:
                raise UploadTooLarge(f"Upload exceeds maximum size of {limit} bytes")
            self.handle.write(chunk)
        self.handle.flush()
        return self.size

    def rewind(self) -> None:
        self.handle.seek(0)

    def close(self) -> None:
        if not self.handle.closed:
            self.handle.close()


class StagingSession:
    """Tracks every path created during one pipeline run"""

    def __init__(self, directory: str):
        self.directory = directory
        self._files: List[StagedFile] = []
        self._paths: List[str] = []

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def acquire(self, prefix: str = "tubely-", suffix: str = "") -> StagedFile:
        """Create a uniquely named temp file that is removed when the session ends"""
        try:
            fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=self.directory)
            handle = os.fdopen(fd, "w+b")
        except OSError as e:
            raise StagingFailure("Unable to create temp file", cause=e)

        staged = StagedFile(path, handle)
        self._files.append(staged)
        self._paths.append(path)
        return staged

    def track(self, path: str) -> str:
        """Put a path produced outside the session (e.g. by ffmpeg) under its cleanup"""
        if path not in self._paths:
            self._paths.append(path)
        return path

    def cleanup(self) -> None:
        for staged in self._files:
            staged.close()
        self._files.clear()

        while self._paths:
            path = self._paths.pop()
            try:
                _remove_quietly(path)
            except OSError as e:
                logger.warning(f"Could not remove staged file {path}: {e}")


class StagingArea:
    """Factory for staging sessions rooted in one directory"""

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory or tempfile.gettempdir()
        os.makedirs(self.directory, exist_ok=True)

    @contextmanager
    def session(self) -> Iterator[StagingSession]:
        staging = StagingSession(self.directory)
        try:
            yield staging
        finally:
            staging.cleanup()

    def copy_to(self, stream: BinaryIO, destination: str, limit: Optional[int] = None) -> int:
        """Stream-copy into a permanent destination (no session cleanup)"""
        written = 0
        try:
            with open(destination, "wb") as out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if limit is not None and written > limit:
                        raise UploadTooLarge(f"Upload exceeds maximum size of {limit} bytes")
                    out.write(chunk)
        except OSError as e:
            _remove_quietly(destination)
            raise StagingFailure(f"Unable to write {destination}", cause=e)
        except UploadTooLarge:
            _remove_quietly(destination)
            raise
        return written


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
