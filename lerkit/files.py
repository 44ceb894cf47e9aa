"""Read-only files opened at the operating-system level."""

from __future__ import annotations

import os
import threading
from pathlib import Path


class ReadOnlyFile:
    """A file opened for reading, exposing its descriptor and size."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        flags = os.O_RDONLY | getattr(os, "O_BINARY", 0)
        self._fd: int | None = os.open(self.path, flags)
        try:
            self.size = os.fstat(self._fd).st_size
        except OSError:
            os.close(self._fd)
            self._fd = None
            raise
        self._lock = threading.Lock()

    def _require_open(self) -> int:
        if self._fd is None:
            raise ValueError(f"file {self.path} is closed")
        return self._fd

    def fileno(self) -> int:
        """The native file descriptor."""
        return self._require_open()

    def name(self) -> str:
        """The file name without its directory."""
        return self.path.name

    def read_at(self, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes starting at ``offset``."""
        if offset < 0 or length < 0:
            raise ValueError("offset and length must not be negative")
        fd = self._require_open()
        if hasattr(os, "pread"):
            return os.pread(fd, length, offset)
        with self._lock:
            os.lseek(fd, offset, os.SEEK_SET)
            return os.read(fd, length)

    def close(self) -> None:
        """Close the descriptor; closing twice is harmless."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    @property
    def closed(self) -> bool:
        return self._fd is None

    def __enter__(self) -> ReadOnlyFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __del__(self) -> None:
        fd = getattr(self, "_fd", None)
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass

    def __repr__(self) -> str:
        return f"ReadOnlyFile({str(self.path)!r}, size={getattr(self, 'size', 0)})"


def open_files(path: str | os.PathLike[str], ext: str) -> list[ReadOnlyFile]:
    """Open every regular file in ``path`` whose extension equals ``ext``."""
    return [
        ReadOnlyFile(entry)
        for entry in sorted(Path(path).iterdir())
        if entry.is_file() and entry.suffix == ext
    ]