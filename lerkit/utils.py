"""Host information, size helpers and a small bit set."""

from __future__ import annotations

import enum
import os
import platform as _platform
import sys
from pathlib import Path

C04MIO = 4 * 1024 * 1024
C08MIO = 8 * 1024 * 1024
C16MIO = 16 * 1024 * 1024
C32MIO = 32 * 1024 * 1024
C64MIO = 64 * 1024 * 1024
C128MIO = 128 * 1024 * 1024

CACHED_DIR = Path("cached")
CPUINFO_PATH = Path("/proc/cpuinfo")

_MIB = 1024 * 1024
_WORD_MASK = 0xFFFFFFFF


class Platform(enum.Enum):
    """Operating systems the engine distinguishes."""

    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"
    OTHER = "other"


def current_platform() -> Platform:
    """The platform this interpreter runs on."""
    if sys.platform.startswith("win"):
        return Platform.WINDOWS
    if sys.platform.startswith("linux"):
        return Platform.LINUX
    if sys.platform == "darwin":
        return Platform.MACOS
    return Platform.OTHER


def home_dir() -> str:
    """The current user's home directory, or an empty string if unknown."""
    host = current_platform()
    if host is Platform.LINUX:
        import pwd

        try:
            return pwd.getpwuid(os.getuid()).pw_dir
        except KeyError:
            return ""
    if host is Platform.WINDOWS:
        return os.environ.get("USERPROFILE", "")
    return ""


def ram_capacity() -> int:
    """Physical memory in MiB, or 0 when it cannot be determined."""
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return 0
    if pages <= 0 or page_size <= 0:
        return 0
    return pages * page_size // _MIB


def cpu_name() -> str:
    """The processor's model name, or an empty string if unknown."""
    try:
        with CPUINFO_PATH.open(encoding="utf-8", errors="replace") as cpuinfo:
            for line in cpuinfo:
                if "model name" in line:
                    return line[line.index(":") + 2 :].rstrip("\n")
    except OSError:
        pass
    if current_platform() is Platform.LINUX:
        return ""
    return _platform.processor().rstrip(" ")


def give_best_size(required_size: int) -> int:
    """Pick a staging size bucket for ``required_size`` bytes."""
    for bucket in (C04MIO, C08MIO, C16MIO, C32MIO):
        if required_size >= bucket:
            return bucket
    return C64MIO


def read_blob_file(path: str | os.PathLike[str]) -> bytes:
    """Read a whole file as bytes."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileNotFoundError(f"File Not Found: {exc.strerror or exc}") from exc


class Bitset:
    """A 32-bit word of flags; a cleared bit marks a free slot."""

    def __init__(self, value: int = 0xFFFF) -> None:
        self.value = value & _WORD_MASK

    def set(self, index: int) -> None:
        """Set the bit at ``index``."""
        self.value = (self.value | (1 << index)) & _WORD_MASK

    def clear(self, index: int) -> None:
        """Clear the bit at ``index``."""
        self.value &= ~(1 << index) & _WORD_MASK

    def find_first(self) -> int:
        """Index of the lowest cleared bit (the count of trailing ones)."""
        return (self.value ^ (self.value + 1)).bit_length() - 1

    def size(self) -> int:
        """Number of bits needed to hold the value."""
        return self.value.bit_length()