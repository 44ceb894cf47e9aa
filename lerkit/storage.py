"""Planning of texture and buffer uploads through staging buffers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Iterable, Mapping, Sequence

from lerkit.files import ReadOnlyFile
from lerkit.ioservice import FileLoadRequest

TEXTURE_ALIGNMENT = 16


@dataclass(frozen=True)
class MipLevel:
    """Where one mip level's data lies inside a texture file."""

    byte_offset: int
    byte_length: int


@dataclass(frozen=True)
class Subresource:
    """One mip level to copy from a staging buffer into a texture."""

    index: int
    offset: int
    width: int
    height: int


def align(value: int, alignment: int) -> int:
    """Round ``value`` up to the next multiple of ``alignment``."""
    if alignment <= 0:
        raise ValueError("alignment must be positive")
    if value < 0:
        raise ValueError("value must not be negative")
    return -(-value // alignment) * alignment


def texture_read_length(path: str | os.PathLike[str], header_sizes: Mapping[str, int]) -> int:
    """Bytes to read to parse the header of the texture at ``path``.

    ``header_sizes`` maps lower-case extensions such as ``".dds"`` to the
    number of bytes a header needs; an unknown extension gives 0.
    """
    ext = PurePath(path).suffix.lower()
    return header_sizes.get(ext, 0)


def texture_request(
    file: ReadOnlyFile, header_sizes: Mapping[str, int], buffer_index: int
) -> FileLoadRequest:
    """A request reading the header of ``file`` to the start of a staging buffer."""
    return FileLoadRequest(
        file=file,
        file_length=texture_read_length(file.name(), header_sizes),
        file_offset=0,
        buff_offset=0,
        buff_index=buffer_index,
    )


def pack_texture_requests(
    files: Iterable[ReadOnlyFile], capacity: int, acquire: Callable[[], int]
) -> tuple[list[FileLoadRequest], list[int]]:
    """Pack whole files one after another into staging buffers.

    Each file starts on a 16-byte boundary; when the next one does not fit
    in the current buffer, ``acquire`` supplies a new buffer index. Returns
    the requests and the buffer indices acquired, in order.
    """
    if capacity <= 0:
        raise ValueError("capacity must be positive")
    requests: list[FileLoadRequest] = []
    stagings: list[int] = []
    offset = capacity
    buffer_id = -1
    for file in files:
        byte_size = align(file.size, TEXTURE_ALIGNMENT)
        if offset + byte_size > capacity:
            offset = 0
            buffer_id = acquire()
            stagings.append(buffer_id)
        requests.append(
            FileLoadRequest(
                file=file,
                file_length=file.size,
                file_offset=0,
                buff_offset=offset,
                buff_index=buffer_id,
            )
        )
        offset += byte_size
    return requests, stagings


def mip_subresources(
    levels: Sequence[MipLevel], width: int, height: int, base_offset: int = 0
) -> list[Subresource]:
    """Copy regions for every mip level, shifted by ``base_offset`` in the buffer."""
    subresources = []
    for mip, level in enumerate(levels):
        offset = level.byte_offset + base_offset
        if offset < 0:
            raise ValueError(f"mip level {mip} starts before the staging data")
        subresources.append(Subresource(mip, offset, width >> mip, height >> mip))
    return subresources


def buffer_request(
    file: ReadOnlyFile, length: int, offset: int, buffer_index: int
) -> FileLoadRequest:
    """A request reading ``length`` bytes at ``offset`` into a staging buffer."""
    if length < 0 or offset < 0:
        raise ValueError("length and offset must not be negative")
    return FileLoadRequest(
        file=file,
        file_length=length,
        file_offset=offset,
        buff_offset=0,
        buff_index=buffer_index,
    )