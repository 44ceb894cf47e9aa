"""Swap chain configuration choices made from surface properties."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Sequence

from lerkit.formats import VkFormat

UINT32_MAX = 0xFFFFFFFF


class SwapChainError(Exception):
    """Raised when the surface offers nothing the swap chain can use."""


class PresentMode(enum.IntEnum):
    """Vulkan presentation modes."""

    IMMEDIATE = 0
    MAILBOX = 1
    FIFO = 2
    FIFO_RELAXED = 3


class ColorSpace(enum.IntEnum):
    """Vulkan surface colour spaces."""

    SRGB_NONLINEAR = 0


@dataclass(frozen=True)
class SurfaceFormat:
    """A format and colour space pair a surface supports."""

    format: VkFormat
    color_space: ColorSpace = ColorSpace.SRGB_NONLINEAR


@dataclass(frozen=True)
class Extent2D:
    """A width and height in pixels."""

    width: int
    height: int


@dataclass(frozen=True)
class SurfaceCapabilities:
    """The parts of a surface's capabilities the swap chain looks at."""

    current_extent: Extent2D
    min_image_extent: Extent2D
    max_image_extent: Extent2D
    min_image_count: int = 1


def choose_present_mode(available: Iterable[PresentMode], vsync: bool) -> PresentMode:
    """FIFO when vsync is wanted, MAILBOX otherwise, else IMMEDIATE."""
    for mode in available:
        if mode == PresentMode.FIFO and vsync:
            return mode
        if mode == PresentMode.MAILBOX and not vsync:
            return mode
    return PresentMode.IMMEDIATE


def choose_surface_format(available: Sequence[SurfaceFormat]) -> SurfaceFormat:
    """Pick an 8-bit RGBA or BGRA format in the sRGB non-linear colour space."""
    if len(available) == 1 and available[0].format == VkFormat.UNDEFINED:
        return SurfaceFormat(VkFormat.B8G8R8A8_UNORM, ColorSpace.SRGB_NONLINEAR)
    for candidate in available:
        if (
            candidate.format in (VkFormat.R8G8B8A8_UNORM, VkFormat.B8G8R8A8_UNORM)
            and candidate.color_space == ColorSpace.SRGB_NONLINEAR
        ):
            return candidate
    raise SwapChainError("found no suitable surface format")


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def choose_extent(capabilities: SurfaceCapabilities, width: int, height: int) -> Extent2D:
    """The surface's extent, or the requested one clamped when it is free."""
    if capabilities.current_extent.width != UINT32_MAX:
        return capabilities.current_extent
    low, high = capabilities.min_image_extent, capabilities.max_image_extent
    return Extent2D(_clamp(width, low.width, high.width), _clamp(height, low.height, high.height))


def back_buffer_count(capabilities: SurfaceCapabilities, frame_count: int) -> int:
    """The surface's minimum image count kept between one and ``frame_count``."""
    if frame_count < 1:
        raise ValueError("frame_count must be at least one")
    return _clamp(capabilities.min_image_count, 1, frame_count)


def next_frame(current: int, image_count: int) -> int:
    """The frame index that follows ``current``, wrapping at ``image_count``."""
    if image_count < 1:
        raise ValueError("image_count must be at least one")
    return (current + 1) % image_count