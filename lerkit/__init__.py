"""Renderer support toolkit: allocation, file loading, texture, swap-chain and scene helpers."""

__version__ = "0.1.0"

__all__ = [
    "memory",
    "utils",
    "files",
    "threads",
    "ioservice",
    "formats",
    "swapchain",
    "storage",
    "meshopt",
    "scene",
]