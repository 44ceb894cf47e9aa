[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lerkit"
version = "0.1.0"
description = "Renderer support toolkit: offset allocator, batched file loading, texture and swap-chain selection helpers, and mesh scene preparation"
requires-python = ">=3.10"
dependencies = []
keywords = ["rendering", "allocator", "meshlet", "texture", "swapchain", "scene"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lerkit"]

[tool.pytest.ini_options]
addopts = "-ra"
