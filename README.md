# lerkit

Support pieces for a real-time renderer, usable on their own from Python.
The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `lerkit.memory`: `VariableSizeAllocator`, a best-fit offset allocator over a
  linear range. `allocate(size)` returns an offset taken from the smallest free
  block that fits; `free(offset, size)` releases a range and merges it with
  adjacent free blocks. `free_size()` and `free_blocks()` report what is free.
  `AllocationError` is raised when no block can hold a request, `ValueError`
  for negative sizes or ranges outside the allocator.
- `lerkit.utils`: host information (`current_platform`, `home_dir`,
  `ram_capacity` in MiB, `cpu_name`), `give_best_size` for picking a staging
  size bucket, `read_blob_file` to read a whole file as bytes, and `Bitset`, a
  32-bit word of flags whose `find_first` gives the lowest cleared bit.
- `lerkit.files`: `ReadOnlyFile`, a read-only file handle with its `size`,
  `fileno()`, `name()` and positional `read_at(offset, length)`, usable as a
  context manager; `open_files(path, ext)` opens every regular file with the
  given extension in a directory, in sorted order.
- `lerkit.threads`: `ThreadPool`, a fixed set of worker threads;
  `enqueue(fn, *args)` returns a `concurrent.futures.Future`.
- `lerkit.ioservice`: `IoService` reads batches of `FileLoadRequest`s into
  buffers registered with `register_buffers` on a background thread.
  `submit` returns a future that is completed through the given thread pool
  with the number of bytes read per request, or fails with `IoError`.
- `lerkit.formats`: the `Format` / `VkFormat` mapping (`convert_format`,
  `reverse_format`) and helpers that pick sampler address mode, image type,
  sample count, aspect flags and usage flags for a `TextureDesc`.
- `lerkit.swapchain`: `choose_present_mode`, `choose_surface_format` (raises
  `SwapChainError` when nothing suits), `choose_extent`, `back_buffer_count`
  and `next_frame`.
- `lerkit.storage`: planning of uploads through staging buffers: `align`,
  `texture_read_length`, `texture_request`, `pack_texture_requests` (packs
  files on 16-byte boundaries, acquiring new buffers as needed),
  `mip_subresources` and `buffer_request`.
- `lerkit.meshopt`: `generate_vertex_remap`, `remap_index_buffer`,
  `remap_vertex_buffer`, `optimize_vertex_cache`, `build_meshlets_bound` and
  `build_meshlets`.
- `lerkit.scene`: `SceneImporter.prepare` takes a `SourceScene` (meshes,
  materials and a `Node` hierarchy) and writes `<output>.bin`, holding the
  index buffer (little-endian uint32) followed by position, texture
  coordinate, normal and tangent buffers (little-endian float32 triples), and
  `<output>.mesh`, a JSON description of instances, materials, buffers,
  meshes and meshlets. `SceneImporter.load` reads that description back.
  `collect_instances` and `export_materials` are available on their own.

## Examples

```python
from lerkit.memory import VariableSizeAllocator

allocator = VariableSizeAllocator(1024)
a = allocator.allocate(256)   # 0
b = allocator.allocate(128)   # 256
allocator.free(a, 256)
print(allocator.free_size())  # 896
```

```python
from lerkit.swapchain import PresentMode, choose_present_mode

mode = choose_present_mode([PresentMode.MAILBOX, PresentMode.FIFO], vsync=True)
# PresentMode.FIFO
```

```python
from lerkit.scene import Node, SceneImporter, SourceMesh, SourceScene

mesh = SourceMesh(positions=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 1, 2)])
scene = SourceScene(meshes=[mesh], root=Node(meshes=[0]))
bin_path, mesh_path = SceneImporter.prepare(scene, "triangle", assets_dir=".")
description = SceneImporter.load(mesh_path)
```

## What the package does not do

- It talks to no graphics device: the format, swap-chain and storage modules
  compute choices and upload plans, but create no textures, swap chains or
  command buffers.
- It reads no model files: a `SourceScene` must be built by the caller.
- It parses no texture headers: `lerkit.storage` takes header sizes and mip
  level offsets as input.
- It provides no command-line program.