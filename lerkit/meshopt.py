"""Index and vertex buffer optimisation and meshlet building."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

REMAP_UNUSED = 0xFFFFFFFF
MAX_MESHLET_VERTICES = 255
MAX_MESHLET_TRIANGLES = 512
VERTEX_CACHE_SIZE = 16


@dataclass(frozen=True)
class Meshlet:
    """A cluster of triangles sharing a small set of vertices.

    ``vertex_offset`` indexes the meshlet vertex list, ``triangle_offset``
    the byte array of local triangle indices.
    """

    vertex_offset: int
    triangle_offset: int
    vertex_count: int
    triangle_count: int


def _triangles(indices: Sequence[int]) -> list[tuple[int, int, int]]:
    it = iter(indices)
    return list(zip(it, it, it))


def _check_indices(indices: Sequence[int], vertex_count: int) -> None:
    if len(indices) % 3:
        raise ValueError("index count must be a multiple of 3")
    if any(not 0 <= index < vertex_count for index in indices):
        raise ValueError(f"index out of range for {vertex_count} vertices")


def _check_limits(max_vertices: int, max_triangles: int) -> None:
    if not 3 <= max_vertices <= MAX_MESHLET_VERTICES:
        raise ValueError(f"max_vertices must be between 3 and {MAX_MESHLET_VERTICES}")
    if not 1 <= max_triangles <= MAX_MESHLET_TRIANGLES:
        raise ValueError(f"max_triangles must be between 1 and {MAX_MESHLET_TRIANGLES}")
    if max_triangles % 4:
        raise ValueError("max_triangles must be a multiple of 4")


def _key(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def generate_vertex_remap(
    indices: Sequence[int] | None, vertex_count: int, streams: Iterable[Sequence[Any]]
) -> tuple[list[int], int]:
    """Map each vertex to a unique index, merging vertices equal in every stream.

    New indices are given in order of first use; vertices never referenced
    map to ``REMAP_UNUSED``. Returns the table and the unique vertex count.
    """
    streams = list(streams)
    if any(len(stream) < vertex_count for stream in streams):
        raise ValueError("every stream must hold vertex_count values")
    if indices is None:
        order: Iterable[int] = range(vertex_count)
    else:
        _check_indices(indices, vertex_count)
        order = indices

    remap = [REMAP_UNUSED] * vertex_count
    seen: dict[tuple[Any, ...], int] = {}
    for index in order:
        if remap[index] != REMAP_UNUSED:
            continue
        key = tuple(_key(stream[index]) for stream in streams)
        target = seen.setdefault(key, len(seen))
        remap[index] = target
    return remap, len(seen)


def remap_index_buffer(indices: Iterable[int], remap: Sequence[int]) -> list[int]:
    """Replace every index by its entry in ``remap``."""
    return [remap[index] for index in indices]


def remap_vertex_buffer(
    vertices: Sequence[Any], vertex_count: int, remap: Sequence[int]
) -> list[Any]:
    """Move vertices to their remapped slots, dropping unused ones."""
    if len(remap) < vertex_count or len(vertices) < vertex_count:
        raise ValueError("vertices and remap must hold vertex_count entries")
    table = remap[:vertex_count]
    used = [target for target in table if target != REMAP_UNUSED]
    result: list[Any] = [None] * (max(used) + 1 if used else 0)
    for vertex, target in zip(vertices, table):
        if target != REMAP_UNUSED:
            result[target] = vertex
    return result


def _vertex_score(cache_position: int, live_triangles: int) -> float:
    if live_triangles == 0:
        return -1.0
    score = 0.0
    if cache_position >= 0:
        if cache_position < 3:
            score = 0.75
        else:
            scaled = 1.0 - (cache_position - 3) / (VERTEX_CACHE_SIZE - 3)
            score = scaled**1.5
    return score + 2.0 * live_triangles**-0.5


def optimize_vertex_cache(indices: Sequence[int], vertex_count: int) -> list[int]:
    """Reorder triangles so consecutive ones reuse recently used vertices."""
    _check_indices(indices, vertex_count)
    triangles = _triangles(indices)
    if not triangles:
        return []

    adjacency: list[list[int]] = [[] for _ in range(vertex_count)]
    for number, triangle in enumerate(triangles):
        for vertex in triangle:
            adjacency[vertex].append(number)

    live = [len(entry) for entry in adjacency]
    cache_position = [-1] * vertex_count
    vertex_score = [_vertex_score(-1, count) for count in live]
    triangle_score = [sum(vertex_score[v] for v in triangle) for triangle in triangles]
    emitted = [False] * len(triangles)
    cache: list[int] = []
    result: list[int] = []
    cursor = 0

    current: int | None = max(range(len(triangles)), key=triangle_score.__getitem__)
    while current is not None:
        triangle = triangles[current]
        result.extend(triangle)
        emitted[current] = True
        for vertex in triangle:
            adjacency[vertex].remove(current)
            live[vertex] -= 1

        grown = list(dict.fromkeys([*triangle, *cache]))
        cache, evicted = grown[:VERTEX_CACHE_SIZE], grown[VERTEX_CACHE_SIZE:]
        for vertex in evicted:
            cache_position[vertex] = -1
        for position, vertex in enumerate(cache):
            cache_position[vertex] = position

        for vertex in {*cache, *evicted}:
            score = _vertex_score(cache_position[vertex], live[vertex])
            delta = score - vertex_score[vertex]
            vertex_score[vertex] = score
            for number in adjacency[vertex]:
                triangle_score[number] += delta

        best: int | None = None
        best_score = float("-inf")
        for vertex in cache:
            for number in adjacency[vertex]:
                if triangle_score[number] > best_score:
                    best, best_score = number, triangle_score[number]
        if best is None:
            while cursor < len(triangles) and emitted[cursor]:
                cursor += 1
            best = cursor if cursor < len(triangles) else None
        current = best
    return result


def build_meshlets_bound(index_count: int, max_vertices: int, max_triangles: int) -> int:
    """Upper bound on the number of meshlets ``build_meshlets`` can produce."""
    _check_limits(max_vertices, max_triangles)
    if index_count < 0 or index_count % 3:
        raise ValueError("index count must be a non-negative multiple of 3")
    conservative = max_vertices - 2
    by_vertices = -(-index_count // conservative)
    by_triangles = -(-(index_count // 3) // max_triangles)
    return max(by_vertices, by_triangles)


def build_meshlets(
    indices: Sequence[int], max_vertices: int, max_triangles: int
) -> tuple[list[Meshlet], list[int], bytes]:
    """Split triangles, in order, into meshlets within the given limits.

    Returns the meshlets, the concatenated global vertex indices of every
    meshlet, and the local triangle indices as bytes, each meshlet's
    triangle data padded to a multiple of four bytes.
    """
    _check_limits(max_vertices, max_triangles)
    if len(indices) % 3:
        raise ValueError("index count must be a multiple of 3")

    meshlets: list[Meshlet] = []
    meshlet_vertices: list[int] = []
    meshlet_triangles = bytearray()
    local: dict[int, int] = {}
    triangles: list[int] = []

    def flush() -> None:
        meshlets.append(
            Meshlet(
                vertex_offset=len(meshlet_vertices) - len(local),
                triangle_offset=len(meshlet_triangles),
                vertex_count=len(local),
                triangle_count=len(triangles) // 3,
            )
        )
        meshlet_triangles.extend(triangles)
        meshlet_triangles.extend(bytes(-len(triangles) % 4))
        local.clear()
        triangles.clear()

    for triangle in _triangles(indices):
        new_vertices = len(set(triangle) - local.keys())
        if len(local) + new_vertices > max_vertices or len(triangles) // 3 >= max_triangles:
            flush()
        for vertex in triangle:
            if vertex not in local:
                local[vertex] = len(local)
                meshlet_vertices.append(vertex)
        triangles.extend(local[vertex] for vertex in triangle)

    if triangles:
        flush()
    return meshlets, meshlet_vertices, bytes(meshlet_triangles)