import pytest

from lerkit.meshopt import (
    REMAP_UNUSED,
    Meshlet,
    build_meshlets,
    build_meshlets_bound,
    generate_vertex_remap,
    optimize_vertex_cache,
    remap_index_buffer,
    remap_vertex_buffer,
)


def _grid(n):
    positions = [(float(x), float(y), 0.0) for y in range(n + 1) for x in range(n + 1)]
    indices = []
    for y in range(n):
        for x in range(n):
            a = y * (n + 1) + x
            b = a + 1
            c = a + n + 1
            d = c + 1
            indices += [a, b, c, b, d, c]
    return positions, indices


def _tris(indices):
    it = iter(indices)
    return list(zip(it, it, it))


def test_remap_merges_identical_vertices():
    positions = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 0), (0, 1, 0), (1, 1, 0)]
    normals = [(0, 0, 1)] * 6
    indices = [0, 1, 2, 3, 4, 5]
    remap, unique = generate_vertex_remap(indices, 6, [positions, normals])
    assert unique == 4
    assert remap[3] == remap[0]
    assert remap[4] == remap[2]
    merged = remap_vertex_buffer(positions, 6, remap)
    assert len(merged) == unique
    assert all(merged[remap[i]] == positions[i] for i in indices)


def test_remap_distinguishes_by_every_stream():
    positions = [(0, 0, 0), (0, 0, 0), (1, 0, 0)]
    normals = [(0, 0, 1), (0, 1, 0), (0, 0, 1)]
    remap, unique = generate_vertex_remap([0, 1, 2], 3, [positions, normals])
    assert unique == len(set(remap))
    assert remap[0] != remap[1]


def test_remap_assigns_in_order_of_first_use():
    positions = [(float(i), 0.0, 0.0) for i in range(6)]
    indices = [5, 3, 1, 0, 2, 4]
    remap, unique = generate_vertex_remap(indices, 6, [positions])
    assert [remap[i] for i in indices] == list(range(unique))


def test_remap_marks_unreferenced_vertices():
    positions = [(float(i), 0.0, 0.0) for i in range(5)]
    remap, unique = generate_vertex_remap([0, 1, 2], 5, [positions])
    assert remap[3] == REMAP_UNUSED
    assert remap[4] == REMAP_UNUSED
    assert len(remap_vertex_buffer(positions, 5, remap)) == unique


def test_remap_without_indices_covers_all_vertices():
    positions = [(1, 2, 3), (1, 2, 3), (4, 5, 6)]
    remap, unique = generate_vertex_remap(None, 3, [positions])
    assert REMAP_UNUSED not in remap
    assert remap[0] == remap[1]
    assert unique == len(set(remap))


def test_remap_rejects_out_of_range_index():
    with pytest.raises(ValueError):
        generate_vertex_remap([0, 1, 7], 3, [[(0, 0, 0)] * 3])


def test_remap_rejects_short_stream():
    with pytest.raises(ValueError):
        generate_vertex_remap([0, 1, 2], 3, [[(0, 0, 0)] * 2])


def test_remap_index_buffer_looks_up_each_index():
    assert remap_index_buffer([0, 1, 2, 1], [2, 0, 1]) == [2, 0, 1, 0]


def test_remap_vertex_buffer_rejects_short_table():
    with pytest.raises(ValueError):
        remap_vertex_buffer([1, 2, 3], 3, [0, 1])


def test_vertex_cache_keeps_every_triangle():
    positions, indices = _grid(6)
    optimized = optimize_vertex_cache(indices, len(positions))
    assert len(optimized) == len(indices)
    assert sorted(_tris(optimized)) == sorted(_tris(indices))


def test_vertex_cache_handles_degenerate_triangles():
    indices = [0, 0, 1, 1, 2, 3, 3, 3, 3]
    optimized = optimize_vertex_cache(indices, 4)
    assert sorted(_tris(optimized)) == sorted(_tris(indices))


def test_vertex_cache_of_empty_buffer_is_empty():
    assert optimize_vertex_cache([], 0) == []


def test_vertex_cache_rejects_partial_triangle():
    with pytest.raises(ValueError):
        optimize_vertex_cache([0, 1], 2)


def test_vertex_cache_rejects_index_out_of_range():
    with pytest.raises(ValueError):
        optimize_vertex_cache([0, 1, 5], 3)


def test_meshlets_bound_of_nothing_is_zero():
    assert build_meshlets_bound(0, 64, 124) == 0


@pytest.mark.parametrize("max_vertices,max_triangles", [(2, 124), (256, 124), (64, 0), (64, 516), (64, 6)])
def test_meshlets_bound_rejects_bad_limits(max_vertices, max_triangles):
    with pytest.raises(ValueError):
        build_meshlets_bound(3, max_vertices, max_triangles)


def test_meshlets_bound_rejects_partial_triangle():
    with pytest.raises(ValueError):
        build_meshlets_bound(4, 64, 124)


@pytest.mark.parametrize("max_vertices,max_triangles", [(64, 124), (3, 4), (16, 8)])
def test_meshlets_rebuild_the_index_buffer(max_vertices, max_triangles):
    positions, indices = _grid(8)
    meshlets, vertices, triangles = build_meshlets(indices, max_vertices, max_triangles)
    rebuilt = []
    for meshlet in meshlets:
        assert 0 < meshlet.vertex_count <= max_vertices
        assert 0 < meshlet.triangle_count <= max_triangles
        assert meshlet.triangle_offset % 4 == 0
        local_vertices = vertices[meshlet.vertex_offset : meshlet.vertex_offset + meshlet.vertex_count]
        local = triangles[meshlet.triangle_offset : meshlet.triangle_offset + 3 * meshlet.triangle_count]
        rebuilt.extend(local_vertices[i] for i in local)
    assert rebuilt == indices
    assert len(meshlets) <= build_meshlets_bound(len(indices), max_vertices, max_triangles)


def test_meshlets_do_not_repeat_vertices_within_one():
    positions, indices = _grid(5)
    meshlets, vertices, _ = build_meshlets(indices, 32, 32)
    for meshlet in meshlets:
        chunk = vertices[meshlet.vertex_offset : meshlet.vertex_offset + meshlet.vertex_count]
        assert len(set(chunk)) == len(chunk)


def test_meshlets_of_empty_buffer():
    assert build_meshlets([], 64, 124) == ([], [], b"")


def test_single_triangle_meshlet():
    meshlets, vertices, triangles = build_meshlets([7, 8, 9], 64, 124)
    assert meshlets == [Meshlet(0, 0, 3, 1)]
    assert vertices == [7, 8, 9]
    assert len(triangles) % 4 == 0


def test_meshlets_reject_bad_limits():
    with pytest.raises(ValueError):
        build_meshlets([0, 1, 2], 64, 3)