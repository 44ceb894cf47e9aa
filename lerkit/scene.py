"""Scene import: geometry packing, instances and materials."""

from __future__ import annotations

import enum
import json
import os
import struct
from dataclasses import asdict, dataclass, field
from itertools import chain
from pathlib import Path, PurePosixPath
from typing import Any, Sequence

from lerkit.meshopt import (
    Meshlet,
    build_meshlets,
    generate_vertex_remap,
    optimize_vertex_cache,
    remap_index_buffer,
    remap_vertex_buffer,
)

MAX_VERTICES_PER_MESHLET = 64
MAX_TRIANGLES_PER_MESHLET = 124
TEXTURE_PREFIX = "sponza"
TEXTURE_EXTENSION = ".DDS"
INDEX_SIZE = 4
VERTEX_SIZE = 12

Vec3 = tuple[float, float, float]

IDENTITY: tuple[float, ...] = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


class SceneError(Exception):
    """Raised when a scene cannot be prepared or loaded."""


class BufferType(enum.IntEnum):
    """Kind of data a region of the geometry file holds."""

    INDEX = 0
    POSITION = 1
    TEXCOORD = 2
    NORMAL = 3
    TANGENT = 4


@dataclass
class Node:
    """A scene graph node; ``transformation`` is a row-major 4x4 matrix."""

    transformation: Sequence[float] = IDENTITY
    meshes: list[int] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    name: str = ""


@dataclass
class SourceMesh:
    """Triangle geometry as read from a model file."""

    positions: list[Vec3]
    faces: list[tuple[int, ...]]
    texcoords: list[Vec3] | None = None
    normals: list[Vec3] | None = None
    tangents: list[Vec3] | None = None
    material_index: int = 0
    bbox_min: Vec3 | None = None
    bbox_max: Vec3 | None = None

    def bounds(self) -> tuple[Vec3, Vec3]:
        """The bounding box, computed from the positions when not given."""
        if self.bbox_min is not None and self.bbox_max is not None:
            return _vec3(self.bbox_min), _vec3(self.bbox_max)
        if not self.positions:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        columns = list(zip(*(_vec3(p) for p in self.positions)))
        return (
            (min(columns[0]), min(columns[1]), min(columns[2])),
            (max(columns[0]), max(columns[1]), max(columns[2])),
        )


@dataclass
class SourceMaterial:
    """Texture file names a material refers to."""

    diffuse: str | None = None
    roughness: str | None = None
    occlusion: str | None = None
    normal: str | None = None


@dataclass
class SourceScene:
    """Meshes, materials and the node hierarchy that places the meshes."""

    meshes: list[SourceMesh]
    materials: list[SourceMaterial] = field(default_factory=list)
    root: Node = field(default_factory=Node)


@dataclass(frozen=True)
class Instance:
    """One placement of a mesh; ``model`` is the column-major world matrix."""

    mesh_id: int
    skin_id: int
    model: tuple[float, ...]


@dataclass(frozen=True)
class MaterialRecord:
    """Texture paths stored for a material."""

    normal: str | None = None
    diffuse: str | None = None
    roughness: str | None = None
    occlusion: str | None = None


@dataclass(frozen=True)
class BufferRecord:
    """A region of the geometry file, in bytes."""

    length: int
    offset: int
    type: BufferType


@dataclass(frozen=True)
class MeshRecord:
    """Where a mesh's indices and vertices lie in the packed buffers."""

    index_count: int
    first_index: int
    first_vertex: int
    vertex_count: int
    bbox_min: Vec3
    bbox_max: Vec3


def _vec3(value: Sequence[float]) -> Vec3:
    if len(value) != 3:
        raise SceneError(f"expected three components, got {len(value)}")
    x, y, z = value
    return float(x), float(y), float(z)


def _matrix(values: Sequence[float]) -> tuple[float, ...]:
    if len(values) != 16:
        raise SceneError("a transformation needs 16 values")
    return tuple(float(v) for v in values)


def _matmul(a: Sequence[float], b: Sequence[float]) -> tuple[float, ...]:
    return tuple(
        sum(a[row * 4 + k] * b[k * 4 + col] for k in range(4))
        for row in range(4)
        for col in range(4)
    )


def _transpose(m: Sequence[float]) -> tuple[float, ...]:
    return tuple(m[col * 4 + row] for row in range(4) for col in range(4))


def collect_instances(root: Node, meshes: Sequence[SourceMesh]) -> list[Instance]:
    """Every mesh placement in the hierarchy, depth first, with world matrices."""
    instances: list[Instance] = []

    def visit(node: Node, parent: tuple[float, ...] | None) -> None:
        local = _matrix(node.transformation)
        world = local if parent is None else _matmul(parent, local)
        model = _transpose(world)
        for mesh_id in node.meshes:
            if not 0 <= mesh_id < len(meshes):
                raise SceneError(f"node refers to missing mesh {mesh_id}")
            instances.append(Instance(mesh_id, meshes[mesh_id].material_index, model))
        for child in node.children:
            visit(child, world)

    visit(root, None)
    return instances


def _texture_path(prefix: str, filename: str) -> str:
    path = PurePosixPath(prefix) / filename
    return str(path.with_suffix(TEXTURE_EXTENSION))


def export_materials(
    materials: Sequence[SourceMaterial], prefix: str = TEXTURE_PREFIX
) -> list[MaterialRecord]:
    """Texture paths for each material, under ``prefix`` with a .DDS extension.

    A slot a material leaves empty keeps the path of the last material
    that set it.
    """
    current: dict[str, str | None] = dict.fromkeys(("normal", "diffuse", "roughness", "occlusion"))
    records = []
    for material in materials:
        for slot in ("diffuse", "roughness", "occlusion", "normal"):
            filename = getattr(material, slot)
            if filename:
                current[slot] = _texture_path(prefix, filename)
        records.append(MaterialRecord(**current))
    return records


def _triangle_indices(mesh: SourceMesh) -> list[int]:
    count = len(mesh.positions)
    indices: list[int] = []
    for face in mesh.faces:
        if len(face) != 3:
            raise SceneError(f"face with {len(face)} indices; only triangles are supported")
        if any(not 0 <= index < count for index in face):
            raise SceneError(f"face {tuple(face)} refers to a missing vertex")
        indices.extend(int(index) for index in face)
    return indices


def _streams(mesh: SourceMesh) -> list[list[Vec3]]:
    count = len(mesh.positions)
    streams = [[_vec3(p) for p in mesh.positions]]
    for name in ("texcoords", "normals", "tangents"):
        values = getattr(mesh, name)
        if not values:
            streams.append([(0.0, 0.0, 0.0)] * count)
        elif len(values) != count:
            raise SceneError(f"{name} holds {len(values)} values for {count} vertices")
        else:
            streams.append([_vec3(v) for v in values])
    return streams


class SceneImporter:
    """Pack a scene into a geometry file and a scene description file."""

    @staticmethod
    def prepare(
        scene: SourceScene,
        output: str,
        assets_dir: str | os.PathLike[str] = "assets",
    ) -> tuple[Path, Path]:
        """Write ``<output>.bin`` and ``<output>.mesh`` under ``assets_dir``.

        The geometry file holds the index buffer as little-endian uint32
        followed by the position, texture coordinate, normal and tangent
        buffers as little-endian float32 triples. Returns both paths.
        """
        if not scene.meshes:
            raise SceneError("scene has no meshes")

        index_buffer: list[int] = []
        vertex_buffers: tuple[list[Vec3], ...] = ([], [], [], [])
        mesh_records: list[MeshRecord] = []
        meshlets: list[Meshlet] = []

        for mesh in scene.meshes:
            indices = _triangle_indices(mesh)
            streams = _streams(mesh)
            count = len(mesh.positions)
            remap, unique = generate_vertex_remap(indices, count, streams)
            indices = optimize_vertex_cache(remap_index_buffer(indices, remap), unique)

            low, high = mesh.bounds()
            mesh_records.append(
                MeshRecord(len(indices), len(index_buffer), len(vertex_buffers[0]), unique, low, high)
            )
            index_buffer.extend(indices)
            for target, stream in zip(vertex_buffers, streams):
                target.extend(remap_vertex_buffer(stream, count, remap))

            built, _, _ = build_meshlets(indices, MAX_VERTICES_PER_MESHLET, MAX_TRIANGLES_PER_MESHLET)
            meshlets.extend(built)

        bin_path = Path(assets_dir) / f"{output}.bin"
        mesh_path = bin_path.with_suffix(".mesh")

        with bin_path.open("wb") as stream:
            stream.write(struct.pack(f"<{len(index_buffer)}I", *index_buffer))
            for buffer in vertex_buffers:
                stream.write(struct.pack(f"<{3 * len(buffer)}f", *chain.from_iterable(buffer)))

        index_bytes = len(index_buffer) * INDEX_SIZE
        length = len(vertex_buffers[0]) * VERTEX_SIZE
        buffers = [BufferRecord(index_bytes, 0, BufferType.INDEX)]
        buffers += [
            BufferRecord(length, index_bytes + length * i, BufferType(i + 1)) for i in range(4)
        ]

        document = {
            "instances": [asdict(i) for i in collect_instances(scene.root, scene.meshes)],
            "materials": [asdict(m) for m in export_materials(scene.materials)],
            "buffers": [
                {"length": b.length, "offset": b.offset, "type": int(b.type)} for b in buffers
            ],
            "meshes": [asdict(m) for m in mesh_records],
            "meshlets": [asdict(m) for m in meshlets],
        }
        mesh_path.write_text(json.dumps(document), encoding="utf-8")
        return bin_path, mesh_path

    @staticmethod
    def load(path: str | os.PathLike[str]) -> dict[str, list[Any]]:
        """Read a scene description written by :meth:`prepare`."""
        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SceneError(f"{path} is not a scene description: {exc}") from exc
        try:
            return {
                "instances": [
                    Instance(d["mesh_id"], d["skin_id"], tuple(float(v) for v in d["model"]))
                    for d in document["instances"]
                ],
                "materials": [MaterialRecord(**d) for d in document["materials"]],
                "buffers": [
                    BufferRecord(d["length"], d["offset"], BufferType(d["type"]))
                    for d in document["buffers"]
                ],
                "meshes": [
                    MeshRecord(
                        d["index_count"],
                        d["first_index"],
                        d["first_vertex"],
                        d["vertex_count"],
                        _vec3(d["bbox_min"]),
                        _vec3(d["bbox_max"]),
                    )
                    for d in document["meshes"]
                ],
                "meshlets": [Meshlet(**d) for d in document.get("meshlets", [])],
            }
        except (KeyError, TypeError, ValueError) as exc:
            raise SceneError(f"{path} is not a valid scene description: {exc}") from exc