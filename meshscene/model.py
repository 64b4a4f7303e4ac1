"""Models, meshes, per-instance transforms and draw commands."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from meshscene.accessors import InitializationError
from meshscene.primitive import GPrimitive
from meshscene.range_splicer import define_index_ranges
from meshscene.transforms import Matrix4, identity as _identity, multiply
from meshscene.vertex import ModelVertex, VertexAttribute, VertexBufferLayout

_LOCAL_TRANSFORM = struct.Struct("<16fI")
_VEC4_SIZE = 16


@dataclass
class GMesh:
    """A mesh made of one or more primitives."""

    primitives: List[GPrimitive] = field(default_factory=list)

    @classmethod
    def from_gltf(cls, document: Mapping[str, Any], mesh_index: int) -> "GMesh":
        """Build the mesh at ``mesh_index`` of a parsed glTF document."""
        meshes = document.get("meshes", [])
        if not 0 <= mesh_index < len(meshes):
            raise ValueError(f"mesh {mesh_index} does not exist")
        return cls(
            primitives=[
                GPrimitive.from_gltf(document, primitive)
                for primitive in meshes[mesh_index].get("primitives", [])
            ]
        )


@dataclass
class GModel:
    """A model: its meshes and how many times each appears in it."""

    meshes: List[GMesh] = field(default_factory=list)
    mesh_instances: List[int] = field(default_factory=list)
    animation_data: Optional[Any] = None

    def _primitives(self):
        return (primitive for mesh in self.meshes for primitive in mesh.primitives)

    def model_vertex_data(
        self, buffer: bytes, vertex_offset: int
    ) -> Tuple[List[ModelVertex], int]:
        """Read all vertices of the model, starting at ``vertex_offset``.

        Records each primitive's vertex offset and count, and returns the
        vertices together with the offset just past them.
        """
        vertices: List[ModelVertex] = []
        for primitive in self._primitives():
            primitive_vertices = primitive.vertex_data(buffer)
            primitive.initialized_vertex_offset_len = (
                vertex_offset,
                len(primitive_vertices),
            )
            vertex_offset += len(primitive_vertices)
            vertices.extend(primitive_vertices)
        return vertices, vertex_offset

    def build_range_vec(self, ranges: List[range]) -> None:
        """Merge the index byte ranges of every primitive into ``ranges``."""
        for primitive in self._primitives():
            define_index_ranges(
                ranges,
                range(
                    primitive.indices_offset,
                    primitive.indices_offset + primitive.indices_length,
                ),
            )

    @staticmethod
    def model_index_data(buffer: bytes, ranges: Sequence[range]) -> List[int]:
        """Read the indices held in ``ranges`` of the main buffer."""
        return GPrimitive.index_data(buffer, ranges)

    def set_model_primitive_offsets(self, ranges: Sequence[range]) -> None:
        """Record each primitive's place in the index buffer composed from ``ranges``."""
        for primitive in self._primitives():
            primitive.set_primitive_offset(ranges)


@dataclass
class LocalTransform:
    """A mesh instance's transform inside its model, and the model instance it belongs to."""

    transform_matrix: Matrix4 = field(default_factory=_identity)
    model_index: int = 0

    @staticmethod
    def identity() -> Matrix4:
        """Return the identity matrix."""
        return _identity()

    @staticmethod
    def raw_matrix_from_vectors(x_vector, y_vector, z_vector, w_vector) -> Matrix4:
        """Assemble a matrix from its four columns."""
        return tuple(
            tuple(float(v) for v in column)
            for column in (x_vector, y_vector, z_vector, w_vector)
        )  # type: ignore[return-value]

    def pack(self) -> bytes:
        """Return the transform as 16 little-endian floats followed by a u32."""
        flat = [value for column in self.transform_matrix for value in column]
        return _LOCAL_TRANSFORM.pack(*flat, self.model_index)

    @staticmethod
    def layout() -> VertexBufferLayout:
        """Return the per-instance buffer layout of packed transforms."""
        columns = tuple(
            VertexAttribute(
                offset=n * _VEC4_SIZE, shader_location=3 + n, format="float32x4"
            )
            for n in range(4)
        )
        return VertexBufferLayout(
            array_stride=_LOCAL_TRANSFORM.size,
            step_mode="instance",
            attributes=columns
            + (
                VertexAttribute(
                    offset=4 * _VEC4_SIZE, shader_location=7, format="uint32"
                ),
            ),
        )


@dataclass(frozen=True)
class GlobalTransform:
    """A transform applied to a whole model instance."""

    transform_matrix: Matrix4

    def __mul__(self, other: Matrix4) -> Matrix4:
        return multiply(self.transform_matrix, other)


@dataclass(frozen=True)
class DrawIndexed:
    """One indexed, instanced draw call."""

    indices: range
    base_vertex: int
    instances: range


def _draw_mesh(mesh: GMesh, instances: range) -> List[DrawIndexed]:
    commands = []
    for primitive in mesh.primitives:
        if (
            primitive.initialized_index_offset_len is None
            or primitive.initialized_vertex_offset_len is None
        ):
            raise InitializationError(
                InitializationError.SCENE_INITIALIZATION,
                "primitive buffer offsets have not been set",
            )
        index_offset, index_length = primitive.initialized_index_offset_len
        vertex_offset, _ = primitive.initialized_vertex_offset_len
        commands.append(
            DrawIndexed(
                indices=range(index_offset, index_offset + index_length),
                base_vertex=vertex_offset,
                instances=instances,
            )
        )
    return commands


def _draw_model(
    model: GModel, model_offset: int, model_instance_count: int
) -> Tuple[List[DrawIndexed], int]:
    commands: List[DrawIndexed] = []
    mesh_offset = model_offset
    for mesh, per_model in zip(model.meshes, model.mesh_instances):
        count = per_model * model_instance_count
        commands.extend(_draw_mesh(mesh, range(mesh_offset, mesh_offset + count)))
        mesh_offset += count
    return commands, mesh_offset


def draw_scene(
    models: Sequence[GModel], model_instances: Sequence[int]
) -> List[DrawIndexed]:
    """Return the draw calls for every primitive of every model instance."""
    commands: List[DrawIndexed] = []
    offset = 0
    for model, instance_count in zip(models, model_instances):
        model_commands, end = _draw_model(model, offset, instance_count)
        commands.extend(model_commands)
        offset += end
    return commands