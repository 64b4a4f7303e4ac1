"""Vertex records and the buffer layouts that describe them."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Tuple

_VERTEX_STRUCT = struct.Struct("<6f")
_FLOAT_SIZE = 4

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class VertexAttribute:
    """One attribute inside a vertex buffer element."""

    offset: int
    shader_location: int
    format: str


@dataclass(frozen=True)
class VertexBufferLayout:
    """How elements of a vertex buffer are laid out and stepped."""

    array_stride: int
    step_mode: str
    attributes: Tuple[VertexAttribute, ...]


def _as_vec3(values, name: str) -> Vec3:
    vec = tuple(float(v) for v in values)
    if len(vec) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(vec)}")
    return vec  # type: ignore[return-value]


@dataclass(frozen=True)
class ModelVertex:
    """A vertex with a position and a normal."""

    position: Vec3
    normal: Vec3 = field(default=(0.0, 0.0, 0.0))

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vec3(self.position, "position"))
        object.__setattr__(self, "normal", _as_vec3(self.normal, "normal"))

    @classmethod
    def from_position(cls, position) -> "ModelVertex":
        """Create a vertex at ``position`` with a zero normal."""
        return cls(position=position)

    def pack(self) -> bytes:
        """Return the vertex as little-endian 32-bit floats."""
        return _VERTEX_STRUCT.pack(*self.position, *self.normal)


def model_vertex_layout() -> VertexBufferLayout:
    """Return the per-vertex layout used for ``ModelVertex`` buffers."""
    return VertexBufferLayout(
        array_stride=_VERTEX_STRUCT.size,
        step_mode="vertex",
        attributes=(
            VertexAttribute(offset=0, shader_location=0, format="float32x3"),
            VertexAttribute(
                offset=3 * _FLOAT_SIZE, shader_location=1, format="float32x3"
            ),
        ),
    )