"""Mesh primitives and the buffer regions they occupy."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from meshscene.accessors import (
    AccessorDataType,
    GltfError,
    InitializationError,
    accessor_from_json,
    get_primitive_data,
)
from meshscene.vertex import ModelVertex

_VEC3 = struct.Struct("<3f")
_U16 = struct.Struct("<H")


@dataclass
class GPrimitive:
    """Byte regions of one primitive's positions, normals and indices.

    Offsets and lengths are in bytes relative to the main binary buffer.
    Once a scene is assembled, ``initialized_vertex_offset_len`` and
    ``initialized_index_offset_len`` hold element offsets and counts relative
    to the composed vertex and index buffers.
    """

    position_offset: int
    position_length: int
    normal_offset: int
    normal_length: int
    indices_offset: int
    indices_length: int
    initialized_vertex_offset_len: Optional[Tuple[int, int]] = None
    initialized_index_offset_len: Optional[Tuple[int, int]] = None

    @classmethod
    def from_gltf(
        cls, document: Mapping[str, Any], primitive: Mapping[str, Any]
    ) -> "GPrimitive":
        """Build a primitive from its entry in a parsed glTF mesh."""
        attributes = primitive.get("attributes", {})
        if "POSITION" not in attributes:
            raise GltfError(GltfError.VERTICES, "primitive has no POSITION attribute")
        if "NORMAL" not in attributes:
            raise GltfError(GltfError.NORMALS, "primitive has no NORMAL attribute")
        if primitive.get("indices") is None:
            raise GltfError(GltfError.NO_INDICES, "primitive has no indices")

        position_accessor = accessor_from_json(document, attributes["POSITION"])
        normal_accessor = accessor_from_json(document, attributes["NORMAL"])
        indices_accessor = accessor_from_json(document, primitive["indices"])

        position_offset, position_length = get_primitive_data(
            position_accessor, AccessorDataType.VEC3_F32
        )
        normal_offset, normal_length = get_primitive_data(
            normal_accessor, AccessorDataType.VEC3_F32
        )
        indices_offset, indices_length = get_primitive_data(
            indices_accessor, AccessorDataType.U16
        )
        return cls(
            position_offset=position_offset,
            position_length=position_length,
            normal_offset=normal_offset,
            normal_length=normal_length,
            indices_offset=indices_offset,
            indices_length=indices_length,
        )

    def vertex_data(self, buffer: bytes) -> List[ModelVertex]:
        """Read this primitive's vertices from the main buffer."""
        position_bytes = buffer[
            self.position_offset : self.position_offset + self.position_length
        ]
        normal_bytes = buffer[
            self.normal_offset : self.normal_offset + self.normal_length
        ]
        if len(position_bytes) != len(normal_bytes):
            raise ValueError(
                f"position data ({len(position_bytes)} bytes) and normal data "
                f"({len(normal_bytes)} bytes) differ in size"
            )
        usable = len(position_bytes) - len(position_bytes) % _VEC3.size
        return [
            ModelVertex(position=position, normal=normal)
            for position, normal in zip(
                _VEC3.iter_unpack(position_bytes[:usable]),
                _VEC3.iter_unpack(normal_bytes[:usable]),
            )
        ]

    @staticmethod
    def index_data(buffer: bytes, ranges: Sequence[range]) -> List[int]:
        """Read the u16 indices in each byte range, in order, as one list."""
        indices: List[int] = []
        for byte_range in ranges:
            chunk = buffer[byte_range.start : byte_range.stop]
            if len(chunk) % _U16.size:
                raise ValueError(f"index range {byte_range!r} has an odd byte length")
            indices.extend(value for (value,) in _U16.iter_unpack(chunk))
        return indices

    def set_primitive_offset(self, ranges: Sequence[range]) -> None:
        """Translate the index region into the buffer composed from ``ranges``.

        The composed index buffer holds only the bytes of ``ranges``, back to
        back; the resulting offset and length are counted in u16 elements.
        """
        relative_offset = 0
        for byte_range in ranges:
            if self.indices_offset > byte_range.stop:
                relative_offset += len(byte_range)
                continue
            if self.indices_offset < byte_range.start:
                raise InitializationError(
                    InitializationError.SCENE_INITIALIZATION,
                    "primitive indices start outside of the composed ranges",
                )
            relative_offset += self.indices_offset - byte_range.start
            if self.indices_offset + self.indices_length > byte_range.stop:
                raise InitializationError(
                    InitializationError.SCENE_INITIALIZATION,
                    "primitive indices extend past their composed range",
                )
            break
        self.initialized_index_offset_len = (
            relative_offset // 2,
            self.indices_length // 2,
        )