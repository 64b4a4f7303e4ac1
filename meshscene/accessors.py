"""glTF accessors and the errors raised while reading them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Mapping, Optional, Tuple

_COMPONENT_FLOAT = 5126
_COMPONENT_UNSIGNED_SHORT = 5123


class AccessorDataType(Enum):
    """Element type expected from an accessor."""

    VEC3_F32 = auto()
    U16 = auto()


class GltfError(Exception):
    """A glTF document does not hold the data expected of it."""

    NO_INDICES = "no_indices"
    NO_VIEW = "no_view"
    NO_PRIMITIVE = "no_primitive"
    INDICES = "indices"
    VERTICES = "vertices"
    NORMALS = "normals"

    def __init__(self, kind: str, message: str = "") -> None:
        super().__init__(message or kind)
        self.kind = kind


class InitializationError(Exception):
    """Scene or instance data could not be set up."""

    INSTANCE_DATA = "instance_data"
    SCENE_MERGE = "scene_merge"
    SCENE_INITIALIZATION = "scene_initialization"

    def __init__(self, kind: str, message: str = "") -> None:
        super().__init__(message or kind)
        self.kind = kind


@dataclass(frozen=True)
class Accessor:
    """The parts of a glTF accessor needed to locate its bytes."""

    component_type: int
    count: int
    byte_offset: int = 0
    view_offset: Optional[int] = None


def accessor_from_json(document: Mapping[str, Any], index: int) -> Accessor:
    """Build an :class:`Accessor` from a parsed glTF document."""
    accessors = document.get("accessors", [])
    if not 0 <= index < len(accessors):
        raise ValueError(f"accessor {index} does not exist")
    raw = accessors[index]
    view_offset = None
    view_index = raw.get("bufferView")
    if view_index is not None:
        views = document.get("bufferViews", [])
        if not 0 <= view_index < len(views):
            raise ValueError(f"buffer view {view_index} does not exist")
        view_offset = int(views[view_index].get("byteOffset", 0))
    return Accessor(
        component_type=int(raw["componentType"]),
        count=int(raw["count"]),
        byte_offset=int(raw.get("byteOffset", 0)),
        view_offset=view_offset,
    )


def get_primitive_data(
    accessor: Accessor, expected_data_type: AccessorDataType
) -> Tuple[int, int]:
    """Return the (byte offset, byte length) of an accessor's data in its buffer."""
    if accessor.component_type == _COMPONENT_FLOAT:
        if expected_data_type is not AccessorDataType.VEC3_F32:
            raise GltfError(GltfError.VERTICES, "Data type given is not f32!")
    elif accessor.component_type == _COMPONENT_UNSIGNED_SHORT:
        if expected_data_type is not AccessorDataType.U16:
            raise GltfError(GltfError.INDICES, "Data type given is not u16!")
    else:
        raise ValueError(f"unhandled data type {accessor.component_type}")

    if expected_data_type is AccessorDataType.U16:
        length = accessor.count * 2
    else:
        length = accessor.count * 12

    if accessor.view_offset is None:
        raise GltfError(GltfError.NO_VIEW)
    return accessor.view_offset + accessor.byte_offset, length