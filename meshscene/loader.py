"""Loading of glTF directories into models and local transforms."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Tuple

from meshscene.model import GMesh, GModel, LocalTransform
from meshscene.transforms import Matrix4, identity, multiply


class GltfFileLoadError(Exception):
    """A glTF directory or its files could not be loaded."""

    NO_GLTF_FILE = "no_gltf_file"
    NO_BINARY_FILE = "no_binary_file"
    MULTIPLE_BINARY_FILES = "multiple_binary_files"
    IO = "io"
    GLTF = "gltf"
    BAD_FILE = "bad_file"

    def __init__(self, kind: str, message: str = "") -> None:
        super().__init__(message or kind)
        self.kind = kind


@dataclass
class GltfData:
    """Models read from a glTF file, its binary buffer and the mesh transforms."""

    models: List[GModel]
    binary_data: bytes
    local_transforms: List[LocalTransform]


@dataclass
class ModelMeshData:
    """Meshes found under a root node, their instance counts and transforms."""

    mesh_ids: List[int] = field(default_factory=list)
    mesh_instances: List[int] = field(default_factory=list)
    transformation_matrices: List[LocalTransform] = field(default_factory=list)


def _node(document: Mapping[str, Any], index: int) -> Mapping[str, Any]:
    nodes = document.get("nodes", [])
    if not 0 <= index < len(nodes):
        raise ValueError(f"node {index} does not exist")
    return nodes[index]


def node_matrix(node: Mapping[str, Any]) -> Matrix4:
    """Return a node's local transform as a column-major matrix."""
    matrix = node.get("matrix")
    if matrix is not None:
        values = [float(v) for v in matrix]
        if len(values) != 16:
            raise ValueError(f"node matrix must have 16 values, got {len(values)}")
        return tuple(
            tuple(values[start : start + 4]) for start in range(0, 16, 4)
        )  # type: ignore[return-value]

    tx, ty, tz = (float(v) for v in node.get("translation", (0.0, 0.0, 0.0)))
    x, y, z, w = (float(v) for v in node.get("rotation", (0.0, 0.0, 0.0, 1.0)))
    sx, sy, sz = (float(v) for v in node.get("scale", (1.0, 1.0, 1.0)))
    return (
        (
            (1.0 - 2.0 * (y * y + z * z)) * sx,
            2.0 * (x * y + z * w) * sx,
            2.0 * (x * z - y * w) * sx,
            0.0,
        ),
        (
            2.0 * (x * y - z * w) * sy,
            (1.0 - 2.0 * (x * x + z * z)) * sy,
            2.0 * (y * z + x * w) * sy,
            0.0,
        ),
        (
            2.0 * (x * z + y * w) * sz,
            2.0 * (y * z - x * w) * sz,
            (1.0 - 2.0 * (x * x + y * y)) * sz,
            0.0,
        ),
        (tx, ty, tz, 1.0),
    )


def get_data_files(dir_path) -> Tuple[Path, Path]:
    """Return the glTF file and the binary file held in ``dir_path``."""
    path = Path(dir_path)
    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        raise GltfFileLoadError(GltfFileLoadError.IO, str(exc)) from exc

    gltf_file = next((entry for entry in entries if entry.suffix == ".gltf"), None)
    if gltf_file is None:
        raise GltfFileLoadError(
            GltfFileLoadError.NO_GLTF_FILE, f"no .gltf file in {path}"
        )
    bin_file = next((entry for entry in entries if entry.suffix == ".bin"), None)
    if bin_file is None:
        raise GltfFileLoadError(
            GltfFileLoadError.NO_BINARY_FILE, f"no .bin file in {path}"
        )
    return gltf_file, bin_file


def get_root_nodes(document: Mapping[str, Any]) -> List[int]:
    """Return the nodes of the first scene that hold a mesh or have children."""
    scenes = document.get("scenes") or []
    if not scenes:
        raise GltfFileLoadError(GltfFileLoadError.GLTF, "document has no scene")
    nodes = document.get("nodes", [])
    roots = []
    for index in scenes[0].get("nodes", []):
        if not 0 <= index < len(nodes):
            raise GltfFileLoadError(
                GltfFileLoadError.GLTF, f"scene refers to missing node {index}"
            )
        node = nodes[index]
        if node.get("mesh") is not None or node.get("children"):
            roots.append(index)
    return roots


def find_model_meshes(
    document: Mapping[str, Any],
    node_index: int,
    base_transform: Matrix4,
    mesh_data: ModelMeshData,
) -> ModelMeshData:
    """Walk a node tree, recording each mesh instance and its accumulated transform."""
    node = _node(document, node_index)
    transform = multiply(base_transform, node_matrix(node))
    mesh_index = node.get("mesh")
    if mesh_index is not None:
        mesh_data.transformation_matrices.append(
            LocalTransform(transform_matrix=transform, model_index=0)
        )
        if mesh_index in mesh_data.mesh_ids:
            mesh_data.mesh_instances[mesh_data.mesh_ids.index(mesh_index)] += 1
        else:
            mesh_data.mesh_ids.append(mesh_index)
            mesh_data.mesh_instances.append(1)
    for child in node.get("children", []):
        mesh_data = find_model_meshes(document, child, transform, mesh_data)
    return mesh_data


def get_model_meshes(
    document: Mapping[str, Any], mesh_ids: Sequence[int]
) -> List[GMesh]:
    """Build the meshes with the given ids, each of which a node must refer to."""
    referenced = {
        node.get("mesh")
        for node in document.get("nodes", [])
        if node.get("mesh") is not None
    }
    meshes = []
    for mesh_id in mesh_ids:
        if mesh_id not in referenced:
            raise ValueError(f"no node refers to mesh {mesh_id}")
        meshes.append(GMesh.from_gltf(document, mesh_id))
    return meshes


def load_models_from_gltf(
    document: Mapping[str, Any], root_node_ids: Sequence[int]
) -> Tuple[List[GModel], List[LocalTransform]]:
    """Build one model per root node, with all mesh transforms in model order."""
    models: List[GModel] = []
    local_transforms: List[LocalTransform] = []
    for root_id in root_node_ids:
        mesh_data = find_model_meshes(document, root_id, identity(), ModelMeshData())
        meshes = get_model_meshes(document, mesh_data.mesh_ids)
        models.append(GModel(meshes=meshes, mesh_instances=mesh_data.mesh_instances))
        local_transforms.extend(mesh_data.transformation_matrices)
    return models, local_transforms


def load_gltf(dir_path) -> GltfData:
    """Load the glTF file and binary buffer held in the directory ``dir_path``."""
    path = Path(dir_path)
    if not path.is_dir():
        raise GltfFileLoadError(GltfFileLoadError.IO, f"{path} is not a directory")
    gltf_file, bin_file = get_data_files(path)
    try:
        with gltf_file.open(encoding="utf-8") as handle:
            document = json.load(handle)
    except OSError as exc:
        raise GltfFileLoadError(GltfFileLoadError.IO, str(exc)) from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise GltfFileLoadError(GltfFileLoadError.GLTF, str(exc)) from exc
    if not isinstance(document, dict):
        raise GltfFileLoadError(GltfFileLoadError.GLTF, "document is not an object")
    try:
        binary_data = bin_file.read_bytes()
    except OSError as exc:
        raise GltfFileLoadError(GltfFileLoadError.IO, str(exc)) from exc

    root_node_ids = get_root_nodes(document)
    models, local_transforms = load_models_from_gltf(document, root_node_ids)
    return GltfData(
        models=models, binary_data=binary_data, local_transforms=local_transforms
    )


_ = math  # quaternion maths above needs no further helpers