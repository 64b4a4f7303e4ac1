import json
import math
import struct

import pytest

from meshscene.loader import (
    GltfData,
    GltfFileLoadError,
    ModelMeshData,
    find_model_meshes,
    get_data_files,
    get_model_meshes,
    get_root_nodes,
    load_gltf,
    load_models_from_gltf,
    node_matrix,
)
from meshscene.transforms import identity, rotation_y, scale, translation


def _binary():
    positions = struct.pack("<9f", 0, 0, 0, 1, 0, 0, 0, 1, 0)
    normals = struct.pack("<9f", 0, 0, 1, 0, 0, 1, 0, 0, 1)
    indices = struct.pack("<3H", 0, 1, 2)
    return positions + normals + indices


def _document():
    return {
        "buffers": [{"byteLength": 78}],
        "bufferViews": [
            {"buffer": 0, "byteOffset": 0, "byteLength": 36},
            {"buffer": 0, "byteOffset": 36, "byteLength": 36},
            {"buffer": 0, "byteOffset": 72, "byteLength": 6},
        ],
        "accessors": [
            {"bufferView": 0, "componentType": 5126, "count": 3, "type": "VEC3"},
            {"bufferView": 1, "componentType": 5126, "count": 3, "type": "VEC3"},
            {"bufferView": 2, "componentType": 5123, "count": 3, "type": "SCALAR"},
        ],
        "meshes": [
            {"primitives": [{"attributes": {"POSITION": 0, "NORMAL": 1}, "indices": 2}]}
        ],
        "nodes": [
            {"children": [1, 2]},
            {"mesh": 0, "translation": [1, 2, 3]},
            {"mesh": 0, "scale": [2, 2, 2]},
            {"mesh": 0},
            {},
        ],
        "scenes": [{"nodes": [0, 3, 4]}],
    }


def _write(directory, document=None, binary=None):
    directory.mkdir(exist_ok=True)
    (directory / "scene.gltf").write_text(json.dumps(document or _document()))
    (directory / "scene.bin").write_bytes(binary if binary is not None else _binary())
    return directory


def _approx_matrix(m):
    return [pytest.approx(list(column), abs=1e-9) for column in m]


def test_node_matrix_defaults_to_identity():
    assert node_matrix({}) == identity()


def test_node_matrix_translation_and_scale():
    assert node_matrix({"translation": [1, 2, 3]}) == translation(1, 2, 3)
    assert node_matrix({"scale": [2, 2, 2]}) == scale(2)


def test_node_matrix_rotation_matches_rotation_y():
    half = math.radians(90) / 2
    node = {"rotation": [0.0, math.sin(half), 0.0, math.cos(half)]}
    assert [list(c) for c in node_matrix(node)] == _approx_matrix(rotation_y(90))


def test_node_matrix_explicit_matrix_is_column_major():
    values = list(range(16))
    result = node_matrix({"matrix": values})
    assert result[0] == (0.0, 1.0, 2.0, 3.0)
    assert result[3] == (12.0, 13.0, 14.0, 15.0)


def test_node_matrix_rejects_short_matrix():
    with pytest.raises(ValueError):
        node_matrix({"matrix": [1, 2, 3]})


def test_get_root_nodes_filters_empty_nodes():
    assert get_root_nodes(_document()) == [0, 3]


def test_get_root_nodes_without_scene():
    document = _document()
    del document["scenes"]
    with pytest.raises(GltfFileLoadError) as info:
        get_root_nodes(document)
    assert info.value.kind == GltfFileLoadError.GLTF


def test_find_model_meshes_counts_instances():
    data = find_model_meshes(_document(), 0, identity(), ModelMeshData())
    assert data.mesh_ids == [0]
    assert data.mesh_instances == [2]
    assert [t.transform_matrix for t in data.transformation_matrices] == [
        translation(1, 2, 3),
        scale(2),
    ]
    assert all(t.model_index == 0 for t in data.transformation_matrices)


def test_find_model_meshes_accumulates_parent_transform():
    document = _document()
    document["nodes"][0]["translation"] = [1, 0, 0]
    document["nodes"][1]["translation"] = [0, 1, 0]
    data = find_model_meshes(document, 0, identity(), ModelMeshData())
    assert data.transformation_matrices[0].transform_matrix == translation(1, 1, 0)


def test_get_model_meshes_requires_referencing_node():
    document = _document()
    document["meshes"].append(document["meshes"][0])
    with pytest.raises(ValueError):
        get_model_meshes(document, [1])


def test_load_models_from_gltf():
    models, transforms = load_models_from_gltf(_document(), [0, 3])
    assert [m.mesh_instances for m in models] == [[2], [1]]
    assert len(transforms) == 3
    assert transforms[2].transform_matrix == identity()
    primitive = models[0].meshes[0].primitives[0]
    assert (primitive.position_offset, primitive.position_length) == (0, 36)
    assert (primitive.indices_offset, primitive.indices_length) == (72, 6)


def test_get_data_files(tmp_path):
    directory = _write(tmp_path / "model")
    gltf_file, bin_file = get_data_files(directory)
    assert gltf_file.name == "scene.gltf"
    assert bin_file.name == "scene.bin"


def test_get_data_files_without_gltf(tmp_path):
    (tmp_path / "data.bin").write_bytes(b"")
    with pytest.raises(GltfFileLoadError) as info:
        get_data_files(tmp_path)
    assert info.value.kind == GltfFileLoadError.NO_GLTF_FILE


def test_get_data_files_without_binary(tmp_path):
    (tmp_path / "scene.gltf").write_text("{}")
    with pytest.raises(GltfFileLoadError) as info:
        get_data_files(tmp_path)
    assert info.value.kind == GltfFileLoadError.NO_BINARY_FILE


def test_load_gltf(tmp_path):
    directory = _write(tmp_path / "model")
    data = load_gltf(directory)
    assert isinstance(data, GltfData)
    assert data.binary_data == _binary()
    assert len(data.models) == 2
    assert len(data.local_transforms) == 3


def test_load_gltf_missing_directory(tmp_path):
    with pytest.raises(GltfFileLoadError) as info:
        load_gltf(tmp_path / "missing")
    assert info.value.kind == GltfFileLoadError.IO


def test_load_gltf_invalid_json(tmp_path):
    directory = tmp_path / "model"
    directory.mkdir()
    (directory / "scene.gltf").write_text("{not json")
    (directory / "scene.bin").write_bytes(b"")
    with pytest.raises(GltfFileLoadError) as info:
        load_gltf(directory)
    assert info.value.kind == GltfFileLoadError.GLTF