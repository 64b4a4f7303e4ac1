import struct

import pytest

from meshscene.accessors import GltfError, InitializationError
from meshscene.primitive import GPrimitive

POSITIONS = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]
NORMALS = [(0.0, 0.0, 1.0), (0.0, 0.0, 1.0), (0.0, 0.0, 1.0)]
INDICES = [0, 1, 2]


def _vec3_bytes(values):
    return b"".join(struct.pack("<3f", *v) for v in values)


def _index_bytes(values):
    return struct.pack(f"<{len(values)}H", *values)


@pytest.fixture
def gltf():
    pos = _vec3_bytes(POSITIONS)
    nor = _vec3_bytes(NORMALS)
    idx = _index_bytes(INDICES)
    buffer = pos + nor + idx
    document = {
        "bufferViews": [
            {"buffer": 0, "byteOffset": 0, "byteLength": len(pos)},
            {"buffer": 0, "byteOffset": len(pos), "byteLength": len(nor)},
            {"buffer": 0, "byteOffset": len(pos) + len(nor), "byteLength": len(idx)},
        ],
        "accessors": [
            {"bufferView": 0, "componentType": 5126, "count": len(POSITIONS), "type": "VEC3"},
            {"bufferView": 1, "componentType": 5126, "count": len(NORMALS), "type": "VEC3"},
            {"bufferView": 2, "componentType": 5123, "count": len(INDICES), "type": "SCALAR"},
        ],
    }
    primitive = {"attributes": {"POSITION": 0, "NORMAL": 1}, "indices": 2}
    return document, primitive, buffer, (len(pos), len(nor), len(idx))


def test_from_gltf_locates_regions(gltf):
    document, primitive, _, (pos_len, nor_len, idx_len) = gltf
    prim = GPrimitive.from_gltf(document, primitive)
    assert (prim.position_offset, prim.position_length) == (0, pos_len)
    assert (prim.normal_offset, prim.normal_length) == (pos_len, nor_len)
    assert (prim.indices_offset, prim.indices_length) == (pos_len + nor_len, idx_len)
    assert prim.initialized_vertex_offset_len is None
    assert prim.initialized_index_offset_len is None


def test_from_gltf_without_indices_raises(gltf):
    document, primitive, _, _ = gltf
    del primitive["indices"]
    with pytest.raises(GltfError) as info:
        GPrimitive.from_gltf(document, primitive)
    assert info.value.kind == GltfError.NO_INDICES


def test_from_gltf_without_normals_raises(gltf):
    document, primitive, _, _ = gltf
    del primitive["attributes"]["NORMAL"]
    with pytest.raises(GltfError) as info:
        GPrimitive.from_gltf(document, primitive)
    assert info.value.kind == GltfError.NORMALS


def test_from_gltf_wrong_index_type_raises(gltf):
    document, primitive, _, _ = gltf
    document["accessors"][2]["componentType"] = 5126
    with pytest.raises(GltfError) as info:
        GPrimitive.from_gltf(document, primitive)
    assert info.value.kind == GltfError.VERTICES


def test_vertex_data_round_trip(gltf):
    document, primitive, buffer, _ = gltf
    prim = GPrimitive.from_gltf(document, primitive)
    vertices = prim.vertex_data(buffer)
    assert [v.position for v in vertices] == POSITIONS
    assert [v.normal for v in vertices] == NORMALS


def test_vertex_data_size_mismatch_raises(gltf):
    document, primitive, buffer, _ = gltf
    prim = GPrimitive.from_gltf(document, primitive)
    prim.normal_length -= 12
    with pytest.raises(ValueError):
        prim.vertex_data(buffer)


def test_index_data_concatenates_ranges():
    first = _index_bytes([4, 5, 6])
    second = _index_bytes([7, 8])
    buffer = first + b"\x00\x00" + second
    ranges = [range(0, len(first)), range(len(first) + 2, len(buffer))]
    assert GPrimitive.index_data(buffer, ranges) == [4, 5, 6, 7, 8]


def test_index_data_odd_length_raises():
    with pytest.raises(ValueError):
        GPrimitive.index_data(b"\x01\x00\x02", [range(0, 3)])


def test_set_primitive_offset_single_range(gltf):
    document, primitive, _, _ = gltf
    prim = GPrimitive.from_gltf(document, primitive)
    prim.set_primitive_offset([range(prim.indices_offset, prim.indices_offset + prim.indices_length)])
    assert prim.initialized_index_offset_len == (0, len(INDICES))


def test_set_primitive_offset_after_earlier_range():
    prim = GPrimitive(0, 0, 0, 0, indices_offset=20, indices_length=6)
    prim.set_primitive_offset([range(0, 10), range(20, 26)])
    assert prim.initialized_index_offset_len == (5, 3)


def test_set_primitive_offset_inside_range():
    prim = GPrimitive(0, 0, 0, 0, indices_offset=24, indices_length=4)
    prim.set_primitive_offset([range(20, 30)])
    assert prim.initialized_index_offset_len == (2, 2)


def test_set_primitive_offset_past_range_raises():
    prim = GPrimitive(0, 0, 0, 0, indices_offset=20, indices_length=12)
    with pytest.raises(InitializationError) as info:
        prim.set_primitive_offset([range(20, 26)])
    assert info.value.kind == InitializationError.SCENE_INITIALIZATION