# meshscene

meshscene reads a glTF scene from a directory and turns it into the flat data
that a GPU renderer needs:

- one vertex buffer (position and normal per vertex),
- one index buffer of u16 values, with overlapping or touching index byte ranges
  merged so that shared index data is read only once,
- a local transform for each mesh instance and a global transform for each
  model instance,
- a camera with a view-projection matrix,
- a list of indexed, instanced draw calls.

Buffers come out as little-endian `bytes`, so any graphics API can upload them.
The package has no dependencies outside the standard library.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Loading a scene

`meshscene.loader.load_gltf(dir_path)` reads a directory that holds a `.gltf`
file and a `.bin` file. If there are several of either, the first in name order
is used. The document must be glTF JSON; each root node of its first scene that
has a mesh or children becomes one model.

```python
from meshscene.loader import load_gltf
from meshscene.scene import GSceneData

gltf_data = load_gltf("res/box")
scene = GSceneData.from_gltf_data(gltf_data).build_scene_init(aspect_ratio=1.0)

vertices = scene.vertex_bytes()   # 24 bytes per vertex: position, then normal
indices = scene.index_bytes()     # u16 indices
instances = scene.instance_data.local_transform_bytes()   # 68 bytes per mesh instance
globals_ = scene.instance_data.global_transform_bytes()   # 64 bytes per model instance
for command in scene.draw_commands():
    print(command.indices, command.base_vertex, command.instances)
```

Each primitive must have `POSITION` and `NORMAL` attributes of 32-bit floats and
u16 indices. The buffer layouts for vertex and per-instance data are described
by `meshscene.vertex.model_vertex_layout()` and
`meshscene.model.LocalTransform.layout()`.

`GSceneData.build_scene_uninit()` builds a scene without a camera; call
`GScene.init(aspect_ratio)` to add the default one (45° field of view, near
plane 0.1, far plane 100, moving 0.05 per step, looking from (0, 5, 10) at the
origin).

## Named scenes

`meshscene.scaffolds` defines `CUBE`, `FOX`, `TRUCK`, `BRAIN`, `DRAGON`,
`BUGGY`, `TRUCK_BOX` and `BUGGY_BOX`, each a `SceneScaffold` naming resource
directories. `SceneScaffold.create(resource_dir, aspect_ratio)` loads the first
directory it names under `resource_dir` and returns a `GScene` with a camera.
The `global_transforms` and `instances` a scaffold carries are descriptive only:
`create` does not apply them.

## Moving things around

```python
from meshscene.transforms import rotation_y

scene.update_global_transform_x(0, rotation_y(0.8))      # degrees
scene.update_camera_pos(scene.speed(), 0.0, 0.0)
view_proj = scene.camera_uniform_data()
```

`GScene.update_global_transform(model_number, model_instance_index, matrix)`
picks an instance by model and instance number instead of a flat index.
`InstanceData.add_model_instance(models, model_index, global_transforms)` adds
further instances of a model, and `InstanceData.merge(other, models)` joins two
sets of instance data. `GScene.format_transforms()` returns a readable listing
of the local transforms per model and mesh.

Matrices are tuples of four columns; `meshscene.transforms` provides
`identity`, `translation`, `scale`, `rotation_y` and `multiply`.

## Index ranges

`meshscene.range_splicer.define_index_ranges(ranges, candidate_range)` keeps a
sorted list of `range` objects, merging a new range into any it touches or
overlaps, or inserting it in order otherwise. It changes the list in place.

## Errors

- `meshscene.loader.GltfFileLoadError`: the directory or its files are missing,
  unreadable or not a usable glTF document.
- `meshscene.accessors.GltfError`: a primitive lacks an attribute or indices, or
  an accessor has the wrong component type or no buffer view.
- `meshscene.accessors.InitializationError`: scene data does not fit together,
  a scene has no camera yet, or a scaffold could not be loaded.
- `ValueError` / `IndexError`: references to nodes, meshes, accessors or models
  that do not exist.

## What it does not do

meshscene prepares data only. It opens no window, talks to no GPU, draws
nothing, handles no keyboard input and has no command-line program. Textures,
materials and animation are not read.