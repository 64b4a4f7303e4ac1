"""Predefined scenes and the directories their glTF files are read from."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from meshscene.accessors import InitializationError
from meshscene.loader import GltfFileLoadError, load_gltf
from meshscene.scene import GScene, GSceneData
from meshscene.transforms import Matrix4, scale, translation


@dataclass(frozen=True)
class ScaffoldGlobalTransform:
    """A transform for one instance of one model of a scaffold."""

    instance_index: int
    model_index: int
    transform: Matrix4


@dataclass(frozen=True)
class ScaffoldModelInstances:
    """Extra instances of a model, one per transform."""

    model_index: int
    transforms: Tuple[Matrix4, ...] = ()


@dataclass(frozen=True)
class SceneScaffold:
    """A description of a scene: its resource directories and transforms."""

    file_paths: Tuple[str, ...]
    global_transforms: Tuple[ScaffoldGlobalTransform, ...] = ()
    instances: Tuple[ScaffoldModelInstances, ...] = ()

    def create(self, resource_dir, aspect_ratio: float) -> GScene:
        """Load the first resource directory under ``resource_dir`` as a scene."""
        if not self.file_paths:
            raise InitializationError(
                InitializationError.SCENE_INITIALIZATION, "scaffold names no files"
            )
        try:
            gltf_data = load_gltf(Path(resource_dir) / self.file_paths[0])
        except GltfFileLoadError as exc:
            raise InitializationError(
                InitializationError.SCENE_INITIALIZATION, str(exc)
            ) from exc
        return GSceneData.from_gltf_data(gltf_data).build_scene_init(aspect_ratio)


def buggy_shrink(instance_index: int, model_index: int) -> ScaffoldGlobalTransform:
    """Shrink a model instance to a fiftieth of its size."""
    return ScaffoldGlobalTransform(instance_index, model_index, scale(0.02))


def move_right(instance_index: int, model_index: int) -> ScaffoldGlobalTransform:
    """Move a model instance five units along x."""
    return ScaffoldGlobalTransform(
        instance_index, model_index, translation(5.0, 0.0, 0.0)
    )


CUBE = SceneScaffold(file_paths=("box",))
FOX = SceneScaffold(file_paths=("fox",))
TRUCK = SceneScaffold(file_paths=("milk-truck",))
BRAIN = SceneScaffold(file_paths=("brain-stem",))
DRAGON = SceneScaffold(file_paths=("dragon",))
BUGGY = SceneScaffold(file_paths=("buggy",), global_transforms=(buggy_shrink(0, 0),))
TRUCK_BOX = SceneScaffold(
    file_paths=("milk-truck", "box"), global_transforms=(move_right(0, 1),)
)
BUGGY_BOX = SceneScaffold(
    file_paths=("buggy", "milk-truck"),
    global_transforms=(buggy_shrink(0, 0), move_right(0, 1)),
)