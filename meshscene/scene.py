"""Scenes: composed vertex and index data, instances and a camera."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Optional

from meshscene.accessors import InitializationError
from meshscene.camera import Camera, default_camera
from meshscene.instances import InstanceData
from meshscene.loader import GltfData
from meshscene.model import DrawIndexed, GModel, LocalTransform, draw_scene
from meshscene.transforms import Matrix4
from meshscene.vertex import ModelVertex


@dataclass
class GScene:
    """A scene ready to be drawn once a camera is set up by :meth:`init`."""

    models: List[GModel]
    vertices: List[ModelVertex]
    indices: List[int]
    instance_data: InstanceData
    camera: Optional[Camera] = None

    def init(self, aspect_ratio: float) -> None:
        """Set up the default camera for the given aspect ratio."""
        self.camera = default_camera(aspect_ratio)

    def _camera(self) -> Camera:
        if self.camera is None:
            raise InitializationError(
                InitializationError.SCENE_INITIALIZATION,
                "scene has no camera; call init() first",
            )
        return self.camera

    def update_global_transform(
        self, model_number: int, model_instance_index: int, new_transform
    ) -> None:
        """Transform one instance of one model."""
        if not 0 <= model_number <= len(self.instance_data.model_instances):
            raise IndexError(f"model {model_number} does not exist")
        instance = (
            sum(self.instance_data.model_instances[:model_number])
            + model_instance_index
        )
        self.instance_data.update_global_transform_x(instance, new_transform)

    def update_global_transform_x(self, instance_idx: int, new_transform) -> None:
        """Transform the model instance at ``instance_idx``."""
        self.instance_data.update_global_transform_x(instance_idx, new_transform)

    def update_camera_pos(self, x: float, y: float, z: float) -> None:
        """Move the camera by (x, y, z)."""
        self._camera().update_position(x, y, z)

    def camera_uniform_data(self) -> Matrix4:
        """Return the camera's view-projection matrix."""
        return self._camera().camera_uniform.view_proj

    def speed(self) -> float:
        """Return how far the camera moves per step."""
        return self._camera().speed

    def vertex_bytes(self) -> bytes:
        """Return the vertex buffer contents."""
        return b"".join(vertex.pack() for vertex in self.vertices)

    def index_bytes(self) -> bytes:
        """Return the index buffer contents as little-endian u16 values."""
        return struct.pack(f"<{len(self.indices)}H", *self.indices)

    def draw_commands(self) -> List[DrawIndexed]:
        """Return the draw calls that render every instance in the scene."""
        return draw_scene(self.models, self.instance_data.model_instances)

    def format_transforms(self) -> str:
        """Describe the local transforms grouped by model and mesh."""
        lines: List[str] = []
        transforms = iter(self.instance_data.local_transform_data)
        for model_number, model in enumerate(self.models):
            lines.append(f"MODEL {model_number} ---------------------------------------")
            for mesh_number, count in enumerate(model.mesh_instances):
                lines.append(f"MESH {mesh_number} ----------------------------------")
                for _ in range(count):
                    transform = next(transforms, None)
                    if transform is not None:
                        lines.append(f"            {transform!r}")
        return "\n".join(lines)


@dataclass
class GSceneData:
    """Scene data composed from a glTF file, not yet set up for drawing."""

    models: List[GModel]
    vertex_vec: List[ModelVertex] = field(default_factory=list)
    index_vec: List[int] = field(default_factory=list)
    local_transforms: List[LocalTransform] = field(default_factory=list)

    @classmethod
    def from_gltf_data(cls, gltf_data: GltfData) -> "GSceneData":
        """Compose the vertex and index data of every model in ``gltf_data``."""
        buffer = gltf_data.binary_data
        models = gltf_data.models

        vertices: List[ModelVertex] = []
        vertex_offset = 0
        for model in models:
            model_vertices, vertex_offset = model.model_vertex_data(
                buffer, vertex_offset
            )
            vertices.extend(model_vertices)

        ranges: List[range] = []
        for model in models:
            model.build_range_vec(ranges)
        indices = GModel.model_index_data(buffer, ranges)
        for model in models:
            model.set_model_primitive_offsets(ranges)

        return cls(
            models=models,
            vertex_vec=vertices,
            index_vec=indices,
            local_transforms=list(gltf_data.local_transforms),
        )

    def build_scene_uninit(self) -> GScene:
        """Build a scene with one instance of each model and no camera."""
        return GScene(
            models=self.models,
            vertices=self.vertex_vec,
            indices=self.index_vec,
            instance_data=InstanceData.default_from_scene(
                len(self.models), self.local_transforms
            ),
        )

    def build_scene_init(self, aspect_ratio: float) -> GScene:
        """Build a scene and set up its camera."""
        scene = self.build_scene_uninit()
        scene.init(aspect_ratio)
        return scene