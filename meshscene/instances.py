"""Per-instance transform data for the models of a scene."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field, replace
from typing import List, Sequence

from meshscene.accessors import InitializationError
from meshscene.model import GlobalTransform, GModel, LocalTransform
from meshscene.transforms import Matrix4, identity

_MATRIX = struct.Struct("<16f")
_log = logging.getLogger(__name__)


def calculate_model_mesh_offsets(
    models: Sequence[GModel], model_instances: Sequence[int]
) -> List[int]:
    """Return, for each model, the index of its first local transform."""
    if len(model_instances) < len(models):
        raise IndexError(
            f"{len(models)} models but only {len(model_instances)} instance counts"
        )
    offsets: List[int] = []
    total = 0
    for model, count in zip(models, model_instances):
        offsets.append(total)
        total += sum(model.mesh_instances) * count
    return offsets


def _as_matrix(matrix) -> Matrix4:
    return tuple(tuple(float(v) for v in column) for column in matrix)  # type: ignore[return-value]


@dataclass
class InstanceData:
    """Local (per mesh instance) and global (per model instance) transforms."""

    model_instances: List[int] = field(default_factory=list)
    local_transform_data: List[LocalTransform] = field(default_factory=list)
    global_transform_data: List[Matrix4] = field(default_factory=list)
    instance_local_offsets: List[int] = field(default_factory=lambda: [0])

    @classmethod
    def default_from_scene(
        cls, model_count: int, local_transforms: Sequence[LocalTransform]
    ) -> "InstanceData":
        """One instance of each model, each placed at the origin."""
        return cls(
            model_instances=[1] * model_count,
            local_transform_data=list(local_transforms),
            global_transform_data=[identity() for _ in range(model_count)],
            instance_local_offsets=[0],
        )

    def update_global_transform_x(self, instance_idx: int, new_transform) -> None:
        """Apply ``new_transform`` on top of a model instance's global transform."""
        transform = GlobalTransform(transform_matrix=_as_matrix(new_transform))
        self.global_transform_data[instance_idx] = (
            transform * self.global_transform_data[instance_idx]
        )

    def add_model_instance(
        self,
        models: Sequence[GModel],
        model_index: int,
        global_transforms: Sequence,
    ) -> None:
        """Add one new instance of a model for each of ``global_transforms``."""
        if not 0 <= model_index < len(self.model_instances) or model_index >= len(
            models
        ):
            raise InitializationError(
                InitializationError.INSTANCE_DATA,
                f"model index {model_index} does not exist",
            )
        matrices = [_as_matrix(t) for t in global_transforms]
        self._add_local_data(models, model_index, len(matrices))
        self._add_global_data(model_index, matrices)
        _log.debug(
            "successfully added %d model(s) at index %d", len(matrices), model_index
        )

    @staticmethod
    def _add_mesh_transforms(
        new_instance_count: int,
        offset: int,
        base_model_index: int,
        base_transform_index: int,
        transforms: List[LocalTransform],
    ) -> None:
        for i in range(new_instance_count):
            new_transform = replace(
                transforms[offset], model_index=i + base_model_index
            )
            transforms.insert(offset + i + base_transform_index, new_transform)

    def _add_local_data(
        self, models: Sequence[GModel], model_index: int, new_instance_count: int
    ) -> None:
        model_instance_count = self.model_instances[model_index]
        model_mesh_count = sum(models[model_index].mesh_instances)
        total_model_count = sum(self.model_instances)

        instance_offset = self.instance_local_offsets[model_index]
        start = instance_offset
        end = model_mesh_count * model_instance_count + instance_offset
        transforms = list(self.local_transform_data[start:end])

        offset = 0
        for mesh_instance_count in models[model_index].mesh_instances:
            for _ in range(mesh_instance_count):
                self._add_mesh_transforms(
                    new_instance_count,
                    offset,
                    total_model_count,
                    model_instance_count,
                    transforms,
                )
                offset += new_instance_count + model_instance_count

        self.local_transform_data[start:end] = transforms
        added = model_mesh_count * new_instance_count
        shifted = instance_offset + 1
        self.instance_local_offsets[shifted:] = [
            value + added for value in self.instance_local_offsets[shifted:]
        ]

    def _add_global_data(self, model_index: int, matrices: List[Matrix4]) -> None:
        self.global_transform_data.extend(matrices)
        self.model_instances[model_index] += len(matrices)

    def merge(self, other: "InstanceData", models: Sequence[GModel]) -> "InstanceData":
        """Return the instance data of ``self`` followed by that of ``other``."""
        model_count = sum(self.model_instances)
        shifted = [
            replace(t, model_index=t.model_index + model_count)
            for t in other.local_transform_data
        ]
        model_instances = self.model_instances + other.model_instances
        return InstanceData(
            model_instances=model_instances,
            local_transform_data=self.local_transform_data + shifted,
            global_transform_data=self.global_transform_data
            + other.global_transform_data,
            instance_local_offsets=calculate_model_mesh_offsets(
                models, model_instances
            ),
        )

    def local_transform_bytes(self) -> bytes:
        """Return the packed local transforms, as laid out for an instance buffer."""
        return b"".join(t.pack() for t in self.local_transform_data)

    def global_transform_bytes(self) -> bytes:
        """Return the global transforms as little-endian floats, column by column."""
        return b"".join(
            _MATRIX.pack(*(v for column in matrix for v in column))
            for matrix in self.global_transform_data
        )