"""A perspective camera and the view-projection uniform it produces."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from typing import Tuple

from meshscene.transforms import Matrix4, identity, multiply

Vec3 = Tuple[float, float, float]

_UNIFORM = struct.Struct("<16f")

OPENGL_TO_WGPU_MATRIX: Matrix4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 0.5, 0.5),
    (0.0, 0.0, 0.0, 1.0),
)


def _sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _normalize(v: Vec3, what: str) -> Vec3:
    length = math.sqrt(_dot(v, v))
    if length == 0.0:
        raise ValueError(f"{what} has zero length")
    return (v[0] / length, v[1] / length, v[2] / length)


def perspective(fovy: float, aspect_ratio: float, znear: float, zfar: float) -> Matrix4:
    """Return a right-handed perspective projection; ``fovy`` is in radians."""
    if not 0.0 < fovy < math.pi:
        raise ValueError(f"field of view must lie between 0 and pi, got {fovy}")
    if aspect_ratio <= 0.0:
        raise ValueError(f"aspect ratio must be positive, got {aspect_ratio}")
    if znear <= 0.0:
        raise ValueError(f"near plane must be positive, got {znear}")
    if zfar <= 0.0:
        raise ValueError(f"far plane must be positive, got {zfar}")
    if zfar <= znear:
        raise ValueError(f"far plane {zfar} must lie beyond near plane {znear}")
    f = 1.0 / math.tan(fovy / 2.0)
    return (
        (f / aspect_ratio, 0.0, 0.0, 0.0),
        (0.0, f, 0.0, 0.0),
        (0.0, 0.0, (zfar + znear) / (znear - zfar), -1.0),
        (0.0, 0.0, 2.0 * zfar * znear / (znear - zfar), 0.0),
    )


def look_at_rh(eye: Vec3, target: Vec3, up: Vec3) -> Matrix4:
    """Return a right-handed view matrix looking from ``eye`` towards ``target``."""
    forward = _normalize(_sub(target, eye), "view direction")
    side = _normalize(_cross(forward, up), "side vector")
    upward = _cross(side, forward)
    return (
        (side[0], upward[0], -forward[0], 0.0),
        (side[1], upward[1], -forward[1], 0.0),
        (side[2], upward[2], -forward[2], 0.0),
        (-_dot(eye, side), -_dot(eye, upward), _dot(eye, forward), 1.0),
    )


@dataclass
class CameraData:
    """Projection parameters and placement of a camera."""

    fov: float
    aspect_ratio: float
    znear: float
    zfar: float
    eye_pos: Vec3 = (0.0, 5.0, 10.0)
    target: Vec3 = (0.0, 0.0, 0.0)
    up: Vec3 = (0.0, 1.0, 0.0)

    def perspective_matrix(self) -> Matrix4:
        """Return the projection matrix times the view matrix."""
        view = look_at_rh(self.eye_pos, self.target, self.up)
        proj = perspective(self.fov, self.aspect_ratio, self.znear, self.zfar)
        return multiply(proj, view)

    def update_position(self, x: float, y: float, z: float) -> None:
        """Move both the eye and the target by (x, y, z)."""
        delta = (float(x), float(y), float(z))
        self.eye_pos = tuple(a + b for a, b in zip(self.eye_pos, delta))  # type: ignore[assignment]
        self.target = tuple(a + b for a, b in zip(self.target, delta))  # type: ignore[assignment]


@dataclass
class CameraUniform:
    """The view-projection matrix handed to shaders."""

    view_proj: Matrix4 = field(default_factory=identity)

    def update(self, camera_data: CameraData) -> None:
        """Recompute the matrix from ``camera_data``."""
        self.view_proj = multiply(OPENGL_TO_WGPU_MATRIX, camera_data.perspective_matrix())

    def pack(self) -> bytes:
        """Return the matrix as 16 little-endian 32-bit floats, column by column."""
        return _UNIFORM.pack(*(value for column in self.view_proj for value in column))


class Camera:
    """A camera with its uniform kept in step with its position."""

    def __init__(
        self, fov: float, aspect_ratio: float, znear: float, zfar: float, speed: float
    ) -> None:
        self.camera_data = CameraData(fov, aspect_ratio, znear, zfar)
        self.camera_uniform = CameraUniform()
        self.camera_uniform.update(self.camera_data)
        self.speed = speed

    def update_position(self, x: float, y: float, z: float) -> None:
        """Move the camera by (x, y, z) and refresh its uniform."""
        self.camera_data.update_position(x, y, z)
        self.camera_uniform.update(self.camera_data)


def default_camera(aspect_ratio: float) -> Camera:
    """Return the camera a scene starts with."""
    return Camera(math.pi / 4, aspect_ratio, 0.1, 100.0, 0.05)