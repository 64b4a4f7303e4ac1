"""4x4 transform matrices stored column by column."""

from __future__ import annotations

import math
from typing import Tuple

Column = Tuple[float, float, float, float]
Matrix4 = Tuple[Column, Column, Column, Column]


def identity() -> Matrix4:
    """Return the 4x4 identity matrix."""
    return (
        (1.0, 0.0, 0.0, 0.0),
        (0.0, 1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 0.0),
        (0.0, 0.0, 0.0, 1.0),
    )


def translation(x: float, y: float, z: float) -> Matrix4:
    """Return a matrix that translates by (x, y, z)."""
    return (
        (1.0, 0.0, 0.0, 0.0),
        (0.0, 1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 0.0),
        (float(x), float(y), float(z), 1.0),
    )


def scale(factor: float) -> Matrix4:
    """Return a matrix that scales uniformly by ``factor``."""
    f = float(factor)
    return (
        (f, 0.0, 0.0, 0.0),
        (0.0, f, 0.0, 0.0),
        (0.0, 0.0, f, 0.0),
        (0.0, 0.0, 0.0, 1.0),
    )


def rotation_y(degrees: float) -> Matrix4:
    """Return a right-handed rotation about the y axis by ``degrees``."""
    angle = math.radians(degrees)
    c, s = math.cos(angle), math.sin(angle)
    return (
        (c, 0.0, -s, 0.0),
        (0.0, 1.0, 0.0, 0.0),
        (s, 0.0, c, 0.0),
        (0.0, 0.0, 0.0, 1.0),
    )


def multiply(a: Matrix4, b: Matrix4) -> Matrix4:
    """Return the matrix product ``a * b`` of two column-major matrices."""
    rows = list(zip(*a))
    return tuple(
        tuple(sum(x * y for x, y in zip(row, column)) for row in rows)
        for column in b
    )  # type: ignore[return-value]