"""Oriented bounding boxes: a centred box placed by rotation, scale and translation."""

from __future__ import annotations

import math
from collections.abc import Sequence

Vec3 = tuple[float, float, float]
_Matrix3 = tuple[Vec3, Vec3, Vec3]

_DEG_TO_RAD = 3.14159 / 180.0


def _matmul(a: _Matrix3, b: _Matrix3) -> _Matrix3:
    columns = list(zip(*b))
    return tuple(
        tuple(sum(x * y for x, y in zip(row, col)) for col in columns) for row in a
    )  # type: ignore[return-value]


def _rotation(rx: float, ry: float, rz: float) -> _Matrix3:
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    rot_x = ((1.0, 0.0, 0.0), (0.0, cx, -sx), (0.0, sx, cx))
    rot_y = ((cy, 0.0, sy), (0.0, 1.0, 0.0), (-sy, 0.0, cy))
    rot_z = ((cz, -sz, 0.0), (sz, cz, 0.0), (0.0, 0.0, 1.0))
    return _matmul(rot_z, _matmul(rot_y, rot_x))


def _vec3(values: Sequence[float]) -> Vec3:
    x, y, z = values
    return (float(x), float(y), float(z))


class OrientedBoundingBox:
    """A box of half-size ``extents`` centred on the origin, rotated, scaled and moved.

    Rotation angles are in degrees and applied about x, then y, then z; the
    result is then scaled per axis and translated to ``pos``.
    """

    def __init__(
        self,
        pos: Sequence[float],
        rot: Sequence[float],
        scale: Sequence[float],
        extents: Sequence[float],
    ) -> None:
        ex, ey, ez = (abs(e) for e in _vec3(extents))
        self.min_x, self.max_x = -ex, ex
        self.min_y, self.max_y = -ey, ey
        self.min_z, self.max_z = -ez, ez

        self._scale = _vec3(scale)
        if any(s == 0.0 for s in self._scale):
            raise ValueError("scale components must be non-zero")
        rx, ry, rz = (angle * _DEG_TO_RAD for angle in _vec3(rot))
        self._rotation = _rotation(rx, ry, rz)
        self._translation = _vec3(pos)
        self._linear: _Matrix3 = tuple(
            tuple(s * value for value in row) for s, row in zip(self._scale, self._rotation)
        )  # type: ignore[assignment]

    @property
    def matrix(self) -> tuple[tuple[float, float, float, float], ...]:
        """The 4x4 box-to-world transformation, as rows."""
        rows = tuple((*row, t) for row, t in zip(self._linear, self._translation))
        return (*rows, (0.0, 0.0, 0.0, 1.0))

    def transform(self, point: Sequence[float]) -> Vec3:
        """Map a point from box space to world space."""
        p = _vec3(point)
        return tuple(
            sum(a * b for a, b in zip(row, p)) + t
            for row, t in zip(self._linear, self._translation)
        )  # type: ignore[return-value]

    def _to_box_space(self, point: Sequence[float]) -> Vec3:
        scaled = [
            (value - t) / s for value, t, s in zip(_vec3(point), self._translation, self._scale)
        ]
        return tuple(
            sum(r * q for r, q in zip(column, scaled)) for column in zip(*self._rotation)
        )  # type: ignore[return-value]

    def contains_point(self, point: Sequence[float]) -> bool:
        """Whether a world-space point lies inside the box, boundary included."""
        x, y, z = self._to_box_space(point)
        return (
            self.min_x <= x <= self.max_x
            and self.min_y <= y <= self.max_y
            and self.min_z <= z <= self.max_z
        )