# models.py
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from meshdeform.scene import SceneObject


def _vec3(v: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64).reshape(3)
    return arr


def rotation_matrix(pitch: float = 0.0, yaw: float = 0.0, roll: float = 0.0) -> np.ndarray:
    """Rotation about X, then Y, then Z (radians), as a 3x3 matrix."""
    cx, sx = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    cz, sz = math.cos(roll), math.sin(roll)
    rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float64)
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float64)
    rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]], dtype=np.float64)
    return rz @ ry @ rx


class Transform:
    """Local-to-world mapping: scale, then rotate, then translate."""

    __slots__ = ["position", "rotation", "scale"]

    def __init__(
        self,
        position: Sequence[float] | np.ndarray = (0.0, 0.0, 0.0),
        rotation: np.ndarray | None = None,
        scale: float | Sequence[float] = 1.0,
    ) -> None:
        self.position = _vec3(position)
        self.rotation = (
            np.eye(3, dtype=np.float64) if rotation is None else np.asarray(rotation, dtype=np.float64)
        )
        self.scale = np.broadcast_to(np.asarray(scale, dtype=np.float64), (3,)).copy()

    def matrix(self) -> np.ndarray:
        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = self.rotation * self.scale
        m[:3, 3] = self.position
        return m

    def transform_point(self, point: Sequence[float] | np.ndarray) -> np.ndarray:
        return self.rotation @ (_vec3(point) * self.scale) + self.position

    def transform_direction(self, direction: Sequence[float] | np.ndarray) -> np.ndarray:
        return self.rotation @ (_vec3(direction) * self.scale)

    def inverse_transform_point(self, point: Sequence[float] | np.ndarray) -> np.ndarray:
        return (self.rotation.T @ (_vec3(point) - self.position)) / self.scale

    def inverse_transform_direction(self, direction: Sequence[float] | np.ndarray) -> np.ndarray:
        return (self.rotation.T @ _vec3(direction)) / self.scale


class Ray:
    __slots__ = ["origin", "direction"]

    def __init__(self, origin: Sequence[float] | np.ndarray, direction: Sequence[float] | np.ndarray) -> None:
        self.origin = _vec3(origin)
        d = _vec3(direction)
        length = float(np.linalg.norm(d))
        if length == 0.0:
            raise ValueError("Ray direction must be non-zero")
        self.direction = d / length

    def at(self, t: float) -> np.ndarray:
        return self.origin + self.direction * t


class RaycastHit:
    __slots__ = ["point", "distance", "triangle", "target"]

    def __init__(
        self,
        point: np.ndarray,
        distance: float,
        triangle: int,
        target: SceneObject | None = None,
    ) -> None:
        self.point = point
        self.distance = distance
        self.triangle = triangle
        self.target = target

    def __repr__(self) -> str:
        return f"RaycastHit(point={self.point.tolist()}, distance={self.distance:.4f}, triangle={self.triangle})"
