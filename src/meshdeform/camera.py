# camera.py
import math

import numpy as np

from meshdeform.models import Ray
from meshdeform.types import MAT4


def perspective(fov_y: float, aspect: float, near: float, far: float) -> MAT4:
    f = 1.0 / np.tan(fov_y * 0.5)
    return np.array(
        [
            [f / aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (far + near) / (near - far), (2.0 * far * near) / (near - far)],
            [0.0, 0.0, -1.0, 0.0],
        ],
        dtype=np.float32,
    )


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> MAT4:
    forward = target - eye
    forward = forward / np.linalg.norm(forward)
    side = np.cross(forward, up)
    side = side / np.linalg.norm(side)
    true_up = np.cross(side, forward)

    m = np.eye(4, dtype=np.float32)
    m[0, :3] = side
    m[1, :3] = true_up
    m[2, :3] = -forward
    m[0, 3] = -np.dot(side, eye)
    m[1, 3] = -np.dot(true_up, eye)
    m[2, 3] = np.dot(forward, eye)
    return m


class OrbitCamera:
    """
    Camera circling ``target`` at ``distance``.

    Matrices are row-major (column vectors); transpose before handing them
    to OpenGL.
    """

    def __init__(
        self,
        width: int,
        height: int,
        distance: float = 4.0,
        pitch: float = 0.3,
        yaw: float = 0.0,
        fov_y: float = math.radians(60.0),
    ) -> None:
        self.width = width
        self.height = height
        self.distance = distance
        self.pitch = pitch
        self.yaw = yaw
        self.fov_y = fov_y
        self.target = np.zeros(3, dtype=np.float64)
        self.near = 0.1
        self.far = 100.0

    def rotate(self, d_pitch: float, d_yaw: float) -> None:
        limit = math.pi / 2 - 0.01
        self.pitch = max(-limit, min(limit, self.pitch + d_pitch))
        self.yaw += d_yaw

    def zoom(self, amount: float) -> None:
        self.distance = max(0.5, self.distance - amount)

    @property
    def eye(self) -> np.ndarray:
        cp = math.cos(self.pitch)
        offset = np.array(
            [cp * math.sin(self.yaw), math.sin(self.pitch), cp * math.cos(self.yaw)],
            dtype=np.float64,
        )
        return self.target + offset * self.distance

    def view(self) -> MAT4:
        return look_at(self.eye, self.target, np.array([0.0, 1.0, 0.0]))

    def projection(self) -> MAT4:
        return perspective(self.fov_y, self.width / self.height, self.near, self.far)

    def screen_point_to_ray(self, x: float, y: float) -> Ray:
        """Ray from the eye through pixel ``(x, y)`` (origin top-left)."""
        ndc_x = 2.0 * x / self.width - 1.0
        ndc_y = 1.0 - 2.0 * y / self.height

        inv = np.linalg.inv(self.projection().astype(np.float64) @ self.view().astype(np.float64))
        near = inv @ np.array([ndc_x, ndc_y, -1.0, 1.0])
        far = inv @ np.array([ndc_x, ndc_y, 1.0, 1.0])
        near = near[:3] / near[3]
        far = far[:3] / far[3]
        return Ray(near, far - near)
