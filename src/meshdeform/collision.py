# collision.py
"""
Triangle-mesh collision proxy.

The deformer hands the collider a full vertex snapshot every refresh; the
collider throws away its previous triangles and bounds and rebuilds them
from scratch. Ray casts run against the last snapshot, so between refreshes
they see slightly stale geometry.
"""

from __future__ import annotations

import logging

import numpy as np

from meshdeform.models import Ray, RaycastHit, Transform
from meshdeform.types import FACE, VERTS

logger = logging.getLogger(__name__)

EPSILON = 1e-9


def ray_aabb(origin: np.ndarray, direction: np.ndarray, lo: np.ndarray, hi: np.ndarray) -> bool:
    """Slab test; True if the ray (t >= 0) touches the box."""
    with np.errstate(divide="ignore", invalid="ignore"):
        inv = 1.0 / direction
        t1 = (lo - origin) * inv
        t2 = (hi - origin) * inv
    t_near = np.nanmax(np.minimum(t1, t2))
    t_far = np.nanmin(np.maximum(t1, t2))
    return bool(t_far >= max(t_near, 0.0))


def ray_triangles(
    origin: np.ndarray,
    direction: np.ndarray,
    v0: np.ndarray,
    e1: np.ndarray,
    e2: np.ndarray,
) -> np.ndarray:
    """
    Vectorized Möller-Trumbore intersection.

    Returns the hit distance per triangle, ``inf`` where the ray misses.
    Both windings count as hits.
    """
    pvec = np.cross(direction, e2)
    det = np.einsum("ij,ij->i", e1, pvec)
    valid = np.abs(det) > EPSILON
    inv_det = np.zeros_like(det)
    inv_det[valid] = 1.0 / det[valid]

    tvec = origin - v0
    u = np.einsum("ij,ij->i", tvec, pvec) * inv_det
    qvec = np.cross(tvec, e1)
    v = (qvec @ direction) * inv_det
    t = np.einsum("ij,ij->i", e2, qvec) * inv_det

    hit = valid & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t > EPSILON)
    return np.where(hit, t, np.inf)


class MeshCollider:
    """Collision proxy in the owning object's local space."""

    def __init__(self, vertices: VERTS, faces: FACE) -> None:
        self.faces = np.asarray(faces, dtype=np.int32)
        self.rebuild_count = 0
        self._build(np.asarray(vertices, dtype=np.float64))

    def _build(self, vertices: VERTS) -> None:
        self.vertices = vertices
        self._v0 = vertices[self.faces[:, 0]]
        self._e1 = vertices[self.faces[:, 1]] - self._v0
        self._e2 = vertices[self.faces[:, 2]] - self._v0
        self.bounds_min = vertices.min(axis=0)
        self.bounds_max = vertices.max(axis=0)

    def rebuild(self, vertices: VERTS) -> None:
        """Replace the proxy wholesale with a new vertex snapshot."""
        verts = np.asarray(vertices, dtype=np.float64)
        if verts.shape != self.vertices.shape:
            raise ValueError(
                f"Collider snapshot shape {verts.shape} does not match {self.vertices.shape}"
            )
        self._build(verts.copy())
        self.rebuild_count += 1

    def raycast(self, ray: Ray, transform: Transform | None = None) -> RaycastHit | None:
        """
        Nearest hit of a world-space ray, or None.

        The ray is taken into local space through ``transform``; the hit point
        and distance are reported back in world space.
        """
        if transform is None:
            origin, direction = ray.origin, ray.direction
        else:
            origin = transform.inverse_transform_point(ray.origin)
            direction = transform.inverse_transform_direction(ray.direction)

        if not ray_aabb(origin, direction, self.bounds_min, self.bounds_max):
            return None

        t = ray_triangles(origin, direction, self._v0, self._e1, self._e2)
        idx = int(np.argmin(t))
        if not np.isfinite(t[idx]):
            return None

        # t is shared between spaces because the local direction is not renormalized
        distance = float(t[idx])
        return RaycastHit(point=ray.at(distance), distance=distance, triangle=idx)
