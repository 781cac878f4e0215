"""Ray picking against every collider registered in a scene."""

from __future__ import annotations

import logging

from meshdeform.collision import MeshCollider
from meshdeform.models import Ray, RaycastHit
from meshdeform.scene import Scene

logger = logging.getLogger(__name__)


class Picker:
    def __init__(self, scene: Scene, max_distance: float = float("inf")) -> None:
        self.scene = scene
        self.max_distance = max_distance

    def raycast(self, ray: Ray) -> RaycastHit | None:
        """Nearest hit across all colliders, tagged with the object that was hit."""
        best: RaycastHit | None = None
        for obj, collider in self.scene.components_of(MeshCollider):
            hit = collider.raycast(ray, obj.transform)
            if hit is None or hit.distance > self.max_distance:
                continue
            if best is None or hit.distance < best.distance:
                hit.target = obj
                best = hit
        return best
