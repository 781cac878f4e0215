# input_adapter.py
"""
Turns "button held + pointer ray" into force injections.

Primary trigger inflates, secondary pinches. Each trigger resolves its own
pick, so the two may land on different bodies in the same tick. A miss, or
a hit on an object without a deformable body, does nothing.
"""

from __future__ import annotations

import logging
from typing import Protocol

from meshdeform.config import InputConfig
from meshdeform.models import Ray, RaycastHit
from meshdeform.scene import Scene
from meshdeform.solver_numpy import DeformableBody

logger = logging.getLogger(__name__)


class TriggerSource(Protocol):
    def primary_held(self) -> bool: ...

    def secondary_held(self) -> bool: ...

    def pointer_ray(self) -> Ray: ...


class RayPicker(Protocol):
    def raycast(self, ray: Ray) -> RaycastHit | None: ...


class ForceInputAdapter:
    def __init__(
        self,
        triggers: TriggerSource,
        picker: RayPicker,
        scene: Scene,
        config: InputConfig | None = None,
    ) -> None:
        self.triggers = triggers
        self.picker = picker
        self.scene = scene
        self.config = config if config is not None else InputConfig()

    @property
    def force(self) -> float:
        return self.config.force

    def poll(self, dt: float) -> int:
        """Check both triggers once; returns how many forces were applied."""
        applied = 0
        if self.triggers.primary_held():
            applied += self._apply(True, dt)
        if self.triggers.secondary_held():
            applied += self._apply(False, dt)
        return applied

    def _apply(self, is_inflate: bool, dt: float) -> int:
        hit = self.picker.raycast(self.triggers.pointer_ray())
        if hit is None or hit.target is None:
            return 0

        body = self.scene.get_component(hit.target, DeformableBody)
        if body is None:
            return 0

        local_point = hit.target.transform.inverse_transform_point(hit.point)
        body.add_deforming_force(local_point, self.force, is_inflate, dt)
        logger.debug("%s %s at %s", "Inflating" if is_inflate else "Pinching", hit.target.name, local_point)
        return 1
