# solver_numpy.py
"""
Per-vertex damped-spring deformer.

Every vertex is tied to its rest position by an independent spring. Forces
injected at a point push (inflate) or pull (pinch) the vertices with a
falloff in squared distance, and each tick the springs relax the surface
back toward its rest shape.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, Sequence

from numba import njit, prange  # type: ignore
import numpy as np

from meshdeform.config import DeformerConfig
from meshdeform.exceptions import InvalidMeshError
from meshdeform.types import VERTS

logger = logging.getLogger(__name__)

# ===============================
# PHYSICS KERNELS
# ===============================


@njit(fastmath=True, cache=True, parallel=True)  # type: ignore
def apply_point_force(
    displaced: np.ndarray,
    velocity: np.ndarray,
    px: float,
    py: float,
    pz: float,
    force: float,
    dt: float,
    sign: float,
) -> int:
    """
    Add an attenuated impulse from point ``p`` to every vertex velocity.

    Returns the number of vertices skipped because they sit exactly on ``p``
    (their push direction is undefined).
    """
    skipped = 0
    for i in prange(len(displaced)):
        dx = displaced[i, 0] - px
        dy = displaced[i, 1] - py
        dz = displaced[i, 2] - pz

        dist_sq = dx * dx + dy * dy + dz * dz
        if dist_sq == 0.0:
            skipped += 1
        else:
            attenuated = force / (1.0 + dist_sq)
            scale = sign * attenuated * dt / np.sqrt(dist_sq)

            velocity[i, 0] += dx * scale
            velocity[i, 1] += dy * scale
            velocity[i, 2] += dz * scale
    return skipped


@njit(fastmath=True, cache=True, parallel=True)  # type: ignore
def integrate_springs(
    original: np.ndarray,
    displaced: np.ndarray,
    velocity: np.ndarray,
    spring_force: float,
    damping: float,
    dt: float,
) -> None:
    """
    Spring toward rest, damp, then move.

    Vertices share no state, so prange is safe.
    """
    spring_dt = spring_force * dt
    damp = 1.0 - damping * dt
    for i in prange(len(displaced)):
        for k in range(3):
            v = velocity[i, k] - (displaced[i, k] - original[i, k]) * spring_dt
            v *= damp
            velocity[i, k] = v
            displaced[i, k] += v * dt


# ===============================
# COLLABORATORS
# ===============================


class MeshSink(Protocol):
    """Rendering-side mesh storage fed with the displaced positions every tick."""

    def set_vertices(self, vertices: VERTS) -> None: ...

    def recalculate_normals(self) -> None: ...


class ColliderSink(Protocol):
    """Collision proxy rebuilt wholesale from a full vertex snapshot."""

    def rebuild(self, vertices: VERTS) -> None: ...


# ===============================
# BODY
# ===============================


class DeformableBody:
    """
    Owns rest positions, displaced positions and velocities of one mesh.

    The body is created empty and must be initialized exactly once with the
    mesh's local-space vertex positions. Sinks receive copies of the
    displaced array, never the live buffer.
    """

    def __init__(
        self,
        config: DeformerConfig | None = None,
        mesh_sink: MeshSink | None = None,
        collider_sink: ColliderSink | None = None,
    ) -> None:
        self.config = config if config is not None else DeformerConfig()
        self.mesh_sink = mesh_sink
        self.collider_sink = collider_sink

        self._original: VERTS = np.zeros((0, 3), dtype=np.float64)
        self._displaced: VERTS = np.zeros((0, 3), dtype=np.float64)
        self._velocity: VERTS = np.zeros((0, 3), dtype=np.float64)

        self.collider_timer = 0.0
        self.tick_dt = self.config.fixed_dt
        self.is_initialized = False
        self.is_exploded = False

        # Injection and integration never interleave on one body
        self._lock = threading.RLock()

    @classmethod
    def from_positions(
        cls,
        positions: Sequence[Sequence[float]] | VERTS,
        config: DeformerConfig | None = None,
        mesh_sink: MeshSink | None = None,
        collider_sink: ColliderSink | None = None,
    ) -> DeformableBody:
        body = cls(config, mesh_sink=mesh_sink, collider_sink=collider_sink)
        body.initialize(positions)
        return body

    def initialize(self, positions: Sequence[Sequence[float]] | VERTS) -> None:
        """Copy the rest shape in and zero all velocities."""
        if self.is_initialized:
            raise InvalidMeshError(
                "DeformableBody is already initialized; construct a new body instead"
            )

        try:
            verts = np.array(positions, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidMeshError(f"Vertex positions are not numeric: {exc}") from exc

        if verts.size == 0:
            raise InvalidMeshError("Cannot deform a mesh with zero vertices")
        if verts.ndim != 2 or verts.shape[1] != 3:
            raise InvalidMeshError(f"Expected (n, 3) vertex positions, got shape {verts.shape}")
        if not np.isfinite(verts).all():
            raise InvalidMeshError("Vertex positions contain NaN or infinite values")

        with self._lock:
            self._original = verts
            self._original.setflags(write=False)
            self._displaced = verts.copy()
            self._velocity = np.zeros_like(verts)
            self.collider_timer = 0.0
            self.is_initialized = True

        logger.info(
            "Deformable body initialized: %d vertices, spring=%.3f, damping=%.3f, "
            "collider interval=%.3fs",
            len(verts),
            self.config.spring_force,
            self.config.damping,
            self.config.collider_update_interval,
        )

    # ------------------------
    # State
    # ------------------------

    @property
    def vertex_count(self) -> int:
        return len(self._original)

    @property
    def original(self) -> VERTS:
        return self._original

    @property
    def displaced(self) -> VERTS:
        view = self._displaced.view()
        view.setflags(write=False)
        return view

    @property
    def velocity(self) -> VERTS:
        view = self._velocity.view()
        view.setflags(write=False)
        return view

    def max_displacement(self) -> float:
        if not self.is_initialized:
            return 0.0
        return float(np.max(np.linalg.norm(self._displaced - self._original, axis=1)))

    def is_at_rest(self, tol: float = 1e-6) -> bool:
        if not self.is_initialized:
            return True
        return self.max_displacement() <= tol and float(np.max(np.abs(self._velocity))) <= tol

    # ------------------------
    # Forces
    # ------------------------

    def add_deforming_force(
        self,
        point: Sequence[float] | np.ndarray,
        force: float,
        is_inflate: bool,
        dt: float | None = None,
    ) -> None:
        """
        Push every vertex away from (inflate) or toward (pinch) ``point``.

        ``point`` must already be in the body's local space. ``force`` is
        expected to be non-negative; it is not checked. The impulse acts as
        if the force were held for ``dt`` seconds, defaulting to the length
        of the most recent tick. Vertices exactly on ``point`` are left
        untouched.
        """
        if not self.is_initialized:
            return

        step = self.tick_dt if dt is None else dt
        px, py, pz = (float(c) for c in point)
        sign = 1.0 if is_inflate else -1.0

        with self._lock:
            skipped = apply_point_force(
                self._displaced,
                self._velocity,
                px,
                py,
                pz,
                float(force),
                float(step),
                sign,
            )

        logger.debug(
            "%s force %.3f at (%.3f, %.3f, %.3f) over %.4fs",
            "Inflate" if is_inflate else "Pinch",
            force,
            px,
            py,
            pz,
            step,
        )
        if skipped:
            logger.debug("Skipped %d vertices coincident with the force point", skipped)

    # ------------------------
    # Integration
    # ------------------------

    def integrate(self, dt: float) -> None:
        """Advance every vertex by ``dt`` seconds and publish the result."""
        if not self.is_initialized:
            logger.warning("integrate() called on an uninitialized body; ignoring")
            return

        with self._lock:
            integrate_springs(
                self._original,
                self._displaced,
                self._velocity,
                float(self.config.spring_force),
                float(self.config.damping),
                float(dt),
            )
            self.tick_dt = dt

            if not self.is_exploded and not np.isfinite(self._displaced).all():
                self.is_exploded = True
                logger.warning(
                    "Deformation became unstable (spring*dt=%.3f, damping*dt=%.3f)",
                    self.config.spring_force * dt,
                    self.config.damping * dt,
                )

            if self.mesh_sink is not None:
                self.mesh_sink.set_vertices(self._displaced.copy())
                self.mesh_sink.recalculate_normals()

            self.collider_timer += dt
            if self.collider_timer >= self.config.collider_update_interval:
                self.collider_timer = 0.0
                self._refresh_collider()

    def _refresh_collider(self) -> None:
        if self.collider_sink is None:
            return
        self.collider_sink.rebuild(self._displaced.copy())
        logger.debug("Collider rebuilt from %d vertices", self.vertex_count)
