import numpy as np
import pytest

from meshdeform.collision import MeshCollider
from meshdeform.config import DeformerConfig
from meshdeform.models import Ray, Transform
from meshdeform.solver_numpy import DeformableBody

# --- Helpers ---


def unit_triangle(z: float = 0.0) -> tuple[np.ndarray, np.ndarray]:
    verts = np.array([[0.0, 0.0, z], [1.0, 0.0, z], [0.0, 1.0, z]])
    faces = np.array([[0, 1, 2]], dtype=np.int32)
    return verts, faces


# --- Tests ---


def test_ray_hits_triangle():
    collider = MeshCollider(*unit_triangle())
    hit = collider.raycast(Ray((0.25, 0.25, 3.0), (0.0, 0.0, -1.0)))

    assert hit is not None
    assert hit.distance == pytest.approx(3.0)
    np.testing.assert_allclose(hit.point, [0.25, 0.25, 0.0], atol=1e-12)
    assert hit.triangle == 0


def test_back_face_also_hits():
    collider = MeshCollider(*unit_triangle())
    hit = collider.raycast(Ray((0.25, 0.25, -2.0), (0.0, 0.0, 1.0)))
    assert hit is not None
    assert hit.distance == pytest.approx(2.0)


def test_ray_misses_outside_and_behind():
    collider = MeshCollider(*unit_triangle())
    assert collider.raycast(Ray((0.9, 0.9, 3.0), (0.0, 0.0, -1.0))) is None
    assert collider.raycast(Ray((0.25, 0.25, 3.0), (0.0, 0.0, 1.0))) is None
    assert collider.raycast(Ray((5.0, 5.0, 3.0), (0.0, 0.0, -1.0))) is None


def test_nearest_triangle_wins():
    verts = np.array(
        [
            [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0], [1.0, 0.0, 1.0], [0.0, 1.0, 1.0],
        ]
    )
    faces = np.array([[0, 1, 2], [3, 4, 5]], dtype=np.int32)
    hit = MeshCollider(verts, faces).raycast(Ray((0.2, 0.2, 5.0), (0.0, 0.0, -1.0)))
    assert hit is not None
    assert hit.triangle == 1
    assert hit.distance == pytest.approx(4.0)


def test_rebuild_replaces_geometry_wholesale():
    verts, faces = unit_triangle()
    collider = MeshCollider(verts, faces)
    ray = Ray((0.25, 0.25, 3.0), (0.0, 0.0, -1.0))

    moved = verts + np.array([5.0, 0.0, 0.0])
    collider.rebuild(moved)

    assert collider.rebuild_count == 1
    assert collider.raycast(ray) is None
    assert collider.raycast(Ray((5.25, 0.25, 3.0), (0.0, 0.0, -1.0))) is not None
    np.testing.assert_array_equal(collider.bounds_min, [5.0, 0.0, 0.0])


def test_rebuild_rejects_mismatched_snapshot():
    collider = MeshCollider(*unit_triangle())
    with pytest.raises(ValueError):
        collider.rebuild(np.zeros((4, 3)))


def test_rebuild_does_not_alias_snapshot():
    verts, faces = unit_triangle()
    collider = MeshCollider(verts, faces)
    snapshot = verts.copy()
    collider.rebuild(snapshot)
    snapshot[:] = 100.0
    assert collider.raycast(Ray((0.25, 0.25, 3.0), (0.0, 0.0, -1.0))) is not None


def test_raycast_through_transform_reports_world_space():
    collider = MeshCollider(*unit_triangle())
    transform = Transform(position=(10.0, 0.0, 0.0), scale=2.0)

    # Local triangle spans [0, 2] in world units after scaling
    hit = collider.raycast(Ray((11.5, 0.2, 4.0), (0.0, 0.0, -1.0)), transform)
    assert hit is not None
    assert hit.distance == pytest.approx(4.0)
    np.testing.assert_allclose(hit.point, [11.5, 0.2, 0.0], atol=1e-12)

    assert collider.raycast(Ray((12.5, 1.0, 4.0), (0.0, 0.0, -1.0)), transform) is None


def test_body_refresh_feeds_collider():
    verts, faces = unit_triangle()
    collider = MeshCollider(verts, faces)
    config = DeformerConfig(collider_update_interval=0.05)
    body = DeformableBody.from_positions(verts, config, collider_sink=collider)

    body.add_deforming_force((0.3, 0.3, -1.0), 50.0, True, dt=0.01)
    body.integrate(0.05)

    assert collider.rebuild_count == 1
    np.testing.assert_array_equal(collider.vertices, body.displaced)
    assert collider.bounds_min[2] > 0.0
