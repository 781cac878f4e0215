"""Hand-computed single-vertex scenario pinned to exact numbers."""

import numpy as np
import pytest

from meshdeform.config import DeformerConfig
from meshdeform.solver_numpy import DeformableBody


@pytest.fixture
def lone_vertex() -> DeformableBody:
    config = DeformerConfig(spring_force=50.0, damping=10.0, fixed_dt=0.01)
    return DeformableBody.from_positions([[0.0, 0.0, 0.0]], config)


def test_force_at_the_vertex_itself_does_nothing(lone_vertex):
    lone_vertex.add_deforming_force((0.0, 0.0, 0.0), 1.0, True, dt=0.01)
    np.testing.assert_array_equal(lone_vertex.velocity, [[0.0, 0.0, 0.0]])


def test_offset_force_gives_expected_impulse(lone_vertex):
    lone_vertex.add_deforming_force((0.0, 0.0, 0.0), 1.0, True, dt=0.01)
    # delta = (-1, 0, 0), attenuated = 10 / (1 + 1) = 5, impulse = 5 * 0.01
    lone_vertex.add_deforming_force((1.0, 0.0, 0.0), 10.0, True, dt=0.01)

    np.testing.assert_allclose(lone_vertex.velocity, [[-0.05, 0.0, 0.0]], rtol=1e-12, atol=1e-15)
    np.testing.assert_array_equal(lone_vertex.displaced, [[0.0, 0.0, 0.0]])


def test_default_duration_is_the_fixed_tick(lone_vertex):
    lone_vertex.add_deforming_force((1.0, 0.0, 0.0), 10.0, True)
    assert lone_vertex.velocity[0, 0] == pytest.approx(-0.05)


def test_first_tick_after_impulse(lone_vertex):
    lone_vertex.add_deforming_force((1.0, 0.0, 0.0), 10.0, True, dt=0.01)
    lone_vertex.integrate(0.01)

    # No displacement yet, so only damping acts: -0.05 * (1 - 10 * 0.01)
    assert lone_vertex.velocity[0, 0] == pytest.approx(-0.045)
    assert lone_vertex.displaced[0, 0] == pytest.approx(-0.00045)
