"""Shared fixtures and test categorization.

Tests whose filename contains ``regression`` get the ``regression`` marker,
everything else is ``unit``.
"""

from __future__ import annotations

import pathlib

import numpy as np
import pytest

from meshdeform.config import DeformerConfig
from meshdeform.solver_numpy import DeformableBody


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    for item in items:
        name = pathlib.Path(str(item.fspath)).name.lower()
        if "regression" in name:
            item.add_marker(pytest.mark.regression)
        else:
            item.add_marker(pytest.mark.unit)


class RecordingMeshSink:
    def __init__(self) -> None:
        self.frames: list[np.ndarray] = []
        self.normal_updates = 0

    def set_vertices(self, vertices: np.ndarray) -> None:
        self.frames.append(vertices)

    def recalculate_normals(self) -> None:
        self.normal_updates += 1


class RecordingColliderSink:
    def __init__(self) -> None:
        self.snapshots: list[np.ndarray] = []

    def rebuild(self, vertices: np.ndarray) -> None:
        self.snapshots.append(vertices)


@pytest.fixture
def config() -> DeformerConfig:
    return DeformerConfig(spring_force=50.0, damping=10.0, collider_update_interval=0.1, fixed_dt=0.01)


@pytest.fixture
def mesh_sink() -> RecordingMeshSink:
    return RecordingMeshSink()


@pytest.fixture
def collider_sink() -> RecordingColliderSink:
    return RecordingColliderSink()


@pytest.fixture
def cube_body(config: DeformerConfig) -> DeformableBody:
    corners = [
        [x, y, z] for x in (-1.0, 1.0) for y in (-1.0, 1.0) for z in (-1.0, 1.0)
    ]
    return DeformableBody.from_positions(corners, config)
