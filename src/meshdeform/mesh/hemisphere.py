# hemisphere.py
"""
UV-style dome and ball meshes for the deformer demo.

Both generators return ``(vertices, faces)`` with Y up, triangles wound
counter-clockwise when seen from outside, and indices laid out ring by ring
from the top pole down.
"""

import logging
import math

import numpy as np

from meshdeform.types import FACE, VERTS

logger = logging.getLogger(__name__)


def _ring_faces(faces: list[list[int]], rings: int, segments: int) -> None:
    """Quads between consecutive rings, split into two triangles each."""
    for r in range(rings - 1):
        curr_ring_start = 1 + r * segments
        next_ring_start = 1 + (r + 1) * segments

        for s in range(segments):
            i1 = curr_ring_start + s
            i2 = curr_ring_start + (s + 1) % segments
            i3 = next_ring_start + s
            i4 = next_ring_start + (s + 1) % segments

            faces.append([i1, i2, i3])
            faces.append([i2, i4, i3])


def _top_cap(faces: list[list[int]], segments: int) -> None:
    for s in range(segments):
        faces.append([0, 1 + (s + 1) % segments, 1 + s])


def generate_hemisphere(
    radius: float = 1.0,
    rings: int = 8,
    segments: int = 16,
) -> tuple[VERTS, FACE]:
    """
    Generate a closed dome: a hemisphere cap sitting on a flat base disk.

    Args:
        radius: Dome radius
        rings: Number of latitude rings below the apex (the last is the rim)
        segments: Number of longitude segments

    Returns:
        (vertices, faces) tuple
    """
    if rings < 1 or segments < 3:
        raise ValueError("Need at least 1 ring and 3 segments")

    points: list[tuple[float, float, float]] = [(0.0, radius, 0.0)]

    for r in range(1, rings + 1):
        # Angle from apex (0) to rim (pi/2)
        phi = (math.pi / 2) * (r / rings)
        y = radius * math.cos(phi)
        ring_radius = radius * math.sin(phi)

        for s in range(segments):
            theta = (2 * math.pi * s) / segments
            points.append((ring_radius * math.cos(theta), y, ring_radius * math.sin(theta)))

    center_idx = len(points)
    points.append((0.0, 0.0, 0.0))

    faces: list[list[int]] = []
    _top_cap(faces, segments)
    _ring_faces(faces, rings, segments)

    # Base disk, facing down
    rim_start = 1 + (rings - 1) * segments
    for s in range(segments):
        faces.append([center_idx, rim_start + s, rim_start + (s + 1) % segments])

    logger.debug("Generated hemisphere: %d vertices, %d faces", len(points), len(faces))
    return np.array(points, dtype=np.float64), np.array(faces, dtype=np.int32)


def generate_sphere(
    radius: float = 1.0,
    rings: int = 12,
    segments: int = 24,
) -> tuple[VERTS, FACE]:
    """
    Generate a UV sphere with a vertex at each pole.

    ``rings`` counts latitude bands, so there are ``rings - 1`` vertex rings
    between the poles.
    """
    if rings < 2 or segments < 3:
        raise ValueError("Need at least 2 rings and 3 segments")

    points: list[tuple[float, float, float]] = [(0.0, radius, 0.0)]

    for r in range(1, rings):
        phi = math.pi * (r / rings)
        y = radius * math.cos(phi)
        ring_radius = radius * math.sin(phi)

        for s in range(segments):
            theta = (2 * math.pi * s) / segments
            points.append((ring_radius * math.cos(theta), y, ring_radius * math.sin(theta)))

    south_idx = len(points)
    points.append((0.0, -radius, 0.0))

    faces: list[list[int]] = []
    _top_cap(faces, segments)
    _ring_faces(faces, rings - 1, segments)

    last_ring_start = 1 + (rings - 2) * segments
    for s in range(segments):
        faces.append([last_ring_start + s, last_ring_start + (s + 1) % segments, south_idx])

    logger.debug("Generated sphere: %d vertices, %d faces", len(points), len(faces))
    return np.array(points, dtype=np.float64), np.array(faces, dtype=np.int32)
