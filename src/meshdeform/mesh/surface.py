"""Renderable triangle mesh: vertex buffer, index buffer and shading normals."""

from __future__ import annotations

import numpy as np

from meshdeform.types import FACE, VERTS


def vertex_normals(vertices: VERTS, faces: FACE) -> VERTS:
    """
    Area-weighted vertex normals.

    Each face contributes its unnormalized cross product (twice its area) to
    its three corners. Vertices touched by no face get a zero normal.
    """
    p1 = vertices[faces[:, 0]]
    p2 = vertices[faces[:, 1]]
    p3 = vertices[faces[:, 2]]
    face_n = np.cross(p2 - p1, p3 - p1)

    normals = np.zeros_like(vertices)
    for corner in range(3):
        np.add.at(normals, faces[:, corner], face_n)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    np.divide(normals, lengths, out=normals, where=lengths > 1e-12)
    return normals


class SurfaceMesh:
    """
    Mesh storage owned by the rendering side.

    The deformer writes new positions in with ``set_vertices`` and then asks
    for ``recalculate_normals``; the renderer reads ``vertices`` and
    ``normals``. ``version`` increments on every vertex write so a renderer
    can skip re-uploading unchanged data.
    """

    def __init__(self, vertices: VERTS, faces: FACE) -> None:
        self.vertices = np.array(vertices, dtype=np.float64)
        self.faces = np.asarray(faces, dtype=np.int32)
        if self.faces.ndim != 2 or self.faces.shape[1] != 3:
            raise ValueError(f"Faces must have shape (m, 3), got {self.faces.shape}")
        if self.faces.size and (self.faces.min() < 0 or self.faces.max() >= len(self.vertices)):
            raise ValueError("Face indices out of range")

        self.normals = vertex_normals(self.vertices, self.faces)
        self.version = 0

    def set_vertices(self, vertices: VERTS) -> None:
        if vertices.shape != self.vertices.shape:
            raise ValueError(
                f"Vertex buffer shape {vertices.shape} does not match mesh {self.vertices.shape}"
            )
        self.vertices = vertices
        self.version += 1

    def recalculate_normals(self) -> None:
        self.normals = vertex_normals(self.vertices, self.faces)

    def interleaved(self) -> np.ndarray:
        """Position + normal per vertex, as float32 for upload."""
        return np.hstack([self.vertices, self.normals]).astype("f4")
