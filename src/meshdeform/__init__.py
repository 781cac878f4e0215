"""
Mesh Deformer Package

Jiggly soft-body deformation of triangle meshes: point forces push vertices
around and per-vertex damped springs pull them back to their rest shape.
"""

from .config import DeformerConfig, InputConfig
from .exceptions import ConfigError, InvalidMeshError, MeshDeformError
from .input_adapter import ForceInputAdapter
from .models import Ray, RaycastHit, Transform
from .solver_numpy import DeformableBody

__version__ = "0.1.0"

__all__ = [
    "DeformableBody",
    "ForceInputAdapter",
    "DeformerConfig",
    "InputConfig",
    "Transform",
    "Ray",
    "RaycastHit",
    "MeshDeformError",
    "InvalidMeshError",
    "ConfigError",
]
