"""Custom exception types for the mesh deformer."""

from __future__ import annotations


class MeshDeformError(Exception):
    """Base class for domain-specific errors."""


class InvalidMeshError(MeshDeformError):
    """Raised when a body is given unusable vertex data or is initialized twice."""


class ConfigError(MeshDeformError):
    """Raised when simulation parameters are out of range."""

    def __init__(self, field: str, value: object, message: str | None = None) -> None:
        if message is None:
            message = f"Invalid value for '{field}': {value!r}"
        super().__init__(message)
        self.field = field
        self.value = value


__all__ = ["MeshDeformError", "InvalidMeshError", "ConfigError"]
