"""
Simulation parameters.

``DeformerConfig`` carries the per-body spring model constants and
``InputConfig`` the force magnitude used by the input side. Neither is
mutated by the simulation itself; the demo replaces them wholesale when the
user tweaks a value.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
import math
from typing import Any, Mapping

from meshdeform.exceptions import ConfigError


def _check_finite(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ConfigError(name, value, f"'{name}' must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigError(name, value)


@dataclass(frozen=True)
class DeformerConfig:
    spring_force: float = 50.0
    damping: float = 10.0
    collider_update_interval: float = 0.1
    # Injection duration used when the caller does not supply one
    fixed_dt: float = 1.0 / 60.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for f in fields(self):
            _check_finite(f.name, getattr(self, f.name))

        if self.spring_force < 0.0:
            raise ConfigError("spring_force", self.spring_force, "spring_force must be >= 0")
        if self.damping < 0.0:
            raise ConfigError("damping", self.damping, "damping must be >= 0")
        if self.collider_update_interval <= 0.0:
            raise ConfigError(
                "collider_update_interval",
                self.collider_update_interval,
                "collider_update_interval must be > 0",
            )
        if self.fixed_dt <= 0.0:
            raise ConfigError("fixed_dt", self.fixed_dt, "fixed_dt must be > 0")

    def is_stable_for(self, dt: float) -> bool:
        """Rough explicit-Euler stability check for a tick of length ``dt``."""
        return self.damping * dt < 1.0 and self.spring_force * dt * dt < 1.0

    def replace(self, **changes: Any) -> DeformerConfig:
        values = asdict(self)
        values.update(changes)
        return DeformerConfig(**values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DeformerConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(unknown[0], data[unknown[0]], f"Unknown config keys: {unknown}")
        return cls(**dict(data))


@dataclass(frozen=True)
class InputConfig:
    force: float = 1.0

    def __post_init__(self) -> None:
        _check_finite("force", self.force)
