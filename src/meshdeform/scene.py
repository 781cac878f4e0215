# scene.py
"""
Explicit scene bookkeeping.

``Scene`` maps each object to the behaviours attached to it, keyed by type,
and ``Scheduler`` drives one tick: every input adapter is polled first, then
every body integrates. Objects never discover each other implicitly.
"""

from __future__ import annotations

import logging
from typing import Iterator, Protocol, TypeVar

from meshdeform.models import Transform

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SceneObject:
    """A named placement in the world; behaviours hang off it through the Scene."""

    def __init__(self, name: str, transform: Transform | None = None) -> None:
        self.name = name
        self.transform = transform if transform is not None else Transform()

    def __repr__(self) -> str:
        return f"SceneObject({self.name!r})"


class Scene:
    """Registry from object identity to ``{behaviour type: behaviour}``."""

    def __init__(self) -> None:
        self._objects: dict[int, SceneObject] = {}
        self._components: dict[int, dict[type, object]] = {}

    def add(self, obj: SceneObject, *components: object) -> SceneObject:
        key = id(obj)
        self._objects[key] = obj
        attached = self._components.setdefault(key, {})
        for component in components:
            attached[type(component)] = component
        return obj

    def attach(self, obj: SceneObject, component: object) -> None:
        if id(obj) not in self._objects:
            raise KeyError(f"{obj!r} is not part of this scene")
        self._components[id(obj)][type(component)] = component

    def remove(self, obj: SceneObject) -> None:
        self._objects.pop(id(obj), None)
        self._components.pop(id(obj), None)

    def get_component(self, obj: SceneObject, kind: type[T]) -> T | None:
        attached = self._components.get(id(obj))
        if attached is None:
            return None
        found = attached.get(kind)
        if found is None:
            # Fall back to subclasses of the requested type
            for component in attached.values():
                if isinstance(component, kind):
                    return component
        return found  # type: ignore[return-value]

    def objects(self) -> Iterator[SceneObject]:
        return iter(list(self._objects.values()))

    def components_of(self, kind: type[T]) -> Iterator[tuple[SceneObject, T]]:
        for obj in self.objects():
            component = self.get_component(obj, kind)
            if component is not None:
                yield obj, component

    def __contains__(self, obj: SceneObject) -> bool:
        return id(obj) in self._objects

    def __len__(self) -> int:
        return len(self._objects)


class Pollable(Protocol):
    def poll(self, dt: float) -> int: ...


class Integrable(Protocol):
    def integrate(self, dt: float) -> None: ...


class Scheduler:
    """Runs adapters, then bodies, once per tick in registration order."""

    def __init__(self) -> None:
        self.adapters: list[Pollable] = []
        self.bodies: list[Integrable] = []
        self.tick_count = 0
        self.time = 0.0

    def add_adapter(self, adapter: Pollable) -> None:
        self.adapters.append(adapter)

    def add_body(self, body: Integrable) -> None:
        self.bodies.append(body)

    def remove_body(self, body: Integrable) -> None:
        self.bodies.remove(body)

    def replace_body(self, old: Integrable, new: Integrable) -> None:
        self.bodies[self.bodies.index(old)] = new

    def tick(self, dt: float) -> int:
        """Advance one tick; returns the number of force injections made."""
        injections = 0
        for adapter in self.adapters:
            injections += adapter.poll(dt)
        for body in self.bodies:
            body.integrate(dt)

        self.tick_count += 1
        self.time += dt
        return injections
