"""World description: the ordered collection of scene objects.

The World is a host-side list of shape descriptions. It is built from
configuration, validated on insertion, and copied into the Taichi
primitive storage by upload() right before a render. The kernel side only
ever reads that storage, so the world is immutable for the duration of a
render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.scene.world import World
    >>> world = World()
    >>> world.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5)
    >>> world.add_half_plane(normal=(0.0, 1.0, 0.0), offset=-0.5)
    >>> world.upload()
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

import numpy as np

from skytrace.geometry.convex import Direction, unit_direction
from skytrace.scene.intersection import (
    MAX_HALF_PLANES,
    MAX_SPHERES,
    add_half_plane,
    add_sphere,
    clear_scene,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in the world.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
    """

    center: tuple[float, float, float]
    radius: float

    def support(self, direction: Direction) -> float:
        """Projection of the center onto ``direction`` plus the radius."""
        center = np.asarray(self.center, dtype=np.float64)
        return float(np.dot(center, unit_direction(direction))) + self.radius

    def to_dict(self) -> dict[str, Any]:
        return {"type": "sphere", "center": list(self.center), "radius": self.radius}


@dataclass(frozen=True)
class HalfPlaneInfo:
    """A half-plane in the world.

    Attributes:
        normal: Unit normal of the plane.
        offset: Signed distance of the plane from the origin along normal.
    """

    normal: tuple[float, float, float]
    offset: float

    def to_dict(self) -> dict[str, Any]:
        return {"type": "half_plane", "normal": list(self.normal), "offset": self.offset}


SceneObject = SphereInfo | HalfPlaneInfo


def _as_point(value: Iterable[float], name: str) -> tuple[float, float, float]:
    values = tuple(float(v) for v in value)
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return values[0], values[1], values[2]


class World:
    """Ordered collection of spheres and half-planes.

    Insertion order is kept for serialization; it does not affect the
    rendered result.

    Attributes:
        objects: The scene objects in insertion order.

    Example:
        >>> world = World()
        >>> world.add_sphere((0.0, 0.0, -1.0), 0.5)
        SphereInfo(center=(0.0, 0.0, -1.0), radius=0.5)
        >>> len(world)
        1
    """

    def __init__(self, objects: Iterable[SceneObject] | None = None) -> None:
        self.objects: list[SceneObject] = []
        for obj in objects or ():
            self.add(obj)

    def add(self, obj: SceneObject) -> SceneObject:
        """Add a prebuilt scene object.

        Raises:
            TypeError: If obj is not a SphereInfo or HalfPlaneInfo.
        """
        if isinstance(obj, SphereInfo):
            return self.add_sphere(obj.center, obj.radius)
        if isinstance(obj, HalfPlaneInfo):
            return self.add_half_plane(obj.normal, obj.offset)
        raise TypeError(f"Unsupported scene object: {type(obj).__name__}")

    def add_sphere(self, center: Iterable[float], radius: float) -> SphereInfo:
        """Add a sphere.

        Raises:
            ValueError: If the radius is not positive or the center is malformed.
            RuntimeError: If the world already holds MAX_SPHERES spheres.
        """
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        if len(self.spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
        sphere = SphereInfo(center=_as_point(center, "Sphere center"), radius=float(radius))
        self.objects.append(sphere)
        return sphere

    def add_half_plane(self, normal: Iterable[float], offset: float) -> HalfPlaneInfo:
        """Add a half-plane. The normal is normalized on insertion.

        Raises:
            ValueError: If the normal has zero length or is malformed.
            RuntimeError: If the world already holds MAX_HALF_PLANES half-planes.
        """
        n = np.asarray(_as_point(normal, "Half-plane normal"), dtype=np.float64)
        length = np.linalg.norm(n)
        if length == 0.0:
            raise ValueError("Half-plane normal must be non-zero")
        if len(self.half_planes) >= MAX_HALF_PLANES:
            raise RuntimeError(f"Maximum number of half-planes ({MAX_HALF_PLANES}) exceeded")
        n = n / length
        plane = HalfPlaneInfo(
            normal=(float(n[0]), float(n[1]), float(n[2])),
            offset=float(offset),
        )
        self.objects.append(plane)
        return plane

    @property
    def spheres(self) -> list[SphereInfo]:
        """The spheres in insertion order."""
        return [obj for obj in self.objects if isinstance(obj, SphereInfo)]

    @property
    def half_planes(self) -> list[HalfPlaneInfo]:
        """The half-planes in insertion order."""
        return [obj for obj in self.objects if isinstance(obj, HalfPlaneInfo)]

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[SceneObject]:
        return iter(self.objects)

    def clear(self) -> None:
        """Remove all objects (does not touch the kernel storage)."""
        self.objects.clear()

    def upload(self) -> None:
        """Replace the kernel-side primitive storage with this world."""
        clear_scene()
        for sphere in self.spheres:
            add_sphere(sphere.center, sphere.radius)
        for plane in self.half_planes:
            add_half_plane(plane.normal, plane.offset)
        logger.debug(
            "Uploaded world: %d spheres, %d half-planes",
            len(self.spheres),
            len(self.half_planes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the world to a dictionary (for JSON serialization)."""
        return {"objects": [obj.to_dict() for obj in self.objects]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "World":
        """Build a world from a dictionary produced by to_dict().

        Raises:
            ValueError: If an object has an unknown type or invalid fields.
        """
        world = cls()
        for obj in data.get("objects", []):
            obj_type = str(obj.get("type", "")).lower()
            if obj_type == "sphere":
                world.add_sphere(obj.get("center", [0.0, 0.0, 0.0]), obj.get("radius", 1.0))
            elif obj_type == "half_plane":
                world.add_half_plane(obj.get("normal", [0.0, 1.0, 0.0]), obj.get("offset", 0.0))
            else:
                raise ValueError(f"Unknown scene object type: {obj_type}")
        return world

    def __repr__(self) -> str:
        return f"World(spheres={len(self.spheres)}, half_planes={len(self.half_planes)})"
