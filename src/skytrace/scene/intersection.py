"""Scene-level nearest-hit queries.

Scene objects are a closed set of primitive kinds (spheres and
half-planes), each stored in Structure-of-Arrays Taichi fields. A query
tests every object and keeps the hit with the smallest ray parameter; there
is no acceleration structure.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.scene.intersection import (
    ...     add_half_plane, add_sphere, clear_scene, closest_hit
    ... )
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5)
    >>> add_half_plane((0.0, 1.0, 0.0), -0.5)
    >>> closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))  # t = 0.5
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from skytrace.geometry.half_plane import HalfPlane, hit_half_plane
from skytrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Hits closer than T_MIN are rejected so a bounced ray does not re-hit the
# surface it starts on
T_MIN = 1e-4
T_MAX = 1e10

# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_HALF_PLANES = 256

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Half-plane storage: Structure of Arrays layout
half_plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_HALF_PLANES)
half_plane_offsets = ti.field(dtype=ti.f32, shape=MAX_HALF_PLANES)
num_half_planes = ti.field(dtype=ti.i32, shape=())

# Result of the last closest_hit() probe
_probe_hit = ti.field(dtype=ti.i32, shape=())
_probe_t = ti.field(dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())


@dataclass(frozen=True)
class ProbeHit:
    """Host-side copy of a nearest-hit query result.

    Attributes:
        t: Ray parameter of the intersection.
        point: The intersection point (origin of the normal ray).
        normal: The unit surface normal (direction of the normal ray).
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]


def clear_scene() -> None:
    """Remove all primitives from the scene.

    Resets the primitive counts to zero. Field data is overwritten when new
    primitives are added.
    """
    num_spheres[None] = 0
    num_half_planes[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    num_spheres[None] = idx + 1
    return idx


def add_half_plane(normal: tuple[float, float, float], offset: float) -> int:
    """Add a half-plane to the scene.

    Args:
        normal: Normal of the plane; normalized before storing.
        offset: Signed distance of the plane from the origin along normal.

    Returns:
        The index of the added half-plane.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of half-planes is exceeded.
    """
    length = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
    if length == 0.0:
        raise ValueError("Half-plane normal must be non-zero")
    idx = num_half_planes[None]
    if idx >= MAX_HALF_PLANES:
        raise RuntimeError(f"Maximum number of half-planes ({MAX_HALF_PLANES}) exceeded")
    half_plane_normals[idx] = [normal[0] / length, normal[1] / length, normal[2] / length]
    half_plane_offsets[idx] = offset
    num_half_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_half_plane_count() -> int:
    """Get the number of half-planes in the scene."""
    return int(num_half_planes[None])


@ti.func
def intersect_world(ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Find the nearest forward intersection with any scene object.

    Every sphere and half-plane is tested; each accepted hit narrows the
    search interval, so the returned record has the smallest t.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        The closest HitRecord, or a miss record.
    """
    closest_t = T_MAX
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, T_MIN, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    for i in range(num_half_planes[None]):
        plane = HalfPlane(normal=half_plane_normals[i], offset=half_plane_offsets[i])
        rec = hit_half_plane(ray_origin, ray_direction, plane, T_MIN, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


@ti.kernel
def _probe_closest_hit(origin: vec3, direction: vec3):
    # Wrapping loop keeps the object scan serial
    for _ in range(1):
        rec = intersect_world(origin, tm.normalize(direction))
        _probe_hit[None] = rec.hit
        _probe_t[None] = rec.t
        _probe_point[None] = rec.point
        _probe_normal[None] = rec.normal


def closest_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> ProbeHit | None:
    """Query the nearest hit for a single ray from Python.

    Intended for tests and debugging; rendering runs the same query inside
    the frame kernel.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized before the query).

    Returns:
        A ProbeHit, or None if the ray hits nothing.
    """
    _probe_closest_hit(vec3(*origin), vec3(*direction))
    if _probe_hit[None] == 0:
        return None
    p = _probe_point[None]
    n = _probe_normal[None]
    return ProbeHit(
        t=float(_probe_t[None]),
        point=(float(p[0]), float(p[1]), float(p[2])),
        normal=(float(n[0]), float(n[1]), float(n[2])),
    )
