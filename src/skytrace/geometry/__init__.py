"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection
    half_plane: Infinite plane primitive and ray-plane intersection
    convex: Support functions for convex shapes (reserved for bounding volumes)

Intersection routines are Taichi functions (@ti.func) called from the
scene-level nearest-hit scan:
    rec = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .convex import Convex, hull_support, unit_direction
from .half_plane import HalfPlane, hit_half_plane, make_half_plane
from .sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_record,
    make_sphere,
    normal_ray,
    sphere_support,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "normal_ray",
    "sphere_support",
    "HalfPlane",
    "hit_half_plane",
    "make_half_plane",
    "Convex",
    "hull_support",
    "unit_direction",
]
