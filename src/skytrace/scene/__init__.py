"""Scene module: world description and nearest-hit queries.

Components:
    intersection: Structure-of-Arrays primitive storage and the nearest-hit scan
    world: Host-side World (ordered spheres and half-planes) with serialization
    demo: The built-in two-sphere demo scene and camera
"""

from .intersection import (
    MAX_HALF_PLANES,
    MAX_SPHERES,
    T_MAX,
    T_MIN,
    ProbeHit,
    add_half_plane,
    add_sphere,
    clear_scene,
    closest_hit,
    get_half_plane_count,
    get_sphere_count,
    intersect_world,
)
from .world import HalfPlaneInfo, SceneObject, SphereInfo, World

# Note: demo is NOT imported here (it depends on skytrace.core.renderer).
# Import it directly: from skytrace.scene.demo import create_demo_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "add_half_plane",
    "clear_scene",
    "closest_hit",
    "get_sphere_count",
    "get_half_plane_count",
    "intersect_world",
    "ProbeHit",
    "MAX_SPHERES",
    "MAX_HALF_PLANES",
    "T_MIN",
    "T_MAX",
    # World module
    "World",
    "SphereInfo",
    "HalfPlaneInfo",
    "SceneObject",
]
