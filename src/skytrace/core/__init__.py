"""Core rendering module.

Components:
    sampler: Per-row xorshift random streams seeded from NumPy
    ray: Ray data structure, diffuse and sun-biased bounces
    tracer: Bounded-depth path tracer with a procedural sky
    renderer: Parallel per-row frame renderer and 8-bit quantization

Rows of the image are rendered in parallel by a Taichi kernel whose
outermost loop runs over rows. Each row owns one random stream; the scene
and camera are read-only during a render.
"""

from .ray import (
    SUN_DIRECTION,
    Ray,
    diffuse_bounce,
    has_sunward,
    make_ray,
    rand_bounce,
    ray_at,
    sunward_ray,
    vec3,
)
from .sampler import (
    MAX_STREAMS,
    draw_uniforms,
    next_signed,
    next_uniform,
    random_in_unit_sphere,
    seed_streams,
)

# Note: tracer and renderer are NOT imported here to avoid circular imports
# (they depend on the scene and camera packages). Import them directly:
#   from skytrace.core.renderer import FrameRenderer, render_frame

__all__ = [
    "Ray",
    "make_ray",
    "ray_at",
    "vec3",
    "diffuse_bounce",
    "has_sunward",
    "sunward_ray",
    "rand_bounce",
    "SUN_DIRECTION",
    "MAX_STREAMS",
    "seed_streams",
    "draw_uniforms",
    "next_uniform",
    "next_signed",
    "random_in_unit_sphere",
]
