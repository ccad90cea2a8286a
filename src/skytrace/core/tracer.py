"""Path tracer: bounded-depth Monte Carlo radiance estimate.

A path starts at a camera ray and repeatedly finds the nearest hit in the
world. Every hit scatters the path diffusely off the surface normal and
attenuates it by a fixed factor; a path that escapes picks up the sky color
for its final direction. A path still bouncing after ``max_depth`` steps
contributes black. This is the loop form of the recursion

    trace(ray, 0) = black
    trace(ray, d) = BOUNCE_ATTENUATION * trace(bounce(hit), d - 1)   on a hit
    trace(ray, d) = sky_color(ray.direction)                         on a miss

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.sampler import seed_streams
    >>> from skytrace.core.tracer import trace_ray
    >>> seed_streams(1, seed=0)
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=20)  # zenith color
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import Ray, make_ray, rand_bounce
from skytrace.geometry.sphere import normal_ray
from skytrace.scene.intersection import intersect_world

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Fraction of radiance kept per bounce (ad hoc gray albedo)
BOUNCE_ATTENUATION = 0.4

# Default recursion limit
DEFAULT_MAX_DEPTH = 20

# Sky gradient endpoints
SKY_HORIZON_RGB = (1.0, 1.0, 1.0)
SKY_ZENITH_RGB = (0.5, 0.7, 1.0)
SKY_HORIZON_COLOR = vec3(*SKY_HORIZON_RGB)
SKY_ZENITH_COLOR = vec3(*SKY_ZENITH_RGB)

_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Procedural sky: vertical blend from horizon white to zenith blue.

    ``t = 0.5 * (y + 1)`` of the unit direction selects the blend, so
    straight down is pure white and straight up pure zenith color.
    """
    unit = tm.normalize(direction)
    t = 0.5 * (unit.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def trace(ray: Ray, max_depth: ti.i32, stream: ti.i32, sun_probability: ti.f32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace (unit direction).
        max_depth: Maximum number of path segments; 0 always yields black.
        stream: Random stream of the calling row.
        sun_probability: Probability of attempting a sunward bounce at
            each hit (0 for plain diffuse bouncing).

    Returns:
        The estimated radiance (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    attenuation = 1.0
    origin = ray.origin
    direction = ray.direction

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_world(origin, direction)
            if rec.hit == 1:
                bounced = rand_bounce(normal_ray(rec), sun_probability, stream)
                origin = bounced.origin
                direction = bounced.direction
                attenuation *= BOUNCE_ATTENUATION
            else:
                radiance = attenuation * sky_color(direction)
                active = 0

    return radiance


@ti.kernel
def _probe_trace(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    stream: ti.i32,
    sun_probability: ti.f32,
):
    # Wrapping loop keeps the path serial
    for _ in range(1):
        ray = make_ray(origin, direction)
        _probe_color[None] = trace(ray, max_depth, stream, sun_probability)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = DEFAULT_MAX_DEPTH,
    stream: int = 0,
    sun_probability: float = 0.0,
) -> tuple[float, float, float]:
    """Trace a single ray against the uploaded world from Python.

    Intended for tests and debugging. Seed the streams first
    (see skytrace.core.sampler.seed_streams).

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized before tracing).
        max_depth: Maximum number of path segments.
        stream: Random stream to draw from.
        sun_probability: Probability of attempting a sunward bounce.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    _probe_trace(vec3(*origin), vec3(*direction), max_depth, stream, sun_probability)
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def sky_color_host(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Host-side sky color, matching sky_color() for reference checks."""
    x, y, z = direction
    length = (x * x + y * y + z * z) ** 0.5
    t = 0.5 * (y / length + 1.0)
    return tuple(  # type: ignore[return-value]
        (1.0 - t) * h + t * zenith for h, zenith in zip(SKY_HORIZON_RGB, SKY_ZENITH_RGB)
    )
