"""Ray data structure and bounce generation for the path tracer.

A Ray is an origin plus a unit direction. Every construction site goes
through make_ray(), which normalizes the direction, so the unit-length
invariant holds for all rays produced by this package. Rays are values:
bounces build new rays and never modify the incoming one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def demo() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.sampler import next_uniform, random_in_unit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Fixed direction of the "sun" used by the biased bounce
SUN_DIRECTION = vec3(-1.0, -5.0, -0.5)


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length when built
            with make_ray()).
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, normalizing its direction.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray whose direction has unit length.
    """
    return Ray(origin=origin, direction=tm.normalize(direction))


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point origin + t * direction."""
    return ray.origin + t * ray.direction


@ti.func
def diffuse_bounce(normal_ray: Ray, stream: ti.i32) -> Ray:
    """Scatter diffusely off a surface.

    Adds a random unit vector to the surface normal. The result leans
    toward the normal but is not an exact cosine distribution.

    Args:
        normal_ray: Ray at the hit point whose direction is the surface normal.
        stream: Random stream of the calling row.

    Returns:
        The bounced ray, starting at the hit point.
    """
    offset = tm.normalize(random_in_unit_sphere(stream))
    return make_ray(normal_ray.origin, normal_ray.direction + offset)


@ti.func
def has_sunward(direction: vec3) -> ti.i32:
    """Whether a direction faces the sun direction (positive dot product)."""
    return ti.cast(tm.dot(SUN_DIRECTION, direction) > 0.0, ti.i32)


@ti.func
def sunward_ray(ray: Ray) -> Ray:
    """Ray from the same origin pointing along SUN_DIRECTION."""
    return make_ray(ray.origin, SUN_DIRECTION)


@ti.func
def rand_bounce(normal_ray: Ray, sun_probability: ti.f32, stream: ti.i32) -> Ray:
    """Choose between a sun-biased and a diffuse bounce.

    With probability ``sun_probability`` the sunward ray is taken if the
    normal faces the sun; otherwise the bounce is diffuse. A probability of
    zero consumes no extra random draw, so the result is identical to
    diffuse_bounce().

    Args:
        normal_ray: Ray at the hit point whose direction is the surface normal.
        sun_probability: Probability of attempting the sunward bounce.
        stream: Random stream of the calling row.

    Returns:
        The bounced ray.
    """
    take_sun = 0
    if sun_probability > 0.0:
        if next_uniform(stream) < sun_probability:
            take_sun = has_sunward(normal_ray.direction)

    result = Ray(origin=normal_ray.origin, direction=normal_ray.direction)
    if take_sun == 1:
        result = sunward_ray(normal_ray)
    else:
        result = diffuse_bounce(normal_ray, stream)
    return result
