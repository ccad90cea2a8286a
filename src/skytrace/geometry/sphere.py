"""Sphere primitive with ray-sphere intersection.

The intersection uses the projection of the center onto the ray: with
``pc = center - origin`` and ``pc2 = dot(pc, direction)`` (direction is
unit length), the squared half-chord is

    discriminant = radius^2 - |pc|^2 + pc2^2

and the nearer root is ``pc2 - sqrt(discriminant)``. Only that root is
considered; a ray starting inside the sphere therefore reports no hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.geometry.sphere import Sphere, hit_sphere, vec3
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import Ray, make_ray

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Together ``point`` and ``normal`` form the normal ray of the hit
    (see normal_ray()).

    Attributes:
        hit: 1 if the ray hit the primitive ahead of its origin, 0 otherwise.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The outward unit normal at the intersection point, never
            re-oriented toward the incoming ray. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def normal_ray(rec: HitRecord) -> Ray:
    """Ray from the hit point along the surface normal."""
    return make_ray(rec.point, rec.normal)


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test.
        t_min: Smallest accepted ray parameter (must be positive).
        t_max: Largest accepted ray parameter.

    Returns:
        A HitRecord for the nearer intersection, or a miss record.
    """
    result = make_miss_record()

    pc = sphere.center - ray_origin
    pc2 = tm.dot(pc, ray_direction)
    discriminant = sphere.radius * sphere.radius - tm.dot(pc, pc) + pc2 * pc2

    if discriminant >= 0.0:
        t = pc2 - ti.sqrt(discriminant)
        # NaN fails both comparisons
        if t > t_min and t < t_max:
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=tm.normalize(point - sphere.center),
            )

    return result


@ti.func
def sphere_support(sphere: Sphere, direction: vec3) -> ti.f32:
    """Signed extent of the sphere along a direction.

    Projection of the center onto the normalized direction plus the radius.
    """
    return tm.dot(sphere.center, tm.normalize(direction)) + sphere.radius


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
