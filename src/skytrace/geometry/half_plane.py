"""Half-plane primitive: the infinite plane ``dot(p, normal) = offset``.

Points with ``dot(p, normal) < offset`` lie below the plane. The reported
normal is always the configured one, regardless of which side the ray
arrives from.
"""

import taichi as ti
import taichi.math as tm

from skytrace.geometry.sphere import HitRecord, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HalfPlane:
    """A plane given by a unit normal and its offset along that normal.

    Attributes:
        normal: Unit normal of the plane (vec3).
        offset: Signed distance of the plane from the world origin.
    """

    normal: vec3
    offset: ti.f32


@ti.func
def hit_half_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: HalfPlane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test a ray against a half-plane.

    A ray parallel to the plane divides by zero; the resulting infinite or
    NaN parameter fails the range check and is reported as a miss.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The half-plane to test.
        t_min: Smallest accepted ray parameter (must be positive).
        t_max: Largest accepted ray parameter.

    Returns:
        A HitRecord for the intersection, or a miss record.
    """
    result = make_miss_record()

    distance = tm.dot(ray_origin, plane.normal)
    t = (plane.offset - distance) / tm.dot(ray_direction, plane.normal)

    if t > t_min and t < t_max:
        result = HitRecord(
            hit=1,
            t=t,
            point=ray_origin + t * ray_direction,
            normal=plane.normal,
        )

    return result


@ti.func
def make_half_plane(normal: vec3, offset: ti.f32) -> HalfPlane:
    """Create a half-plane, normalizing its normal."""
    return HalfPlane(normal=tm.normalize(normal), offset=offset)
