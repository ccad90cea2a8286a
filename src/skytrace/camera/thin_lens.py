"""Thin-lens camera model and primary ray generation.

The camera is a view ray (origin + view direction) plus image size, field
of view, focal length and aperture. From these a ray generator derives a
screen plane at ``focal_length`` along the view direction:

- ``x_direction = cross(view, up)`` scaled to the viewport width
- ``y_direction = cross(view, x_direction)`` scaled to the viewport height
  (for a camera looking down -z this points down, so row 0 is the top row)
- ``upper_left = screen_center - x_direction / 2 - y_direction / 2``
- aperture vectors: the screen axes rescaled to half the aperture

Each generated ray aims at a jittered point inside the pixel's footprint on
the screen plane (anti-aliasing) and starts at a jittered point on the lens
(depth of field). Lens offsets are drawn from [0, 1) on both aperture axes,
so only one quadrant of the lens is sampled.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.thin_lens import Camera, setup_camera
    >>> camera = Camera(
    ...     origin=(0.0, 0.0, 0.0),
    ...     direction=(0.0, 0.0, -1.0),
    ...     image_width=800,
    ...     image_height=450,
    ...     field_of_view=2.0,
    ...     focal_length=0.87,
    ...     aperture=0.03,
    ... )
    >>> ray_gen = setup_camera(camera)
    >>> # Use gen_ray(stream, x, y) within a Taichi kernel
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from skytrace.core.ray import Ray, make_ray, vec3
from skytrace.core.sampler import next_uniform

WORLD_UP = np.array([0.0, 1.0, 0.0])

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for a thin-lens camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        direction: View direction (any non-zero length).
        image_width: Output image width in pixels.
        image_height: Output image height in pixels.
        field_of_view: Horizontal field of view in radians.
        focal_length: Distance from the origin to the screen plane.
        aperture: Lens aperture diameter; 0 disables depth of field.
    """

    origin: tuple[float, float, float]
    direction: tuple[float, float, float]
    image_width: int
    image_height: int
    field_of_view: float
    focal_length: float
    aperture: float = 0.0

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.image_width / self.image_height

    @property
    def viewport_width(self) -> float:
        """Width of the screen plane at the focal length."""
        return math.tan(self.field_of_view * 0.5) * 2.0 * self.focal_length

    @property
    def viewport_height(self) -> float:
        """Height of the screen plane at the focal length."""
        return self.viewport_width / self.aspect_ratio

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If any parameter is out of range or the view
                direction is zero or parallel to world up.
        """
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.image_width}x{self.image_height}"
            )
        if not 0.0 < self.field_of_view < math.pi:
            raise ValueError(f"Field of view must be in (0, pi) radians, got {self.field_of_view}")
        if not self.focal_length > 0.0:
            raise ValueError(f"Focal length must be positive, got {self.focal_length}")
        if self.aperture < 0.0:
            raise ValueError(f"Aperture must be non-negative, got {self.aperture}")

        view = np.asarray(self.direction, dtype=np.float64)
        norm = np.linalg.norm(view)
        if norm == 0.0:
            raise ValueError("Camera direction must be non-zero")
        if np.linalg.norm(np.cross(view / norm, WORLD_UP)) < 1e-9:
            raise ValueError("Camera direction must not be parallel to world up (0, 1, 0)")


@dataclass(frozen=True)
class CameraRayGen:
    """Screen-plane basis derived from a Camera.

    All vectors are float64 NumPy arrays of shape (3,).

    Attributes:
        origin: Camera position.
        screen_center: Point on the screen plane straight ahead.
        x_direction: Screen x axis, length = viewport width.
        y_direction: Screen y axis, length = viewport height.
        upper_left: Screen-plane anchor for pixel (0, 0).
        x_aperture: Lens x axis, length = aperture / 2.
        y_aperture: Lens y axis, length = aperture / 2.
        image_width: Image width in pixels.
        image_height: Image height in pixels.
    """

    origin: npt.NDArray[np.float64]
    screen_center: npt.NDArray[np.float64]
    x_direction: npt.NDArray[np.float64]
    y_direction: npt.NDArray[np.float64]
    upper_left: npt.NDArray[np.float64]
    x_aperture: npt.NDArray[np.float64]
    y_aperture: npt.NDArray[np.float64]
    image_width: int
    image_height: int

    @classmethod
    def from_camera(cls, camera: Camera) -> "CameraRayGen":
        """Compute the screen-plane basis for a camera.

        Raises:
            ValueError: If the camera configuration is invalid.
        """
        camera.validate()

        origin = np.asarray(camera.origin, dtype=np.float64)
        center_direction = _normalize_to(np.asarray(camera.direction, dtype=np.float64),
                                         camera.focal_length)
        screen_center = origin + center_direction

        x_direction = _normalize_to(np.cross(center_direction, WORLD_UP), camera.viewport_width)
        y_direction = _normalize_to(np.cross(center_direction, x_direction),
                                    camera.viewport_height)
        upper_left = screen_center - x_direction * 0.5 - y_direction * 0.5

        return cls(
            origin=origin,
            screen_center=screen_center,
            x_direction=x_direction,
            y_direction=y_direction,
            upper_left=upper_left,
            x_aperture=_normalize_to(x_direction, camera.aperture * 0.5),
            y_aperture=_normalize_to(y_direction, camera.aperture * 0.5),
            image_width=camera.image_width,
            image_height=camera.image_height,
        )

    def screen_point(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Point on the screen plane at fractional coordinates (u, v).

        (0, 0) is the upper-left corner, (1, 1) the lower-right.
        """
        return self.upper_left + self.x_direction * u + self.y_direction * v


def _normalize_to(v: npt.NDArray[np.float64], length: float) -> npt.NDArray[np.float64]:
    return v / np.linalg.norm(v) * length


# =============================================================================
# Taichi Fields for Ray Generator State (read-only during a render)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_x_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_y_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_upper_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_x_aperture = ti.Vector.field(3, dtype=ti.f32, shape=())
_y_aperture = ti.Vector.field(3, dtype=ti.f32, shape=())
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Result of the last generate_ray() probe
_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> CameraRayGen:
    """Compute the ray generator basis and upload it for kernel use.

    Must be called before rendering. The uploaded state is shared by all
    rows; each row supplies its own random stream to gen_ray().

    Args:
        camera: Camera configuration.

    Returns:
        The host-side CameraRayGen that was uploaded.

    Raises:
        ValueError: If the camera configuration is invalid.
    """
    ray_gen = CameraRayGen.from_camera(camera)

    _camera_origin[None] = ray_gen.origin.tolist()
    _x_direction[None] = ray_gen.x_direction.tolist()
    _y_direction[None] = ray_gen.y_direction.tolist()
    _upper_left[None] = ray_gen.upper_left.tolist()
    _x_aperture[None] = ray_gen.x_aperture.tolist()
    _y_aperture[None] = ray_gen.y_aperture.tolist()
    _image_width[None] = ray_gen.image_width
    _image_height[None] = ray_gen.image_height

    return ray_gen


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def gen_ray(stream: ti.i32, pixel_x: ti.i32, pixel_y: ti.i32) -> Ray:
    """Generate one jittered, lens-sampled ray for a pixel.

    Consumes four uniforms from ``stream``: two for the sub-pixel screen
    jitter, then two for the lens offset. Every call returns a different
    ray.

    Args:
        stream: Random stream of the calling row.
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).

    Returns:
        A ray from a point on the lens toward the jittered screen point.
    """
    jitter_x = next_uniform(stream)
    jitter_y = next_uniform(stream)
    u = (ti.cast(pixel_x, ti.f32) + jitter_x) / ti.cast(_image_width[None], ti.f32)
    v = (ti.cast(pixel_y, ti.f32) + jitter_y) / ti.cast(_image_height[None], ti.f32)
    point = _upper_left[None] + _x_direction[None] * u + _y_direction[None] * v

    lens_a = next_uniform(stream)
    lens_b = next_uniform(stream)
    base = _camera_origin[None] + _x_aperture[None] * lens_a + _y_aperture[None] * lens_b

    return make_ray(base, point - base)


@ti.kernel
def _probe_gen_ray(stream: ti.i32, pixel_x: ti.i32, pixel_y: ti.i32):
    ray = gen_ray(stream, pixel_x, pixel_y)
    _probe_origin[None] = ray.origin
    _probe_direction[None] = ray.direction


def generate_ray(
    pixel_x: int, pixel_y: int, stream: int = 0
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Generate one camera ray from Python.

    Intended for tests and debugging. Advances ``stream`` like a kernel-side
    gen_ray() call.

    Returns:
        Tuple of (origin, direction).
    """
    _probe_gen_ray(stream, pixel_x, pixel_y)
    o = _probe_origin[None]
    d = _probe_direction[None]
    return (
        (float(o[0]), float(o[1]), float(o[2])),
        (float(d[0]), float(d[1]), float(d[2])),
    )


# =============================================================================
# Utility Functions
# =============================================================================


def get_ray_gen_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded ray generator state for debugging.

    Returns:
        Dictionary with origin, x_direction, y_direction, upper_left,
        x_aperture and y_aperture.
    """
    fields = {
        "origin": _camera_origin,
        "x_direction": _x_direction,
        "y_direction": _y_direction,
        "upper_left": _upper_left,
        "x_aperture": _x_aperture,
        "y_aperture": _y_aperture,
    }
    info = {}
    for name, field in fields.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
