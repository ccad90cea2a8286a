"""Built-in demo scene: two spheres resting above a ground plane.

The scene consists of:
- A unit-diameter sphere straight ahead of the camera at z = -1
- A second sphere of the same size further back and to the right
- A ground half-plane at y = -0.5, touching the bottom of both spheres

The camera sits at the origin looking down -z with a wide (2 radian)
horizontal field of view and a small aperture for a slight depth-of-field
blur.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.renderer import render_frame
    >>> from skytrace.scene.demo import create_demo_scene, DEMO_RENDER_SETTINGS
    >>>
    >>> world, camera = create_demo_scene(width=400, height=225)
    >>> image = render_frame(world, camera, DEMO_RENDER_SETTINGS)
"""

from dataclasses import dataclass

from skytrace.camera.thin_lens import Camera
from skytrace.core.renderer import RenderSettings
from skytrace.scene.world import World

# =============================================================================
# Demo Scene Constants
# =============================================================================

DEMO_IMAGE_WIDTH = 800
DEMO_IMAGE_HEIGHT = 450
DEMO_IMAGE_SAMPLES = 100
DEMO_MAX_DEPTH = 20

DEMO_RENDER_SETTINGS = RenderSettings(
    image_samples=DEMO_IMAGE_SAMPLES,
    max_depth=DEMO_MAX_DEPTH,
)

GROUND_NORMAL = (0.0, 1.0, 0.0)
GROUND_OFFSET = -0.5


@dataclass
class DemoCameraParams:
    """Lens parameters of the demo camera.

    Attributes:
        field_of_view: Horizontal field of view in radians.
        focal_length: Distance to the screen plane.
        aperture: Lens aperture diameter.
    """

    field_of_view: float = 2.0
    focal_length: float = 0.87
    aperture: float = 0.03


def create_demo_world() -> World:
    """Create the demo world (two spheres and the ground plane)."""
    world = World()
    world.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5)
    world.add_sphere(center=(1.5, 0.0, -3.0), radius=0.5)
    world.add_half_plane(normal=GROUND_NORMAL, offset=GROUND_OFFSET)
    return world


def create_demo_camera(
    width: int = DEMO_IMAGE_WIDTH,
    height: int = DEMO_IMAGE_HEIGHT,
    params: DemoCameraParams | None = None,
) -> Camera:
    """Create the demo camera at the origin looking down -z."""
    if params is None:
        params = DemoCameraParams()
    return Camera(
        origin=(0.0, 0.0, 0.0),
        direction=(0.0, 0.0, -1.0),
        image_width=width,
        image_height=height,
        field_of_view=params.field_of_view,
        focal_length=params.focal_length,
        aperture=params.aperture,
    )


def create_demo_scene(
    width: int = DEMO_IMAGE_WIDTH,
    height: int = DEMO_IMAGE_HEIGHT,
    params: DemoCameraParams | None = None,
) -> tuple[World, Camera]:
    """Create the demo world and camera.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        params: Optional lens parameters; defaults to DemoCameraParams().

    Returns:
        A tuple of (World, Camera).
    """
    return create_demo_world(), create_demo_camera(width, height, params)
