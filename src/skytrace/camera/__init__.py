"""Camera module for view and ray generation.

Components:
    thin_lens: Thin-lens camera with screen jitter and lens sampling

Camera responsibilities:
    - Derive the screen-plane basis from origin, view direction, field of
      view and focal length
    - Jitter each sample inside its pixel for anti-aliasing
    - Jitter each ray origin across the aperture for depth of field

Pixel coordinates run left to right and top to bottom.
"""

from .thin_lens import (
    WORLD_UP,
    Camera,
    CameraRayGen,
    gen_ray,
    generate_ray,
    get_ray_gen_info,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraRayGen",
    "WORLD_UP",
    "setup_camera",
    "gen_ray",
    "generate_ray",
    "get_ray_gen_info",
]
