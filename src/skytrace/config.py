"""Render configuration files.

A configuration bundles the three inputs of a render: the world, the camera
and the render settings. It round-trips through plain dictionaries and JSON
files of the form::

    {
        "camera": {"origin": [0, 0, 0], "direction": [0, 0, -1],
                   "image_width": 800, "image_height": 450,
                   "field_of_view": 2.0, "focal_length": 0.87,
                   "aperture": 0.03},
        "render": {"image_samples": 100, "max_depth": 20,
                   "seed": null, "sun_probability": 0.0},
        "world": {"objects": [
            {"type": "sphere", "center": [0, 0, -1], "radius": 0.5},
            {"type": "half_plane", "normal": [0, 1, 0], "offset": -0.5}
        ]}
    }

Missing "render" keys fall back to RenderSettings defaults; "camera" keys
other than aperture are required.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from skytrace.camera.thin_lens import Camera
from skytrace.core.renderer import RenderSettings
from skytrace.scene.world import World

logger = logging.getLogger(__name__)

_CAMERA_REQUIRED = (
    "origin",
    "direction",
    "image_width",
    "image_height",
    "field_of_view",
    "focal_length",
)


@dataclass
class RenderConfig:
    """Everything needed to render one frame.

    Attributes:
        world: The scene objects.
        camera: The camera configuration.
        settings: Sample count, depth limit, seed and sun bias.
    """

    world: World
    camera: Camera
    settings: RenderSettings = field(default_factory=RenderSettings)

    def validate(self) -> None:
        """Validate the camera and settings.

        Raises:
            ValueError: If either is invalid.
        """
        self.camera.validate()
        self.settings.validate()


def camera_to_dict(camera: Camera) -> dict[str, Any]:
    """Export a camera to a dictionary."""
    data = asdict(camera)
    data["origin"] = list(camera.origin)
    data["direction"] = list(camera.direction)
    return data


def camera_from_dict(data: dict[str, Any]) -> Camera:
    """Build a camera from a dictionary.

    Raises:
        ValueError: If a required key is missing or a vector is malformed.
    """
    missing = [key for key in _CAMERA_REQUIRED if key not in data]
    if missing:
        raise ValueError(f"Camera configuration is missing keys: {', '.join(missing)}")

    origin = tuple(float(v) for v in data["origin"])
    direction = tuple(float(v) for v in data["direction"])
    if len(origin) != 3 or len(direction) != 3:
        raise ValueError("Camera origin and direction must have 3 components")

    camera = Camera(
        origin=(origin[0], origin[1], origin[2]),
        direction=(direction[0], direction[1], direction[2]),
        image_width=int(data["image_width"]),
        image_height=int(data["image_height"]),
        field_of_view=float(data["field_of_view"]),
        focal_length=float(data["focal_length"]),
        aperture=float(data.get("aperture", 0.0)),
    )
    camera.validate()
    return camera


def settings_to_dict(settings: RenderSettings) -> dict[str, Any]:
    """Export render settings to a dictionary."""
    return asdict(settings)


def settings_from_dict(data: dict[str, Any]) -> RenderSettings:
    """Build render settings from a dictionary, using defaults for missing keys.

    Raises:
        ValueError: If a setting is out of range or an unknown key is present.
    """
    defaults = RenderSettings()
    unknown = set(data) - set(asdict(defaults))
    if unknown:
        raise ValueError(f"Unknown render settings: {', '.join(sorted(unknown))}")

    seed = data.get("seed", defaults.seed)
    settings = RenderSettings(
        image_samples=int(data.get("image_samples", defaults.image_samples)),
        max_depth=int(data.get("max_depth", defaults.max_depth)),
        seed=None if seed is None else int(seed),
        sun_probability=float(data.get("sun_probability", defaults.sun_probability)),
    )
    settings.validate()
    return settings


def config_to_dict(config: RenderConfig) -> dict[str, Any]:
    """Export a configuration to a dictionary (for JSON serialization)."""
    return {
        "camera": camera_to_dict(config.camera),
        "render": settings_to_dict(config.settings),
        "world": config.world.to_dict(),
    }


def config_from_dict(data: dict[str, Any]) -> RenderConfig:
    """Build a configuration from a dictionary.

    Raises:
        ValueError: If the camera section is missing or any section is invalid.
    """
    if "camera" not in data:
        raise ValueError("Configuration has no 'camera' section")
    return RenderConfig(
        world=World.from_dict(data.get("world", {})),
        camera=camera_from_dict(data["camera"]),
        settings=settings_from_dict(data.get("render", {})),
    )


def load_config(filepath: str | Path) -> RenderConfig:
    """Load a configuration from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or the configuration is invalid.
    """
    path = Path(filepath)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    config = config_from_dict(data)
    logger.info("Loaded configuration from %s (%d objects)", path, len(config.world))
    return config


def save_config(config: RenderConfig, filepath: str | Path) -> None:
    """Write a configuration to a JSON file."""
    path = Path(filepath)
    with path.open("w", encoding="utf-8") as f:
        json.dump(config_to_dict(config), f, indent=2)
    logger.debug("Saved configuration to %s", path)
