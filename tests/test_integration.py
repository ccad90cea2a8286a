"""Integration tests for the full rendering pipeline.

These tests exercise the world, camera, tracer and renderer together on
small images.
"""

from pathlib import Path

import numpy as np
import pytest

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "examples" / "demo_scene.json"


class TestSingleSphereScene:
    """A single sphere in front of the camera."""

    def test_probe_hits_front_of_sphere(self):
        from skytrace.scene.intersection import closest_hit
        from skytrace.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5)
        world.upload()
        hit = closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.t == pytest.approx(0.5, abs=1e-5)

    def test_center_pixel_darker_than_sky(self):
        from skytrace.camera.thin_lens import Camera
        from skytrace.core.renderer import RenderSettings, quantize_radiance, render_frame
        from skytrace.core.tracer import sky_color_host
        from skytrace.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5)
        camera = Camera(
            origin=(0.0, 0.0, 0.0),
            direction=(0.0, 0.0, -1.0),
            image_width=21,
            image_height=11,
            field_of_view=2.0,
            focal_length=1.0,
        )
        image = render_frame(world, camera, RenderSettings(image_samples=4, seed=0))
        sky = quantize_radiance(np.array([[sky_color_host((0.0, 0.0, -1.0))]]), 1)[0, 0]

        center = image[5, 10]
        assert np.all(center < sky)
        # Corners see past the sphere into the sky
        assert image[0, 0, 2] == 255


class TestGroundPlaneScene:
    """Only the ground plane below the camera."""

    def test_probe_above_and_below_horizon(self):
        from skytrace.scene.intersection import closest_hit
        from skytrace.scene.world import World

        world = World()
        world.add_half_plane((0.0, 1.0, 0.0), -0.5)
        world.upload()
        assert closest_hit((0.0, 0.0, 0.0), (0.0, 0.2, -1.0)) is None
        below = closest_hit((0.0, 0.0, 0.0), (0.0, -0.5, -1.0))
        assert below is not None
        assert below.point[1] == pytest.approx(-0.5, abs=1e-5)

    def test_ground_darker_than_sky(self):
        from skytrace.core.renderer import RenderSettings, render_frame
        from skytrace.scene.demo import create_demo_camera
        from skytrace.scene.world import World

        world = World()
        world.add_half_plane((0.0, 1.0, 0.0), -0.5)
        image = render_frame(world, create_demo_camera(16, 9), RenderSettings(image_samples=4, seed=1))
        # Top row is sky, bottom row is ground lit by one attenuated bounce
        assert np.all(image[0, :, 2] == 255)
        assert np.all(image[-1, :, 2] < 255)


class TestDemoScene:
    """The demo scene end to end."""

    def test_render_demo_scene(self):
        from skytrace.core.renderer import FrameRenderer, RenderSettings
        from skytrace.scene.demo import create_demo_scene

        world, camera = create_demo_scene(32, 18)
        renderer = FrameRenderer(world, camera, RenderSettings(image_samples=4, seed=11))
        image = renderer.render(rows_per_batch=5)
        assert image.shape == (18, 32, 3)
        # Image contains both sky and shaded geometry
        assert image.max() == 255
        assert image.min() < 200

    def test_example_config_loads(self):
        from skytrace.config import load_config

        config = load_config(EXAMPLE_CONFIG)
        config.validate()
        assert config.camera.image_width == 800
        assert len(config.world.spheres) == 2
        assert len(config.world.half_planes) == 1
        assert config.settings.seed is None

    def test_render_from_config(self, tmp_path):
        from dataclasses import replace

        from skytrace.config import load_config
        from skytrace.core.renderer import RenderSettings, render_frame
        from skytrace.preview.export import load_png, save_png

        config = load_config(EXAMPLE_CONFIG)
        camera = replace(config.camera, image_width=24, image_height=12)
        image = render_frame(config.world, camera, RenderSettings(image_samples=2, seed=5))
        path = tmp_path / "demo.png"
        save_png(image, path)
        assert load_png(path).shape == (12, 24, 3)
