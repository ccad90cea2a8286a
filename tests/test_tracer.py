"""Unit tests for the path tracer.

Tests cover:
- Depth limits
- Sky gradient on escape
- Attenuation per bounce
- Sun-biased bouncing
"""

import pytest


class TestSkyColor:
    """Tests for the sky gradient."""

    def test_host_sky_endpoints(self):
        from skytrace.core.tracer import sky_color_host

        assert sky_color_host((0.0, 1.0, 0.0)) == pytest.approx((0.5, 0.7, 1.0))
        assert sky_color_host((0.0, -1.0, 0.0)) == pytest.approx((1.0, 1.0, 1.0))
        assert sky_color_host((1.0, 0.0, 0.0)) == pytest.approx((0.75, 0.85, 1.0))

    def test_empty_world_returns_sky(self):
        from skytrace.core.sampler import seed_streams
        from skytrace.core.tracer import sky_color_host, trace_ray

        seed_streams(1, seed=0)
        for direction in [(0.0, 1.0, 0.0), (0.3, -0.2, -1.0), (0.0, 0.0, -1.0)]:
            color = trace_ray((0.0, 0.0, 0.0), direction)
            assert color == pytest.approx(sky_color_host(direction), abs=1e-5)


class TestTraceDepth:
    """Tests for max_depth handling."""

    def test_depth_zero_is_black(self):
        from skytrace.core.tracer import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0) == (0.0, 0.0, 0.0)

    def test_depth_exhausted_on_hit_is_black(self):
        from skytrace.scene.intersection import add_sphere
        from skytrace.core.tracer import trace_ray

        add_sphere((0.0, 0.0, -1.0), 0.5)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1) == (0.0, 0.0, 0.0)

    def test_depth_one_miss_is_sky(self):
        from skytrace.core.tracer import sky_color_host, trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=1)
        assert color == pytest.approx(sky_color_host((0.0, 1.0, 0.0)))


class TestAttenuation:
    """Tests for bounce attenuation."""

    def test_single_ground_bounce(self):
        from skytrace.core.sampler import seed_streams
        from skytrace.core.tracer import BOUNCE_ATTENUATION, trace_ray
        from skytrace.scene.intersection import add_half_plane

        add_half_plane((0.0, 1.0, 0.0), -0.5)
        seed_streams(1, seed=3)
        for _ in range(16):
            r, g, b = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
            # Both sky endpoints have full blue, so one bounce leaves 0.4
            assert b == pytest.approx(BOUNCE_ATTENUATION, abs=1e-5)
            assert 0.5 * BOUNCE_ATTENUATION - 1e-5 <= r <= BOUNCE_ATTENUATION + 1e-5
            assert r <= g + 1e-6

    def test_sphere_darker_than_sky(self):
        from skytrace.core.sampler import seed_streams
        from skytrace.core.tracer import BOUNCE_ATTENUATION, sky_color_host, trace_ray
        from skytrace.scene.intersection import add_half_plane, add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5)
        add_half_plane((0.0, 1.0, 0.0), -0.5)
        seed_streams(1, seed=9)
        sky = sky_color_host((0.0, 0.0, -1.0))
        for _ in range(16):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
            assert all(c <= BOUNCE_ATTENUATION + 1e-5 for c in color)
            assert all(c < s for c, s in zip(color, sky))


class TestSunBias:
    """Tests for the sun_probability option."""

    def test_zero_probability_is_reproducible(self):
        from skytrace.core.sampler import seed_streams
        from skytrace.core.tracer import trace_ray
        from skytrace.scene.intersection import add_half_plane

        add_half_plane((0.0, 1.0, 0.0), -0.5)
        seed_streams(1, seed=5)
        first = [trace_ray((0.0, 0.0, 0.0), (0.1, -1.0, 0.0)) for _ in range(4)]
        seed_streams(1, seed=5)
        second = [trace_ray((0.0, 0.0, 0.0), (0.1, -1.0, 0.0)) for _ in range(4)]
        assert first == second

    def test_sunward_bounce_from_downward_normal(self):
        from skytrace.core.sampler import seed_streams
        from skytrace.core.tracer import BOUNCE_ATTENUATION, sky_color_host, trace_ray
        from skytrace.scene.intersection import add_half_plane

        # Ceiling whose normal points down, toward the sun
        add_half_plane((0.0, -1.0, 0.0), -2.0)
        seed_streams(1, seed=1)
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), sun_probability=1.0)
        expected = tuple(BOUNCE_ATTENUATION * c for c in sky_color_host((-1.0, -5.0, -0.5)))
        assert color == pytest.approx(expected, abs=1e-5)
