"""Unit tests for rays and bounce generation.

Tests cover:
- Ray construction normalizes the direction
- ray_at() evaluation
- Diffuse bounces stay unit length and leave the surface
- Sunward test and sun-biased bounce selection
"""

import numpy as np
import taichi as ti


class TestRayConstruction:
    """Tests for make_ray() and ray_at()."""

    def test_make_ray_normalizes_direction(self):
        from skytrace.core.ray import make_ray, vec3

        origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -4.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert np.allclose(origin.to_numpy(), [1.0, 2.0, 3.0])
        assert np.allclose(direction.to_numpy(), [0.0, 0.0, -1.0], atol=1e-6)

    def test_ray_at(self):
        from skytrace.core.ray import make_ray, ray_at, vec3

        point = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            point[None] = ray_at(ray, 2.5)

        test_kernel()
        assert np.allclose(point.to_numpy(), [1.0, 2.5, 0.0], atol=1e-6)

    def test_ray_at_zero_is_origin(self):
        from skytrace.core.ray import make_ray, ray_at, vec3

        point = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(-1.0, 4.0, 2.0), vec3(1.0, 1.0, 1.0))
            point[None] = ray_at(ray, 0.0)

        test_kernel()
        assert np.allclose(point.to_numpy(), [-1.0, 4.0, 2.0])


class TestDiffuseBounce:
    """Tests for diffuse_bounce()."""

    def test_bounce_is_unit_and_leaves_surface(self, seeded_streams):
        from skytrace.core.ray import diffuse_bounce, make_ray, vec3

        n = 256
        origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                normal = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0))
                for i in range(n):
                    bounced = diffuse_bounce(normal, 0)
                    origins[i] = bounced.origin
                    directions[i] = bounced.direction

        test_kernel()
        d = directions.to_numpy()
        assert np.allclose(np.linalg.norm(d, axis=1), 1.0, atol=1e-5)
        # Normal plus a unit vector never points below the surface
        assert np.all(d[:, 1] >= -1e-5)
        assert np.allclose(origins.to_numpy(), [0.0, 1.0, 0.0])

    def test_bounces_vary(self, seeded_streams):
        from skytrace.core.ray import diffuse_bounce, make_ray, vec3

        directions = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                normal = make_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0))
                directions[0] = diffuse_bounce(normal, 1).direction
                directions[1] = diffuse_bounce(normal, 1).direction

        test_kernel()
        d = directions.to_numpy()
        assert not np.allclose(d[0], d[1])


class TestSunBias:
    """Tests for has_sunward() and rand_bounce()."""

    def test_has_sunward(self):
        from skytrace.core.ray import has_sunward, vec3

        results = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            # Sun direction is (-1, -5, -0.5)
            results[0] = has_sunward(vec3(0.0, -1.0, 0.0))
            results[1] = has_sunward(vec3(0.0, 1.0, 0.0))
            results[2] = has_sunward(vec3(1.0, 0.0, -2.0))

        test_kernel()
        assert results[0] == 1
        assert results[1] == 0
        # Perpendicular: dot product is exactly zero
        assert results[2] == 0

    def test_sunward_ray_direction(self):
        from skytrace.core.ray import make_ray, sunward_ray, vec3

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0))
            direction[None] = sunward_ray(ray).direction

        test_kernel()
        expected = np.array([-1.0, -5.0, -0.5])
        expected = expected / np.linalg.norm(expected)
        assert np.allclose(direction.to_numpy(), expected, atol=1e-5)

    def test_zero_probability_matches_diffuse(self):
        from skytrace.core.ray import diffuse_bounce, make_ray, rand_bounce, vec3
        from skytrace.core.sampler import seed_streams

        n = 16
        diffuse = ti.Vector.field(3, dtype=ti.f32, shape=n)
        biased = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def diffuse_kernel():
            for _ in range(1):
                normal = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0))
                for i in range(n):
                    diffuse[i] = diffuse_bounce(normal, 0).direction

        @ti.kernel
        def biased_kernel():
            for _ in range(1):
                normal = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0))
                for i in range(n):
                    biased[i] = rand_bounce(normal, 0.0, 0).direction

        seed_streams(1, seed=77)
        diffuse_kernel()
        seed_streams(1, seed=77)
        biased_kernel()
        assert np.allclose(diffuse.to_numpy(), biased.to_numpy())

    def test_full_probability_takes_sun_when_facing(self, seeded_streams):
        from skytrace.core.ray import make_ray, rand_bounce, vec3

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                normal = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0))
                direction[None] = rand_bounce(normal, 1.0, 0).direction

        test_kernel()
        expected = np.array([-1.0, -5.0, -0.5])
        expected = expected / np.linalg.norm(expected)
        assert np.allclose(direction.to_numpy(), expected, atol=1e-5)

    def test_full_probability_falls_back_when_facing_away(self, seeded_streams):
        from skytrace.core.ray import make_ray, rand_bounce, vec3

        directions = ti.Vector.field(3, dtype=ti.f32, shape=32)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                normal = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
                for i in range(32):
                    directions[i] = rand_bounce(normal, 1.0, 0).direction

        test_kernel()
        d = directions.to_numpy()
        # Diffuse bounces off an upward normal stay in the upper hemisphere
        assert np.all(d[:, 1] >= -1e-5)
        assert np.allclose(np.linalg.norm(d, axis=1), 1.0, atol=1e-5)
