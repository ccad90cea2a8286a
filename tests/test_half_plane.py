"""Unit tests for half-plane intersection."""

import numpy as np
import taichi as ti


def _run_hit(origin, direction, normal, offset, t_min=1e-4, t_max=1e10):
    from skytrace.geometry.half_plane import hit_half_plane, make_half_plane, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    hit_normal = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, n: vec3, off: ti.f32, lo: ti.f32, hi: ti.f32):
        plane = make_half_plane(n, off)
        record = hit_half_plane(o, d.normalized(), plane, lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        hit_normal[None] = record.normal

    test_kernel(vec3(*origin), vec3(*direction), vec3(*normal), offset, t_min, t_max)
    return hit[None], t_val[None], point.to_numpy(), hit_normal.to_numpy()


class TestHalfPlaneIntersection:
    """Tests for hit_half_plane()."""

    def test_hit_from_above(self):
        hit, t, point, normal = _run_hit((0, 0, 0), (0, -1, 0), (0, 1, 0), -0.5)
        assert hit == 1
        assert abs(t - 0.5) < 1e-5
        assert np.allclose(point, [0.0, -0.5, 0.0], atol=1e-5)
        assert np.allclose(normal, [0.0, 1.0, 0.0])

    def test_oblique_hit(self):
        hit, t, point, _ = _run_hit((0, 0, 0), (1, -1, 0), (0, 1, 0), -1.0)
        assert hit == 1
        assert abs(t - np.sqrt(2.0)) < 1e-5
        assert np.allclose(point, [1.0, -1.0, 0.0], atol=1e-5)

    def test_parallel_ray_misses(self):
        hit, _, _, _ = _run_hit((0, 0, 0), (1, 0, 0), (0, 1, 0), -0.5)
        assert hit == 0

    def test_plane_behind_ray_misses(self):
        hit, _, _, _ = _run_hit((0, 0, 0), (0, 1, 0), (0, 1, 0), -0.5)
        assert hit == 0

    def test_hit_from_below_keeps_normal(self):
        hit, t, _, normal = _run_hit((0, -2, 0), (0, 1, 0), (0, 1, 0), -0.5)
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        # Normal is not flipped toward the incoming ray
        assert np.allclose(normal, [0.0, 1.0, 0.0])

    def test_start_on_plane_rejected(self):
        hit, _, _, _ = _run_hit((0, -0.5, 0), (0, -1, 0), (0, 1, 0), -0.5)
        assert hit == 0

    def test_normal_is_normalized(self):
        hit, t, _, normal = _run_hit((0, 0, 0), (0, -1, 0), (0, 4, 0), -0.5)
        assert hit == 1
        assert abs(t - 0.5) < 1e-5
        assert np.allclose(normal, [0.0, 1.0, 0.0], atol=1e-6)
