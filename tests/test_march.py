import math

import pytest

from fractalmarch.core import shade_pixel
from fractalmarch.core.field import sample_field
from fractalmarch.core.march import TAU, fragment_uv, frame_time, iter_march, march_pixel, wrap_time
from fractalmarch.core.vec import Vec2, Vec3, Vec4


def test_field_at_origin_is_lattice_term():
    assert sample_field(Vec3(0, 0, 0)) == 0.0


def test_field_outside_sphere_is_sphere_term():
    assert sample_field(Vec3(0, 0, -8)) == pytest.approx(4.0)
    assert sample_field(Vec3(10, 0, 0)) == pytest.approx(6.0)


def test_field_inside_sphere_uses_sine_lattice():
    p = Vec3(0.5, 0.5, 0.5)
    expected = math.sin(math.sqrt(3 * 0.25 ** 2))
    assert sample_field(p) == pytest.approx(expected)


def test_march_runs_exactly_the_iteration_count():
    states = list(iter_march(3, 4, 16, 9, 0.7))
    assert [s.j for s in states] == list(range(1, 101))
    states = list(iter_march(3, 4, 16, 9, 0.7, iterations=7))
    assert len(states) == 7


def test_first_step_starts_on_the_camera_axis():
    first = next(iter_march(100, 20, 960, 540, 0.0))
    assert first.p.x == pytest.approx(0.0, abs=1e-12)
    assert first.p.y == pytest.approx(0.0, abs=1e-12)
    assert first.p.z == pytest.approx(-8.0)
    step = 0.012 + 0.07 * abs(4.0 - 0.01)
    assert first.s == pytest.approx(step)
    assert first.d == pytest.approx(step)
    expected = Vec4(*(1.3 * math.sin(k + 0.3) / first.s for k in (1, 2, 3, 1)))
    for got, want in zip(first.o, expected):
        assert got == pytest.approx(want)


def test_depth_is_non_decreasing():
    for (x, y, t) in [(0, 0, 0.0), (479, 269, 1.3), (959, 539, 5.9), (200, 400, 3.0)]:
        prev = 0.0
        for state in iter_march(x, y, 960, 540, t):
            assert state.s >= 0.012
            assert state.d >= prev
            prev = state.d


def test_march_is_deterministic():
    a = march_pixel(123, 45, 960, 540, 2.2)
    b = march_pixel(123, 45, 960, 540, 2.2)
    assert a == b


def test_reference_scenario_pixel_zero():
    raw = march_pixel(0, 0, 960, 540, frame_time(0, 240))
    assert all(math.isfinite(c) for c in raw)
    px = shade_pixel(0, 0, 960, 540, 0.0)
    assert px.a == 255
    assert all(0 <= c <= 255 for c in px)


def test_time_wraps_to_one_loop():
    assert wrap_time(TAU) == 0.0
    assert wrap_time(-1.0) == pytest.approx(TAU - 1.0)
    assert march_pixel(7, 3, 16, 9, 0.0) == march_pixel(7, 3, 16, 9, TAU)


def test_frame_time():
    assert frame_time(0, 240) == 0.0
    assert frame_time(120, 240) == pytest.approx(math.pi)
    assert frame_time(240, 240) == frame_time(0, 240)
    assert frame_time(245, 240) == frame_time(5, 240)
    with pytest.raises(ValueError):
        frame_time(0, 0)


def test_fragment_uv_uses_pixel_corner():
    assert fragment_uv(0, 0, 16, 8) == Vec2(-2.0, -1.0)
    assert fragment_uv(8, 4, 16, 8) == Vec2(0.0, 0.0)
    # one pixel step is 2/height with no half-pixel shift
    assert fragment_uv(1, 0, 16, 8) == Vec2(-1.75, -1.0)
