import math

import pytest

from frenet_path.data_struct import State
from frenet_path.spline import Spline
from frenet_path.tools import (
    constraint_angle,
    distance,
    find_closest_point,
    get_curvature,
    get_heading,
    global_to_local,
    is_equal,
    local_to_global,
    time_ms,
    time_s,
)


def _line(n=11):
    s = [float(i) for i in range(n)]
    return Spline(s, s), Spline(s, [0.0] * n)


@pytest.mark.parametrize("angle", [0.0, 1.0, -1.0, 3 * math.pi, -7.5, 20.0, math.pi])
def test_constraint_angle_range_and_direction(angle):
    wrapped = constraint_angle(angle)
    assert -math.pi <= wrapped <= math.pi
    assert math.cos(wrapped) == pytest.approx(math.cos(angle))
    assert math.sin(wrapped) == pytest.approx(math.sin(angle), abs=1e-9)


def test_constraint_angle_identity_inside_range():
    assert constraint_angle(0.5) == 0.5


def test_time_helpers_consistent():
    assert time_s(1.0, 3.5) == 2.5
    assert time_ms(1.0, 3.5) == pytest.approx(time_s(1.0, 3.5) * 1000)


def test_is_equal():
    assert is_equal(1.0, 1.0 + 1e-9)
    assert not is_equal(1.0, 1.1)
    assert is_equal(1.0, 1.05, epsilon=0.1)


def test_distance():
    assert distance(State(0.0, 0.0), State(3.0, 4.0)) == pytest.approx(5.0)
    assert distance(State(2.0, 2.0), State(2.0, 2.0)) == 0.0


def test_local_global_round_trip():
    ref = State(1.0, -2.0, 0.7)
    target = State(3.0, 1.5, 0.2, k=0.1, s=4.0)
    back = local_to_global(ref, global_to_local(ref, target))
    assert back.x == pytest.approx(target.x)
    assert back.y == pytest.approx(target.y)
    assert back.z == pytest.approx(target.z)
    assert back.k == target.k


def test_local_to_global_preserves_distance():
    ref = State(5.0, 5.0, 1.2)
    a = local_to_global(ref, State(1.0, 0.0))
    b = local_to_global(ref, State(0.0, 0.0))
    assert distance(a, b) == pytest.approx(1.0)
    assert (b.x, b.y) == (5.0, 5.0)


def test_global_to_local_resets_s():
    local = global_to_local(State(0.0, 0.0), State(1.0, 1.0, s=9.0))
    assert local.s == 0.0


def test_heading_and_curvature_of_straight_line():
    s = [0.0, 1.0, 2.0, 3.0, 4.0]
    xs, ys = Spline(s, s), Spline(s, s)
    assert get_heading(xs, ys, 1.5) == pytest.approx(math.pi / 4)
    assert get_curvature(xs, ys, 1.5) == pytest.approx(0.0, abs=1e-12)


def test_curvature_of_circle():
    radius = 5.0
    thetas = [i * math.pi / 30 for i in range(31)]
    s = [radius * t for t in thetas]
    xs = Spline(s, [radius * math.cos(t) for t in thetas])
    ys = Spline(s, [radius * math.sin(t) for t in thetas])
    mid = s[15]
    assert get_curvature(xs, ys, mid) == pytest.approx(1 / radius, rel=1e-2)


def test_find_closest_point_on_line():
    xs, ys = _line()
    p = find_closest_point(xs, ys, 3.3, 2.0, 10.0)
    assert p.s == pytest.approx(3.3, abs=1e-6)
    assert p.x == pytest.approx(3.3, abs=1e-6)
    assert p.y == pytest.approx(0.0, abs=1e-9)


def test_find_closest_point_clamped_to_max_s():
    xs, ys = _line()
    p = find_closest_point(xs, ys, 20.0, 0.0, 10.0)
    assert p.s == 10.0
    assert p.x == pytest.approx(10.0)


def test_find_closest_point_degenerate_range():
    xs, ys = _line()
    p = find_closest_point(xs, ys, 8.0, 1.0, 2.0, start_s=4.0)
    assert p.x == pytest.approx(xs(4.0))
    assert p.y == pytest.approx(ys(4.0))