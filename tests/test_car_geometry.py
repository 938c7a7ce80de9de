import math

import pytest

from frenet_path.car_geometry import CarGeometry
from frenet_path.data_struct import State
from frenet_path.tools import local_to_global

WIDTH, BACK, FRONT = 2.0, 1.0, 3.9


def _corners(pose):
    local = [(FRONT, WIDTH / 2), (FRONT, -WIDTH / 2), (-BACK, WIDTH / 2), (-BACK, -WIDTH / 2)]
    return [local_to_global(pose, State(x, y)) for x, y in local]


def test_six_circles():
    car = CarGeometry(WIDTH, BACK, FRONT)
    assert len(car.circles(State())) == 6
    assert car.length == pytest.approx(BACK + FRONT)


@pytest.mark.parametrize("pose", [State(), State(3.0, -1.0, 0.8), State(-2.0, 4.0, -2.5)])
def test_bounding_circle_contains_corners(pose):
    car = CarGeometry(WIDTH, BACK, FRONT)
    bc = car.bounding_circle(pose)
    for corner in _corners(pose):
        assert math.hypot(corner.x - bc.x, corner.y - bc.y) <= bc.r + 1e-9


@pytest.mark.parametrize("pose", [State(), State(3.0, -1.0, 0.8)])
def test_corners_covered_by_circles(pose):
    car = CarGeometry(WIDTH, BACK, FRONT)
    circles = car.circles(pose)
    for corner in _corners(pose):
        assert any(math.hypot(corner.x - c.x, corner.y - c.y) <= c.r + 1e-9 for c in circles)


def test_circles_symmetric_about_axis():
    car = CarGeometry(WIDTH, BACK, FRONT)
    circles = car.circles(State())
    ys = sorted(round(c.y, 12) for c in circles)
    assert ys == sorted(round(-c.y, 12) for c in circles)
    assert circles[4].y == 0.0 and circles[5].y == 0.0


def test_circles_follow_pose_rigidly():
    car = CarGeometry(WIDTH, BACK, FRONT)
    pose = State(7.0, 2.0, 1.1)
    at_origin = car.circles(State())
    moved = car.circles(pose)
    for a, b in zip(at_origin, moved):
        expected = local_to_global(pose, State(a.x, a.y))
        assert b.x == pytest.approx(expected.x)
        assert b.y == pytest.approx(expected.y)
        assert b.r == a.r


def test_bounding_circle_radius_independent_of_pose():
    car = CarGeometry(WIDTH, BACK, FRONT)
    assert car.bounding_circle(State()).r == car.bounding_circle(State(5.0, 5.0, 2.0)).r