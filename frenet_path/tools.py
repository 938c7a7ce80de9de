"""Geometry helpers: angle wrapping, frame transforms and spline queries."""

from __future__ import annotations

import math

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import State
from frenet_path.spline import Spline

_SEARCH_GRID = 0.5
_NEWTON_STEPS = 20
_NEWTON_TOLERANCE = 1e-5


def constraint_angle(angle: float) -> float:
    """Wrap ``angle`` into ``[-pi, pi]``."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


def time_s(begin: float, end: float) -> float:
    """Duration in seconds between two readings of a seconds clock."""
    return end - begin


def time_ms(begin: float, end: float) -> float:
    """Duration in milliseconds between two readings of a seconds clock."""
    return (end - begin) * 1000


def is_equal(a: float, b: float, epsilon: float = PlanningConfig.epsilon) -> bool:
    return abs(a - b) < epsilon


def get_heading(xs: Spline, ys: Spline, s: float) -> float:
    """Heading of the curve ``(xs(s), ys(s))`` at ``s``."""
    return math.atan2(ys.deriv(1, s), xs.deriv(1, s))


def get_curvature(xs: Spline, ys: Spline, s: float) -> float:
    """Signed curvature of the curve ``(xs(s), ys(s))`` at ``s``."""
    x_d1 = xs.deriv(1, s)
    y_d1 = ys.deriv(1, s)
    x_d2 = xs.deriv(2, s)
    y_d2 = ys.deriv(2, s)
    return (x_d1 * y_d2 - y_d1 * x_d2) / (x_d1 ** 2 + y_d1 ** 2) ** 1.5


def distance(p1: State, p2: State) -> float:
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def local_to_global(reference: State, target: State) -> State:
    """Express ``target``, given in the frame of ``reference``, in the global frame."""
    c, s = math.cos(reference.z), math.sin(reference.z)
    x = target.x * c - target.y * s + reference.x
    y = target.x * s + target.y * c + reference.y
    return State(x, y, reference.z + target.z, target.k, target.s)


def global_to_local(reference: State, target: State) -> State:
    """Express the global ``target`` in the frame of ``reference``."""
    dx = target.x - reference.x
    dy = target.y - reference.y
    c, s = math.cos(reference.z), math.sin(reference.z)
    return State(dx * c + dy * s, -dx * s + dy * c, target.z - reference.z, target.k, 0.0)


def find_closest_point(
    xs: Spline,
    ys: Spline,
    x: float,
    y: float,
    max_s: float,
    start_s: float = 0.0,
) -> State:
    """Point on the curve nearest to ``(x, y)`` with ``s`` in ``[start_s, max_s]``.

    A coarse grid search is refined with Newton's method; the returned state
    carries the arc length in ``s``.
    """
    if max_s <= start_s:
        return State(xs(start_s), ys(start_s))

    target = State(x, y)
    min_dis = math.inf
    min_dis_s = start_s
    tmp_s = start_s
    while tmp_s <= max_s:
        d = distance(State(xs(tmp_s), ys(tmp_s)), target)
        if d < min_dis:
            min_dis = d
            min_dis_s = tmp_s
        tmp_s += _SEARCH_GRID

    cur_s = prev_s = min_dis_s
    for _ in range(_NEWTON_STEPS):
        path_x, path_y = xs(cur_s), ys(cur_s)
        dx, dy = xs.deriv(1, cur_s), ys.deriv(1, cur_s)
        ddx, ddy = xs.deriv(2, cur_s), ys.deriv(2, cur_s)
        j = (path_x - x) * dx + (path_y - y) * dy
        h = dx * dx + (path_x - x) * ddx + dy * dy + (path_y - y) * ddy
        if h == 0.0:
            break
        cur_s -= j / h
        if abs(cur_s - prev_s) < _NEWTON_TOLERANCE:
            break
        prev_s = cur_s

    cur_s = min(cur_s, max_s)
    return State(xs(cur_s), ys(cur_s), s=cur_s)