import math

import numpy as np
import pytest

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import (
    CoveringCircleBounds,
    ReferenceData,
    SingleCircleBounds,
    State,
    VehicleState,
)
from frenet_path.solver import QpSolveError, solve_qp
from frenet_path.solver_k_as_input import SolverKAsInput


def _bounds(ub=2.0, lb=-2.0):
    return CoveringCircleBounds(*(SingleCircleBounds(ub=ub, lb=lb) for _ in range(4)))


def _straight_reference(n=8, ub=2.0, lb=-2.0):
    states = [State(float(i), 0.0, 0.0, 0.0, float(i)) for i in range(n)]
    return ReferenceData(reference_states=states, bounds=[_bounds(ub, lb) for _ in range(n)])


def _solver(horizon=6, offset=0.0, end_z=0.0, config=None, reference=None):
    vehicle = VehicleState(State(), State(z=end_z), initial_offset=offset)
    return SolverKAsInput(reference or _straight_reference(), vehicle, horizon, config)


def test_problem_sizes():
    solver = _solver(horizon=6)
    assert solver.num_of_variables == 4 * 6 - 1
    assert solver.num_of_constraints == 11 * 6 - 1
    matrix, lower, upper = solver.constraint_matrix()
    assert matrix.shape == (solver.num_of_constraints, solver.num_of_variables)
    assert lower.shape == upper.shape == (solver.num_of_constraints,)
    assert solver.hessian_matrix().shape == (solver.num_of_variables, solver.num_of_variables)


def test_hessian_structure():
    config = PlanningConfig()
    h = 6
    hessian = _solver(horizon=h, config=config).hessian_matrix()
    np.testing.assert_allclose(hessian, hessian.T)
    w_c, w_cr = config.k_curvature_weight, config.k_curvature_rate_weight
    assert hessian[2 * h, 2 * h] == pytest.approx(w_c + w_cr)
    assert hessian[3 * h - 2, 3 * h - 2] == pytest.approx(w_c + w_cr)
    assert hessian[2 * h + 1, 2 * h + 1] == pytest.approx(2 * w_cr + w_c)
    assert hessian[2 * h, 2 * h + 1] == pytest.approx(-w_cr)
    assert hessian[3 * h - 1, 3 * h - 1] == pytest.approx(config.kp_slack_weight)
    assert hessian[1, 1] == pytest.approx(config.k_deviation_weight)
    assert hessian[0, 0] == 0.0


def test_dynamic_matrix_on_straight_reference():
    config = PlanningConfig(wheel_base=2.0)
    a, b = _solver(config=config).dynamic_matrix(0)
    np.testing.assert_allclose(a, [[1.0, 0.0], [1.0, 1.0]])
    np.testing.assert_allclose(b, [0.5, 0.0])


def test_initial_state_bounds_follow_init_error():
    vehicle = VehicleState(State(), State(), initial_offset=0.3, initial_heading_error=0.1)
    solver = SolverKAsInput(_straight_reference(), vehicle, 6)
    _, lower, upper = solver.constraint_matrix()
    np.testing.assert_allclose(lower[0:2], [-0.1, -0.3])
    np.testing.assert_allclose(upper[0:2], [-0.1, -0.3])


def test_end_heading_constraint():
    h = 6
    _, lower, upper = _solver(horizon=h, end_z=0.2).constraint_matrix()
    assert lower[4 * h - 2] == pytest.approx(0.2 - math.radians(5))
    assert upper[4 * h - 2] == pytest.approx(0.2 + math.radians(5))


def test_end_heading_not_constrained_when_disabled_or_large():
    h = 6
    config = PlanningConfig(constraint_end_heading=False)
    _, lower, _ = _solver(horizon=h, end_z=0.2, config=config).constraint_matrix()
    assert lower[4 * h - 2] == -math.inf
    _, lower, upper = _solver(horizon=h, end_z=1.5).constraint_matrix()
    assert lower[4 * h - 2] == -math.inf
    assert upper[4 * h - 2] == math.inf


def test_second_circle_corridor_is_shrunk():
    config = PlanningConfig()
    h = 6
    _, lower, upper = _solver(horizon=h, config=config).constraint_matrix()
    margin = config.expected_safety_margin
    np.testing.assert_allclose(upper[9 * h - 1:10 * h - 1], 2.0 - margin)
    np.testing.assert_allclose(lower[10 * h - 1:11 * h - 1], -2.0 + margin)
    assert np.all(np.isinf(lower[9 * h - 1:10 * h - 1]))
    assert np.all(np.isinf(upper[10 * h - 1:11 * h - 1]))


def test_straight_reference_stays_on_reference():
    reference = _straight_reference()
    path = _solver(reference=reference).solve()
    assert len(path) == 6
    for ref, point in zip(reference.reference_states, path):
        assert point.x == pytest.approx(ref.x, abs=1e-5)
        assert point.y == pytest.approx(ref.y, abs=1e-5)
        assert point.s == pytest.approx(ref.s, abs=1e-5)


def test_initial_offset_solution_is_feasible():
    solver = _solver(offset=0.3)
    problem = solver.build_problem()
    result = solve_qp(problem)
    ax = problem.constraints @ result
    assert np.all(ax >= problem.lower - 1e-5)
    assert np.all(ax <= problem.upper + 1e-5)
    path = solver.optimized_path(result)
    assert path[0].y == pytest.approx(0.3, abs=1e-6)
    assert abs(path[-1].z) <= math.radians(5) + 1e-6


def test_blocked_corridor_raises():
    with pytest.raises(QpSolveError):
        _solver(offset=3.0).solve()


def test_missing_bounds_raise():
    states = [State(float(i), 0.0, s=float(i)) for i in range(8)]
    solver = SolverKAsInput(ReferenceData(reference_states=states), VehicleState(), 6)
    with pytest.raises(ValueError):
        solver.constraint_matrix()


def test_optimized_path_rejects_wrong_size():
    with pytest.raises(ValueError):
        _solver().optimized_path(np.zeros(5))