"""Quadratic programs for path optimization and the common solver frame."""

from __future__ import annotations

import abc
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy.optimize import minimize

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import ReferenceData, State, VehicleState
from frenet_path.tools import constraint_angle

# Bounds at or beyond this magnitude are treated as absent.
_INFINITE_BOUND = 1e20
_FEASIBILITY_TOLERANCE = 1e-6
_MAX_ITERATIONS = 1000
# Number of leading reference states inspected for the sampling interval.
_INTERVAL_CHECK_NUM = 10


class QpSolveError(RuntimeError):
    """Raised when a quadratic program cannot be set up or solved."""


@dataclass
class QpProblem:
    """Minimise ``0.5 x'Px + q'x`` subject to ``lower <= A x <= upper``."""

    hessian: np.ndarray
    gradient: np.ndarray
    constraints: np.ndarray
    lower: np.ndarray
    upper: np.ndarray

    def __post_init__(self) -> None:
        self.hessian = np.atleast_2d(np.asarray(self.hessian, dtype=float))
        self.gradient = np.asarray(self.gradient, dtype=float).ravel()
        self.constraints = np.atleast_2d(np.asarray(self.constraints, dtype=float))
        self.lower = np.asarray(self.lower, dtype=float).ravel()
        self.upper = np.asarray(self.upper, dtype=float).ravel()
        n = self.gradient.size
        if self.hessian.shape != (n, n):
            raise ValueError(f"hessian has shape {self.hessian.shape}, expected {(n, n)}")
        if self.constraints.shape[1] != n:
            raise ValueError(
                f"constraint matrix has {self.constraints.shape[1]} columns, expected {n}"
            )
        m = self.constraints.shape[0]
        if self.lower.size != m or self.upper.size != m:
            raise ValueError(f"bounds must have {m} entries each")

    @property
    def num_of_variables(self) -> int:
        return self.gradient.size

    @property
    def num_of_constraints(self) -> int:
        return self.constraints.shape[0]


def solve_qp(problem: QpProblem) -> np.ndarray:
    """Return the minimiser of ``problem``; raise :class:`QpSolveError` on failure."""
    lower, upper, a = problem.lower, problem.upper, problem.constraints
    if np.any(lower > upper):
        raise QpSolveError("a lower bound exceeds its upper bound")

    has_lower = lower > -_INFINITE_BOUND
    has_upper = upper < _INFINITE_BOUND
    equal = has_lower & has_upper & (lower == upper)
    ineq_lower = has_lower & ~equal
    ineq_upper = has_upper & ~equal

    constraints = []
    if equal.any():
        a_eq, b_eq = a[equal], lower[equal]
        constraints.append(
            {"type": "eq", "fun": lambda x: a_eq @ x - b_eq, "jac": lambda x: a_eq}
        )
    if ineq_lower.any() or ineq_upper.any():
        a_in = np.vstack([a[ineq_lower], -a[ineq_upper]])
        b_in = np.concatenate([lower[ineq_lower], -upper[ineq_upper]])
        constraints.append(
            {"type": "ineq", "fun": lambda x: a_in @ x - b_in, "jac": lambda x: a_in}
        )

    p = (problem.hessian + problem.hessian.T) / 2.0
    q = problem.gradient

    result = minimize(
        lambda x: 0.5 * x @ p @ x + q @ x,
        np.zeros(problem.num_of_variables),
        jac=lambda x: p @ x + q,
        method="SLSQP",
        constraints=constraints,
        options={"maxiter": _MAX_ITERATIONS, "ftol": 1e-12},
    )
    if not result.success:
        raise QpSolveError(f"QP solver failed: {result.message}")

    x = result.x
    ax = a @ x
    scale = np.maximum(1.0, np.abs(np.where(has_lower, lower, 0.0)))
    low_violation = np.where(has_lower, (lower - ax) / scale, 0.0)
    scale = np.maximum(1.0, np.abs(np.where(has_upper, upper, 0.0)))
    up_violation = np.where(has_upper, (ax - upper) / scale, 0.0)
    worst = max(float(np.max(low_violation, initial=0.0)), float(np.max(up_violation, initial=0.0)))
    if worst > _FEASIBILITY_TOLERANCE:
        raise QpSolveError(f"QP is infeasible: constraint violated by {worst:g}")
    return x


class PathQpSolver(abc.ABC):
    """Frame for optimizing lateral errors along a discretised reference path.

    Subclasses define the variables, the cost, the constraints and how a
    solution vector maps back to path states.
    """

    def __init__(
        self,
        reference: ReferenceData,
        vehicle_state: VehicleState,
        horizon: int,
        config: PlanningConfig | None = None,
    ) -> None:
        if horizon < 2:
            raise ValueError(f"horizon must be at least 2, got {horizon}")
        if horizon > reference.size:
            raise ValueError(
                f"horizon {horizon} exceeds the {reference.size} reference states"
            )
        self.horizon = horizon
        self.reference = reference
        self.vehicle_state = vehicle_state
        self.config = config or PlanningConfig()
        self.num_of_variables = 0
        self.num_of_constraints = 0
        states = reference.reference_states[:_INTERVAL_CHECK_NUM]
        self.reference_interval = max([0.0, *(b.s - a.s for a, b in zip(states, states[1:]))])

    @abc.abstractmethod
    def hessian_matrix(self) -> np.ndarray:
        """The cost matrix ``P``."""

    @abc.abstractmethod
    def constraint_matrix(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """The constraint matrix ``A`` with its lower and upper bounds."""

    @abc.abstractmethod
    def optimized_path(self, result: Sequence[float]) -> list[State]:
        """Convert a solution vector into path states."""

    def build_problem(self) -> QpProblem:
        """Assemble the QP; the linear cost term is zero."""
        matrix, lower, upper = self.constraint_matrix()
        return QpProblem(
            self.hessian_matrix(),
            np.zeros(self.num_of_variables),
            matrix,
            lower,
            upper,
        )

    def solve(self) -> list[State]:
        """Solve the QP and return the optimized path."""
        return self.optimized_path(solve_qp(self.build_problem()))

    def _checked_result(self, result: Sequence[float]) -> np.ndarray:
        values = np.asarray(result, dtype=float).ravel()
        if values.size != self.num_of_variables:
            raise ValueError(
                f"solution has {values.size} entries, expected {self.num_of_variables}"
            )
        return values

    def _end_heading_error(self) -> float:
        return constraint_angle(
            self.vehicle_state.end_state.z - self.reference.reference_states[-1].z
        )

    def _assemble_path(
        self,
        offsets: Sequence[float],
        heading_errors: Sequence[float],
        curvatures: Sequence[float],
    ) -> list[State]:
        """Shift each reference state sideways by its offset and build the path."""
        path: list[State] = []
        s = 0.0
        for ref, offset, heading_error, k in zip(
            self.reference.reference_states, offsets, heading_errors, curvatures
        ):
            normal = constraint_angle(ref.z + math.pi / 2)
            x = ref.x + float(offset) * math.cos(normal)
            y = ref.y + float(offset) * math.sin(normal)
            if path:
                s += math.hypot(x - path[-1].x, y - path[-1].y)
            path.append(State(x, y, ref.z + float(heading_error), float(k), s))
        return path