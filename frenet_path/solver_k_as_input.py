"""QP path optimizer with curvature as the control input."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import ReferenceData, State, VehicleState
from frenet_path.solver import PathQpSolver

_END_HEADING_LIMIT = math.radians(70)
_END_HEADING_TOLERANCE = math.radians(5)


class SolverKAsInput(PathQpSolver):
    """Variables: ``(e_psi, e_y)`` per step, ``h - 1`` controls, ``h`` slacks."""

    def __init__(
        self,
        reference: ReferenceData,
        vehicle_state: VehicleState,
        horizon: int,
        config: PlanningConfig | None = None,
    ) -> None:
        super().__init__(reference, vehicle_state, horizon, config)
        self.num_of_variables = 4 * horizon - 1
        self.num_of_constraints = 11 * horizon - 1

    def dynamic_matrix(self, i: int) -> tuple[np.ndarray, np.ndarray]:
        """Linearised transition ``(A, B)`` from step ``i`` to ``i + 1``."""
        states = self.reference.reference_states
        ref_k = states[i].k
        ref_s = states[i + 1].s - states[i].s
        wheel_base = self.config.wheel_base
        ref_delta = math.atan(ref_k * wheel_base)
        a = np.array([[1.0, -ref_s * ref_k ** 2], [ref_s, 1.0]])
        b = np.array([ref_s / wheel_base / math.cos(ref_delta) ** 2, 0.0])
        return a, b

    def hessian_matrix(self) -> np.ndarray:
        h = self.horizon
        cfg = self.config
        w_c = cfg.k_curvature_weight
        w_cr = cfg.k_curvature_rate_weight
        control_size = h - 1
        hessian = np.zeros((self.num_of_variables, self.num_of_variables))

        # Only the lateral offset of each state is penalised.
        hessian[np.arange(1, 2 * h, 2), np.arange(1, 2 * h, 2)] = cfg.k_deviation_weight

        main = np.full(control_size, 2 * w_cr + w_c)
        main[0] = main[-1] = w_c + w_cr
        r = np.diag(main)
        if control_size > 1:
            idx = np.arange(control_size - 1)
            r[idx, idx + 1] = -w_cr
            r[idx + 1, idx] = -w_cr
        hessian[2 * h:3 * h - 1, 2 * h:3 * h - 1] = r

        slack = np.arange(3 * h - 1, 4 * h - 1)
        hessian[slack, slack] = cfg.kp_slack_weight
        return hessian

    def constraint_matrix(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        h = self.horizon
        cfg = self.config
        states = self.reference.reference_states
        bounds = self.reference.bounds
        if len(bounds) < h:
            raise ValueError(f"{len(bounds)} collision bounds given for a horizon of {h}")

        cons = np.zeros((self.num_of_constraints, self.num_of_variables))

        # Transition part.
        cons[:2 * h, :2 * h] = -np.eye(2 * h)
        for i in range(h - 1):
            a, b = self.dynamic_matrix(i)
            cons[2 * (i + 1):2 * (i + 1) + 2, 2 * i:2 * i + 2] = a
            cons[2 * (i + 1):2 * (i + 1) + 2, 2 * h + i] = b

        # Plain variable bounds.
        cons[2 * h:6 * h - 1, :] = np.eye(4 * h - 1)

        # Collision part 1: circles 0, 2 and 3.
        collision = np.array([[cfg.d1, 1.0], [cfg.d3, 1.0], [cfg.d4, 1.0]])
        for i in range(h):
            row = 6 * h - 1 + 3 * i
            cons[row:row + 3, 2 * i:2 * i + 2] = collision

        # Collision part 2: circle 1 with a shrunk corridor softened by slacks.
        for i in range(h):
            cons[9 * h - 1 + i, 2 * i:2 * i + 2] = (cfg.d2, 1.0)
            cons[10 * h - 1 + i, 2 * i:2 * i + 2] = (cfg.d2, 1.0)
        cons[9 * h - 1:10 * h - 1, 3 * h - 1:4 * h - 1] = -np.eye(h)
        cons[10 * h - 1:11 * h - 1, 3 * h - 1:4 * h - 1] = np.eye(h)

        lower = np.zeros(self.num_of_constraints)
        upper = np.zeros(self.num_of_constraints)

        # Initial state and transition offsets.
        init_offset, init_heading_error = self.vehicle_state.init_error
        x0 = np.array([init_heading_error, init_offset])
        lower[0:2] = -x0
        upper[0:2] = -x0
        for i in range(h - 1):
            ds = states[i + 1].s - states[i].s
            steer = math.atan(states[i].k * cfg.wheel_base)
            c = (ds * steer / cfg.wheel_base / math.cos(steer) ** 2, 0.0)
            lower[2 + 2 * i:4 + 2 * i] = c
            upper[2 + 2 * i:4 + 2 * i] = c

        # State bounds.
        lower[2 * h:4 * h] = -math.inf
        upper[2 * h:4 * h] = math.inf
        if cfg.constraint_end_heading:
            end_psi = self._end_heading_error()
            if end_psi < _END_HEADING_LIMIT:
                lower[4 * h - 2] = end_psi - _END_HEADING_TOLERANCE
                upper[4 * h - 2] = end_psi + _END_HEADING_TOLERANCE

        # Control bounds.
        lower[4 * h:5 * h - 1] = -cfg.max_steering_angle
        upper[4 * h:5 * h - 1] = cfg.max_steering_angle

        # Slack bounds.
        lower[5 * h - 1:6 * h - 1] = 0.0
        upper[5 * h - 1:6 * h - 1] = cfg.expected_safety_margin

        # Collision bounds part 1.
        for i, bound in enumerate(bounds[:h]):
            row = 6 * h - 1 + 3 * i
            upper[row:row + 3] = (bound.c0.ub, bound.c2.ub, bound.c3.ub)
            lower[row:row + 3] = (bound.c0.lb, bound.c2.lb, bound.c3.lb)

        # Collision bounds part 2.
        upper[10 * h - 1:11 * h - 1] = math.inf
        lower[9 * h - 1:10 * h - 1] = -math.inf
        for i, bound in enumerate(bounds[:h]):
            upper[9 * h - 1 + i] = bound.c1.ub - cfg.expected_safety_margin
            lower[10 * h - 1 + i] = bound.c1.lb + cfg.expected_safety_margin

        return cons, lower, upper

    def optimized_path(self, result: Sequence[float]) -> list[State]:
        h = self.horizon
        values = self._checked_result(result)
        heading_errors = values[0:2 * h:2]
        offsets = values[1:2 * h:2]
        curvatures = [*values[2 * h:3 * h - 1], values[3 * h - 2]]
        return self._assemble_path(offsets, heading_errors, curvatures)