"""QP path optimizer with curvature rate as the control input."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import ReferenceData, State, VehicleState
from frenet_path.solver import PathQpSolver

_END_HEADING_LIMIT = math.radians(70)
_END_HEADING_TOLERANCE = math.radians(5)
# Distance along the path over which one control value is held.
_CONTROL_HOLD_DISTANCE = 1.2
# Limit on the lateral offset at the end of the path.
_END_OFFSET_LIMIT = 1.0


class SolverKpAsInput(PathQpSolver):
    """Variables: ``(e_y, e_psi, k)`` per step, the curvature-rate controls
    and two slack sets of ``horizon`` entries each.

    One control value is held for ``keep_control_steps`` consecutive steps.
    """

    def __init__(
        self,
        reference: ReferenceData,
        vehicle_state: VehicleState,
        horizon: int,
        config: PlanningConfig | None = None,
    ) -> None:
        super().__init__(reference, vehicle_state, horizon, config)
        if self.reference_interval <= 0:
            raise ValueError("reference states must have increasing arc length")
        self.keep_control_steps = max(int(_CONTROL_HOLD_DISTANCE / self.reference_interval), 1)
        self.control_horizon = (horizon + self.keep_control_steps - 2) // self.keep_control_steps
        self.state_size = 3 * horizon
        self.control_size = self.control_horizon
        self.slack_size = 2 * horizon
        self.num_of_variables = self.state_size + self.control_size + self.slack_size
        self.num_of_constraints = 11 * horizon + self.control_horizon + 2

    @property
    def _slack_begin(self) -> int:
        return self.state_size + self.control_size

    def hessian_matrix(self) -> np.ndarray:
        h = self.horizon
        cfg = self.config
        hessian = np.zeros((self.num_of_variables, self.num_of_variables))
        steps = np.arange(h)
        hessian[3 * steps, 3 * steps] += cfg.kp_deviation_weight
        hessian[3 * steps + 2, 3 * steps + 2] += cfg.kp_curvature_weight
        slack = self._slack_begin + np.arange(2 * h)
        hessian[slack, slack] += cfg.kp_slack_weight
        controls = self.state_size + np.arange(self.control_horizon)
        hessian[controls, controls] += self.keep_control_steps * cfg.kp_curvature_rate_weight
        return hessian

    def constraint_matrix(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        h = self.horizon
        ch = self.control_horizon
        cfg = self.config
        states = self.reference.reference_states
        bounds = self.reference.bounds
        if len(bounds) < h:
            raise ValueError(f"{len(bounds)} collision bounds given for a horizon of {h}")

        vars_begin = 3 * h
        collision_begin = vars_begin + 2 * h + ch
        end_begin = collision_begin + 6 * h
        slack_begin = self._slack_begin

        cons = np.zeros((self.num_of_constraints, self.num_of_variables))

        # Transition part.
        cons[:self.state_size, :self.state_size] = -np.eye(self.state_size)
        a = np.zeros((3, 3))
        a[0, 1] = 1.0
        a[1, 2] = 1.0
        b = np.array([0.0, 0.0, 1.0])
        offsets = []
        for i in range(h - 1):
            ref_k = states[i].k
            ds = states[i + 1].s - states[i].s
            ref_kp = (states[i + 1].k - ref_k) / ds
            a[1, 0] = -ref_k ** 2
            row = 3 * (i + 1)
            cons[row:row + 3, 3 * i:3 * i + 3] = a * ds + np.eye(3)
            cons[row:row + 3, self.state_size + i // self.keep_control_steps] = b * ds
            c = np.array([0.0, 0.0, ref_kp])
            ref_state = np.array([0.0, 0.0, ref_k])
            offsets.append(ds * (c - a @ ref_state - b * ref_kp))

        # Plain variable rows.
        for i in range(h):
            cons[vars_begin + i, 3 * i + 2] = 1.0
            cons[vars_begin + h + ch + i, slack_begin + i] = 1.0
        for i in range(ch):
            cons[vars_begin + h + i, self.state_size + i] = 1.0

        # Collision part: circles 0 and 2 hard, circles 3 and 1 softened by slacks.
        collision = np.array([[1.0, cfg.d1], [1.0, cfg.d3]])
        for i in range(h):
            row = collision_begin + 2 * i
            cons[row:row + 2, 3 * i:3 * i + 2] = collision
        for i in range(h):
            for block, d, sign in (
                (2, cfg.d4, -1.0),
                (3, cfg.d4, 1.0),
                (4, cfg.d2, -1.0),
                (5, cfg.d2, 1.0),
            ):
                row = collision_begin + block * h + i
                cons[row, 3 * i:3 * i + 2] = (1.0, d)
                cons[row, slack_begin + i] = sign

        # End state: lateral offset and heading error.
        cons[end_begin, self.state_size - 3] = 1.0
        cons[end_begin + 1, self.state_size - 2] = 1.0

        lower = np.zeros(self.num_of_constraints)
        upper = np.zeros(self.num_of_constraints)

        init_offset, init_heading_error = self.vehicle_state.init_error
        x0 = np.array([init_offset, init_heading_error, self.vehicle_state.start_state.k])
        lower[0:3] = -x0
        upper[0:3] = -x0
        for i, c in enumerate(offsets):
            row = 3 * (i + 1)
            lower[row:row + 3] = -c
            upper[row:row + 3] = -c

        # Variable bounds.
        max_k = math.tan(cfg.max_steering_angle) / cfg.wheel_base
        lower[vars_begin:vars_begin + h] = -max_k
        upper[vars_begin:vars_begin + h] = max_k
        lower[vars_begin + h:vars_begin + h + ch] = -math.inf
        upper[vars_begin + h:vars_begin + h + ch] = math.inf
        lower[vars_begin + h + ch:vars_begin + 2 * h + ch] = 0.0
        upper[vars_begin + h + ch:vars_begin + 2 * h + ch] = cfg.expected_safety_margin

        # Collision bounds.
        margin = cfg.expected_safety_margin
        for i, bound in enumerate(bounds[:h]):
            row = collision_begin + 2 * i
            upper[row:row + 2] = (bound.c0.ub, bound.c2.ub)
            lower[row:row + 2] = (bound.c0.lb, bound.c2.lb)
            upper[collision_begin + 2 * h + i] = bound.c3.ub - margin
            lower[collision_begin + 2 * h + i] = -math.inf
            lower[collision_begin + 3 * h + i] = bound.c3.lb + margin
            upper[collision_begin + 3 * h + i] = math.inf
            upper[collision_begin + 4 * h + i] = bound.c1.ub - margin
            lower[collision_begin + 4 * h + i] = -math.inf
            lower[collision_begin + 5 * h + i] = bound.c1.lb + margin
            upper[collision_begin + 5 * h + i] = math.inf

        # End state bounds.
        lower[end_begin] = -_END_OFFSET_LIMIT
        upper[end_begin] = _END_OFFSET_LIMIT
        lower[end_begin + 1] = -math.inf
        upper[end_begin + 1] = math.inf
        if cfg.constraint_end_heading:
            end_psi = self._end_heading_error()
            if end_psi < _END_HEADING_LIMIT:
                lower[end_begin + 1] = end_psi - _END_HEADING_TOLERANCE
                upper[end_begin + 1] = end_psi + _END_HEADING_TOLERANCE

        return cons, lower, upper

    def optimized_path(self, result: Sequence[float]) -> list[State]:
        h = self.horizon
        values = self._checked_result(result)
        offsets = values[0:3 * h:3]
        heading_errors = values[1:3 * h:3]
        curvatures = values[2:3 * h:3]
        return self._assemble_path(offsets, heading_errors, curvatures)