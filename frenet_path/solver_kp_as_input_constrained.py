"""QP path optimizer with curvature rate as input and soft curvature limits."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import ReferenceData, State, VehicleState
from frenet_path.solver import PathQpSolver

_END_HEADING_LIMIT = math.radians(70)
_END_HEADING_TOLERANCE = math.radians(5)
_KEEP_CONTROL_STEPS = 4
_CURVATURE_SLACK_WEIGHT = 500.0
_CURVATURE_RATE_SLACK_WEIGHT = 25000.0


class SolverKpAsInputConstrained(PathQpSolver):
    """Variables: ``(e_y, e_psi, k)`` per step, the curvature-rate controls and
    ``3 * horizon`` slacks (collision, curvature and curvature-rate slacks).

    Curvature and curvature rate are limited by the reference's ``max_k_list``
    and ``max_kp_list``; the limits may be exceeded at a cost through slacks.
    """

    def __init__(
        self,
        reference: ReferenceData,
        vehicle_state: VehicleState,
        horizon: int,
        config: PlanningConfig | None = None,
    ) -> None:
        super().__init__(reference, vehicle_state, horizon, config)
        self.keep_control_steps = _KEEP_CONTROL_STEPS
        self.control_horizon = (horizon + self.keep_control_steps - 2) // self.keep_control_steps
        self.state_size = 3 * horizon
        self.control_size = self.control_horizon
        self.slack_size = 3 * horizon
        self.num_of_variables = self.state_size + self.control_size + self.slack_size
        self.num_of_constraints = 12 * horizon + 3 * self.control_horizon + 2

    @property
    def _slack_begin(self) -> int:
        return self.state_size + self.control_size

    def hessian_matrix(self) -> np.ndarray:
        h = self.horizon
        ch = self.control_horizon
        cfg = self.config
        slack = self._slack_begin
        hessian = np.zeros((self.num_of_variables, self.num_of_variables))
        steps = np.arange(h)
        hessian[3 * steps, 3 * steps] += cfg.kp_deviation_weight
        hessian[3 * steps + 2, 3 * steps + 2] += cfg.kp_curvature_weight
        hessian[slack + steps, slack + steps] += cfg.kp_slack_weight
        hessian[slack + h + steps, slack + h + steps] += _CURVATURE_SLACK_WEIGHT
        controls = np.arange(ch)
        hessian[self.state_size + controls, self.state_size + controls] += (
            self.keep_control_steps * cfg.kp_curvature_rate_weight
        )
        kp_slack = slack + 2 * h + controls
        hessian[kp_slack, kp_slack] += _CURVATURE_RATE_SLACK_WEIGHT * self.keep_control_steps
        return hessian

    def constraint_matrix(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        h = self.horizon
        ch = self.control_horizon
        cfg = self.config
        states = self.reference.reference_states
        bounds = self.reference.bounds
        max_k_list = self.reference.max_k_list
        max_kp_list = self.reference.max_kp_list
        if len(bounds) < h:
            raise ValueError(f"{len(bounds)} collision bounds given for a horizon of {h}")
        if len(max_k_list) < h:
            raise ValueError(f"{len(max_k_list)} curvature limits given for a horizon of {h}")
        if len(max_kp_list) < ch:
            raise ValueError(
                f"{len(max_kp_list)} curvature rate limits given for {ch} control steps"
            )

        kl_begin = 3 * h
        ku_begin = kl_begin + h
        kpl_begin = ku_begin + h
        kpu_begin = kpl_begin + ch
        slack_rows = kpu_begin + ch
        collision_begin = slack_rows + 2 * h + ch
        end_begin = collision_begin + 5 * h
        slack = self._slack_begin

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

        # Curvature limits with slacks, and the slack rows themselves.
        for i in range(h):
            cons[kl_begin + i, 3 * i + 2] = 1.0
            cons[kl_begin + i, slack + h + i] = 1.0
            cons[ku_begin + i, 3 * i + 2] = 1.0
            cons[ku_begin + i, slack + h + i] = -1.0
            cons[slack_rows + i, slack + i] = 1.0
            cons[slack_rows + h + i, slack + h + i] = 1.0
        # Curvature-rate limits with slacks.
        for i in range(ch):
            cons[kpl_begin + i, self.state_size + i] = 1.0
            cons[kpl_begin + i, slack + 2 * h + i] = 1.0
            cons[kpu_begin + i, self.state_size + i] = 1.0
            cons[kpu_begin + i, slack + 2 * h + i] = -1.0
            cons[slack_rows + 2 * h + i, slack + 2 * h + i] = 1.0

        # Collision part: circles 0, 1 and 3 hard, circle 2 softened by a slack.
        collision = np.array([[1.0, cfg.d1], [1.0, cfg.d2], [1.0, cfg.d4]])
        for i in range(h):
            row = collision_begin + 3 * i
            cons[row:row + 3, 3 * i:3 * i + 2] = collision
        for i in range(h):
            for block, sign in ((3, -1.0), (4, 1.0)):
                row = collision_begin + block * h + i
                cons[row, 3 * i:3 * i + 2] = (1.0, cfg.d3)
                cons[row, slack + i] = sign

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

        # Curvature and slack bounds.
        max_k = math.tan(cfg.max_steering_angle) / cfg.wheel_base
        for i in range(h):
            lower[kl_begin + i] = -max_k_list[i]
            upper[kl_begin + i] = math.inf
            lower[ku_begin + i] = -math.inf
            upper[ku_begin + i] = max_k_list[i]
            lower[slack_rows + i] = 0.0
            upper[slack_rows + i] = cfg.expected_safety_margin
            lower[slack_rows + h + i] = 0.0
            upper[slack_rows + h + i] = max(max_k - max_k_list[i], 0.0)
        for i in range(ch):
            lower[kpl_begin + i] = -max_kp_list[i]
            upper[kpl_begin + i] = math.inf
            lower[kpu_begin + i] = -math.inf
            upper[kpu_begin + i] = max_kp_list[i]
            lower[slack_rows + 2 * h + i] = 0.0
            upper[slack_rows + 2 * h + i] = math.inf

        # Collision bounds.
        margin = cfg.expected_safety_margin
        for i, bound in enumerate(bounds[:h]):
            row = collision_begin + 3 * i
            upper[row:row + 3] = (bound.c0.ub, bound.c1.ub, bound.c3.ub)
            lower[row:row + 3] = (bound.c0.lb, bound.c1.lb, bound.c3.lb)
            upper[collision_begin + 3 * h + i] = bound.c2.ub - margin
            lower[collision_begin + 3 * h + i] = -math.inf
            lower[collision_begin + 4 * h + i] = bound.c2.lb + margin
            upper[collision_begin + 4 * h + i] = math.inf

        # End state bounds; the end offset is left free.
        lower[end_begin:end_begin + 2] = -math.inf
        upper[end_begin:end_begin + 2] = math.inf
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