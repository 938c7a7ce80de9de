"""Selection of a path QP solver by name."""

from __future__ import annotations

from frenet_path.config import PlanningConfig
from frenet_path.data_struct import ReferenceData, VehicleState
from frenet_path.solver import PathQpSolver
from frenet_path.solver_k_as_input import SolverKAsInput
from frenet_path.solver_kp_as_input import SolverKpAsInput
from frenet_path.solver_kp_as_input_constrained import SolverKpAsInputConstrained

_SOLVERS: dict[str, type[PathQpSolver]] = {
    "K": SolverKAsInput,
    "KP": SolverKpAsInput,
    "KPC": SolverKpAsInputConstrained,
}


def create_solver(
    kind: str,
    reference: ReferenceData,
    vehicle_state: VehicleState,
    horizon: int,
    config: PlanningConfig | None = None,
) -> PathQpSolver:
    """Build the solver named ``kind``: ``"K"``, ``"KP"`` or ``"KPC"``."""
    try:
        solver_class = _SOLVERS[kind]
    except KeyError:
        raise ValueError(f"No such solver: {kind!r}") from None
    return solver_class(reference, vehicle_state, horizon, config)