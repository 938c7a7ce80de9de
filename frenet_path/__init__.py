"""Frenet-frame path optimization: splines, geometry tools, collision checks and QP path solvers."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "spline",
    "data_struct",
    "tools",
    "grid_map",
    "car_geometry",
    "collision_checker",
    "solver",
    "solver_k_as_input",
    "solver_kp_as_input",
    "solver_kp_as_input_constrained",
    "factory",
]