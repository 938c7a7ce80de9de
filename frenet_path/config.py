"""Tunable parameters for reference smoothing and path optimization."""

from __future__ import annotations

from dataclasses import dataclass

_POSITIVE_FIELDS = (
    "car_width",
    "car_length",
    "wheel_base",
    "output_spacing",
    "epsilon",
    "search_longitudial_spacing",
    "search_lateral_spacing",
)

_NON_NEGATIVE_FIELDS = (
    "safety_margin",
    "circle_radius",
    "max_steering_angle",
    "expected_safety_margin",
    "search_lateral_range",
)


@dataclass
class PlanningConfig:
    """All planner settings in one place.

    Vehicle geometry, covering-circle offsets along the body (``d1``..``d4``),
    cost weights for the smoothers and the QP solvers, and feature switches.
    """

    # Vehicle geometry.
    car_width: float = 2.0
    car_length: float = 4.9
    safety_margin: float = 0.3
    circle_radius: float = 1.2
    wheel_base: float = 2.85
    rear_axle_to_center: float = 1.45
    # Longitudinal offsets of the covering circles from the rear axle.
    d1: float = -0.3875
    d2: float = 1.0375
    d3: float = 2.4625
    d4: float = 3.8875
    max_steering_angle: float = 0.61
    mu: float = 0.4
    max_curvature_rate: float = 0.1

    # Reference smoothing.
    smoothing_method: str = "TENSION"
    tension_solver: str = "OSQP"
    enable_searching: bool = False
    search_lateral_range: float = 10.0
    search_longitudial_spacing: float = 1.5
    search_lateral_spacing: float = 0.6
    frenet_angle_diff_weight: float = 1500.0
    frenet_angle_diff_diff_weight: float = 200.0
    frenet_deviation_weight: float = 15.0
    cartesian_curvature_weight: float = 1.0
    cartesian_curvature_rate_weight: float = 50.0
    cartesian_deviation_weight: float = 0.0
    tension_2_deviation_weight: float = 0.005
    tension_2_curvature_weight: float = 1.0
    tension_2_curvature_rate_weight: float = 10.0
    enable_simple_boundary_decision: bool = True

    # Path optimization.
    optimization_method: str = "KP"
    k_curvature_weight: float = 50.0
    k_curvature_rate_weight: float = 200.0
    k_deviation_weight: float = 0.0
    kp_curvature_weight: float = 10.0
    kp_curvature_rate_weight: float = 200.0
    kp_deviation_weight: float = 0.0
    kp_slack_weight: float = 5.0
    expected_safety_margin: float = 0.8
    constraint_end_heading: bool = True
    enable_exact_position: bool = False

    # Output.
    enable_raw_output: bool = True
    output_spacing: float = 0.3
    enable_computation_time_output: bool = False
    enable_collision_check: bool = True

    # Search costs and numerics.
    search_obstacle_cost: float = 0.4
    search_deviation_cost: float = 0.4
    epsilon: float = 1e-6
    enable_dynamic_segmentation: bool = True

    def __post_init__(self) -> None:
        for name in _POSITIVE_FIELDS:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)!r}")