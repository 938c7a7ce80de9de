"""Plain data records shared by the planner: points, circles, bounds and states."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from frenet_path.spline import Spline


@dataclass
class State:
    """A point on a path: position, heading ``z``, curvature ``k`` and arc length ``s``."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    k: float = 0.0
    s: float = 0.0
    v: float = 0.0
    a: float = 0.0


@dataclass
class Circle:
    """A circle given by its centre and radius."""

    x: float = 0.0
    y: float = 0.0
    r: float = 0.0


@dataclass
class SingleCircleBounds:
    """Lateral limits of one covering circle: ``ub`` to the left, ``lb`` to the right."""

    ub: float = 0.0
    lb: float = 0.0
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    def set(self, bounds: Sequence[float], center: State) -> None:
        """Take ``(upper, lower)`` from ``bounds`` and the position from ``center``."""
        self.ub = float(bounds[0])
        self.lb = float(bounds[1])
        self.x = center.x
        self.y = center.y
        self.heading = center.z


@dataclass
class CoveringCircleBounds:
    """Bounds for the four circles that cover the vehicle body."""

    c0: SingleCircleBounds = field(default_factory=SingleCircleBounds)
    c1: SingleCircleBounds = field(default_factory=SingleCircleBounds)
    c2: SingleCircleBounds = field(default_factory=SingleCircleBounds)
    c3: SingleCircleBounds = field(default_factory=SingleCircleBounds)


@dataclass
class VehicleState:
    """Start and target states plus the initial error against the reference line."""

    start_state: State = field(default_factory=State)
    end_state: State = field(default_factory=State)
    initial_offset: float = 0.0
    initial_heading_error: float = 0.0

    @property
    def init_error(self) -> tuple[float, float]:
        """Initial ``(offset, heading_error)`` with respect to the reference."""
        return self.initial_offset, self.initial_heading_error


@dataclass
class ReferenceData:
    """A discretised reference path together with its per-point limits."""

    reference_states: list[State] = field(default_factory=list)
    bounds: list[CoveringCircleBounds] = field(default_factory=list)
    max_k_list: list[float] = field(default_factory=list)
    max_kp_list: list[float] = field(default_factory=list)
    xs: Spline | None = None
    ys: Spline | None = None
    length: float = 0.0

    def __post_init__(self) -> None:
        if self.bounds and len(self.bounds) != len(self.reference_states):
            raise ValueError(
                f"{len(self.bounds)} bounds given for {len(self.reference_states)} reference states"
            )

    @property
    def size(self) -> int:
        return len(self.reference_states)

    def __len__(self) -> int:
        return self.size