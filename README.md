# frenet_path

Path optimization for car-like vehicles in the Frenet frame of a
reference line. The path is posed as a quadratic program over the lateral
offset, the heading error and the curvature at each reference point. The
vehicle body is covered by circles, and each circle's lateral position is
kept between given bounds.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `frenet_path.config.PlanningConfig` is a dataclass holding the vehicle
  geometry (`car_width`, `car_length`, `wheel_base`,
  `rear_axle_to_center`, circle offsets `d1`..`d4`,
  `max_steering_angle`), the cost weights of the solvers and feature
  switches such as `constraint_end_heading`. Non-positive lengths and
  negative margins raise `ValueError`.
- `frenet_path.spline.Spline` is a cubic (default) or linear
  interpolating spline. Boundary conditions are set with `BoundaryType`
  (`FIRST_DERIV` or `SECOND_DERIV`) and their values; the default is a
  natural spline. Call it for a value and use `deriv(order, x)` for
  derivatives. Points outside the data are extrapolated.
  `BandMatrix` is the banded LU solver the spline uses.
- `frenet_path.data_struct` holds the records `State`, `Circle`,
  `SingleCircleBounds`, `CoveringCircleBounds`, `VehicleState` (start and
  end state plus `init_error`) and `ReferenceData` (the sampled reference
  states with their collision bounds and curvature / curvature-rate
  limits).
- `frenet_path.tools` provides `constraint_angle`, `distance`,
  `local_to_global`, `global_to_local`, `get_heading`, `get_curvature`,
  `find_closest_point`, `is_equal`, `time_s` and `time_ms`.
- `frenet_path.grid_map.GridMap` is a layered grid with bilinear lookup
  (`at_position`); `Map` reads the obstacle distance from its `distance`
  layer and returns 0 outside the map.
- `frenet_path.car_geometry.CarGeometry` covers the body with six circles
  and one bounding circle; `frenet_path.collision_checker.CollisionChecker`
  checks a pose against a grid map.
- `frenet_path.solver` defines `QpProblem`, `solve_qp` (SciPy's SLSQP),
  `QpSolveError` and the abstract `PathQpSolver`. The formulations are
  `SolverKAsInput` (curvature as input), `SolverKpAsInput` (curvature rate
  as input) and `SolverKpAsInputConstrained` (curvature rate as input with
  soft curvature limits). `frenet_path.factory.create_solver` builds one
  by name: `"K"`, `"KP"` or `"KPC"`; any other name raises `ValueError`.

## Examples

Heading and curvature of a curve given by two splines:

```python
from frenet_path.spline import Spline
from frenet_path.tools import get_heading, get_curvature

s = [0.0, 1.0, 2.0, 3.0]
xs = Spline(s, [0.0, 1.0, 2.0, 3.0])
ys = Spline(s, [0.0, 0.5, 0.8, 0.9])
print(get_heading(xs, ys, 1.5), get_curvature(xs, ys, 1.5))
```

Checking a pose in open space:

```python
import numpy as np

from frenet_path.collision_checker import CollisionChecker
from frenet_path.data_struct import State
from frenet_path.grid_map import GridMap

grid = GridMap({"distance": np.full((100, 100), 5.0)}, resolution=0.2)
checker = CollisionChecker(grid)
print(checker.is_single_state_collision_free_improved(State(0.0, 0.0, 0.0)))  # True
```

A solver is built from a `ReferenceData`, a `VehicleState` and a horizon;
`solve()` returns the optimized path as a list of `State` objects and
raises `QpSolveError` when the QP is infeasible or the solver fails.

## What it does not do

The package solves the path QP for a reference that is already sampled
and bounded. It does not smooth raw reference points, search around
obstacles, or compute the covering-circle bounds and curvature limits of
a `ReferenceData` from a map; those must be supplied by the caller. It
has no command-line program, does not load maps from images and does not
compute distance fields: the `distance` layer of a `GridMap` is given as
an array.