"""Footprint collision checks against a distance map."""

from __future__ import annotations

from frenet_path.car_geometry import CarGeometry
from frenet_path.config import PlanningConfig
from frenet_path.data_struct import State
from frenet_path.grid_map import GridMap, Map


class CollisionChecker:
    """Checks vehicle poses against the ``distance`` layer of a grid map."""

    def __init__(self, grid_map: GridMap, config: PlanningConfig | None = None) -> None:
        config = config or PlanningConfig()
        self.map = Map(grid_map)
        half_length = config.car_length / 2.0
        self.car = CarGeometry(
            config.car_width,
            half_length - config.rear_axle_to_center,
            half_length + config.rear_axle_to_center,
        )

    def is_single_state_collision_free(self, current: State) -> bool:
        """True if every covering circle is inside the map and clear of obstacles."""
        for circle in self.car.circles(current):
            pos = (circle.x, circle.y)
            if not self.map.is_inside(pos):
                return False
            if self.map.obstacle_distance(pos) < circle.r:
                return False
        return True

    def is_single_state_collision_free_improved(self, current: State) -> bool:
        """Same verdict, using the bounding circle first as a cheap test."""
        bounding = self.car.bounding_circle(current)
        pos = (bounding.x, bounding.y)
        if not self.map.is_inside(pos):
            return False
        if self.map.obstacle_distance(pos) < bounding.r:
            return self.is_single_state_collision_free(current)
        return True