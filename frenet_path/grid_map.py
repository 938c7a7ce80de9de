"""A layered raster map and a distance-field lookup built on it."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

import numpy as np


class GridMap:
    """Equally shaped 2-D layers on a square-celled grid centred at ``position``.

    Cell ``(i, j)`` lies ``i`` cells below the map's maximum x and ``j`` cells
    below its maximum y, so row 0 is the +x edge and column 0 the +y edge.
    """

    def __init__(
        self,
        layers: Mapping[str, Sequence[Sequence[float]]],
        resolution: float,
        position: Sequence[float] = (0.0, 0.0),
    ) -> None:
        if resolution <= 0:
            raise ValueError("resolution must be positive")
        if not layers:
            raise ValueError("at least one layer is required")
        self._layers: dict[str, np.ndarray] = {}
        shape = None
        for name, data in layers.items():
            arr = np.asarray(data, dtype=float)
            if arr.ndim != 2 or arr.size == 0:
                raise ValueError(f"layer {name!r} must be a non-empty 2-D array")
            if shape is not None and arr.shape != shape:
                raise ValueError(f"layer {name!r} has shape {arr.shape}, expected {shape}")
            shape = arr.shape
            self._layers[name] = arr
        self.resolution = float(resolution)
        self.position = (float(position[0]), float(position[1]))
        self.shape: tuple[int, int] = shape
        self.length = (shape[0] * self.resolution, shape[1] * self.resolution)
        self._corner = (
            self.position[0] + self.length[0] / 2,
            self.position[1] + self.length[1] / 2,
        )

    def exists(self, layer: str) -> bool:
        return layer in self._layers

    def _continuous_index(self, pos: Sequence[float]) -> tuple[float, float]:
        return (
            (self._corner[0] - pos[0]) / self.resolution,
            (self._corner[1] - pos[1]) / self.resolution,
        )

    def is_inside(self, pos: Sequence[float]) -> bool:
        ci, cj = self._continuous_index(pos)
        return 0.0 <= ci < self.shape[0] and 0.0 <= cj < self.shape[1]

    def at_position(self, layer: str, pos: Sequence[float]) -> float:
        """Bilinearly interpolated value of ``layer`` at ``pos``.

        Near the border, where not all four neighbouring cells exist, the
        value of the containing cell is returned.
        """
        if layer not in self._layers:
            raise KeyError(layer)
        if not self.is_inside(pos):
            raise ValueError(f"position {tuple(pos)} is outside the map")
        data = self._layers[layer]
        rows, cols = self.shape
        ci, cj = self._continuous_index(pos)
        fi, fj = ci - 0.5, cj - 0.5
        i0, j0 = math.floor(fi), math.floor(fj)
        if i0 < 0 or j0 < 0 or i0 + 1 >= rows or j0 + 1 >= cols:
            return float(data[min(int(ci), rows - 1), min(int(cj), cols - 1)])
        ti, tj = fi - i0, fj - j0
        top = data[i0, j0] * (1 - tj) + data[i0, j0 + 1] * tj
        bottom = data[i0 + 1, j0] * (1 - tj) + data[i0 + 1, j0 + 1] * tj
        return float(top * (1 - ti) + bottom * ti)


class Map:
    """Obstacle-distance queries on a grid map holding a ``distance`` layer."""

    def __init__(self, grid_map: GridMap) -> None:
        if not grid_map.exists("distance"):
            raise ValueError("grid map must contain 'distance' layer")
        self.grid_map = grid_map

    def obstacle_distance(self, pos: Sequence[float]) -> float:
        """Distance to the nearest obstacle, or 0 outside the map."""
        if self.grid_map.is_inside(pos):
            return self.grid_map.at_position("distance", pos)
        return 0.0

    def is_inside(self, pos: Sequence[float]) -> bool:
        return self.grid_map.is_inside(pos)