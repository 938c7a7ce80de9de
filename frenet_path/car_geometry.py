"""Covering circles of a rectangular vehicle body."""

from __future__ import annotations

import math

from frenet_path.data_struct import Circle, State
from frenet_path.tools import local_to_global


class CarGeometry:
    """A rectangle ``width`` wide reaching ``back_length`` behind and
    ``front_length`` ahead of the reference point.

    The body is covered by four small corner circles and two large middle
    circles; a single bounding circle encloses the whole rectangle.
    """

    def __init__(self, width: float, back_length: float, front_length: float) -> None:
        self.width = width
        self.back_length = back_length
        self.front_length = front_length
        self.length = back_length + front_length

        half_w = width / 2.0
        self._bounding = Circle(
            (front_length - back_length) / 2.0,
            0.0,
            math.hypot(self.length / 2, half_w),
        )
        shift = width / 4.0
        small_r = math.sqrt(2 * shift ** 2)
        large_r = math.hypot(width, (self.length - width) / 2.0) / 2
        mid_offset = (self.length - width) / 4
        self._circles = (
            Circle(-back_length + shift, -half_w + shift, small_r),  # rear right
            Circle(-back_length + shift, half_w - shift, small_r),  # rear left
            Circle(front_length - shift, -half_w + shift, small_r),  # front right
            Circle(front_length - shift, half_w - shift, small_r),  # front left
            Circle(self._bounding.x + mid_offset, 0.0, large_r),  # front middle
            Circle(self._bounding.x - mid_offset, 0.0, large_r),  # rear middle
        )

    def circles(self, pos: State) -> list[Circle]:
        """Covering circles for a vehicle at ``pos``, in the global frame."""
        result = []
        for c in self._circles:
            g = local_to_global(pos, State(c.x, c.y))
            result.append(Circle(g.x, g.y, c.r))
        return result

    def bounding_circle(self, pos: State) -> Circle:
        """The circle enclosing the whole body at ``pos``, in the global frame."""
        g = local_to_global(pos, State(self._bounding.x, self._bounding.y))
        return Circle(g.x, g.y, self._bounding.r)