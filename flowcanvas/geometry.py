"""
Geometry primitives shared by the viewport, graph store and controller.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A 2D point or vector. Used for both screen and world coordinates."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def is_close(self, other: 'Point', tolerance: float = 1e-9) -> bool:
        return (math.isclose(self.x, other.x, rel_tol=tolerance, abs_tol=tolerance)
                and math.isclose(self.y, other.y, rel_tol=tolerance, abs_tol=tolerance))


ORIGIN = Point(0.0, 0.0)
