"""
Viewport - pan offset and zoom factor of the canvas.

Screen coordinates are pixels relative to the canvas element's top-left corner.
World coordinates are the node graph's own coordinate system. The mapping is

    world = (screen - pan_offset) / zoom

applied per axis. Zoom is always anchored at the viewport origin: changing it
leaves pan_offset untouched, so the apparent focal point shifts with zoom.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from flowcanvas.config import CanvasSettings
from flowcanvas.geometry import Point, ORIGIN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportState:
    """Immutable snapshot of the viewport used by renderers."""
    pan_offset: Point
    zoom: float
    show_grid: bool
    grid_spacing: float


class Viewport:
    """Owns pan offset and zoom; converts between screen and world space."""

    def __init__(self, settings: Optional[CanvasSettings] = None):
        settings = settings or CanvasSettings()
        self.zoom_min = settings.zoom_min
        self.zoom_max = settings.zoom_max
        self.zoom_step = settings.zoom_step
        self.grid_size = settings.grid_size
        self._pan = ORIGIN
        self._zoom = self._clamp(1.0)
        self._show_grid = True

    @property
    def pan_offset(self) -> Point:
        return self._pan

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def show_grid(self) -> bool:
        return self._show_grid

    @property
    def zoom_percent(self) -> int:
        return round(self._zoom * 100)

    @property
    def grid_spacing(self) -> float:
        """Screen-space spacing of the background dot grid."""
        return self.grid_size * self._zoom

    def screen_to_world(self, screen_point: Point) -> Point:
        return Point(
            (screen_point.x - self._pan.x) / self._zoom,
            (screen_point.y - self._pan.y) / self._zoom,
        )

    def world_to_screen(self, world_point: Point) -> Point:
        return Point(
            world_point.x * self._zoom + self._pan.x,
            world_point.y * self._zoom + self._pan.y,
        )

    def _clamp(self, value: float) -> float:
        return max(self.zoom_min, min(self.zoom_max, value))

    def set_zoom(self, requested: float) -> float:
        """
        Set the zoom factor, clamped to [zoom_min, zoom_max].

        Out-of-range requests are clamped rather than rejected. A NaN request
        leaves the zoom unchanged.

        Returns:
            The zoom actually applied
        """
        if math.isnan(requested):
            logger.debug("Ignoring NaN zoom request")
            return self._zoom
        actual = self._clamp(requested)
        if actual != requested:
            logger.debug(f"Zoom {requested} clamped to {actual}")
        self._zoom = actual
        return actual

    def zoom_in(self) -> float:
        return self.set_zoom(self._zoom + self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self._zoom - self.zoom_step)

    def set_pan(self, offset: Point) -> Point:
        if not offset.is_finite():
            logger.debug(f"Ignoring non-finite pan offset {offset}")
            return self._pan
        self._pan = offset
        return self._pan

    def pan_by(self, delta: Point) -> Point:
        return self.set_pan(self._pan + delta)

    def reset(self) -> None:
        self._pan = ORIGIN
        self._zoom = self._clamp(1.0)

    def toggle_grid(self) -> bool:
        self._show_grid = not self._show_grid
        return self._show_grid

    def snapshot(self) -> ViewportState:
        return ViewportState(
            pan_offset=self._pan,
            zoom=self._zoom,
            show_grid=self._show_grid,
            grid_spacing=self.grid_spacing,
        )
