"""
Interaction Controller - translates pointer and drag events into mutations.

This controller owns the transient interaction state and coordinates between:
- Pointer/drag events from the UI (already converted to canvas-relative pixels)
- The Viewport for screen/world conversion
- The Graph Store for placement, moves, deletion and duplication

States:
    IDLE                  nothing in progress
    PLACING_FROM_PALETTE  a palette entry is being dragged towards the canvas
    DRAGGING_NODE         a placed node follows the pointer

Every pointer move during a node drag recomputes the position from the
absolute pointer location and the grab offset captured at press time, so
coalesced or dropped move events can never make the node drift.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from flowcanvas.errors import UnknownNodeType
from flowcanvas.geometry import Point
from flowcanvas.session import EditorSession

logger = logging.getLogger(__name__)


class InteractionState(Enum):
    IDLE = 'idle'
    PLACING_FROM_PALETTE = 'placing_from_palette'
    DRAGGING_NODE = 'dragging_node'


@dataclass(frozen=True)
class DragSession:
    """A node drag in progress. grab_offset is fixed for the whole session."""
    node_id: str
    grab_offset: Point


class InteractionController:
    """Runs the drag-and-placement state machine for one editor session."""

    def __init__(self, session: EditorSession):
        self.session = session
        self._state = InteractionState.IDLE
        self._drag: Optional[DragSession] = None
        self._placing_type_id: Optional[str] = None
        self._hover_point: Optional[Point] = None
        self._canvas_size: Optional[Tuple[float, float]] = None
        self._on_state_change: Optional[Callable[[InteractionState], None]] = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def drag_session(self) -> Optional[DragSession]:
        return self._drag

    @property
    def placing_type_id(self) -> Optional[str]:
        return self._placing_type_id

    @property
    def hover_point(self) -> Optional[Point]:
        return self._hover_point

    @property
    def canvas_size(self) -> Optional[Tuple[float, float]]:
        return self._canvas_size

    def set_on_state_change(self, callback: Callable[[InteractionState], None]):
        self._on_state_change = callback

    def _transition(self, new_state: InteractionState) -> None:
        if new_state is self._state:
            return
        logger.debug(f"Interaction {self._state.value} -> {new_state.value}")
        self._state = new_state
        if self._on_state_change:
            self._on_state_change(new_state)

    # --- Canvas bounds ---

    def set_canvas_bounds(self, width: float, height: float) -> None:
        """Record the canvas size reported by the resize listener."""
        self._canvas_size = (float(width), float(height))

    def is_inside_canvas(self, screen_point: Point) -> bool:
        if not screen_point.is_finite():
            return False
        if self._canvas_size is None:
            # Bounds not observed yet; the event came from the canvas itself
            return True
        width, height = self._canvas_size
        return 0 <= screen_point.x <= width and 0 <= screen_point.y <= height

    # --- Palette placement ---

    def drag_start(self, type_id: str) -> bool:
        """A palette entry started being dragged."""
        if self._state is not InteractionState.IDLE:
            logger.debug(f"Palette drag of {type_id!r} ignored in state {self._state.value}")
            return False
        self._placing_type_id = type_id
        self._hover_point = None
        self._transition(InteractionState.PLACING_FROM_PALETTE)
        return True

    def drag_over(self, screen_point: Point) -> bool:
        """Track the hover point; True if dropping here would place a node."""
        if self._state is not InteractionState.PLACING_FROM_PALETTE:
            return False
        self._hover_point = screen_point
        return self.is_inside_canvas(screen_point) and self._placing_type_id in self.session.registry

    def drop(self, screen_point: Point, type_id: Optional[str] = None) -> Optional[str]:
        """
        Finish a palette drag over the canvas.

        Args:
            screen_point: Drop location relative to the canvas
            type_id: Payload carried by the drop event; falls back to the id
                given to drag_start

        Returns:
            The new node id, or None if nothing was placed
        """
        if self._state is InteractionState.DRAGGING_NODE:
            logger.debug("Drop during a node drag ignored")
            return None
        type_id = type_id or self._placing_type_id
        self._placing_type_id = None
        self._hover_point = None
        self._transition(InteractionState.IDLE)

        if not type_id:
            logger.debug("Drop without a node type ignored")
            return None
        if not self.is_inside_canvas(screen_point):
            logger.debug(f"Drop of {type_id!r} outside the canvas at {screen_point} ignored")
            return None

        world = self.session.viewport.screen_to_world(screen_point)
        if not world.is_finite():
            logger.debug(f"Drop of {type_id!r} maps to non-finite world point {world}; ignored")
            return None
        try:
            return self.session.store.create_node(type_id, world)
        except UnknownNodeType as e:
            logger.warning(f"Drop ignored: {e}")
            return None

    def drag_cancel(self) -> None:
        """The palette drag ended somewhere other than the canvas."""
        if self._state is InteractionState.PLACING_FROM_PALETTE:
            self._placing_type_id = None
            self._hover_point = None
            self._transition(InteractionState.IDLE)

    # --- Node dragging ---

    def pointer_down(self, screen_point: Point, target_node_id: Optional[str] = None) -> bool:
        """
        Press on the canvas. Pressing a node selects it and starts a drag.

        Returns:
            True if a drag session started
        """
        if target_node_id is None:
            return False
        if self._state is not InteractionState.IDLE:
            logger.debug(f"Press on {target_node_id} ignored in state {self._state.value}")
            return False

        node = self.session.store.get_node(target_node_id)
        if node is None:
            logger.debug(f"Press on stale node {target_node_id!r} ignored")
            return False

        self.session.store.select(target_node_id)
        grab_offset = self.session.viewport.screen_to_world(screen_point) - node.position
        if not grab_offset.is_finite():
            logger.debug(f"Press at {screen_point} gives non-finite grab offset; selected without drag")
            return False

        self._drag = DragSession(node_id=target_node_id, grab_offset=grab_offset)
        self._transition(InteractionState.DRAGGING_NODE)
        return True

    def pointer_move(self, screen_point: Point) -> bool:
        """Move the dragged node so it keeps its grab offset under the pointer."""
        if self._drag is None:
            return False
        new_position = self.session.viewport.screen_to_world(screen_point) - self._drag.grab_offset
        return self.session.store.move_node(self._drag.node_id, new_position)

    def pointer_up(self) -> None:
        self._drag = None
        if self._state is InteractionState.DRAGGING_NODE:
            self._transition(InteractionState.IDLE)

    # --- Selection and node commands ---

    def select_node(self, node_id: str) -> bool:
        return self.session.store.select(node_id)

    def clear_selection(self) -> None:
        self.session.store.clear_selection()

    def request_delete(self, node_id: str) -> bool:
        return self.session.store.delete_node(node_id)

    def request_duplicate(self, node_id: str) -> Optional[str]:
        return self.session.store.duplicate_node(node_id)
