"""
Canvas interaction system for FlowCanvas.

This package turns pointer and drag events into graph mutations:
- InteractionController: drag-and-placement state machine and selection
- DragSession / InteractionState: transient interaction state
- canvas handlers: NiceGUI event binding for app.py integration

Usage:
    from flowcanvas.interaction import InteractionController
    from flowcanvas.interaction.handlers import setup_canvas_handlers
"""

from flowcanvas.interaction.constants import (
    CANVAS_ELEMENT_ID,
    DRAG_DATA_KEY,
    POINTER_MOVE_THROTTLE,
    NODE_WIDTH,
)
from flowcanvas.interaction.controller import DragSession, InteractionController, InteractionState

__all__ = [
    'InteractionController',
    'InteractionState',
    'DragSession',
    'CANVAS_ELEMENT_ID',
    'DRAG_DATA_KEY',
    'POINTER_MOVE_THROTTLE',
    'NODE_WIDTH',
]
