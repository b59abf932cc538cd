"""
Canvas Handlers - NiceGUI event handlers for the canvas surface.

This module keeps browser event plumbing out of app.py: it normalizes the raw
payloads emitted by the JavaScript snippets below into canvas-relative points
and forwards them to the InteractionController.

Usage:
    handlers = setup_canvas_handlers(controller, refresh_canvas, refresh_panel)
    attach_canvas_events(canvas_element, handlers)
    observe_canvas_size()
"""

import logging
from typing import Any, Callable, Dict, Optional

from nicegui import ui

from flowcanvas.geometry import Point
from flowcanvas.interaction.constants import (
    CANVAS_ELEMENT_ID,
    DRAG_DATA_KEY,
    POINTER_MOVE_THROTTLE,
)
from flowcanvas.interaction.controller import InteractionController, InteractionState

logger = logging.getLogger(__name__)

# Emits pointer coordinates relative to the canvas box
_CANVAS_POINT_JS = f'''(e) => {{
    const r = document.getElementById("{CANVAS_ELEMENT_ID}").getBoundingClientRect();
    emit(e.clientX - r.left, e.clientY - r.top);
}}'''

_DRAG_OVER_JS = f'''(e) => {{
    e.preventDefault();
    const r = document.getElementById("{CANVAS_ELEMENT_ID}").getBoundingClientRect();
    emit(e.clientX - r.left, e.clientY - r.top);
}}'''

_DROP_JS = f'''(e) => {{
    e.preventDefault();
    const r = document.getElementById("{CANVAS_ELEMENT_ID}").getBoundingClientRect();
    emit(e.clientX - r.left, e.clientY - r.top, e.dataTransfer.getData("{DRAG_DATA_KEY}"));
}}'''

# Reports the canvas size once and again on every resize
CANVAS_RESIZE_JS = f'''
(() => {{
    const el = document.getElementById("{CANVAS_ELEMENT_ID}");
    if (!el) return;
    const report = () => emitEvent("canvas_resize", {{width: el.offsetWidth, height: el.offsetHeight}});
    new ResizeObserver(report).observe(el);
    report();
}})();
'''


def palette_drag_start_js(type_id: str) -> str:
    """JavaScript handler that tags a palette drag with its node type id."""
    return f'''(e) => {{
        e.dataTransfer.setData("{DRAG_DATA_KEY}", "{type_id}");
        emit("{type_id}");
    }}'''


def node_press_js(node_id: str) -> str:
    """JavaScript handler for pressing a node card; keeps the press off the canvas."""
    return f'''(e) => {{
        e.stopPropagation();
        const r = document.getElementById("{CANVAS_ELEMENT_ID}").getBoundingClientRect();
        emit(e.clientX - r.left, e.clientY - r.top, "{node_id}");
    }}'''


def _event_args(event: Any) -> Any:
    return event.args if hasattr(event, 'args') else event


def normalize_pointer_payload(raw: Any) -> Optional[Point]:
    """
    Normalize a pointer event payload into a canvas-relative Point.

    Accepts [x, y, ...] sequences emitted by the JS handlers as well as dicts
    with x/y or offsetX/offsetY keys. Returns None for anything else.
    """
    try:
        if isinstance(raw, (list, tuple)) and len(raw) >= 2:
            return Point(float(raw[0]), float(raw[1]))
        if isinstance(raw, dict):
            x = raw.get('x', raw.get('offsetX'))
            y = raw.get('y', raw.get('offsetY'))
            if x is None or y is None:
                return None
            return Point(float(x), float(y))
    except (TypeError, ValueError):
        logger.debug(f"Unparseable pointer payload {raw!r}")
    return None


def _payload_extra(raw: Any, index: int) -> Optional[str]:
    if isinstance(raw, (list, tuple)) and len(raw) > index and raw[index]:
        return str(raw[index])
    return None


def setup_canvas_handlers(
    controller: InteractionController,
    refresh_canvas: Callable[[], None],
    refresh_panel: Callable[[], None],
) -> Dict[str, Callable]:
    """
    Build the event handlers for the canvas, palette and node cards.

    Args:
        controller: InteractionController of the page's editor session
        refresh_canvas: Redraws the canvas from a fresh snapshot
        refresh_panel: Redraws the property panel

    Returns:
        Dict with handler functions for binding to UI events
    """

    def handle_palette_drag_start(event):
        raw = _event_args(event)
        type_id = raw[0] if isinstance(raw, (list, tuple)) and raw else raw
        if isinstance(type_id, str):
            controller.drag_start(type_id)

    def handle_palette_drag_end(event):
        # dragend also fires after a successful drop, by then we are idle
        controller.drag_cancel()

    def handle_drag_over(event):
        point = normalize_pointer_payload(_event_args(event))
        if point is not None:
            controller.drag_over(point)

    def handle_drop(event):
        raw = _event_args(event)
        point = normalize_pointer_payload(raw)
        if point is None:
            controller.drag_cancel()
            return
        node_id = controller.drop(point, _payload_extra(raw, 2))
        if node_id:
            refresh_canvas()
        else:
            ui.notify('Nothing to place here', position='bottom', timeout=800, color='warning')

    def handle_node_press(event):
        raw = _event_args(event)
        point = normalize_pointer_payload(raw)
        node_id = _payload_extra(raw, 2)
        if point is None or node_id is None:
            return
        controller.pointer_down(point, node_id)
        refresh_canvas()
        refresh_panel()

    def handle_pointer_move(event):
        if controller.state is not InteractionState.DRAGGING_NODE:
            return
        point = normalize_pointer_payload(_event_args(event))
        if point is not None and controller.pointer_move(point):
            refresh_canvas()

    def handle_pointer_up(event):
        controller.pointer_up()

    def handle_resize(event):
        raw = _event_args(event)
        if not (isinstance(raw, dict) and 'width' in raw and 'height' in raw):
            return
        try:
            controller.set_canvas_bounds(raw['width'], raw['height'])
        except (TypeError, ValueError):
            logger.debug(f"Unparseable canvas size payload {raw!r}")

    def handle_delete(node_id: str):
        controller.request_delete(node_id)
        refresh_canvas()
        refresh_panel()

    def handle_duplicate(node_id: str):
        if controller.request_duplicate(node_id):
            refresh_canvas()

    return {
        'handle_palette_drag_start': handle_palette_drag_start,
        'handle_palette_drag_end': handle_palette_drag_end,
        'handle_drag_over': handle_drag_over,
        'handle_drop': handle_drop,
        'handle_node_press': handle_node_press,
        'handle_pointer_move': handle_pointer_move,
        'handle_pointer_up': handle_pointer_up,
        'handle_resize': handle_resize,
        'handle_delete': handle_delete,
        'handle_duplicate': handle_duplicate,
    }


def attach_canvas_events(canvas: ui.element, handlers: Dict[str, Callable]) -> None:
    """Bind the canvas-level handlers to the canvas element."""
    canvas.on('dragover', handlers['handle_drag_over'], js_handler=_DRAG_OVER_JS)
    canvas.on('drop', handlers['handle_drop'], js_handler=_DROP_JS)
    canvas.on('mousemove', handlers['handle_pointer_move'], js_handler=_CANVAS_POINT_JS,
              throttle=POINTER_MOVE_THROTTLE)
    canvas.on('mouseup', handlers['handle_pointer_up'])
    canvas.on('mouseleave', handlers['handle_pointer_up'])
    ui.on('canvas_resize', handlers['handle_resize'])


def observe_canvas_size() -> None:
    """Start the resize listener. Call once the client is connected."""
    ui.run_javascript(CANVAS_RESIZE_JS)
