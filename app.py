"""
Main NiceGUI application for FlowCanvas.

Renders one editor session as three columns: the node palette, the canvas and
the property panel. All state lives in the page's EditorSession; the canvas
and the panel are redrawn from session snapshots after every handled event.
"""

import logging
import sys

from nicegui import ui, Client

from flowcanvas.config import get_settings
from flowcanvas.interaction import InteractionController, CANVAS_ELEMENT_ID, NODE_WIDTH
from flowcanvas.interaction.constants import CONNECTION_ANCHOR_Y
from flowcanvas.interaction.handlers import (
    setup_canvas_handlers,
    attach_canvas_events,
    observe_canvas_size,
    palette_drag_start_js,
    node_press_js,
)
from flowcanvas.node_registry import CATEGORIES, get_node_registry
from flowcanvas.properties import PropertyPanelBinder
from flowcanvas.properties.renderer import render_property_panel
from flowcanvas.session import EditorSession, CanvasSnapshot

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


def connection_lines_svg(snapshot: CanvasSnapshot) -> str:
    """Straight connection lines from each source's right handle to the target's left handle."""
    positions = {node.id: node.position for node in snapshot.nodes}
    lines = []
    for conn in snapshot.connections:
        src = positions.get(conn.from_node_id)
        dst = positions.get(conn.to_node_id)
        if src is None or dst is None:
            continue
        lines.append(
            f'<line x1="{src.x + NODE_WIDTH}" y1="{src.y + CONNECTION_ANCHOR_Y}" '
            f'x2="{dst.x}" y2="{dst.y + CONNECTION_ANCHOR_Y}" stroke="#9ca3af" stroke-width="2" />'
        )
    return (
        '<svg style="position: absolute; left: 0; top: 0; overflow: visible; pointer-events: none;" '
        f'width="1" height="1">{"".join(lines)}</svg>'
    )


@ui.page('/')
async def editor_page(client: Client):
    registry = get_node_registry()

    # Containers are filled in below; the render functions clear and rebuild them
    state = {
        'header_container': None,
        'canvas': None,
        'panel_container': None,
        'panel_node_id': None,
    }

    def timer_scheduler(delay, callback):
        def finish():
            callback()
            refresh_all()
        return ui.timer(delay, finish, once=True)

    session = EditorSession(registry=registry, settings=settings, scheduler=timer_scheduler)
    controller = InteractionController(session)
    binder = PropertyPanelBinder(session)

    def refresh_all():
        render_header_controls()
        render_canvas()
        render_panel()

    handlers = setup_canvas_handlers(
        controller,
        refresh_canvas=lambda: render_canvas(),
        refresh_panel=lambda: render_panel(),
    )

    def on_edit(field_key, value):
        accepted = binder.apply_edit(field_key, value, node_id=state['panel_node_id'])
        if accepted:
            render_canvas()
        return accepted

    # --- Header ---

    def change_zoom(step_in: bool):
        if step_in:
            session.viewport.zoom_in()
        else:
            session.viewport.zoom_out()
        render_header_controls()
        render_canvas()

    def toggle_grid():
        session.viewport.toggle_grid()
        render_canvas()

    def reset_view():
        session.viewport.reset()
        render_header_controls()
        render_canvas()

    def run_workflow():
        if session.run_workflow():
            refresh_all()

    def render_header_controls():
        container = state['header_container']
        if not container: return

        container.clear()
        with container:
            ui.button('Grid', icon='grid_on', on_click=toggle_grid).props('outline size=sm')
            ui.button(icon='zoom_out', on_click=lambda _: change_zoom(False)).props('outline size=sm')
            ui.label(f'{session.viewport.zoom_percent}%').classes('text-sm text-gray-600 w-12 text-center')
            ui.button(icon='zoom_in', on_click=lambda _: change_zoom(True)).props('outline size=sm')
            ui.button(icon='center_focus_strong', on_click=reset_view).props('outline size=sm').tooltip('Reset view')
            ui.button('Save', icon='save',
                      on_click=lambda _: ui.notify('No storage backend is configured', position='bottom')
                      ).props('outline size=sm')
            if session.is_running:
                ui.button('Running...', icon='pause').props('size=sm color=green disable')
            else:
                ui.button('Run', icon='play_arrow', on_click=run_workflow).props('size=sm color=green')

    # --- Canvas ---

    def render_canvas():
        canvas = state['canvas']
        if not canvas: return

        snapshot = session.snapshot()
        vp = snapshot.viewport
        if vp.show_grid:
            canvas.style(
                'background-image: radial-gradient(circle, #e5e7eb 1px, transparent 1px); '
                f'background-size: {vp.grid_spacing}px {vp.grid_spacing}px; '
                f'background-position: {vp.pan_offset.x}px {vp.pan_offset.y}px'
            )
        else:
            canvas.style('background-image: none')

        canvas.clear()
        with canvas:
            layer = ui.element('div').classes('absolute inset-0').style(
                f'transform: translate({vp.pan_offset.x}px, {vp.pan_offset.y}px) scale({vp.zoom}); '
                'transform-origin: 0 0'
            )
            with layer:
                ui.html(connection_lines_svg(snapshot))
                for node in snapshot.nodes:
                    render_node_card(node, snapshot)

    def render_node_card(node, snapshot: CanvasSnapshot):
        descriptor = registry.get(node.type_id)
        if descriptor is None:
            return
        ring = 'ring-2 ring-purple-500' if node.id == snapshot.selection else ''
        card = ui.card().classes(f'absolute w-48 p-3 cursor-move select-none {ring}')
        card.style(f'left: {node.position.x}px; top: {node.position.y}px')
        card.on('mousedown', handlers['handle_node_press'], js_handler=node_press_js(node.id))
        with card:
            with ui.row().classes('w-full items-center justify-between no-wrap'):
                with ui.row().classes('items-center gap-2 no-wrap'):
                    ui.icon(descriptor.icon, color=descriptor.color, size='xs')
                    ui.label(node.display_name).classes('font-medium text-sm')
                # Keep button presses off the card so the click survives the redraw
                actions = ui.row().classes('gap-1 no-wrap')
                actions.on('mousedown', lambda _: None, js_handler='(e) => e.stopPropagation()')
                with actions:
                    ui.button(icon='content_copy',
                              on_click=lambda _, n=node.id: handlers['handle_duplicate'](n)
                              ).props('flat dense size=xs')
                    ui.button(icon='delete',
                              on_click=lambda _, n=node.id: handlers['handle_delete'](n)
                              ).props('flat dense size=xs color=red')
            ui.label(descriptor.description).classes('text-xs text-gray-600')
            if snapshot.is_running:
                with ui.row().classes('items-center gap-2'):
                    ui.spinner('dots', size='xs', color='green')
                    ui.label('Running...').classes('text-xs text-green-600')

    # --- Properties Panel ---

    def render_panel():
        container = state['panel_container']
        if not container: return

        panel = binder.panel_state()
        state['panel_node_id'] = panel.node_id
        container.clear()
        with container:
            render_property_panel(panel, on_edit)

    # --- Layout ---

    with ui.header().classes('bg-white text-black border-b items-center justify-between px-6'):
        with ui.column().classes('gap-0'):
            name_input = ui.input(value=session.workflow_name).props('borderless dense').classes('text-lg font-semibold')
            name_input.on('blur', lambda e: name_input.set_value(session.rename_workflow(name_input.value)))
            ui.label('Workflow Editor').classes('text-sm text-gray-500')
        state['header_container'] = ui.row().classes('items-center gap-2')

    with ui.row().classes('w-full no-wrap gap-0').style('height: calc(100vh - 64px)'):

        # Node palette
        with ui.column().classes('w-80 h-full overflow-y-auto border-r p-4 bg-white'):
            ui.label('Workflow Nodes').classes('font-semibold mb-2')
            with ui.tabs().classes('w-full') as tabs:
                tab_items = {'all': ui.tab('all', label='All')}
                for category in CATEGORIES:
                    tab_items[category] = ui.tab(category, label=category.title())
            with ui.tab_panels(tabs, value=tab_items['all']).classes('w-full'):
                for key, tab in tab_items.items():
                    with ui.tab_panel(tab).classes('gap-2 p-0 pt-2'):
                        for descriptor in registry.by_category(key):
                            entry = ui.card().classes('w-full p-3 border-2 border-dashed cursor-move')
                            entry.props('draggable=true')
                            entry.on('dragstart', handlers['handle_palette_drag_start'],
                                     js_handler=palette_drag_start_js(descriptor.type_id))
                            entry.on('dragend', handlers['handle_palette_drag_end'])
                            with entry, ui.row().classes('items-center gap-3 no-wrap'):
                                ui.icon(descriptor.icon, color=descriptor.color, size='sm')
                                with ui.column().classes('gap-0'):
                                    ui.label(descriptor.display_name).classes('font-medium')
                                    ui.label(descriptor.description).classes('text-xs opacity-75')

        canvas = ui.element('div').classes('flex-grow h-full relative overflow-hidden bg-gray-50')
        canvas.props(f'id={CANVAS_ELEMENT_ID}')
        attach_canvas_events(canvas, handlers)
        state['canvas'] = canvas

        state['panel_container'] = ui.column().classes('w-80 h-full overflow-y-auto border-l p-4 bg-white')

    refresh_all()

    await client.connected()
    observe_canvas_size()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='FlowCanvas',
        port=settings.port,
        reload=not getattr(sys, 'frozen', False),
    )
