"""
Property panel renderer.

Draws a PanelState with NiceGUI widgets. Each FieldKind has its own render
function; every widget reports changes through a single on_edit callback so
the binder stays the only path back into the graph store.
"""

from typing import Any, Callable, Dict

from nicegui import ui

from flowcanvas.node_configs import FieldKind
from flowcanvas.properties.binder import FieldBinding, PanelState

# (field_key, raw_value) -> accepted
EditCallback = Callable[[str, Any], bool]


def make_change_handler(field_key: str, on_edit: EditCallback) -> Callable:
    """
    Create a value change handler that forwards the widget value.

    Rejected values are reported with a short notification; the widget keeps
    what the user typed so they can correct it.
    """
    def handler(e):
        if not on_edit(field_key, e.value):
            ui.notify(f'Invalid value for {field_key.replace("_", " ")}', type='warning',
                      position='bottom', timeout=1000)
    return handler


def _render_text(binding: FieldBinding, on_edit: EditCallback) -> None:
    inp = ui.input(binding.spec.label, value=binding.value or '',
                   placeholder=binding.spec.placeholder).classes('w-full')
    inp.props('outlined dense')
    inp.on_value_change(make_change_handler(binding.key, on_edit))


def _render_long_text(binding: FieldBinding, on_edit: EditCallback) -> None:
    area = ui.textarea(binding.spec.label, value=binding.value or '',
                       placeholder=binding.spec.placeholder).classes('w-full')
    area.props('outlined dense autogrow')
    area.on_value_change(make_change_handler(binding.key, on_edit))


def _render_choice(binding: FieldBinding, on_edit: EditCallback) -> None:
    sel = ui.select(list(binding.spec.choices), label=binding.spec.label,
                    value=binding.value, clearable=True).classes('w-full')
    sel.props(f'outlined dense placeholder="{binding.spec.placeholder}"')
    sel.on_value_change(make_change_handler(binding.key, on_edit))


def _render_number(binding: FieldBinding, on_edit: EditCallback) -> None:
    num = ui.number(binding.spec.label, value=binding.value,
                    placeholder=binding.spec.placeholder).classes('w-full')
    num.props('outlined dense')
    num.on_value_change(make_change_handler(binding.key, on_edit))


def _render_toggle(binding: FieldBinding, on_edit: EditCallback) -> None:
    with ui.row().classes('w-full items-center justify-between'):
        ui.label(binding.spec.label).classes('text-sm')
        box = ui.checkbox(value=bool(binding.value))
        box.on_value_change(make_change_handler(binding.key, on_edit))


FIELD_RENDERERS: Dict[FieldKind, Callable[[FieldBinding, EditCallback], None]] = {
    FieldKind.TEXT: _render_text,
    FieldKind.LONG_TEXT: _render_long_text,
    FieldKind.CHOICE: _render_choice,
    FieldKind.NUMBER: _render_number,
    FieldKind.TOGGLE: _render_toggle,
}


def render_empty_panel() -> None:
    with ui.column().classes('w-full items-center text-center py-12'):
        ui.icon('settings', size='3rem', color='grey-5')
        ui.label('No Node Selected').classes('text-lg font-medium')
        ui.label('Select a node from the canvas to view and edit its properties.').classes('text-sm text-gray-500')


def render_property_panel(state: PanelState, on_edit: EditCallback) -> None:
    """
    Render the property panel for a node.

    Args:
        state: Projection produced by PropertyPanelBinder.panel_state()
        on_edit: Called with (field_key, raw_value) for every widget change
    """
    if state.is_empty:
        render_empty_panel()
        return

    descriptor = state.descriptor
    ui.label('Node Properties').classes('font-semibold mb-2')
    with ui.row().classes('w-full items-center gap-3 p-3 bg-gray-50 rounded-lg'):
        ui.icon(descriptor.icon, color=descriptor.color)
        with ui.column().classes('gap-0'):
            ui.label(descriptor.display_name).classes('font-medium')
            ui.label(descriptor.description).classes('text-sm text-gray-600')

    for binding in state.general_fields + state.config_fields:
        FIELD_RENDERERS[binding.spec.kind](binding, on_edit)

    advanced = state.advanced_fields
    if advanced:
        ui.separator().classes('mt-4')
        ui.label('Advanced').classes('font-medium')
        for binding in advanced:
            FIELD_RENDERERS[binding.spec.kind](binding, on_edit)
