"""
Tests for the NiceGUI canvas handlers.

Handlers are called with stand-in event objects carrying the same args the
JavaScript snippets emit, so no browser or NiceGUI client is needed.
"""

from types import SimpleNamespace

import pytest

from flowcanvas.geometry import Point
from flowcanvas.interaction import InteractionController, InteractionState
from flowcanvas.interaction.handlers import normalize_pointer_payload, setup_canvas_handlers
from flowcanvas.node_registry import load_registry
from flowcanvas.session import EditorSession


def event(args):
    return SimpleNamespace(args=args)


@pytest.fixture
def controller():
    session = EditorSession(registry=load_registry(), scheduler=lambda delay, callback: None)
    return InteractionController(session)


@pytest.fixture
def refreshes():
    return {'canvas': 0, 'panel': 0}


@pytest.fixture
def handlers(controller, refreshes):
    def refresh_canvas():
        refreshes['canvas'] += 1

    def refresh_panel():
        refreshes['panel'] += 1

    return setup_canvas_handlers(controller, refresh_canvas, refresh_panel)


class TestNormalizePointerPayload:

    @pytest.mark.parametrize('raw, expected', [
        ([10, 20], Point(10, 20)),
        ((1.5, 2.5, 'http'), Point(1.5, 2.5)),
        ({'x': 3, 'y': 4}, Point(3, 4)),
        ({'offsetX': 5, 'offsetY': 6}, Point(5, 6)),
        (['7', '8'], Point(7, 8)),
    ])
    def test_valid(self, raw, expected):
        assert normalize_pointer_payload(raw) == expected

    @pytest.mark.parametrize('raw', [None, [], [1], {'x': 1}, ['a', 'b'], 'click'])
    def test_invalid(self, raw):
        assert normalize_pointer_payload(raw) is None


class TestCanvasHandlers:

    def test_palette_drop_places_node(self, handlers, controller, refreshes):
        handlers['handle_palette_drag_start'](event(['http']))
        assert controller.state is InteractionState.PLACING_FROM_PALETTE

        handlers['handle_drag_over'](event([90, 90]))
        handlers['handle_drop'](event([100, 100, 'http']))

        nodes = controller.session.store.list_nodes()
        assert [(n.type_id, n.position) for n in nodes] == [('http', Point(100, 100))]
        assert refreshes['canvas'] == 1
        assert controller.state is InteractionState.IDLE

    def test_drag_end_cancels_placement(self, handlers, controller):
        handlers['handle_palette_drag_start'](event(['email']))
        handlers['handle_palette_drag_end'](event(None))
        assert controller.state is InteractionState.IDLE
        assert len(controller.session.store) == 0

    def test_press_move_release(self, handlers, controller, refreshes):
        store = controller.session.store
        node_id = store.create_node('code', Point(100, 100))

        handlers['handle_node_press'](event([110, 110, node_id]))
        assert store.selected_id == node_id
        assert refreshes == {'canvas': 1, 'panel': 1}

        handlers['handle_pointer_move'](event([160, 140]))
        handlers['handle_pointer_up'](event(None))
        handlers['handle_pointer_move'](event([500, 500]))

        assert store.get_node(node_id).position == Point(150, 130)
        assert refreshes['canvas'] == 2
        assert controller.state is InteractionState.IDLE

    def test_press_without_node_id_is_ignored(self, handlers, controller, refreshes):
        handlers['handle_node_press'](event([10, 10]))
        assert controller.state is InteractionState.IDLE
        assert refreshes == {'canvas': 0, 'panel': 0}

    def test_resize_sets_bounds(self, handlers, controller):
        handlers['handle_resize'](event({'width': 640, 'height': 480}))
        assert controller.canvas_size == (640.0, 480.0)
        handlers['handle_resize'](event({'width': 10}))
        assert controller.canvas_size == (640.0, 480.0)

    def test_resize_with_bad_numbers_keeps_bounds(self, handlers, controller):
        handlers['handle_resize'](event({'width': 640, 'height': 480}))
        handlers['handle_resize'](event({'width': 'auto', 'height': 480}))
        handlers['handle_resize'](event({'width': None, 'height': [1]}))
        assert controller.canvas_size == (640.0, 480.0)

    def test_delete_and_duplicate(self, handlers, controller, refreshes):
        store = controller.session.store
        node_id = store.create_node('delay', Point(0, 0))
        store.select(node_id)

        handlers['handle_duplicate'](node_id)
        assert len(store) == 2
        handlers['handle_delete'](node_id)
        assert node_id not in store
        assert store.selected_id is None
        assert refreshes == {'canvas': 2, 'panel': 1}
