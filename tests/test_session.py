"""
Tests for the editor session: workflow name, run placeholder and snapshots.
"""

import asyncio

import pytest

from flowcanvas.config import CanvasSettings
from flowcanvas.geometry import Point
from flowcanvas.node_registry import load_registry
from flowcanvas.session import DEFAULT_WORKFLOW_NAME, EditorSession


class FakeScheduler:
    """Records scheduled callbacks instead of running a timer."""

    def __init__(self):
        self.calls = []

    def __call__(self, delay, callback):
        self.calls.append((delay, callback))

    def fire(self):
        delay, callback = self.calls.pop(0)
        callback()


@pytest.fixture(scope='module')
def registry():
    return load_registry()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def session(registry, scheduler):
    return EditorSession(registry=registry, scheduler=scheduler)


class TestWorkflowName:

    def test_default_name(self, session):
        assert session.workflow_name == DEFAULT_WORKFLOW_NAME

    def test_rename(self, session):
        assert session.rename_workflow('  Order sync ') == 'Order sync'
        assert session.snapshot().workflow_name == 'Order sync'

    def test_blank_name_falls_back(self, session):
        session.rename_workflow('Order sync')
        assert session.rename_workflow('   ') == DEFAULT_WORKFLOW_NAME


class TestRunPlaceholder:
    """Test the simulated run flag."""

    def test_run_schedules_finish(self, session, scheduler):
        assert session.run_workflow() is True
        assert session.is_running
        assert [delay for delay, _ in scheduler.calls] == [3.0]

        scheduler.fire()
        assert not session.is_running

    def test_run_while_running_is_ignored(self, session, scheduler):
        session.run_workflow()
        assert session.run_workflow() is False
        assert len(scheduler.calls) == 1

    def test_run_again_after_finish(self, session, scheduler):
        session.run_workflow()
        scheduler.fire()
        assert session.run_workflow() is True

    def test_run_does_not_touch_graph(self, session, scheduler):
        node_id = session.store.create_node('http', Point(0, 0))
        before = session.store.list_nodes()
        session.run_workflow()
        scheduler.fire()
        assert session.store.list_nodes() == before
        assert session.store.get_node(node_id) is not None

    def test_run_duration_from_settings(self, registry, scheduler):
        session = EditorSession(registry=registry, settings=CanvasSettings(run_duration=0.5),
                                scheduler=scheduler)
        session.run_workflow()
        assert scheduler.calls[0][0] == 0.5

    def test_failing_scheduler_leaves_session_idle(self, registry):
        def broken_scheduler(delay, callback):
            raise RuntimeError('no running event loop')

        session = EditorSession(registry=registry, scheduler=broken_scheduler)
        with pytest.raises(RuntimeError):
            session.run_workflow()
        assert not session.is_running

    def test_default_scheduler_without_event_loop(self, registry):
        session = EditorSession(registry=registry)
        with pytest.raises(RuntimeError):
            session.run_workflow()
        assert not session.is_running

    def test_run_retried_after_scheduler_failure(self, registry, scheduler):
        calls = []

        def flaky_scheduler(delay, callback):
            calls.append(delay)
            if len(calls) == 1:
                raise RuntimeError('no running event loop')
            scheduler(delay, callback)

        session = EditorSession(registry=registry, scheduler=flaky_scheduler)
        with pytest.raises(RuntimeError):
            session.run_workflow()
        assert session.run_workflow() is True
        assert session.is_running

    def test_default_scheduler_uses_event_loop(self, registry):
        async def run():
            session = EditorSession(registry=registry, settings=CanvasSettings(run_duration=0.01))
            session.run_workflow()
            assert session.is_running
            await asyncio.sleep(0.05)
            return session.is_running

        assert asyncio.run(run()) is False


class TestSnapshot:

    def test_snapshot_reflects_state(self, session):
        a = session.store.create_node('trigger', Point(0, 0))
        b = session.store.create_node('http', Point(200, 0))
        session.store.connect(a, b)
        session.store.select(b)
        session.viewport.set_zoom(1.5)

        snap = session.snapshot()
        assert [n.id for n in snap.nodes] == [a, b]
        assert [c.connection_id for c in snap.connections] == [f'{a}->{b}']
        assert snap.selection == b
        assert snap.viewport.zoom == 1.5
        assert snap.is_running is False

    def test_snapshot_is_detached(self, session):
        node_id = session.store.create_node('code', Point(0, 0))
        snap = session.snapshot()
        session.store.move_node(node_id, Point(9, 9))
        session.store.delete_node(node_id)
        assert snap.nodes[0].position == Point(0, 0)
