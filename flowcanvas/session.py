"""
Editor Session - the single owned context of one editing session.

Bundles the registry, settings, viewport and graph store together with the
workflow name and the simulated run flag. Components receive the session
explicitly instead of reaching for module-level state.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from flowcanvas.config import CanvasSettings
from flowcanvas.graph_store import Connection, GraphStore, WorkflowNode
from flowcanvas.node_registry import NodeRegistry, get_node_registry
from flowcanvas.viewport import Viewport, ViewportState

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOW_NAME = "Untitled Workflow"

# (delay_seconds, callback) -> handle
Scheduler = Callable[[float, Callable[[], None]], Any]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Schedule a one-shot callback on the running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass(frozen=True)
class CanvasSnapshot:
    """Everything a renderer needs to draw the canvas. Never read back."""
    workflow_name: str
    viewport: ViewportState
    nodes: Tuple[WorkflowNode, ...]
    connections: Tuple[Connection, ...]
    selection: Optional[str]
    is_running: bool


class EditorSession:
    """Owns all state of one editing session."""

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        settings: Optional[CanvasSettings] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.settings = settings or CanvasSettings()
        self.registry = registry or get_node_registry()
        self.viewport = Viewport(self.settings)
        self.store = GraphStore(self.registry, self.settings)
        self.workflow_name = DEFAULT_WORKFLOW_NAME
        self._scheduler = scheduler or asyncio_scheduler
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    def rename_workflow(self, name: str) -> str:
        self.workflow_name = name.strip() or DEFAULT_WORKFLOW_NAME
        return self.workflow_name

    def run_workflow(self) -> bool:
        """
        Start the simulated run.

        Flips is_running on and schedules a one-shot timer that flips it off
        after settings.run_duration seconds. There is no cancellation.

        Returns:
            False if a run is already in progress

        Raises:
            Whatever the scheduler raises; the session stays idle in that case
        """
        if self._is_running:
            logger.debug("Run requested while already running; ignored")
            return False
        self._is_running = True
        try:
            self._scheduler(self.settings.run_duration, self._finish_run)
        except Exception:
            self._is_running = False
            logger.error(f"Could not schedule the end of workflow '{self.workflow_name}'")
            raise
        logger.info(f"Workflow '{self.workflow_name}' started ({len(self.store)} nodes)")
        return True

    def _finish_run(self) -> None:
        self._is_running = False
        logger.info(f"Workflow '{self.workflow_name}' finished")

    def snapshot(self) -> CanvasSnapshot:
        return CanvasSnapshot(
            workflow_name=self.workflow_name,
            viewport=self.viewport.snapshot(),
            nodes=tuple(self.store.list_nodes()),
            connections=tuple(self.store.list_connections()),
            selection=self.store.selected_id,
            is_running=self._is_running,
        )
