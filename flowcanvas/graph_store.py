"""
Graph Store - authoritative node, connection and selection state.

Nodes and connections are kept in a networkx DiGraph: each graph node holds a
WorkflowNode under the 'node' attribute and each edge is a Connection. Every
mutation runs to completion before returning, so callers never observe a
half-applied change (e.g. a node removed while its connections survive).

Operations that target an id which no longer exists are silent no-ops. The UI
may race harmlessly with deletion (a drag on a node deleted a moment ago),
so stale ids are logged at debug level and ignored.
"""

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional

import networkx as nx

from flowcanvas.config import CanvasSettings
from flowcanvas.geometry import Point
from flowcanvas.node_configs import NodeConfig, with_value
from flowcanvas.node_registry import NodeRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connection:
    """A directed edge between two placed nodes."""
    from_node_id: str
    to_node_id: str

    @property
    def connection_id(self) -> str:
        return f"{self.from_node_id}->{self.to_node_id}"


@dataclass(frozen=True)
class WorkflowNode:
    """A node placed on the canvas. Position is in world space."""
    id: str
    type_id: str
    display_name: str
    position: Point
    config: NodeConfig
    outgoing_connection_ids: FrozenSet[str] = field(default_factory=frozenset)


class GraphStore:
    """Owns the placed nodes, their connections and the current selection."""

    def __init__(self, registry: NodeRegistry, settings: Optional[CanvasSettings] = None):
        settings = settings or CanvasSettings()
        self.registry = registry
        self.duplicate_offset = Point(*settings.duplicate_offset)
        self._graph = nx.DiGraph()
        self._selected_id: Optional[str] = None

    # --- Internal helpers ---

    def _allocate_id(self) -> str:
        while True:
            node_id = f"node_{uuid.uuid4().hex[:12]}"
            if node_id not in self._graph:
                return node_id

    def _stored(self, node_id: str) -> Optional[WorkflowNode]:
        if node_id not in self._graph:
            logger.debug(f"Ignoring stale node reference {node_id!r}")
            return None
        return self._graph.nodes[node_id]['node']

    def _replace(self, node: WorkflowNode, **changes: Any) -> None:
        self._graph.nodes[node.id]['node'] = dataclasses.replace(node, **changes)

    def _with_connections(self, node: WorkflowNode) -> WorkflowNode:
        outgoing = frozenset(
            Connection(node.id, target).connection_id
            for target in self._graph.successors(node.id)
        )
        return dataclasses.replace(node, outgoing_connection_ids=outgoing)

    # --- Queries ---

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        if node_id not in self._graph:
            return None
        return self._with_connections(self._graph.nodes[node_id]['node'])

    def list_nodes(self) -> List[WorkflowNode]:
        """Placed nodes in creation order."""
        return [self._with_connections(data['node']) for _, data in self._graph.nodes(data=True)]

    def list_connections(self) -> List[Connection]:
        return [Connection(src, dst) for src, dst in self._graph.edges()]

    def nodes_by_category(self, category: str) -> List[WorkflowNode]:
        result = []
        for node in self.list_nodes():
            descriptor = self.registry.get(node.type_id)
            if descriptor is not None and descriptor.category == category:
                result.append(node)
        return result

    # --- Node mutations ---

    def create_node(self, type_id: str, world_position: Point) -> str:
        """
        Place a new node of the given type.

        Args:
            type_id: Registered node type id
            world_position: Position of the node origin in world space

        Returns:
            The new node id

        Raises:
            UnknownNodeType: if type_id is not registered (nothing is stored)
            ValueError: if world_position is not finite
        """
        descriptor = self.registry.require(type_id)
        if not world_position.is_finite():
            raise ValueError(f"Node position must be finite, got {world_position}")

        node_id = self._allocate_id()
        node = WorkflowNode(
            id=node_id,
            type_id=type_id,
            display_name=descriptor.display_name,
            position=world_position,
            config=descriptor.default_config(),
        )
        self._graph.add_node(node_id, node=node)
        logger.info(f"Created {type_id} node {node_id} at ({world_position.x:.1f}, {world_position.y:.1f})")
        return node_id

    def move_node(self, node_id: str, new_position: Point) -> bool:
        node = self._stored(node_id)
        if node is None:
            return False
        if not new_position.is_finite():
            logger.debug(f"Ignoring non-finite position {new_position} for {node_id}")
            return False
        self._replace(node, position=new_position)
        return True

    def rename_node(self, node_id: str, new_name: str) -> bool:
        node = self._stored(node_id)
        if node is None:
            return False
        self._replace(node, display_name=new_name)
        return True

    def set_node_config(self, node_id: str, field_key: str, value: Any) -> bool:
        """
        Update one configuration field of a node.

        Only fields declared by the node's configuration record are accepted,
        and only with a value of the declared kind.

        Returns:
            True if the field was written, False for a stale id or rejected value
        """
        node = self._stored(node_id)
        if node is None:
            return False
        new_config = with_value(node.config, field_key, value)
        if new_config is None:
            logger.warning(f"Rejected config value {value!r} for field '{field_key}' of {node.type_id} node {node_id}")
            return False
        self._replace(node, config=new_config)
        return True

    def delete_node(self, node_id: str) -> bool:
        """
        Remove a node together with every connection touching it.

        Clears the selection if it pointed at the node. Deleting an absent id
        is a no-op.

        Returns:
            True if a node was removed
        """
        if node_id not in self._graph:
            logger.debug(f"Delete of absent node {node_id!r} ignored")
            return False
        # remove_node drops all incident edges in the same call
        self._graph.remove_node(node_id)
        if self._selected_id == node_id:
            self._selected_id = None
        logger.info(f"Deleted node {node_id}")
        return True

    def duplicate_node(self, node_id: str) -> Optional[str]:
        """
        Copy a node to a fresh id, offset by the duplicate offset.

        The copy shares type, display name and configuration values but starts
        without connections.

        Returns:
            The new node id, or None if the source does not exist
        """
        source = self._stored(node_id)
        if source is None:
            return None
        new_position = source.position + self.duplicate_offset
        if not new_position.is_finite():
            logger.warning(f"Duplicate of {node_id} would land at a non-finite position; skipped")
            return None
        new_id = self._allocate_id()
        # Config records are immutable, so sharing the instance copies by value
        copy = dataclasses.replace(
            source,
            id=new_id,
            position=new_position,
            outgoing_connection_ids=frozenset(),
        )
        self._graph.add_node(new_id, node=copy)
        logger.info(f"Duplicated node {node_id} as {new_id}")
        return new_id

    # --- Connections ---

    def connect(self, from_node_id: str, to_node_id: str) -> Optional[Connection]:
        """Connect two present, distinct nodes. Returns None when rejected."""
        if from_node_id == to_node_id:
            logger.warning(f"Rejected self-connection on {from_node_id}")
            return None
        if from_node_id not in self._graph or to_node_id not in self._graph:
            logger.debug(f"Ignoring connection {from_node_id!r} -> {to_node_id!r}: endpoint missing")
            return None
        self._graph.add_edge(from_node_id, to_node_id)
        return Connection(from_node_id, to_node_id)

    def disconnect(self, from_node_id: str, to_node_id: str) -> bool:
        if not self._graph.has_edge(from_node_id, to_node_id):
            return False
        self._graph.remove_edge(from_node_id, to_node_id)
        return True

    # --- Selection ---

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def select(self, node_id: str) -> bool:
        if node_id not in self._graph:
            logger.debug(f"Ignoring selection of absent node {node_id!r}")
            return False
        self._selected_id = node_id
        return True

    def clear_selection(self) -> None:
        self._selected_id = None
