"""
Node Registry for FlowCanvas.

Handles loading and validation of the node type catalog: the ordered,
read-only list of archetypes users drag from the palette. Each entry in the
catalog YAML provides:
  - id: type identifier referenced by placed nodes
  - name: display name (also the default name of new nodes)
  - category: one of triggers, actions, logic
  - description, icon, color: palette presentation
  - config: name of the typed configuration record (see node_configs)
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type

import yaml

from flowcanvas.errors import NodeRegistryError, UnknownNodeType
from flowcanvas.node_configs import CONFIG_RECORDS, BaseNodeConfig, FieldSpec, field_specs
from flowcanvas.paths import get_default_catalog_path

logger = logging.getLogger(__name__)

# Palette tabs, in display order
CATEGORIES = ('triggers', 'actions', 'logic')

REQUIRED_KEYS = ('id', 'name', 'category')


@dataclass(frozen=True)
class NodeTypeDescriptor:
    """Display metadata and configuration schema of one node archetype."""
    type_id: str
    display_name: str
    category: str
    description: str = ''
    icon: str = 'extension'
    color: str = 'grey'
    config_cls: Type[BaseNodeConfig] = BaseNodeConfig

    @property
    def config_schema(self) -> Tuple[FieldSpec, ...]:
        return field_specs(self.config_cls)

    def default_config(self) -> BaseNodeConfig:
        return self.config_cls()


def _validate_entry(entry: Any, index: int) -> List[str]:
    """Validate a single catalog entry. Returns list of error messages."""
    if not isinstance(entry, dict):
        return [f"Entry {index}: must be a mapping"]

    errors = []
    for key in REQUIRED_KEYS:
        if key not in entry:
            errors.append(f"Entry {index}: missing required '{key}' property")
    if errors:
        return errors

    type_id = entry['id']
    if not isinstance(type_id, str) or not re.match(r'^[a-z][a-z0-9_]*$', type_id):
        errors.append(f"Entry {index}: id {type_id!r} must be lowercase, start with a letter, use only a-z, 0-9, _")

    if entry['category'] not in CATEGORIES:
        errors.append(f"Type '{type_id}': invalid category '{entry['category']}' (must be: {', '.join(CATEGORIES)})")

    config_name = entry.get('config', 'basic')
    if config_name not in CONFIG_RECORDS:
        errors.append(f"Type '{type_id}': unknown config record '{config_name}' (must be: {', '.join(CONFIG_RECORDS)})")

    return errors


class NodeRegistry:
    """
    Ordered, read-only collection of node type descriptors.

    Queryable by type id and filterable by category. Never mutated after
    construction.
    """

    def __init__(self, descriptors: List[NodeTypeDescriptor]):
        self._descriptors: Tuple[NodeTypeDescriptor, ...] = tuple(descriptors)
        self._by_id: Dict[str, NodeTypeDescriptor] = {}
        for descriptor in self._descriptors:
            if descriptor.type_id in self._by_id:
                raise NodeRegistryError(f"Duplicate node type id '{descriptor.type_id}'")
            self._by_id[descriptor.type_id] = descriptor

    def __iter__(self) -> Iterator[NodeTypeDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._by_id

    def get(self, type_id: str) -> Optional[NodeTypeDescriptor]:
        return self._by_id.get(type_id)

    def require(self, type_id: str) -> NodeTypeDescriptor:
        """Return the descriptor for type_id or raise UnknownNodeType."""
        descriptor = self._by_id.get(type_id)
        if descriptor is None:
            raise UnknownNodeType(type_id)
        return descriptor

    def by_category(self, category: Optional[str] = None) -> List[NodeTypeDescriptor]:
        """Descriptors of a category in catalog order; all of them for None or 'all'."""
        if category in (None, 'all'):
            return list(self._descriptors)
        return [d for d in self._descriptors if d.category == category]

    @property
    def type_ids(self) -> List[str]:
        return [d.type_id for d in self._descriptors]

    @classmethod
    def from_entries(cls, entries: List[Any]) -> 'NodeRegistry':
        """
        Build a registry from raw catalog entries.

        Invalid entries are skipped with a warning so a single bad entry does
        not hide the rest of the palette.
        """
        descriptors = []
        seen = set()
        for index, entry in enumerate(entries):
            errors = _validate_entry(entry, index)
            if not errors and entry['id'] in seen:
                errors.append(f"Type '{entry['id']}': duplicate id")
            if errors:
                for error in errors:
                    logger.warning(f"Skipping node type: {error}")
                continue
            seen.add(entry['id'])
            descriptors.append(NodeTypeDescriptor(
                type_id=entry['id'],
                display_name=str(entry['name']),
                category=entry['category'],
                description=str(entry.get('description', '')),
                icon=str(entry.get('icon', 'extension')),
                color=str(entry.get('color', 'grey')),
                config_cls=CONFIG_RECORDS[entry.get('config', 'basic')],
            ))
        return cls(descriptors)


def load_registry(catalog_path: Optional[Path] = None) -> NodeRegistry:
    """
    Load a node type catalog from a YAML file.

    Args:
        catalog_path: Catalog to read; the bundled default when omitted

    Raises:
        NodeRegistryError: if the file is missing or is not a valid catalog
    """
    catalog_path = catalog_path or get_default_catalog_path()
    try:
        with open(catalog_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise NodeRegistryError(f"Cannot read node type catalog {catalog_path}: {e}") from e
    except yaml.YAMLError as e:
        raise NodeRegistryError(f"Invalid YAML in {catalog_path}: {e}") from e

    entries = data.get('node_types') if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise NodeRegistryError(f"{catalog_path}: expected a 'node_types' list")

    registry = NodeRegistry.from_entries(entries)
    logger.info(f"Loaded {len(registry)} node types from {catalog_path}")
    return registry


# Global instance for convenience
_registry: Optional[NodeRegistry] = None

def get_node_registry() -> NodeRegistry:
    """Get the registry built from the bundled catalog."""
    global _registry
    if _registry is None:
        _registry = load_registry()
    return _registry
