"""
Property Panel Binder - projects the selected node onto editable fields.

The binder is a pure read of the session: selection + graph store + node
registry. It never keeps its own copy of node data, and every edit goes back
through GraphStore.rename_node / GraphStore.set_node_config.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from flowcanvas.node_configs import ADVANCED, CONFIG, GENERAL, FieldKind, FieldSpec, config_value
from flowcanvas.node_registry import NodeTypeDescriptor
from flowcanvas.session import EditorSession

logger = logging.getLogger(__name__)

DISPLAY_NAME_KEY = 'display_name'

DISPLAY_NAME_SPEC = FieldSpec(
    key=DISPLAY_NAME_KEY,
    label='Node Name',
    kind=FieldKind.TEXT,
    section=GENERAL,
)


@dataclass(frozen=True)
class FieldBinding:
    """One editable field together with its current value."""
    spec: FieldSpec
    value: Any

    @property
    def key(self) -> str:
        return self.spec.key


@dataclass(frozen=True)
class PanelState:
    """What the property panel shows. Empty when nothing is selected."""
    node_id: Optional[str] = None
    descriptor: Optional[NodeTypeDescriptor] = None
    fields: Tuple[FieldBinding, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.node_id is None

    def section(self, name: str) -> Tuple[FieldBinding, ...]:
        return tuple(b for b in self.fields if b.spec.section == name)

    @property
    def general_fields(self) -> Tuple[FieldBinding, ...]:
        return self.section(GENERAL)

    @property
    def config_fields(self) -> Tuple[FieldBinding, ...]:
        return self.section(CONFIG)

    @property
    def advanced_fields(self) -> Tuple[FieldBinding, ...]:
        return self.section(ADVANCED)

    def get(self, key: str) -> Optional[FieldBinding]:
        for binding in self.fields:
            if binding.key == key:
                return binding
        return None


EMPTY_PANEL = PanelState()


def coerce_value(spec: FieldSpec, raw: Any) -> Any:
    """
    Convert a raw widget value into the type declared by a field.

    Raises:
        ValueError: if the value cannot represent the field's kind
    """
    kind = spec.kind
    if kind in (FieldKind.TEXT, FieldKind.LONG_TEXT):
        return '' if raw is None else str(raw)
    if kind is FieldKind.NUMBER:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None
        if isinstance(raw, bool):
            raise ValueError(f"{spec.label}: expected a number, got {raw!r}")
        try:
            number = float(raw.strip() if isinstance(raw, str) else raw)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"{spec.label}: expected a number, got {raw!r}") from None
        if not math.isfinite(number):
            raise ValueError(f"{spec.label}: number must be finite")
        return number
    if kind is FieldKind.CHOICE:
        if raw is None or raw == '':
            return None
        if raw not in spec.choices:
            raise ValueError(f"{spec.label}: {raw!r} is not one of {', '.join(spec.choices)}")
        return raw
    if kind is FieldKind.TOGGLE:
        if not isinstance(raw, bool):
            raise ValueError(f"{spec.label}: expected true or false, got {raw!r}")
        return raw
    raise TypeError(f"Unhandled field kind: {kind!r}")


class PropertyPanelBinder:
    """Reads the selected node for the property panel and writes edits back."""

    def __init__(self, session: EditorSession):
        self.session = session

    def panel_state(self) -> PanelState:
        store = self.session.store
        node_id = store.selected_id
        node = store.get_node(node_id) if node_id else None
        if node is None:
            return EMPTY_PANEL
        descriptor = self.session.registry.get(node.type_id)
        if descriptor is None:
            return EMPTY_PANEL

        bindings = [FieldBinding(DISPLAY_NAME_SPEC, node.display_name)]
        for spec in descriptor.config_schema:
            bindings.append(FieldBinding(spec, config_value(node.config, spec.key)))
        return PanelState(node_id=node.id, descriptor=descriptor, fields=tuple(bindings))

    def apply_edit(self, key: str, raw_value: Any, node_id: Optional[str] = None) -> bool:
        """
        Write one edited field back to the graph store.

        Args:
            key: Field key from a FieldBinding
            raw_value: Value as produced by the widget
            node_id: Node the panel was rendered for; defaults to the selection

        Returns:
            True if the store accepted the change
        """
        store = self.session.store
        node_id = node_id or store.selected_id
        node = store.get_node(node_id) if node_id else None
        if node is None:
            return False

        if key == DISPLAY_NAME_KEY:
            return store.rename_node(node.id, coerce_value(DISPLAY_NAME_SPEC, raw_value))

        descriptor = self.session.registry.get(node.type_id)
        spec = None
        if descriptor is not None:
            spec = next((s for s in descriptor.config_schema if s.key == key), None)
        if spec is None:
            logger.warning(f"Field '{key}' is not defined for {node.type_id} nodes")
            return False

        try:
            value = coerce_value(spec, raw_value)
        except ValueError as e:
            logger.warning(f"Rejected edit on {node.id}: {e}")
            return False
        return store.set_node_config(node.id, key, value)
