"""
Error types for the canvas core.

Only node creation with an unknown type and an unreadable catalog are real
errors. Operations that target ids which no longer exist are silent no-ops,
and out-of-range zoom requests are clamped.
"""


class FlowCanvasError(Exception):
    """Base class for FlowCanvas errors."""


class UnknownNodeType(FlowCanvasError, KeyError):
    """Raised when a type id does not resolve to a registered node type."""

    def __init__(self, type_id: str):
        super().__init__(type_id)
        self.type_id = type_id

    def __str__(self) -> str:
        return f"Unknown node type: {self.type_id!r}"


class NodeRegistryError(FlowCanvasError):
    """Raised when a node type catalog cannot be read at all."""
