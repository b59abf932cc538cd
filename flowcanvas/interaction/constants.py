"""
Shared constants for the canvas interaction layer.

These values are used by both Python (controller, handlers) and the
JavaScript snippets the handlers attach to the canvas. Keep them in sync!
"""

# DOM id of the canvas surface; pointer coordinates are relative to its box
CANVAS_ELEMENT_ID = 'workflow-canvas'

# dataTransfer key carrying the node type id during palette drags
DRAG_DATA_KEY = 'nodeType'

# Seconds between forwarded pointer-move events while dragging a node
POINTER_MOVE_THROTTLE = 0.02

# Rendered node card width in world units (w-48)
NODE_WIDTH = 192

# Vertical offset of the connection handles from a node's origin
CONNECTION_ANCHOR_Y = 40
