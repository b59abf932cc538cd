"""
FlowCanvas: interactive canvas engine for composing automation workflows.
"""

__version__ = "0.1.0"
