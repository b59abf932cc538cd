"""
Property Panel Module

Projects the selected node onto editable fields (binder) and draws them with
NiceGUI widgets (renderer).
"""

from flowcanvas.properties.binder import PropertyPanelBinder, PanelState, FieldBinding, coerce_value

__all__ = ['PropertyPanelBinder', 'PanelState', 'FieldBinding', 'coerce_value']
