"""
Path utilities for FlowCanvas.

Handles path resolution for both development mode and frozen (PyInstaller) executables.
- In development: paths are relative to the project root
- When frozen: paths are relative to the executable location

User configuration (config.json) lives NEXT TO the executable, while the
default node catalog is bundled inside the package.
"""

import sys
from pathlib import Path


def get_app_dir() -> Path:
    """
    Get the application directory.
    
    - In development: the project root (parent of flowcanvas/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent.parent


def get_package_dir() -> Path:
    """Get the directory holding the flowcanvas package files."""
    return Path(__file__).parent


def get_config_path() -> Path:
    """Get the path to the config file (zoom bounds, run duration, etc.)."""
    return get_app_dir() / "config.json"


def get_default_catalog_path() -> Path:
    """Get the path to the bundled node type catalog."""
    return get_package_dir() / "node_types.yaml"
