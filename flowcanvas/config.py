"""
Configuration management for FlowCanvas.

Handles persistent editor configuration including:
- Zoom bounds and step used by the viewport toolbar
- Grid spacing, duplicate offset and the simulated run duration
- Logging level and the port the NiceGUI app binds to

Config is stored in config.json next to the executable/project root.
Environment variables prefixed with FLOWCANVAS_ override stored values.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from flowcanvas.paths import get_config_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "FLOWCANVAS_"


def _convert_setting(key: str, default: Any, value: Any) -> Any:
    if key == 'duplicate_offset':
        dx, dy = value
        return (float(dx), float(dy))
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


@dataclass(frozen=True)
class CanvasSettings:
    """Immutable editor settings resolved from defaults, config.json and env."""
    zoom_min: float = 0.5
    zoom_max: float = 2.0
    zoom_step: float = 0.1
    grid_size: float = 20.0
    duplicate_offset: Tuple[float, float] = (50.0, 50.0)
    run_duration: float = 3.0
    log_level: str = "INFO"
    port: int = 8080

    def __post_init__(self):
        for name in ('zoom_min', 'zoom_max', 'zoom_step', 'grid_size'):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")
        if self.zoom_min > self.zoom_max:
            raise ValueError(f"zoom_min ({self.zoom_min}) exceeds zoom_max ({self.zoom_max})")
        if self.run_duration < 0:
            raise ValueError(f"run_duration must not be negative, got {self.run_duration!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CanvasSettings':
        """
        Build settings from a plain dict, ignoring unknown keys.

        A value that cannot be converted to its field's type is logged and
        replaced by the default.

        Raises:
            ValueError: if the converted values describe impossible bounds
        """
        kwargs: Dict[str, Any] = {}
        defaults = cls()
        for key, default in asdict(defaults).items():
            if key not in data:
                continue
            try:
                kwargs[key] = _convert_setting(key, default, data[key])
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"Ignoring invalid setting {key}={data[key]!r}; using {default!r}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['duplicate_offset'] = list(self.duplicate_offset)
        return data


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {config_path}: top level must be an object")
            return {}
        return data
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = config_path or get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def _env_overrides() -> Dict[str, Any]:
    """Collect FLOWCANVAS_* environment variables as raw config values."""
    overrides: Dict[str, Any] = {}
    for key in CanvasSettings.__dataclass_fields__:
        env_value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
        if env_value is None:
            continue
        if key == 'duplicate_offset':
            overrides[key] = [part.strip() for part in env_value.split(',')]
        else:
            overrides[key] = env_value
    return overrides


def get_settings(config_path: Optional[Path] = None) -> CanvasSettings:
    """
    Resolve the editor settings.

    Priority:
    1. Environment variables (FLOWCANVAS_ZOOM_MIN, FLOWCANVAS_RUN_DURATION, ...)
    2. Values stored in config.json
    3. Built-in defaults

    Raises:
        ValueError: if the merged values describe impossible bounds
    """
    raw = load_config(config_path)
    raw.update(_env_overrides())
    return CanvasSettings.from_dict(raw)
