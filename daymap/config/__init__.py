# daymap/config/__init__.py
"""Configuration system for daymap."""

from .loader import get_config_path, get_data_dir, load_config
from .schema import (
    CalendarConfig,
    DaymapConfig,
    LMStudioConfig,
    OllamaConfig,
    OutputConfig,
    StorageConfig,
)

__all__ = [
    "DaymapConfig",
    "OllamaConfig",
    "LMStudioConfig",
    "StorageConfig",
    "CalendarConfig",
    "OutputConfig",
    "load_config",
    "get_config_path",
    "get_data_dir",
]
