"""Common utilities for aclengine."""

from .logger import setup_logger, get_logger
from .config import load_config, load_typed_config
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_logger",
    "get_settings",
    "load_config",
    "load_typed_config",
    "setup_logger",
]
