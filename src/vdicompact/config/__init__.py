"""Configuration management."""

from .manager import ConfigManager
from .paths import default_clonevdi_path, resolve_clonevdi, resolve_vboxmanage
from ..models.config import Settings

__all__ = [
    "ConfigManager",
    "Settings",
    "default_clonevdi_path",
    "resolve_clonevdi",
    "resolve_vboxmanage",
]
