"""Wrappers for the external VirtualBox and CloneVDI executables."""

from .clonevdi import CloneVDI, check_version, parse_version, read_file_version
from .exceptions import (
    CommandError,
    ConfigError,
    ToolNotFoundError,
    UnsupportedVersionError,
    VdiCompactError,
)
from .vboxmanage import VBoxManage

__all__ = [
    "CloneVDI",
    "CommandError",
    "ConfigError",
    "ToolNotFoundError",
    "UnsupportedVersionError",
    "VBoxManage",
    "VdiCompactError",
    "check_version",
    "parse_version",
    "read_file_version",
]
