"""Data models."""

from .config import Settings
from .vm import (
    CompactionAttempt,
    CompactionStatus,
    DiskImage,
    VirtualMachine,
)

__all__ = [
    "CompactionAttempt",
    "CompactionStatus",
    "DiskImage",
    "Settings",
    "VirtualMachine",
]
