"""Host process and recycle bin operations."""

from .processes import find_processes, stop_virtualbox_processes
from .recycle import empty_recycle_bin, send_to_recycle_bin

__all__ = [
    "empty_recycle_bin",
    "find_processes",
    "send_to_recycle_bin",
    "stop_virtualbox_processes",
]
