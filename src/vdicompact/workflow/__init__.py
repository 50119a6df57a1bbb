"""The shutdown and compaction workflow."""

from .compaction import clone_target_for, compact_disk, process_disk, replace_disk
from .disks import enumerate_disks
from .execution import ActionGate, ExecutionMode
from .runner import failed_attempts, run_workflow, summarize
from .shutdown import shutdown_running_vms

__all__ = [
    "ActionGate",
    "ExecutionMode",
    "clone_target_for",
    "compact_disk",
    "enumerate_disks",
    "failed_attempts",
    "process_disk",
    "replace_disk",
    "run_workflow",
    "shutdown_running_vms",
    "summarize",
]
