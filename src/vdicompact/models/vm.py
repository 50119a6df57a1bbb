"""Virtual machine and disk image models."""

from enum import Enum
from pathlib import Path, PureWindowsPath

from pydantic import BaseModel


class VirtualMachine(BaseModel):
    """A VM registered with VirtualBox."""

    name: str
    state: str | None = None
    disk_path: Path | None = None

    @property
    def running(self) -> bool:
        """Whether VirtualBox reports the VM as running."""
        return self.state is not None and self.state.lower() == "running"


class DiskImage(BaseModel):
    """A VDI file attached to a VM."""

    vm_name: str
    path: Path

    @property
    def drive(self) -> str:
        """Windows drive letter the image lives on (e.g. ``C:``), or ``""``."""
        return PureWindowsPath(str(self.path)).drive


class CompactionStatus(str, Enum):
    """Outcome of processing a single disk."""

    COMPACTED = "compacted"
    PREVIEW = "preview"
    DECLINED = "declined"
    CLONE_EXISTS = "clone_exists"
    COMPACTOR_MISSING = "compactor_missing"
    DISK_MISSING = "disk_missing"
    FAILED = "failed"
    CLONE_MISSING = "clone_missing"
    NOT_REPLACED = "not_replaced"


class CompactionAttempt(BaseModel):
    """Record of one disk going through compaction."""

    disk: DiskImage
    clone_path: Path
    status: CompactionStatus | None = None
    exit_code: int | None = None
    size_before: int | None = None
    size_after: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == CompactionStatus.COMPACTED

    @property
    def bytes_freed(self) -> int:
        """Bytes saved by the compaction, 0 when unknown."""
        if not self.succeeded or self.size_before is None or self.size_after is None:
            return 0
        return max(0, self.size_before - self.size_after)
