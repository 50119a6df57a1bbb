"""The compaction run: shutdown, discovery, then one disk at a time."""

import time
from collections import Counter
from pathlib import Path
from typing import Callable

from ..models.config import Settings
from ..models.vm import CompactionAttempt, CompactionStatus
from ..system.processes import stop_virtualbox_processes
from ..system.recycle import empty_recycle_bin, send_to_recycle_bin
from ..tools.clonevdi import CloneVDI
from ..tools.vboxmanage import VBoxManage
from ..utils.output import console, print_info
from .compaction import Gate, process_disk
from .disks import enumerate_disks
from .shutdown import shutdown_running_vms


def run_workflow(
    vbox: VBoxManage,
    compactor: CloneVDI,
    settings: Settings,
    gate: Gate,
    sleep: Callable[[float], None] = time.sleep,
    stop_processes: Callable[..., None] = stop_virtualbox_processes,
    recycle: Callable[[Path], None] = send_to_recycle_bin,
    empty_bin: Callable[[str], None] = empty_recycle_bin,
) -> list[CompactionAttempt]:
    """Shut VirtualBox down and compact every VM's disk image.

    A failing disk never stops the run; its outcome is recorded on the
    returned attempt.

    Args:
        vbox: VBoxManage wrapper
        compactor: Verified CloneVDI wrapper
        settings: Effective settings
        gate: Decides whether each mutating action is carried out
        sleep: Sleep function used while waiting for VMs
        stop_processes: Stops the VirtualBox GUI and VBoxSVC
        recycle: Moves a file to the recycle bin
        empty_bin: Empties the recycle bin of one drive

    Returns:
        One attempt per discovered disk, in discovery order
    """
    console.rule("Shutting down virtual machines")
    shutdown_running_vms(
        vbox,
        gate,
        timeout=settings.shutdown_timeout,
        poll_interval=settings.poll_interval,
        settle=settings.poweroff_settle,
        sleep=sleep,
    )
    stop_processes(gate, close_timeout=settings.gui_close_timeout)

    console.rule("Compacting disk images")
    disks = enumerate_disks(vbox, settings.disk_extension)
    if not disks:
        print_info(f"No {settings.disk_extension} disk images found")
        return []

    attempts = []
    total = len(disks)
    for index, disk in enumerate(disks, start=1):
        print_info(f"({index}/{total}) {disk.vm_name}: {disk.path}")
        attempts.append(
            process_disk(
                disk,
                compactor,
                gate,
                prefix=settings.clone_prefix,
                reclaim_space=settings.empty_recycle_bin,
                recycle=recycle,
                empty_bin=empty_bin,
            )
        )
    return attempts


def summarize(attempts: list[CompactionAttempt]) -> tuple[Counter, int]:
    """Count outcomes and total space freed.

    Returns:
        (count per status, total bytes freed)
    """
    counts: Counter = Counter(a.status for a in attempts)
    freed = sum(a.bytes_freed for a in attempts)
    return counts, freed


def failed_attempts(attempts: list[CompactionAttempt]) -> list[CompactionAttempt]:
    """Attempts that ended in a warning state."""
    ok = {CompactionStatus.COMPACTED, CompactionStatus.PREVIEW, CompactionStatus.DECLINED}
    return [a for a in attempts if a.status not in ok]
