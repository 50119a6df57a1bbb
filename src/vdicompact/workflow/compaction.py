"""Per-disk compaction and replacement of the original image."""

from pathlib import Path
from typing import Callable

from ..models.vm import CompactionAttempt, CompactionStatus, DiskImage
from ..system.recycle import empty_recycle_bin, send_to_recycle_bin
from ..tools.clonevdi import CloneVDI
from ..tools.exceptions import CommandError, VdiCompactError
from ..utils.helpers import file_size
from ..utils.output import format_bytes, print_info, print_success, print_warning

Gate = Callable[[str, str], bool]


def _is_preview(gate: Gate) -> bool:
    return bool(getattr(gate, "preview", False))


def clone_target_for(path: Path, prefix: str = "Clone of ") -> Path:
    """Clone file CloneVDI writes for ``path``: same directory, prefixed name."""
    return path.with_name(f"{prefix}{path.name}")


def compact_disk(
    disk: DiskImage,
    clone_path: Path,
    compactor: CloneVDI,
    gate: Gate,
) -> tuple[CompactionStatus, int | None]:
    """Run CloneVDI for one disk.

    Nothing is touched when CloneVDI is missing or a clone file is already
    present; an earlier interrupted run therefore blocks the disk until the
    stale clone is removed by hand.

    Args:
        disk: Disk image to compact
        clone_path: Where CloneVDI writes the compacted copy
        compactor: CloneVDI wrapper
        gate: Decides whether CloneVDI is run

    Returns:
        (status, CloneVDI exit code or None if it did not run)
    """
    if not compactor.exists():
        print_warning(f"CloneVDI not found at '{compactor.path}', skipping '{disk.path}'")
        return CompactionStatus.COMPACTOR_MISSING, None

    if clone_path.exists():
        print_warning(
            f"'{clone_path}' already exists, skipping '{disk.path}'. "
            "Remove the leftover clone to compact this disk."
        )
        return CompactionStatus.CLONE_EXISTS, None

    if not gate("Compact with CloneVDI", str(disk.path)):
        if _is_preview(gate):
            return CompactionStatus.PREVIEW, None
        return CompactionStatus.DECLINED, None

    print_info(f"Compacting '{disk.path}'...")
    try:
        exit_code = compactor.compact(disk.path, clone_path)
    except CommandError as e:
        print_warning(f"{e}; '{disk.path}' left unchanged")
        return CompactionStatus.FAILED, None

    if exit_code != 0:
        print_warning(f"CloneVDI exited with code {exit_code}; '{disk.path}' left unchanged")
        return CompactionStatus.FAILED, exit_code

    if not clone_path.exists():
        print_warning(
            f"CloneVDI reported success but '{clone_path}' does not exist; "
            f"'{disk.path}' left unchanged"
        )
        return CompactionStatus.CLONE_MISSING, exit_code

    return CompactionStatus.COMPACTED, exit_code


def replace_disk(
    disk: DiskImage,
    clone_path: Path,
    gate: Gate,
    reclaim_space: bool = False,
    recycle: Callable[[Path], None] = send_to_recycle_bin,
    empty_bin: Callable[[str], None] = empty_recycle_bin,
) -> CompactionStatus:
    """Swap the compacted clone in for the original image.

    The original goes to the recycle bin and the clone takes its name, so
    the VM configuration keeps pointing at the same path.

    Args:
        disk: Original disk image
        clone_path: Compacted clone produced by CloneVDI
        gate: Decides whether each step is carried out
        reclaim_space: Also empty the recycle bin of the disk's drive
        recycle: Moves a file to the recycle bin
        empty_bin: Empties the recycle bin of one drive

    Returns:
        COMPACTED when the swap completed, PREVIEW in dry-run mode,
        NOT_REPLACED otherwise
    """
    preview = _is_preview(gate)

    if gate("Move to Recycle Bin", str(disk.path)):
        try:
            recycle(disk.path)
        except OSError as e:
            print_warning(
                f"Could not recycle '{disk.path}': {e}. "
                f"The compacted clone is at '{clone_path}'"
            )
            return CompactionStatus.NOT_REPLACED
    elif not preview:
        print_warning(f"'{disk.path}' kept; the compacted clone is at '{clone_path}'")
        return CompactionStatus.NOT_REPLACED

    if not preview and disk.path.exists():
        print_warning(
            f"'{disk.path}' still exists after recycling; "
            f"the compacted clone is at '{clone_path}'"
        )
        return CompactionStatus.NOT_REPLACED

    if gate("Rename", f"{clone_path} -> {disk.path.name}"):
        try:
            clone_path.rename(disk.path)
        except OSError as e:
            print_warning(
                f"Could not rename '{clone_path}' to '{disk.path.name}': {e}. "
                "The original image is in the Recycle Bin"
            )
            return CompactionStatus.NOT_REPLACED
    elif not preview:
        print_warning(
            f"'{clone_path}' was not renamed; the original image is in the Recycle Bin"
        )
        return CompactionStatus.NOT_REPLACED

    if reclaim_space and gate("Empty Recycle Bin", disk.drive or str(disk.path)):
        try:
            empty_bin(disk.drive)
        except VdiCompactError as e:
            print_warning(str(e))

    return CompactionStatus.PREVIEW if preview else CompactionStatus.COMPACTED


def process_disk(
    disk: DiskImage,
    compactor: CloneVDI,
    gate: Gate,
    prefix: str = "Clone of ",
    reclaim_space: bool = False,
    recycle: Callable[[Path], None] = send_to_recycle_bin,
    empty_bin: Callable[[str], None] = empty_recycle_bin,
) -> CompactionAttempt:
    """Compact one disk and put the result in place of the original."""
    clone_path = clone_target_for(disk.path, prefix)
    attempt = CompactionAttempt(disk=disk, clone_path=clone_path)

    if not disk.path.is_file():
        print_warning(f"Disk image '{disk.path}' does not exist, skipping")
        attempt.status = CompactionStatus.DISK_MISSING
        return attempt

    attempt.size_before = file_size(disk.path)

    status, attempt.exit_code = compact_disk(disk, clone_path, compactor, gate)
    if status not in (CompactionStatus.COMPACTED, CompactionStatus.PREVIEW):
        attempt.status = status
        return attempt

    attempt.status = replace_disk(disk, clone_path, gate, reclaim_space, recycle, empty_bin)

    if attempt.status == CompactionStatus.COMPACTED:
        attempt.size_after = file_size(disk.path)
        if attempt.size_before is not None and attempt.size_after is not None:
            print_success(
                f"Compacted '{disk.path.name}': {format_bytes(attempt.size_before)} -> "
                f"{format_bytes(attempt.size_after)}"
            )
        else:
            print_success(f"Compacted '{disk.path.name}'")
    return attempt
