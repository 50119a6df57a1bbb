"""Recycle bin operations."""

import ctypes
import sys
from pathlib import Path

from send2trash import send2trash

from ..tools.exceptions import VdiCompactError

SHERB_NOCONFIRMATION = 0x00000001
SHERB_NOPROGRESSUI = 0x00000002
SHERB_NOSOUND = 0x00000004

S_OK = 0x00000000
# Returned by SHEmptyRecycleBinW when the bin is already empty.
E_UNEXPECTED = 0x8000FFFF


def send_to_recycle_bin(path: Path) -> None:
    """Move a file to the recycle bin (trash), not a permanent delete.

    Raises:
        OSError: If the shell refused the operation
    """
    send2trash(str(path))


def empty_recycle_bin(drive: str) -> None:
    """Empty the recycle bin of a single drive without any UI.

    Args:
        drive: Drive letter such as ``"C:"``

    Raises:
        VdiCompactError: If unsupported on this platform or the shell failed
    """
    if sys.platform != "win32":
        raise VdiCompactError("Emptying the recycle bin is only supported on Windows")
    if not drive:
        raise VdiCompactError("No drive letter to empty the recycle bin for")

    flags = SHERB_NOCONFIRMATION | SHERB_NOPROGRESSUI | SHERB_NOSOUND
    result = ctypes.windll.shell32.SHEmptyRecycleBinW(None, f"{drive}\\", flags)
    result &= 0xFFFFFFFF
    if result not in (S_OK, E_UNEXPECTED):
        raise VdiCompactError(
            f"Emptying the recycle bin on {drive} failed (HRESULT 0x{result:08X})"
        )
