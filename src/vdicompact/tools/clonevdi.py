"""CloneVDI wrapper and version gate."""

import re
import subprocess
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable

import pefile

from .exceptions import CommandError, ToolNotFoundError, UnsupportedVersionError

DOWNLOAD_URL = "https://forums.virtualbox.org/viewtopic.php?t=22422"

# First release with command line compaction.
MIN_VERSION = Decimal("3.02")

# 4.00 accepts -c on the command line but silently skips compaction.
BROKEN_VERSIONS = (Decimal("4.00"), Decimal("4.01"))

_RE_VERSION = re.compile(r"\s*(\d+(?:\.\d+)?)")


def read_file_version(path: Path) -> str | None:
    """Read the file version embedded in a Windows executable.

    Prefers the ``FileVersion`` string from the StringFileInfo table and
    falls back to the fixed file info as ``major.minor``.

    Args:
        path: Executable to inspect

    Returns:
        Version string, or None if the file has no version resource
    """
    try:
        pe = pefile.PE(str(path), fast_load=True)
    except (OSError, pefile.PEFormatError):
        return None

    try:
        pe.parse_data_directories(
            directories=[pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_RESOURCE"]]
        )
        for file_info in getattr(pe, "FileInfo", None) or []:
            for entry in file_info:
                if getattr(entry, "Key", b"") != b"StringFileInfo":
                    continue
                for table in entry.StringTable:
                    value = table.entries.get(b"FileVersion")
                    if value:
                        return value.decode("utf-8", errors="replace").strip()

        fixed = getattr(pe, "VS_FIXEDFILEINFO", None)
        if fixed:
            version_ms = fixed[0].FileVersionMS
            return f"{version_ms >> 16}.{version_ms & 0xFFFF:02d}"
        return None
    finally:
        pe.close()


def parse_version(text: str | None) -> Decimal | None:
    """Parse the leading ``major.minor`` of a version string as a decimal.

    Args:
        text: Version string such as ``"3.02"`` or ``"4.01 beta"``

    Returns:
        Decimal version, or None if the string has no leading number
    """
    if not text:
        return None
    match = _RE_VERSION.match(text)
    if not match:
        return None
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def check_version(version: Decimal) -> None:
    """Reject CloneVDI releases that cannot compact from the command line.

    Args:
        version: Parsed CloneVDI version

    Raises:
        UnsupportedVersionError: If the version is too old or known broken
    """
    low, high = BROKEN_VERSIONS
    if version < MIN_VERSION:
        raise UnsupportedVersionError(
            f"CloneVDI {version} is too old; version {MIN_VERSION} or later is required. "
            f"Download a current build from {DOWNLOAD_URL}",
            version=str(version),
        )
    if low <= version < high:
        raise UnsupportedVersionError(
            f"CloneVDI {version} ignores the compact option on the command line. "
            f"Download a fixed build from {DOWNLOAD_URL}",
            version=str(version),
        )


class CloneVDI:
    """The external CloneVDI executable."""

    def __init__(
        self,
        path: Path,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        version_reader: Callable[[Path], str | None] = read_file_version,
    ) -> None:
        """Initialize the wrapper.

        Args:
            path: Path to CloneVDI.exe
            runner: Callable with the ``subprocess.run`` signature
            version_reader: Returns the executable's version string
        """
        self.path = Path(path)
        self._runner = runner
        self._version_reader = version_reader

    def exists(self) -> bool:
        return self.path.is_file()

    def version(self) -> str | None:
        """Version string embedded in the executable."""
        return self._version_reader(self.path)

    def verify(self) -> Decimal:
        """Check the executable is present and of a supported version.

        Returns:
            Parsed version

        Raises:
            ToolNotFoundError: If the executable is missing
            UnsupportedVersionError: If the version is unreadable or rejected
        """
        if not self.exists():
            raise ToolNotFoundError("CloneVDI", str(self.path))

        raw = self.version()
        version = parse_version(raw)
        if version is None:
            raise UnsupportedVersionError(
                f"Could not determine the version of {self.path}. "
                f"Download a current build from {DOWNLOAD_URL}",
                version=raw,
            )
        check_version(version)
        return version

    def build_command(self, source: Path, dest: Path) -> list[str]:
        """Command line for a compacting clone that keeps the disk UUID."""
        return [str(self.path), str(source), "-o", str(dest), "-kc"]

    def compact(self, source: Path, dest: Path) -> int:
        """Clone ``source`` to ``dest`` with compaction and wait for exit.

        CloneVDI writes its own diagnostics to the console, so output is not
        captured.

        Args:
            source: Disk image to compact
            dest: Clone file to create

        Returns:
            CloneVDI exit code

        Raises:
            CommandError: If CloneVDI could not be started
        """
        try:
            result = self._runner(self.build_command(source, dest))
        except OSError as e:
            raise CommandError(f"Failed to run {self.path.name}: {e}")
        return result.returncode
