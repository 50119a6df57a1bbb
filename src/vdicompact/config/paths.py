"""Resolution of the external tool paths."""

import os
import shutil
import sys
from pathlib import Path
from typing import Callable, Mapping

from ..models.config import Settings
from ..tools.exceptions import ToolNotFoundError
from ..utils.helpers import program_dir

INSTALL_DIR_VARIABLES = ("VBOX_MSI_INSTALL_PATH", "VBOX_INSTALL_PATH")

CLONEVDI_EXE = "CloneVDI.exe"


def vboxmanage_executable() -> str:
    return "VBoxManage.exe" if sys.platform == "win32" else "VBoxManage"


def resolve_vboxmanage(
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Locate VBoxManage once, at startup.

    Order: ``vboxmanage_path`` setting, the VirtualBox installer's
    environment variables, then ``PATH``.

    Args:
        settings: Loaded settings
        environ: Environment to read (defaults to ``os.environ``)

    Returns:
        Path to an existing VBoxManage executable

    Raises:
        ToolNotFoundError: If VBoxManage cannot be found
    """
    if environ is None:
        environ = os.environ

    tried: list[str] = []

    if settings.vboxmanage_path:
        path = Path(settings.vboxmanage_path)
        if path.is_file():
            return path
        raise ToolNotFoundError("VBoxManage", f"configured path {path} does not exist")

    for var in INSTALL_DIR_VARIABLES:
        install_dir = environ.get(var)
        if not install_dir:
            continue
        path = Path(install_dir) / vboxmanage_executable()
        if path.is_file():
            return path
        tried.append(str(path))

    found = shutil.which("VBoxManage")
    if found:
        return Path(found)

    tried.append("PATH")
    raise ToolNotFoundError(
        "VBoxManage",
        f"tried {', '.join(tried)}. Is VirtualBox installed?",
    )


def default_clonevdi_path() -> Path:
    """CloneVDI.exe next to the running program."""
    return program_dir() / CLONEVDI_EXE


def resolve_clonevdi(
    option: Path | None,
    settings: Settings,
    ask: Callable[[Path], Path | None] | None = None,
) -> Path:
    """Locate CloneVDI.

    Order: command line option, ``clonevdi_path`` setting, the program
    directory, then ``PATH``. When none of these exist and ``ask`` is given
    the user is asked to select the file.

    Args:
        option: Path given on the command line
        settings: Loaded settings
        ask: Called with the expected path; returns the chosen file or None

    Returns:
        Path to an existing file

    Raises:
        ToolNotFoundError: If no file was found or chosen
    """
    if option is not None:
        candidate = Path(option)
    elif settings.clonevdi_path:
        candidate = Path(settings.clonevdi_path)
    else:
        candidate = default_clonevdi_path()
        if not candidate.is_file():
            found = shutil.which("CloneVDI")
            if found:
                candidate = Path(found)

    if candidate.is_file():
        return candidate

    if ask is not None:
        chosen = ask(candidate)
        if chosen is not None and Path(chosen).is_file():
            return Path(chosen)
        if chosen is not None:
            raise ToolNotFoundError("CloneVDI", f"{chosen} does not exist")

    raise ToolNotFoundError("CloneVDI", str(candidate))
