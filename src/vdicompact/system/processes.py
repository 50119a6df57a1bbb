"""Termination of the VirtualBox GUI and its COM server."""

import subprocess
import sys
from typing import Callable, Iterable

import psutil

from ..utils.output import print_info, print_success, print_warning

GUI_PROCESS_NAMES = ("VirtualBox",)

# VBoxSVC has no window, so it only goes away by being killed.
HELPER_PROCESS_NAMES = ("VBoxSVC",)


def _normalize(name: str) -> str:
    return name.lower().removesuffix(".exe")


def find_processes(names: Iterable[str]) -> list[psutil.Process]:
    """Find running processes by executable name (``.exe`` optional).

    Args:
        names: Process names to look for, case-insensitive

    Returns:
        Matching processes
    """
    wanted = {_normalize(n) for n in names}
    found = []
    for proc in psutil.process_iter(["name"]):
        name = proc.info.get("name")
        if name and _normalize(name) in wanted:
            found.append(proc)
    return found


def close_gracefully(
    proc: psutil.Process,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> None:
    """Ask a process to exit.

    On Windows ``taskkill`` without ``/F`` posts a close message to the
    process windows. Elsewhere the process gets SIGTERM.
    """
    try:
        if sys.platform == "win32":
            runner(["taskkill", "/PID", str(proc.pid)], capture_output=True)
        else:
            proc.terminate()
    except (psutil.NoSuchProcess, OSError):
        pass
    except psutil.AccessDenied:
        print_warning(f"Access denied closing process {proc.pid}")


def _kill(proc: psutil.Process) -> None:
    try:
        proc.kill()
    except psutil.NoSuchProcess:
        pass
    except psutil.AccessDenied:
        print_warning(f"Access denied killing process {proc.pid}")


def stop_virtualbox_processes(
    gate: Callable[[str, str], bool],
    close_timeout: float = 5,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> None:
    """Close the VirtualBox Manager and kill a leftover VBoxSVC.

    Best effort: nothing is re-verified afterwards.

    Args:
        gate: Decides whether each action is carried out
        close_timeout: Seconds to wait for the GUI to close before killing it
        runner: Callable with the ``subprocess.run`` signature
    """
    gui = find_processes(GUI_PROCESS_NAMES)
    if gui and gate("Close window", "VirtualBox Manager"):
        print_info("Closing VirtualBox Manager...")
        for proc in gui:
            close_gracefully(proc, runner)
        _, alive = psutil.wait_procs(gui, timeout=close_timeout)
        for proc in alive:
            print_warning(f"VirtualBox Manager (pid {proc.pid}) did not close, killing it")
            _kill(proc)

    helpers = find_processes(HELPER_PROCESS_NAMES)
    if helpers and gate("Stop process", "VBoxSVC"):
        for proc in helpers:
            _kill(proc)
        print_success("Stopped VBoxSVC")
