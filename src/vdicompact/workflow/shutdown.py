"""Shutdown of running VMs before compaction."""

import time
from typing import Callable

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..tools.exceptions import CommandError
from ..tools.parsing import is_powered_off
from ..tools.vboxmanage import VBoxManage
from ..utils.output import console, print_info, print_success, print_warning


def wait_for_poweroff(
    vbox: VBoxManage,
    name: str,
    timeout: float = 60,
    poll_interval: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll a VM's state until it reports powered off.

    An unknown state counts as not yet powered off.

    Args:
        vbox: VBoxManage wrapper
        name: VM name
        timeout: Maximum wait in seconds
        poll_interval: Seconds between polls

    Returns:
        True if the VM powered off within the timeout
    """
    waited = 0.0
    while waited < timeout:
        if is_powered_off(vbox.get_power_state(name)):
            return True
        sleep(poll_interval)
        waited += poll_interval
    return is_powered_off(vbox.get_power_state(name))


def shutdown_vm(
    vbox: VBoxManage,
    name: str,
    gate: Callable[[str, str], bool],
    timeout: float = 60,
    poll_interval: float = 1.0,
    settle: float = 3.0,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Shut one VM down, escalating to a forced power off on timeout."""
    if not gate("ACPI shutdown", name):
        if getattr(gate, "preview", False):
            gate("Power off", name)
        return

    try:
        if not vbox.acpi_power_button(name):
            print_warning(f"VBoxManage rejected the ACPI shutdown of '{name}'")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(description=f"Waiting for '{name}' to power off...", total=None)
            stopped = wait_for_poweroff(vbox, name, timeout, poll_interval, sleep)
    except CommandError as e:
        print_warning(str(e))
        stopped = False

    if stopped:
        print_success(f"VM '{name}' shut down")
        return

    print_warning(f"VM '{name}' did not shut down within {timeout:g}s")
    if gate("Power off", name):
        try:
            vbox.power_off(name)
        except CommandError as e:
            print_warning(str(e))
        sleep(settle)
        print_info(f"VM '{name}' powered off")


def shutdown_running_vms(
    vbox: VBoxManage,
    gate: Callable[[str, str], bool],
    timeout: float = 60,
    poll_interval: float = 1.0,
    settle: float = 3.0,
    sleep: Callable[[float], None] = time.sleep,
) -> list[str]:
    """Shut down every running VM, one at a time.

    Args:
        vbox: VBoxManage wrapper
        gate: Decides whether each action is carried out
        timeout: Seconds to wait for an ACPI shutdown
        poll_interval: Seconds between state polls
        settle: Seconds to wait after a forced power off

    Returns:
        Names of the VMs that were running
    """
    try:
        running = vbox.list_running_vms()
    except CommandError as e:
        print_warning(f"Could not list running VMs: {e}")
        return []

    if not running:
        print_info("No running VMs")
        return []

    for name in running:
        shutdown_vm(vbox, name, gate, timeout, poll_interval, settle, sleep)
    return running
