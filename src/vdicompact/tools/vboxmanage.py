"""VBoxManage command wrapper."""

import subprocess
from pathlib import Path
from typing import Any, Callable

from .exceptions import CommandError
from .parsing import parse_disk_path, parse_vm_names, parse_vm_state
from ..models.vm import VirtualMachine

Runner = Callable[..., subprocess.CompletedProcess]


class VBoxManage:
    """Narrow query/control interface over the VBoxManage CLI."""

    def __init__(self, path: Path, runner: Runner = subprocess.run) -> None:
        """Initialize the wrapper.

        Args:
            path: Resolved path to the VBoxManage executable
            runner: Callable with the ``subprocess.run`` signature
        """
        self.path = Path(path)
        self._runner = runner

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        """Run VBoxManage synchronously and capture its output.

        Args:
            *args: Command line arguments

        Returns:
            Completed process

        Raises:
            CommandError: If VBoxManage could not be started
        """
        cmd = [str(self.path), *args]
        try:
            return self._runner(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise CommandError(f"Failed to run {self.path.name}: {e}")

    def _query(self, *args: str) -> str:
        """Run a query command that must succeed.

        Raises:
            CommandError: On a nonzero exit code
        """
        result = self._run(*args)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise CommandError(
                f"VBoxManage {' '.join(args)} failed: {stderr or 'no output'}",
                returncode=result.returncode,
            )
        return (result.stdout or "").replace("\r\n", "\n")

    def list_vms(self) -> list[str]:
        """Names of all registered VMs."""
        return parse_vm_names(self._query("list", "vms"))

    def list_running_vms(self) -> list[str]:
        """Names of VMs that are currently running."""
        return parse_vm_names(self._query("list", "runningvms"))

    def get_vm_info(self, name: str) -> str | None:
        """Machine-readable VM info.

        Args:
            name: VM name

        Returns:
            Raw ``showvminfo --machinereadable`` output, or None if the
            query failed (inaccessible or unregistered VM)
        """
        try:
            return self._query("showvminfo", name, "--machinereadable")
        except CommandError:
            return None

    def get_disk_path(self, name: str, extension: str = ".vdi") -> str | None:
        """Path of the VM's disk image with the given extension, if any."""
        info = self.get_vm_info(name)
        if info is None:
            return None
        return parse_disk_path(info, extension)

    def get_power_state(self, name: str) -> str | None:
        """Reported ``VMState`` of a VM, or None if unknown."""
        info = self.get_vm_info(name)
        if info is None:
            return None
        return parse_vm_state(info)

    def acpi_power_button(self, name: str) -> bool:
        """Press the virtual ACPI power button.

        Returns:
            True if VBoxManage accepted the command
        """
        return self._run("controlvm", name, "acpipowerbutton").returncode == 0

    def power_off(self, name: str) -> bool:
        """Pull the virtual power plug.

        Returns:
            True if VBoxManage accepted the command
        """
        return self._run("controlvm", name, "poweroff").returncode == 0

    def get_virtual_machines(self, extension: str = ".vdi") -> list[VirtualMachine]:
        """Describe every registered VM with its state and disk image."""
        vms = []
        for name in self.list_vms():
            info = self.get_vm_info(name)
            data: dict[str, Any] = {"name": name}
            if info is not None:
                data["state"] = parse_vm_state(info)
                data["disk_path"] = parse_disk_path(info, extension)
            vms.append(VirtualMachine(**data))
        return vms
