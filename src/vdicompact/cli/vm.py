"""The ``list`` command."""

import typer

from ..config import ConfigManager, resolve_vboxmanage
from ..tools.exceptions import VdiCompactError
from ..tools.vboxmanage import VBoxManage
from ..utils import console, create_table, get_status_color, print_error, print_info
from ..workflow import clone_target_for


def list_vms() -> None:
    """List registered VMs and the disk image each one would compact."""
    try:
        settings = ConfigManager().get()
        vbox = VBoxManage(resolve_vboxmanage(settings))
        vms = vbox.get_virtual_machines(settings.disk_extension)
    except VdiCompactError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not vms:
        print_info("No VMs registered")
        return

    table = create_table(
        title="Virtual Machines",
        columns=[
            ("Name", "cyan"),
            ("State", ""),
            ("Disk image", ""),
            ("Leftover clone", "yellow"),
        ],
    )

    for vm in vms:
        state = vm.state or "unknown"
        color = get_status_color(state)
        if vm.disk_path is None:
            disk = f"[dim]no {settings.disk_extension} disk[/dim]"
            clone = ""
        else:
            disk = str(vm.disk_path)
            clone_path = clone_target_for(vm.disk_path, settings.clone_prefix)
            clone = clone_path.name if clone_path.exists() else ""
        table.add_row(vm.name, f"[{color}]{state}[/{color}]", disk, clone)

    console.print(table)
