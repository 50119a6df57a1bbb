"""Discovery of the disk images to compact."""

from pathlib import Path

from ..models.vm import DiskImage
from ..tools.exceptions import CommandError
from ..tools.vboxmanage import VBoxManage
from ..utils.output import print_info, print_warning


def enumerate_disks(vbox: VBoxManage, extension: str = ".vdi") -> list[DiskImage]:
    """Find one disk image per registered VM.

    Only the first attachment with ``extension`` is used; VMs without one
    are skipped.

    Args:
        vbox: VBoxManage wrapper
        extension: Disk image extension

    Returns:
        Disk images in VM registration order, empty if the VM list
        cannot be read
    """
    try:
        names = vbox.list_vms()
    except CommandError as e:
        print_warning(f"Could not list VMs: {e}")
        return []

    disks = []
    for name in names:
        path = vbox.get_disk_path(name, extension)
        if path is None:
            print_info(f"Skipping '{name}': no {extension} disk attached")
            continue
        disks.append(DiskImage(vm_name=name, path=Path(path)))
    return disks
