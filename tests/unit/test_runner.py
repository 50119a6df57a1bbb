from pathlib import Path
from unittest.mock import Mock

import pytest

from vdicompact.models.vm import CompactionStatus
from vdicompact.tools.vboxmanage import VBoxManage
from vdicompact.workflow.execution import ActionGate, ExecutionMode
from vdicompact.workflow.runner import failed_attempts, run_workflow, summarize


@pytest.fixture
def vm_dirs(tmp_path):
    """Two VMs on disk: VM-A with a VDI, VM-B with a stale clone next to its VDI."""
    a = tmp_path / "VMs" / "A" / "a.vdi"
    b = tmp_path / "VMs" / "B" / "b.vdi"
    for path in (a, b):
        path.parent.mkdir(parents=True)
        path.write_bytes(b"original " + path.name.encode() * 200)
    (b.parent / "Clone of b.vdi").write_bytes(b"stale")
    return a, b


@pytest.fixture
def vbox(vbox_runner, vm_dirs):
    a, b = vm_dirs
    vbox_runner.add("list", "runningvms", stdout='"VM-A" {a}\n')
    vbox_runner.add("controlvm", "VM-A", "acpipowerbutton")
    vbox_runner.add("list", "vms", stdout='"VM-A" {a}\n"VM-B" {b}\n"VM-C" {c}\n')
    vbox_runner.add(
        "showvminfo", "VM-A", "--machinereadable",
        stdout=f'VMState="poweroff"\n"SATA-0-0"="{a}"\n',
    )
    vbox_runner.add(
        "showvminfo", "VM-B", "--machinereadable",
        stdout=f'VMState="poweroff"\n"SATA-0-0"="{b}"\n',
    )
    vbox_runner.add(
        "showvminfo", "VM-C", "--machinereadable",
        stdout='VMState="poweroff"\n"SATA-0-0"="/vms/c.vmdk"\n',
    )
    return VBoxManage(Path("VBoxManage"), runner=vbox_runner)


def test_full_run(vbox, vbox_runner, compactor, clonevdi_runner, settings, recycle_bin, vm_dirs):
    a, b = vm_dirs
    stop_processes = Mock()

    attempts = run_workflow(
        vbox,
        compactor,
        settings,
        ActionGate(ExecutionMode.EXECUTE),
        sleep=lambda _: None,
        stop_processes=stop_processes,
        recycle=recycle_bin,
        empty_bin=Mock(),
    )

    assert [a_.disk.vm_name for a_ in attempts] == ["VM-A", "VM-B"]
    assert attempts[0].status == CompactionStatus.COMPACTED
    assert attempts[1].status == CompactionStatus.CLONE_EXISTS
    assert a.read_bytes() == b"compacted"
    assert b.read_bytes().startswith(b"original")
    assert len(clonevdi_runner.calls) == 1
    stop_processes.assert_called_once()

    commands = vbox_runner.commands()
    assert commands.index(["controlvm", "VM-A", "acpipowerbutton"]) < commands.index(["list", "vms"])

    counts, freed = summarize(attempts)
    assert counts[CompactionStatus.COMPACTED] == 1
    assert freed == attempts[0].bytes_freed > 0
    assert failed_attempts(attempts) == [attempts[1]]


def test_dry_run_mutates_nothing(vbox, vbox_runner, compactor, clonevdi_runner, settings, vm_dirs):
    a, b = vm_dirs
    before = {p: p.read_bytes() for p in (a, b)}
    recycle = Mock()
    empty_bin = Mock()
    settings = settings.model_copy(update={"empty_recycle_bin": True})

    attempts = run_workflow(
        vbox,
        compactor,
        settings,
        ActionGate(ExecutionMode.DRY_RUN),
        sleep=lambda _: None,
        stop_processes=Mock(),
        recycle=recycle,
        empty_bin=empty_bin,
    )

    assert [x.status for x in attempts] == [CompactionStatus.PREVIEW, CompactionStatus.CLONE_EXISTS]
    assert clonevdi_runner.calls == []
    recycle.assert_not_called()
    empty_bin.assert_not_called()
    assert {p: p.read_bytes() for p in (a, b)} == before
    assert not (a.parent / "Clone of a.vdi").exists()
    assert not any(cmd[0] == "controlvm" for cmd in vbox_runner.commands())


def test_no_disks(vbox_runner, compactor, settings):
    vbox_runner.add("list", "runningvms", stdout="")
    vbox_runner.add("list", "vms", stdout="")
    vbox = VBoxManage(Path("VBoxManage"), runner=vbox_runner)

    attempts = run_workflow(vbox, compactor, settings, ActionGate(), stop_processes=Mock())

    assert attempts == []


def test_vm_list_failure_after_shutdown(vbox_runner, compactor, settings):
    vbox_runner.add("list", "runningvms", stdout="")
    vbox_runner.add("list", "vms", returncode=1)
    vbox = VBoxManage(Path("VBoxManage"), runner=vbox_runner)
    stop_processes = Mock()

    attempts = run_workflow(vbox, compactor, settings, ActionGate(), stop_processes=stop_processes)

    assert attempts == []
    stop_processes.assert_called_once()
