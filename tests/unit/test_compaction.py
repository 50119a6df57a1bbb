from pathlib import Path
from unittest.mock import Mock

import pytest

from vdicompact.models.vm import CompactionStatus, DiskImage
from vdicompact.tools.clonevdi import CloneVDI
from vdicompact.tools.exceptions import VdiCompactError
from vdicompact.workflow.compaction import (
    clone_target_for,
    compact_disk,
    process_disk,
    replace_disk,
)
from vdicompact.workflow.execution import ActionGate, ExecutionMode

from tests.fakes.fake_runner import FakeCloneVDIRunner

ORIGINAL = b"original bytes with lots of free space" * 100


@pytest.fixture
def disk(tmp_path):
    vm_dir = tmp_path / "VMs" / "A"
    vm_dir.mkdir(parents=True)
    path = vm_dir / "a.vdi"
    path.write_bytes(ORIGINAL)
    return DiskImage(vm_name="VM-A", path=path)


@pytest.fixture
def execute():
    return ActionGate(ExecutionMode.EXECUTE)


@pytest.fixture
def dry_run():
    return ActionGate(ExecutionMode.DRY_RUN)


def test_clone_target_for():
    assert clone_target_for(Path("/vms/a.vdi")) == Path("/vms/Clone of a.vdi")
    assert clone_target_for(Path("/vms/a.vdi"), "tmp-") == Path("/vms/tmp-a.vdi")


class TestProcessDisk:
    def test_successful_compaction_replaces_original(
        self, disk, compactor, clonevdi_runner, execute, recycle_bin
    ):
        attempt = process_disk(disk, compactor, execute, recycle=recycle_bin)

        clone = disk.path.with_name("Clone of a.vdi")
        assert attempt.status == CompactionStatus.COMPACTED
        assert attempt.exit_code == 0
        assert not clone.exists()
        assert disk.path.read_bytes() == b"compacted"
        assert (recycle_bin.bin_dir / "a.vdi").read_bytes() == ORIGINAL
        assert clonevdi_runner.calls[0][1:] == [str(disk.path), "-o", str(clone), "-kc"]
        assert attempt.size_before == len(ORIGINAL)
        assert attempt.size_after == len(b"compacted")
        assert attempt.bytes_freed == len(ORIGINAL) - len(b"compacted")

    def test_existing_clone_blocks_disk(self, disk, compactor, clonevdi_runner, execute):
        clone = disk.path.with_name("Clone of a.vdi")
        clone.write_bytes(b"stale clone")
        recycle = Mock()

        attempt = process_disk(disk, compactor, execute, recycle=recycle)

        assert attempt.status == CompactionStatus.CLONE_EXISTS
        assert clonevdi_runner.calls == []
        recycle.assert_not_called()
        assert disk.path.read_bytes() == ORIGINAL
        assert clone.read_bytes() == b"stale clone"

    def test_nonzero_exit_leaves_original(self, disk, clonevdi_exe, execute):
        runner = FakeCloneVDIRunner(returncode=1, write=False)
        compactor = CloneVDI(clonevdi_exe, runner=runner)
        recycle = Mock()

        attempt = process_disk(disk, compactor, execute, recycle=recycle)

        assert attempt.status == CompactionStatus.FAILED
        assert attempt.exit_code == 1
        assert disk.path.read_bytes() == ORIGINAL
        recycle.assert_not_called()
        assert attempt.bytes_freed == 0

    def test_nonzero_exit_with_partial_clone_is_not_renamed(self, disk, clonevdi_exe, execute):
        runner = FakeCloneVDIRunner(returncode=2, output=b"partial")
        compactor = CloneVDI(clonevdi_exe, runner=runner)
        recycle = Mock()

        attempt = process_disk(disk, compactor, execute, recycle=recycle)

        assert attempt.status == CompactionStatus.FAILED
        assert disk.path.read_bytes() == ORIGINAL
        recycle.assert_not_called()

    def test_missing_clone_after_success(self, disk, clonevdi_exe, execute):
        compactor = CloneVDI(clonevdi_exe, runner=FakeCloneVDIRunner(write=False))
        recycle = Mock()

        attempt = process_disk(disk, compactor, execute, recycle=recycle)

        assert attempt.status == CompactionStatus.CLONE_MISSING
        assert disk.path.read_bytes() == ORIGINAL
        recycle.assert_not_called()

    def test_missing_compactor(self, disk, tmp_path, execute):
        runner = FakeCloneVDIRunner()
        compactor = CloneVDI(tmp_path / "gone" / "CloneVDI.exe", runner=runner)

        attempt = process_disk(disk, compactor, execute)

        assert attempt.status == CompactionStatus.COMPACTOR_MISSING
        assert runner.calls == []

    def test_missing_disk_file(self, tmp_path, compactor, clonevdi_runner, execute):
        disk = DiskImage(vm_name="VM-A", path=tmp_path / "absent.vdi")

        attempt = process_disk(disk, compactor, execute)

        assert attempt.status == CompactionStatus.DISK_MISSING
        assert clonevdi_runner.calls == []

    def test_dry_run_touches_nothing(self, disk, compactor, clonevdi_runner, dry_run):
        recycle = Mock()
        empty_bin = Mock()

        attempt = process_disk(
            disk, compactor, dry_run, reclaim_space=True, recycle=recycle, empty_bin=empty_bin
        )

        assert attempt.status == CompactionStatus.PREVIEW
        assert clonevdi_runner.calls == []
        recycle.assert_not_called()
        empty_bin.assert_not_called()
        assert disk.path.read_bytes() == ORIGINAL
        assert not disk.path.with_name("Clone of a.vdi").exists()

    def test_dry_run_reports_every_action(self, disk, compactor):
        gate = Mock(return_value=False)
        gate.preview = True

        process_disk(disk, compactor, gate, reclaim_space=True, recycle=Mock(), empty_bin=Mock())

        actions = [c.args[0] for c in gate.call_args_list]
        assert actions == ["Compact with CloneVDI", "Move to Recycle Bin", "Rename", "Empty Recycle Bin"]

    def test_declined_compaction(self, disk, compactor, clonevdi_runner):
        gate = ActionGate(ExecutionMode.CONFIRM, ask=lambda _: False)

        attempt = process_disk(disk, compactor, gate)

        assert attempt.status == CompactionStatus.DECLINED
        assert clonevdi_runner.calls == []

    def test_custom_prefix(self, disk, compactor, clonevdi_runner, execute, recycle_bin):
        attempt = process_disk(disk, compactor, execute, prefix="compact-", recycle=recycle_bin)

        assert attempt.clone_path.name == "compact-a.vdi"
        assert attempt.status == CompactionStatus.COMPACTED


class TestReplaceDisk:
    def _clone(self, disk):
        clone = disk.path.with_name("Clone of a.vdi")
        clone.write_bytes(b"compacted")
        return clone

    def test_reclaim_space_empties_disk_drive(self, disk, execute, recycle_bin):
        clone = self._clone(disk)
        empty_bin = Mock()

        status = replace_disk(disk, clone, execute, reclaim_space=True, recycle=recycle_bin, empty_bin=empty_bin)

        assert status == CompactionStatus.COMPACTED
        empty_bin.assert_called_once_with(disk.drive)

    def test_recycle_bin_not_emptied_by_default(self, disk, execute, recycle_bin):
        clone = self._clone(disk)
        empty_bin = Mock()

        replace_disk(disk, clone, execute, recycle=recycle_bin, empty_bin=empty_bin)

        empty_bin.assert_not_called()

    def test_recycle_failure_keeps_both_files(self, disk, execute):
        clone = self._clone(disk)
        recycle = Mock(side_effect=OSError("shell refused"))

        status = replace_disk(disk, clone, execute, recycle=recycle)

        assert status == CompactionStatus.NOT_REPLACED
        assert disk.path.read_bytes() == ORIGINAL
        assert clone.exists()

    def test_declined_recycle_does_not_rename(self, disk):
        clone = self._clone(disk)
        gate = ActionGate(ExecutionMode.CONFIRM, ask=lambda _: False)
        recycle = Mock()

        status = replace_disk(disk, clone, gate, recycle=recycle)

        assert status == CompactionStatus.NOT_REPLACED
        recycle.assert_not_called()
        assert disk.path.read_bytes() == ORIGINAL
        assert clone.exists()

    def test_empty_bin_failure_is_not_fatal(self, disk, execute, recycle_bin):
        clone = self._clone(disk)
        empty_bin = Mock(side_effect=VdiCompactError("unsupported"))

        status = replace_disk(disk, clone, execute, reclaim_space=True, recycle=recycle_bin, empty_bin=empty_bin)

        assert status == CompactionStatus.COMPACTED
        assert disk.path.read_bytes() == b"compacted"


def test_compact_disk_checks_collision_before_running(disk, compactor, clonevdi_runner, execute):
    clone = disk.path.with_name("Clone of a.vdi")
    clone.write_bytes(b"x")

    status, exit_code = compact_disk(disk, clone, compactor, execute)

    assert status == CompactionStatus.CLONE_EXISTS
    assert exit_code is None
    assert clonevdi_runner.calls == []
