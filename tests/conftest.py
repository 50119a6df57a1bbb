import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_SRC_DIR = _THIS_DIR.parent / "src"

if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from vdicompact.models.config import Settings  # noqa: E402
from vdicompact.tools.clonevdi import CloneVDI  # noqa: E402

from tests.fakes.fake_runner import FakeCloneVDIRunner, FakeRunner  # noqa: E402


@pytest.fixture
def vbox_runner():
    return FakeRunner()


@pytest.fixture
def clonevdi_exe(tmp_path):
    exe = tmp_path / "tools" / "CloneVDI.exe"
    exe.parent.mkdir()
    exe.write_bytes(b"MZ fake")
    return exe


@pytest.fixture
def clonevdi_runner():
    return FakeCloneVDIRunner()


@pytest.fixture
def compactor(clonevdi_exe, clonevdi_runner):
    return CloneVDI(clonevdi_exe, runner=clonevdi_runner, version_reader=lambda _: "3.10")


@pytest.fixture
def settings():
    return Settings(shutdown_timeout=3, poll_interval=1.0, poweroff_settle=0, gui_close_timeout=0)


@pytest.fixture
def recycle_bin(tmp_path):
    """A stand-in recycle bin directory plus a recycle function moving files into it."""
    bin_dir = tmp_path / "recycle-bin"
    bin_dir.mkdir()

    def recycle(path):
        path.rename(bin_dir / path.name)

    recycle.bin_dir = bin_dir
    return recycle
