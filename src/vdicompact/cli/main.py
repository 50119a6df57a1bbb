"""Main CLI application."""

import typer
from rich.console import Console

from .. import __version__
from ..utils.helpers import ordered_group
from . import compact, config, vm

_CMD_ORDER = ["run", "list", "check", "config"]

console = Console()

app = typer.Typer(
    name="vdicompact",
    help="Compact VirtualBox VDI disk images with CloneVDI",
    no_args_is_help=True,
    cls=ordered_group(_CMD_ORDER),
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("run")(compact.run_compaction)
app.command("list")(vm.list_vms)
app.command("check")(compact.check_tools)
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: Whether version flag was set
    """
    if value:
        console.print(f"vdicompact version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """vdicompact - shrink VirtualBox disk images.

    Shuts down every running VM, closes VirtualBox, then runs CloneVDI on
    each VM's VDI disk and swaps the compacted copy in place of the
    original. The original goes to the Recycle Bin.

    Get started:
        vdicompact check           # Verify VBoxManage and CloneVDI
        vdicompact run --dry-run   # See what would happen
        vdicompact run             # Compact everything
    """
    pass


if __name__ == "__main__":
    app()
