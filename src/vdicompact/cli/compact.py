"""The ``run`` and ``check`` commands."""

from pathlib import Path

import typer
from rich.table import Table

from ..config import ConfigManager, resolve_clonevdi, resolve_vboxmanage
from ..models.config import Settings
from ..models.vm import CompactionAttempt, CompactionStatus
from ..tools.clonevdi import CloneVDI
from ..tools.exceptions import VdiCompactError
from ..tools.vboxmanage import VBoxManage
from ..utils import (
    console,
    format_bytes,
    format_percentage,
    get_status_color,
    print_error,
    print_info,
    print_success,
    print_warning,
    prompt,
)
from ..workflow import ActionGate, ExecutionMode, run_workflow, summarize


def _ask_for_clonevdi(expected: Path) -> Path | None:
    """Ask for the CloneVDI location when it is not where we expected it."""
    if not console.is_interactive:
        return None
    print_warning(f"CloneVDI not found at '{expected}'")
    answer = prompt("Path to CloneVDI.exe (leave empty to abort)", default="")
    answer = answer.strip().strip('"')
    if not answer:
        return None
    return Path(answer)


def preflight(clonevdi: Path | None, settings: Settings) -> tuple[VBoxManage, CloneVDI]:
    """Locate and validate both external tools.

    Raises:
        VdiCompactError: If either tool is missing or CloneVDI is rejected
    """
    vbox = VBoxManage(resolve_vboxmanage(settings))
    print_info(f"VBoxManage: {vbox.path}")

    compactor = CloneVDI(resolve_clonevdi(clonevdi, settings, ask=_ask_for_clonevdi))
    version = compactor.verify()
    print_info(f"CloneVDI {version}: {compactor.path}")
    return vbox, compactor


def _render_summary(attempts: list[CompactionAttempt]) -> None:
    table = Table(title="Compaction Summary", show_header=True, header_style="bold cyan")
    table.add_column("VM", style="cyan")
    table.add_column("Disk")
    table.add_column("Status")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    table.add_column("Of original", justify="right")

    for attempt in attempts:
        status = attempt.status.value if attempt.status else "unknown"
        color = get_status_color(status)
        before = format_bytes(attempt.size_before) if attempt.size_before is not None else "-"
        after = format_bytes(attempt.size_after) if attempt.size_after is not None else "-"
        if attempt.size_before and attempt.size_after is not None:
            percent = format_percentage(attempt.size_after / attempt.size_before * 100)
        else:
            percent = "-"
        table.add_row(
            attempt.disk.vm_name,
            attempt.disk.path.name,
            f"[{color}]{status}[/{color}]",
            before,
            after,
            percent,
        )

    console.print(table)

    counts, freed = summarize(attempts)
    compacted = counts.get(CompactionStatus.COMPACTED, 0)
    print_info(f"Summary: {compacted} of {len(attempts)} disk(s) compacted, {format_bytes(freed)} freed")


def run_compaction(
    clonevdi: Path = typer.Option(None, "--clonevdi", "-c", help="Path to CloneVDI.exe"),
    empty_recycle_bin: bool = typer.Option(
        None,
        "--empty-recycle-bin/--keep-recycle-bin",
        help="Empty the Recycle Bin of each disk's drive after compacting (irreversible)",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "--what-if", "-n", help="Only report what would be done"
    ),
    confirm_each: bool = typer.Option(False, "--confirm", help="Ask before every action"),
    timeout: int = typer.Option(
        None, "--timeout", "-t", min=0, help="Seconds to wait for an ACPI shutdown"
    ),
) -> None:
    """Shut down all VMs and compact every VDI disk image."""
    try:
        settings = ConfigManager().get()
        overrides: dict = {}
        if empty_recycle_bin is not None:
            overrides["empty_recycle_bin"] = empty_recycle_bin
        if timeout is not None:
            overrides["shutdown_timeout"] = timeout
        if overrides:
            settings = settings.model_copy(update=overrides)

        vbox, compactor = preflight(clonevdi, settings)

        if dry_run:
            mode = ExecutionMode.DRY_RUN
        elif confirm_each:
            mode = ExecutionMode.CONFIRM
        else:
            mode = ExecutionMode.EXECUTE

        attempts = run_workflow(vbox, compactor, settings, ActionGate(mode))

    except VdiCompactError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if attempts:
        _render_summary(attempts)
    if mode == ExecutionMode.DRY_RUN:
        print_info("Dry run: no changes were made")


def check_tools(
    clonevdi: Path = typer.Option(None, "--clonevdi", "-c", help="Path to CloneVDI.exe"),
) -> None:
    """Check that VBoxManage and a supported CloneVDI are available."""
    try:
        settings = ConfigManager().get()
        preflight(clonevdi, settings)
    except VdiCompactError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success("Ready to compact")
