"""Configuration management commands for vdicompact."""

import typer
from rich.table import Table

from ..config import ConfigManager, Settings
from ..tools.exceptions import VdiCompactError
from ..utils import console, print_error, print_info, print_success

app = typer.Typer(help="Manage vdicompact settings", no_args_is_help=True)


@app.command("show")
def show_settings() -> None:
    """Show the effective settings."""
    config_manager = ConfigManager()

    try:
        settings = config_manager.get()
    except VdiCompactError as e:
        print_error(str(e))
        raise typer.Exit(1)

    defaults = Settings()
    table = Table(title="Settings", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for key in Settings.model_fields:
        value = getattr(settings, key)
        source = "default" if value == getattr(defaults, key) else "config"
        shown = "-" if value is None else repr(value) if isinstance(value, str) else str(value)
        table.add_row(key, shown, source)

    console.print(table)
    if not config_manager.exists():
        print_info(f"No config file at {config_manager.config_file}; using defaults")


@app.command("set")
def set_setting(
    key: str = typer.Argument(..., help="Setting name"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a setting."""
    try:
        ConfigManager().set_value(key, value)
    except VdiCompactError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"{key} set to {value!r}")


@app.command("unset")
def unset_setting(
    key: str = typer.Argument(..., help="Setting name"),
) -> None:
    """Reset a setting to its default."""
    try:
        ConfigManager().unset_value(key)
    except VdiCompactError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"{key} reset to default")


@app.command("path")
def config_path() -> None:
    """Print the config file location."""
    console.print(str(ConfigManager().config_file), soft_wrap=True)
