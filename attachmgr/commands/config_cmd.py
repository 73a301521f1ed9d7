"""Settings commands."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..errors import ConfigError
from ..local import ObsidianAppConfig
from ..settings import get_settings_path, load_settings, save_settings


def run_config_show(vault_path: Path) -> int:
    """Display current settings and the host attachment folder."""
    console = Console()
    try:
        settings = load_settings(vault_path)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    table = Table(title="Attachment settings")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    for key, value in settings.to_dict().items():
        table.add_row(key, escape(str(value)))
    table.add_row("", "")
    table.add_row("[dim]host attachment folder[/dim]", escape(ObsidianAppConfig(vault_path).get()))
    table.add_row("[dim]settings file[/dim]", escape(str(get_settings_path(vault_path))))

    console.print(table)
    return 0


def run_config_set(vault_path: Path, key: str, value: str) -> int:
    """Change one setting and save."""
    console = Console(stderr=True)
    try:
        settings = load_settings(vault_path).update(**{key: value})
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    path = save_settings(vault_path, settings)
    console.print(f"[green]Saved[/green] {escape(key)} = {escape(value)} to {escape(str(path))}")
    return 0
