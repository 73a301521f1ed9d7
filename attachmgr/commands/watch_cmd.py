"""Watch command - keep attachments in sync while the vault changes."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..journal import read_journal
from ..watcher import run_watch_loop
from .ops_cmd import build_manager


def run_watch(vault_path: Path, *, note: str | None = None) -> None:
    """
    Watch the vault and handle pastes and renames as they happen.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    manager = build_manager(vault_path, note=note, console=console)
    settings = manager.ctx.settings

    console.print(f"[bold]Watching[/bold] {escape(str(vault_path))}")
    console.print(f"  Root mode: {settings.root_mode.value}")
    console.print(f"  Attachment path: {escape(settings.attachment_path)}")
    console.print(f"  Auto rename: {'on' if settings.auto_rename_folder else 'off'}")
    if note:
        console.print(f"  Active note: {escape(note)}")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    event_count = 0

    def on_event(formatted: str) -> None:
        nonlocal event_count
        event_count += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] {escape(formatted)}")

    run_watch_loop(manager, manager.host.storage, on_event=on_event)
    console.print()
    console.print(f"[bold]Stopped.[/bold] Handled {event_count} events.")


def run_journal(vault_path: Path, *, last_n: int | None = None, format: str = "text") -> int:
    """
    Display entries from the relocation journal.

    Returns the number of entries displayed.
    """
    console = Console()
    entries = read_journal(vault_path, last_n=last_n)

    if not entries:
        console.print("[dim]No moves recorded.[/dim]")
        return 0

    for entry in entries:
        if format == "json":
            print(json.dumps(entry.to_dict()))
            continue
        when = entry.timestamp[:19].replace("T", " ")
        source = escape(entry.source) if entry.source else "[dim](new)[/dim]"
        console.print(
            f"[dim]{when}[/dim] [bold]{entry.operation}[/bold] {source} -> {escape(entry.destination)}"
            f"  [dim]{escape(entry.note)}[/dim]",
            highlight=False,
            soft_wrap=True,
        )

    return len(entries)
