"""One-shot commands: resolve, rename, paste, drop."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..capture import DroppedFile
from ..errors import StorageError
from ..local import open_local_host
from ..manager import AttachmentManager
from ..models import FileEntry, RenameEvent
from ..notify import Notifier
from ..paths import normalize_path
from ..results import BaseResult, Status
from ..settings import load_settings


def build_manager(vault_path: Path, note: str | None = None, console: Console | None = None) -> AttachmentManager:
    """Engine over `vault_path` with persisted settings and the journal enabled."""
    host = open_local_host(vault_path, note=note)
    return AttachmentManager(
        host,
        load_settings(vault_path),
        notifier=Notifier(console or Console(stderr=True)),
        journal_path=vault_path,
    )


def _print_result(console: Console, result: BaseResult) -> int:
    color = {
        Status.DONE: "green",
        Status.SKIPPED: "dim",
        Status.PARTIAL: "yellow",
        Status.FAILED: "red",
    }[result.status]
    line = f"[{color}]{result.status.value}[/{color}]"
    if result.message:
        line += f" {escape(result.message)}"
    console.print(line, highlight=False)
    return 0 if result.status in (Status.DONE, Status.SKIPPED) else 1


def run_resolve(vault_path: Path, note: str) -> int:
    """Print the attachment directory of `note`."""
    manager = build_manager(vault_path)
    print(manager.attachment_path(normalize_path(note)))
    return 0


def run_rename(vault_path: Path, old: str, new: str) -> int:
    """Synchronize attachments for a note renamed from `old` to `new`.

    If the note still sits at `old`, it is moved to `new` first.
    """
    console = Console(stderr=True)
    manager = build_manager(vault_path, console=console)
    storage = manager.host.storage
    old, new = normalize_path(old), normalize_path(new)

    try:
        if storage.exists(old) and not storage.exists(new):
            storage.rename(old, new)
        elif not storage.exists(new):
            console.print(f"[red]Note not found:[/red] {escape(new)}", highlight=False)
            return 1

        result = manager.on_renamed(RenameEvent(FileEntry(new), old))
    except StorageError as e:
        console.print(f"[red]Storage failure:[/red] {escape(str(e))}", highlight=False)
        return 2
    finally:
        manager.close()

    return _print_result(console, result)


def run_paste(vault_path: Path, file: str, note: str) -> int:
    """Move a captured file into the attachment folder of `note` and fix the reference."""
    console = Console(stderr=True)
    note = normalize_path(note)
    file = normalize_path(file)
    manager = build_manager(vault_path, note=note, console=console)

    document = manager.host.workspace.active_document()
    if document is None:
        console.print(f"[red]Note not found:[/red] {escape(note)}", highlight=False)
        return 1
    if not manager.host.storage.exists(file):
        console.print(f"[red]File not found:[/red] {escape(file)}", highlight=False)
        return 1

    try:
        result = manager.paste.relocate(FileEntry(file), document)
    except StorageError as e:
        console.print(f"[red]Storage failure:[/red] {escape(str(e))}", highlight=False)
        return 2
    finally:
        manager.close()

    console.print(f"{result.source} -> {result.dest}", markup=False, highlight=False)
    return _print_result(console, result)


def run_drop(vault_path: Path, files: list[Path], note: str) -> int:
    """Save files from disk as if they were dropped onto `note`."""
    console = Console()
    note = normalize_path(note)
    manager = build_manager(vault_path, note=note, console=Console(stderr=True))

    if manager.host.workspace.active_document() is None:
        console.print(f"[red]Note not found:[/red] {escape(note)}", highlight=False)
        return 1

    dropped = []
    for f in files:
        mime_type, _ = mimetypes.guess_type(f.name)
        dropped.append(DroppedFile(name=f.name, mime_type=mime_type or "", data=f.read_bytes()))

    try:
        if note.lower().endswith(".md"):
            result = manager.on_editor_drop(dropped)
        else:
            result = manager.on_document_drop(dropped)
    except StorageError as e:
        console.print(f"[red]Storage failure:[/red] {escape(str(e))}", highlight=False)
        return 2
    finally:
        manager.close()

    if result is None or not result.saved:
        console.print("[dim]No image files saved.[/dim]")
        return 1

    for path, link in zip(result.saved, result.links):
        print(f"{path}\t{link}")
    return 0
