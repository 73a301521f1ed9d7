"""Tests for translating watchdog events into engine events."""

from __future__ import annotations

from pathlib import Path

import pytest
from watchdog.events import (
    DirMovedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from attachmgr.errors import StorageError
from attachmgr.host import Host
from attachmgr.journal import read_journal
from attachmgr.manager import AttachmentManager
from attachmgr.notify import Notifier
from attachmgr.settings import Settings
from attachmgr.watcher import AttachmentEventHandler

from .conftest import write


@pytest.fixture
def manager(host: Host, coupled_settings: Settings, notifier: Notifier, vault: Path) -> AttachmentManager:
    return AttachmentManager(host, coupled_settings, notifier, journal_path=vault)


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def handler(manager: AttachmentManager, events: list[str]) -> AttachmentEventHandler:
    return AttachmentEventHandler(manager, manager.host.storage, on_event=events.append)


def test_note_move_carries_attachment_folder(
    handler: AttachmentEventHandler, vault: Path, events: list[str]
) -> None:
    write(vault, "Docs/Design.md", "![[Docs/Design-assets/a.png]]\n")
    write(vault, "Docs/Design-assets/a.png", b"a")
    (vault / "Docs" / "Design.md").rename(vault / "Docs" / "Plan.md")

    handler.on_moved(FileMovedEvent(str(vault / "Docs" / "Design.md"), str(vault / "Docs" / "Plan.md")))

    assert (vault / "Docs" / "Plan-assets" / "a.png").exists()
    assert not (vault / "Docs" / "Design-assets").exists()
    assert "![[Docs/Plan-assets/a.png]]" in (vault / "Docs" / "Plan.md").read_text(encoding="utf-8")
    assert len(events) == 1
    assert events[0].startswith("renamed Docs/Design.md -> Docs/Plan.md: done")


def test_folder_move_is_ignored(handler: AttachmentEventHandler, vault: Path, events: list[str]) -> None:
    (vault / "Docs").mkdir()
    (vault / "Docs").rename(vault / "Papers")

    handler.on_moved(DirMovedEvent(str(vault / "Docs"), str(vault / "Papers")))

    assert events == []


def test_move_failure_is_logged(
    handler: AttachmentEventHandler, manager: AttachmentManager, vault: Path, events: list[str], monkeypatch
) -> None:
    write(vault, "Docs/Plan.md", "")
    write(vault, "Docs/Design-assets/a.png", b"a")

    def fail(src: str, dst: str) -> None:
        raise StorageError(f"Cannot move {src} to {dst}", src)

    monkeypatch.setattr(manager.host.files, "rename_file", fail)

    handler.on_moved(FileMovedEvent(str(vault / "Docs" / "Design.md"), str(vault / "Docs" / "Plan.md")))

    assert (vault / "Docs" / "Design-assets" / "a.png").exists()
    assert events == []


def test_pasted_image_follows_active_note(
    handler: AttachmentEventHandler, vault: Path, events: list[str]
) -> None:
    write(vault, "Docs/Design.md", "![[Pasted image 20240101.png]]\n")
    handler.on_modified(FileModifiedEvent(str(vault / "Docs" / "Design.md")))
    write(vault, "Pasted image 20240101.png", b"\x89PNG")

    handler.on_created(FileCreatedEvent(str(vault / "Pasted image 20240101.png")))

    assert not (vault / "Pasted image 20240101.png").exists()
    moved = list((vault / "Docs" / "Design-assets").iterdir())
    assert len(moved) == 1
    assert moved[0].suffix == ".png"
    text = (vault / "Docs" / "Design.md").read_text(encoding="utf-8")
    assert f"![[Docs/Design-assets/{moved[0].name}]]" in text
    assert events and "done" in events[0]
    assert read_journal(vault)[-1].operation == "paste"


def test_created_non_paste_is_ignored(handler: AttachmentEventHandler, vault: Path, events: list[str]) -> None:
    write(vault, "Docs/Design.md", "")
    handler.on_modified(FileModifiedEvent(str(vault / "Docs" / "Design.md")))
    write(vault, "photo.png", b"x")

    handler.on_created(FileCreatedEvent(str(vault / "photo.png")))

    assert (vault / "photo.png").exists()
    assert events == []


def test_hidden_paths_are_ignored(
    handler: AttachmentEventHandler, manager: AttachmentManager, vault: Path, events: list[str]
) -> None:
    write(vault, ".obsidian/Pasted image 1.png", b"x")
    write(vault, ".obsidian/workspace.md", "")

    handler.on_modified(FileModifiedEvent(str(vault / ".obsidian" / "workspace.md")))
    handler.on_created(FileCreatedEvent(str(vault / ".obsidian" / "Pasted image 1.png")))

    assert manager.host.workspace.active_document() is None
    assert (vault / ".obsidian" / "Pasted image 1.png").exists()
    assert events == []


def test_paths_outside_vault_are_ignored(
    handler: AttachmentEventHandler, tmp_path: Path, events: list[str]
) -> None:
    write(tmp_path, "elsewhere/Pasted image 1.png", b"x")

    handler.on_created(FileCreatedEvent(str(tmp_path / "elsewhere" / "Pasted image 1.png")))

    assert events == []


def test_close_restores_host_folder(manager: AttachmentManager) -> None:
    manager.host.config.set("Docs/Design-assets")

    manager.close()

    assert manager.host.config.get() == "/"
