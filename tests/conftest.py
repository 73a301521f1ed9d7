"""Pytest configuration and fixtures."""

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from attachmgr.context import Context
from attachmgr.host import Document, Host
from attachmgr.local import open_local_host
from attachmgr.notify import Notifier
from attachmgr.settings import RootMode, Settings


class MemoryDocument(Document):
    """Open document held in memory."""

    def __init__(self, path: str, text: str = ""):
        self.path = path
        self.text = text

    def get_text(self) -> str:
        return self.text

    def set_text(self, text: str) -> None:
        self.text = text


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty vault with an Obsidian config folder."""
    root = tmp_path / "vault"
    (root / ".obsidian").mkdir(parents=True)
    (root / ".obsidian" / "app.json").write_text(json.dumps({"attachmentFolderPath": "/"}), encoding="utf-8")
    return root


@pytest.fixture
def coupled_settings() -> Settings:
    """Attachments live in <note folder>/<note name>-assets."""
    return Settings(
        root_mode=RootMode.IN_FOLDER,
        attachment_root="",
        attachment_path="${notepath}/${notename}-assets",
    )


@pytest.fixture
def notifier() -> Notifier:
    return Notifier(Console(file=io.StringIO()))


@pytest.fixture
def host(vault: Path) -> Host:
    return open_local_host(vault)


@pytest.fixture
def ctx(host: Host, coupled_settings: Settings, notifier: Notifier, vault: Path) -> Context:
    return Context(host, coupled_settings, notifier, journal_path=vault)


def write(root: Path, rel: str, content: str | bytes = "") -> Path:
    """Create a file (and its parents) under `root`."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path
