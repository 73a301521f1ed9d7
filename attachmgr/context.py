"""Shared state handed to every event handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pendulum

from .host import Host
from .journal import log_move
from .models import NoteIdentity
from .notify import Notifier
from .paths import render_file_name, resolve_attachment_path
from .settings import Settings


@dataclass
class Context:
    host: Host
    settings: Settings
    notifier: Notifier = field(default_factory=Notifier)
    journal_path: Path | None = None  # vault root; None disables the journal

    def attachment_path(self, note: NoteIdentity) -> str:
        """Attachment directory of `note` under the current settings."""
        return resolve_attachment_path(note.name, note.folder, self.settings, self.host.config.get())

    def attachment_name(self, note_name: str, now: pendulum.DateTime | None = None) -> str:
        """Attachment file name (without extension) for a file owned by `note_name`."""
        return render_file_name(note_name, self.settings, now)

    def record(self, operation: str, source: str, destination: str, note: str, **metadata: Any) -> None:
        if self.journal_path is not None:
            log_move(self.journal_path, operation, source, destination, note, metadata)
