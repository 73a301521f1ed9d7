"""Entry point that routes host events to the engine's handlers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .capture import DropHandler, DroppedFile, PasteHandler
from .context import Context
from .host import Host
from .models import CreateEvent, NoteIdentity, RenameEvent
from .notify import Notifier
from .rename import RenameCoordinator
from .results import DropResult, RelocationResult, RenameResult
from .settings import Settings

logger = logging.getLogger(__name__)


class AttachmentManager:
    """Handles one event at a time, each to completion, in delivery order."""

    def __init__(
        self,
        host: Host,
        settings: Settings,
        notifier: Notifier | None = None,
        journal_path: Path | None = None,
    ):
        self.ctx = Context(host, settings, notifier or Notifier(), journal_path)
        self.renames = RenameCoordinator(self.ctx)
        self.paste = PasteHandler(self.ctx)
        self.drops = DropHandler(self.ctx)
        host.config.backup()

    @property
    def host(self) -> Host:
        return self.ctx.host

    def attachment_path(self, note_path: str) -> str:
        """Attachment directory for the note at `note_path`."""
        return self.ctx.attachment_path(NoteIdentity.from_path(note_path))

    def on_created(self, event: CreateEvent) -> RelocationResult | None:
        return self.paste.handle(event)

    def on_renamed(self, event: RenameEvent) -> RenameResult:
        return self.renames.handle(event)

    def on_editor_drop(self, files: Iterable[DroppedFile]) -> DropResult | None:
        return self.drops.on_editor_drop(files)

    def on_document_drop(self, files: Iterable[DroppedFile]) -> DropResult | None:
        return self.drops.on_document_drop(files)

    def close(self) -> None:
        """Put the host's attachment-folder setting back to its original value."""
        self.host.config.restore()
        logger.debug("Restored host attachment folder: %s", self.host.config.get())
