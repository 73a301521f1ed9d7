"""
Capture of pasted and dropped files.

- PasteHandler: a freshly created "Pasted image ..." file is moved into the
  active note's attachment folder and the note's reference is rewritten.
- DropHandler: dropped PNG/JPEG payloads are saved straight into the active
  note's attachment folder through the host's save routine.
"""

from __future__ import annotations

import logging
import posixpath
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from .context import Context
from .errors import ErrorKind, StorageError
from .host import Document
from .models import CreateEvent, FileEntry, NoteIdentity
from .paths import IMAGE_EXTENSIONS, is_note_path
from .relocate import relocate_file
from .results import DropResult, RelocationResult, Status

logger = logging.getLogger(__name__)

PASTED_IMAGE_PREFIX = "Pasted image "

# Files older than this at creation-event time come from a vault scan, not a paste
CREATE_WINDOW_SECONDS = 1.0

# MIME types accepted on drop, with the extension they are saved under
DROP_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpeg",
}


def is_pasted_image(entry: FileEntry) -> bool:
    return entry.name.startswith(PASTED_IMAGE_PREFIX) and entry.extension in IMAGE_EXTENSIONS


class PasteHandler:
    def __init__(self, ctx: Context, clock: Callable[[], float] = time.time):
        self.ctx = ctx
        self.clock = clock

    def handle(self, event: CreateEvent) -> RelocationResult | None:
        """React to a created entry; returns None when the entry is not a fresh paste."""
        entry = event.entry
        if not isinstance(entry, FileEntry):
            return None
        if self.clock() - event.ctime > CREATE_WINDOW_SECONDS:
            return None
        if is_note_path(entry.path) or not is_pasted_image(entry):
            return None

        logger.debug("Image created: %s", entry.path)
        document = self.ctx.host.workspace.active_document()
        if document is None:
            message = "Error: No active file found."
            self.ctx.notifier.notice(message, style="red")
            return RelocationResult(
                status=Status.SKIPPED,
                kind=ErrorKind.SKIPPED_NO_OP,
                message=message,
                source=entry.path,
            )
        return self.relocate(entry, document)

    def relocate(self, entry: FileEntry, document: Document) -> RelocationResult:
        """Move `entry` into the attachment folder of `document` and rewrite its link."""
        note = NoteIdentity.from_path(document.path)
        attach_path = self.ctx.attachment_path(note)
        attach_name = f"{self.ctx.attachment_name(note.name)}.{entry.extension}"
        logger.debug("New path of created file: %s/%s", attach_path, attach_name)
        return relocate_file(self.ctx, entry.path, attach_path, attach_name, document.path)


@dataclass(frozen=True)
class DroppedFile:
    """A file payload dropped onto a document."""

    name: str
    mime_type: str
    data: bytes


class DropHandler:
    def __init__(self, ctx: Context):
        self.ctx = ctx

    def on_editor_drop(self, files: Iterable[DroppedFile]) -> DropResult | None:
        """Drop onto a markdown editor."""
        document = self.ctx.host.workspace.active_document()
        if document is None or document.extension != "md":
            return None
        return self.drop(files, document)

    def on_document_drop(self, files: Iterable[DroppedFile]) -> DropResult | None:
        """Drop onto any other document type (canvas and friends)."""
        document = self.ctx.host.workspace.active_document()
        if document is None or document.extension == "md":
            return None
        return self.drop(files, document)

    def drop(self, files: Iterable[DroppedFile], document: Document) -> DropResult:
        """Save accepted payloads for `document`.

        The host attachment-folder setting is pointed at the note's attachment
        folder only for the duration of each save.
        """
        host = self.ctx.host
        note = NoteIdentity.from_path(document.path)
        result = DropResult()

        for dropped in files:
            extension = DROP_TYPES.get(dropped.mime_type)
            if not dropped.name or extension is None:
                logger.debug("Ignoring dropped file %r (%s)", dropped.name, dropped.mime_type)
                continue

            attach_path = self.ctx.attachment_path(note)
            name = self.ctx.attachment_name(note.name)
            try:
                if not host.storage.exists(attach_path):
                    host.storage.mkdir(attach_path)
                with host.config.scoped(attach_path):
                    saved = host.files.save_attachment(name, extension, dropped.data, document.path)
            except StorageError:
                self.ctx.notifier.notice(f"failed to save {dropped.name} to {attach_path}", style="red")
                raise
            logger.debug("Save attachment to: %s", saved)

            link = host.links.generate(saved, document.path)
            logger.debug("Markdown link: %s", link)
            self.ctx.record("drop", "", saved, document.path, original_name=dropped.name)
            result.saved.append(saved)
            result.links.append(link)

        if not result.saved:
            result.status = Status.SKIPPED
            result.kind = ErrorKind.SKIPPED_NO_OP
            result.message = f"No image files dropped on {posixpath.basename(document.path)}"
        return result
