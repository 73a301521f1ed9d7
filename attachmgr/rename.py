"""
Attachment synchronization after a note is renamed or moved.

Each rename event runs through:

    IDLE -> VALIDATING -> RESOLVING -> CHECKING_COLLISION -> MOVING -> DONE

and may leave early to SKIPPED or FAILED. The association between a note and
its attachment folder is never stored; it is re-derived from the old and new
note paths every time.
"""

from __future__ import annotations

import logging
import posixpath
from enum import Enum

from .context import Context
from .errors import ErrorKind, StorageError
from .models import FileEntry, NoteIdentity, RenameEvent, RenameKind, StripResult
from .paths import is_note_path, strip_paths
from .results import RenameResult, Status

logger = logging.getLogger(__name__)


class RenameState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    CHECKING_COLLISION = "checking_collision"
    MOVING = "moving"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


class RenameCoordinator:
    """Moves a note's attachment folder after the note itself moved."""

    def __init__(self, ctx: Context):
        self.ctx = ctx
        self.state = RenameState.IDLE

    def handle(self, event: RenameEvent) -> RenameResult:
        """Process one rename event to completion.

        Raises StorageError if the move itself fails; every other outcome is
        reported through the returned result.
        """
        logger.debug("Rename: %s -> %s", event.old_path, event.entry.path)
        self.state = RenameState.VALIDATING

        reason = self._validate(event)
        if reason:
            return self._skip(reason)

        kind = event.kind
        logger.debug("renameType: %s", kind.value)
        result = RenameResult(rename_kind=kind)

        self.state = RenameState.RESOLVING
        old_note = NoteIdentity.from_path(event.old_path)
        new_note = NoteIdentity.from_path(event.entry.path)
        old_attach = self.ctx.attachment_path(old_note)
        new_attach = self.ctx.attachment_path(new_note)
        result.old_attachment_path = old_attach
        result.new_attachment_path = new_attach
        logger.debug("Old attachment path: %s", old_attach)
        logger.debug("New attachment path: %s", new_attach)

        if old_attach == new_attach:
            return self._skip("attachment path unchanged", result)
        if not self.ctx.host.storage.exists(old_attach):
            return self._skip(f"no attachments at {old_attach}", result)

        strip = strip_paths(old_attach, new_attach)
        if strip is None:
            message = f"Error rename path {old_attach} to {new_attach}"
            return self._fail(ErrorKind.REDUCTION_FAILURE, message, result)
        result.source, result.dest = strip.source, strip.dest
        logger.debug("nsrc: %s", strip.source)
        logger.debug("ndst: %s", strip.dest)

        self.state = RenameState.CHECKING_COLLISION
        if self.ctx.host.storage.exists(strip.dest):
            if kind == RenameKind.FILE:
                message = f"Same file name exists: {strip.dest}"
            else:
                # Rare: an ancestor folder rename should not find the target occupied.
                message = f"Folder already exists: {strip.dest}"
            return self._fail(ErrorKind.DESTINATION_COLLISION, message, result)

        self.state = RenameState.MOVING
        if not self._move(strip):
            message = f"Cannot find {strip.source} in vault tree"
            return self._fail(ErrorKind.MISSING_SOURCE, message, result)

        self.ctx.record("rename", strip.source, strip.dest, event.entry.path, kind=kind.value)
        self.state = RenameState.DONE
        result.status = Status.DONE
        result.message = f"Moved {strip.source} to {strip.dest}"
        return result

    def _validate(self, event: RenameEvent) -> str | None:
        """Return a reason to skip the event, or None to proceed."""
        settings = self.ctx.settings
        if not settings.auto_rename_folder:
            return "auto rename disabled"
        if not settings.path_is_note_coupled:
            return "attachment path does not use both ${notename} and ${notepath}"
        if not isinstance(event.entry, FileEntry):
            return f"folder {event.entry.path}"
        if is_attachment(event):
            return f"{event.old_path} is an attachment"
        return None

    def _move(self, strip: StripResult) -> bool:
        """Move the first tree entry at `strip.source`; False if none was found."""
        # Walk from the parent so entries under hidden roots are visited too
        parent = posixpath.dirname(strip.source) or "/"
        for entry in self.ctx.host.storage.walk(parent):
            if entry.path != strip.source:
                continue
            try:
                self.ctx.host.files.rename_file(strip.source, strip.dest)
            except StorageError:
                self.state = RenameState.FAILED
                self.ctx.notifier.notice(f"Failed to move {strip.source} to {strip.dest}", style="red")
                raise
            return True
        return False

    def _skip(self, reason: str, result: RenameResult | None = None) -> RenameResult:
        logger.debug("Rename skipped: %s", reason)
        self.state = RenameState.SKIPPED
        result = result or RenameResult()
        result.status = Status.SKIPPED
        result.kind = ErrorKind.SKIPPED_NO_OP
        result.message = reason
        return result

    def _fail(self, kind: ErrorKind, message: str, result: RenameResult) -> RenameResult:
        self.state = RenameState.FAILED
        self.ctx.notifier.notice(message)
        result.status = Status.FAILED
        result.kind = kind
        result.message = message
        return result


def is_attachment(event: RenameEvent) -> bool:
    """A renamed file is an attachment unless its old path was a note or canvas."""
    if isinstance(event.entry, FileEntry):
        return not is_note_path(event.old_path)
    return True
