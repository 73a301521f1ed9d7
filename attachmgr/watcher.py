"""
File system watcher that feeds vault events to the attachment engine.

This module provides:
- Watchdog-based vault monitoring
- Translation of created/moved events into CreateEvent/RenameEvent
- Active-note tracking from note modifications

Watchdog dispatches events from a single thread, so events are handled one at
a time in delivery order.
"""

import logging
import time
from typing import Callable

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers import Observer

from .errors import StorageError
from .local import LocalVault, LocalWorkspace
from .manager import AttachmentManager
from .models import CreateEvent, Entry, FileEntry, FolderEntry, RenameEvent
from .results import BaseResult, Status

logger = logging.getLogger(__name__)


class AttachmentEventHandler(FileSystemEventHandler):
    """
    Translates watchdog events into engine events.

    Key behaviors:
    - Ignores anything under dot-directories (.obsidian, .attachmgr, .git)
    - A storage failure is logged and the next event is processed
    - Modified notes become the active document unless one is pinned
    """

    def __init__(
        self,
        manager: AttachmentManager,
        storage: LocalVault,
        on_event: Callable[[str], None] | None = None,
    ):
        """
        Initialize the event handler.

        Args:
            manager: Engine entry point
            storage: Vault storage used to map absolute paths to vault paths
            on_event: Callback for event notifications (receives formatted string)
        """
        super().__init__()
        self.manager = manager
        self.storage = storage
        self.on_event = on_event

    def _vault_path(self, path: str | bytes) -> str | None:
        """Vault path for `path`, or None if it is hidden or outside the vault."""
        if isinstance(path, bytes):
            path = path.decode()
        try:
            rel = self.storage.relpath(path)
        except ValueError:
            return None
        if any(part.startswith(".") for part in rel.split("/")):
            return None
        return rel

    def _entry(self, event: FileSystemEvent, path: str) -> Entry:
        return FolderEntry(path) if event.is_directory else FileEntry(path)

    def _report(self, label: str, result: BaseResult | None) -> None:
        if result is None:
            return
        text = f"{label}: {result.status.value}"
        if result.message:
            text += f" ({result.message})"
        logger.info(text)
        if self.on_event:
            self.on_event(text)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle entry creation."""
        path = self._vault_path(event.src_path)
        if path is None or event.is_directory:
            return
        try:
            ctime = self.storage.ctime(path)
        except OSError:
            # Already gone again
            return
        try:
            result = self.manager.on_created(CreateEvent(self._entry(event, path), ctime))
        except StorageError as e:
            logger.error("Failed to relocate %s: %s", path, e)
            return
        self._report(f"created {path}", result)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Track the most recently edited note."""
        path = self._vault_path(event.src_path)
        if path is None or event.is_directory:
            return
        workspace = self.manager.host.workspace
        if isinstance(workspace, LocalWorkspace):
            workspace.touch(path)

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        """Handle file or folder rename/move."""
        old_path = self._vault_path(event.src_path)
        new_path = self._vault_path(event.dest_path)
        if old_path is None or new_path is None:
            return
        logger.debug("New path: %s", new_path)
        logger.debug("Old path: %s", old_path)
        try:
            result = self.manager.on_renamed(RenameEvent(self._entry(event, new_path), old_path))
        except StorageError as e:
            logger.error("Failed to synchronize attachments of %s: %s", new_path, e)
            return
        if result.message and result.status != Status.SKIPPED:
            self._report(f"renamed {old_path} -> {new_path}", result)


def watch_vault(
    manager: AttachmentManager,
    storage: LocalVault,
    on_event: Callable[[str], None] | None = None,
) -> tuple[Observer, AttachmentEventHandler]:
    """
    Start watching a vault for file system events.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = AttachmentEventHandler(manager, storage, on_event=on_event)

    observer = Observer()
    observer.schedule(handler, str(storage.root), recursive=True)
    observer.start()

    return observer, handler


def run_watch_loop(
    manager: AttachmentManager,
    storage: LocalVault,
    on_event: Callable[[str], None] | None = None,
) -> None:
    """
    Run the watch loop until interrupted.

    The host attachment-folder setting is restored when the loop ends.
    """
    observer, _ = watch_vault(manager, storage, on_event=on_event)

    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()
        manager.close()
