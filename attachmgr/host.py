"""
Host collaborators consumed by the attachment engine.

The engine never touches the file system, editor buffers, or host settings
directly; it goes through these interfaces. `attachmgr.local` provides
implementations over a directory on disk.

All paths are vault-relative and "/"-separated; the vault root is "/".
"""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from .models import Entry


class Storage(ABC):
    """File tree queries and raw mutations."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def mkdir(self, path: str) -> None:
        """Create a folder and any missing parents."""
        ...

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        """Move a file or folder. Raises StorageError if `dst` exists."""
        ...

    @abstractmethod
    def walk(self, folder: str = "/") -> Iterator[Entry]:
        """Depth-first traversal; a folder is yielded before its children."""
        ...

    @abstractmethod
    def ctime(self, path: str) -> float:
        """Creation time of an entry, epoch seconds."""
        ...

    @abstractmethod
    def read_text(self, path: str) -> str:
        ...

    @abstractmethod
    def write_text(self, path: str, text: str) -> None:
        ...

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> None:
        ...


class FileManager(ABC):
    """Host-level file operations (moves that keep references valid)."""

    @abstractmethod
    def rename_file(self, src: str, dst: str) -> None:
        """Move an entry and update references to it across the vault."""
        ...

    @abstractmethod
    def save_attachment(self, name: str, extension: str, data: bytes, source_path: str) -> str:
        """Save bytes into the host's current attachment folder; return the new path."""
        ...


class Document(ABC):
    """An open text-bearing document (note or canvas)."""

    path: str

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.path)[1].lstrip(".").lower()

    @abstractmethod
    def get_text(self) -> str:
        ...

    @abstractmethod
    def set_text(self, text: str) -> None:
        ...


class Workspace(ABC):
    """Access to the active document."""

    @abstractmethod
    def active_document(self) -> Document | None:
        ...


class LinkGenerator(ABC):
    """Produces the reference text a document uses to embed a file."""

    @abstractmethod
    def generate(self, path: str, source_path: str) -> str:
        ...


class AttachmentFolderSetting(ABC):
    """The host's own "default attachment location" setting.

    This is the one untyped seam into host internals: implementations read an
    undocumented host value, and the rest of the engine only sees a string.
    """

    def __init__(self) -> None:
        self._backup: str | None = None

    @abstractmethod
    def get(self) -> str:
        ...

    @abstractmethod
    def set(self, value: str) -> None:
        ...

    def backup(self) -> None:
        """Remember the current value so `restore()` can put it back."""
        self._backup = self.get()

    def restore(self) -> None:
        if self._backup is not None:
            self.set(self._backup)

    @contextmanager
    def scoped(self, value: str) -> Iterator[None]:
        """Temporarily replace the setting; the prior value is always restored."""
        previous = self.get()
        self.set(value)
        try:
            yield
        finally:
            self.set(previous)


@dataclass
class Host:
    """Bundle of collaborators handed to engine components."""

    storage: Storage
    files: FileManager
    workspace: Workspace
    links: LinkGenerator
    config: AttachmentFolderSetting
