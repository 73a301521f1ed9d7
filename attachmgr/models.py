"""Data models for notes, vault entries, and file-system events."""

import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Union

# Extensions of text-bearing documents that can own attachments
NOTE_EXTENSIONS = (".md", ".canvas")


@dataclass(frozen=True)
class NoteIdentity:
    """A note reduced to what attachment paths are derived from."""

    name: str  # basename without extension
    folder: str  # posix, no trailing slash, "" = vault root

    @classmethod
    def from_path(cls, path: str) -> "NoteIdentity":
        """Derive identity from a vault-relative note path."""
        path = path.strip("/")
        stem, _ = posixpath.splitext(posixpath.basename(path))
        return cls(name=stem, folder=posixpath.dirname(path))


@dataclass(frozen=True)
class FileEntry:
    """A file in the vault (vault-relative posix path)."""

    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def basename(self) -> str:
        """File name without extension."""
        return posixpath.splitext(self.name)[0]

    @property
    def extension(self) -> str:
        """Extension without the leading dot, lowercased."""
        return posixpath.splitext(self.path)[1].lstrip(".").lower()

    @property
    def parent(self) -> str:
        return posixpath.dirname(self.path)


@dataclass(frozen=True)
class FolderEntry:
    """A folder in the vault (vault-relative posix path)."""

    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)


Entry = Union[FileEntry, FolderEntry]


class RenameKind(str, Enum):
    """What a rename event most likely was."""

    FILE = "file"  # the note's own basename changed
    FOLDER = "folder"  # an ancestor folder changed, basename kept


def classify_rename(old_path: str, new_path: str) -> RenameKind:
    """Classify a rename by comparing basenames (without extension).

    A note moved between folders without changing its name is reported as a
    folder rename as well; only the basename is compared.
    """
    old_stem = posixpath.splitext(posixpath.basename(old_path))[0]
    new_stem = posixpath.splitext(posixpath.basename(new_path))[0]
    return RenameKind.FOLDER if old_stem == new_stem else RenameKind.FILE


@dataclass(frozen=True)
class RenameEvent:
    """An entry that now lives at `entry.path` and used to live at `old_path`."""

    entry: Entry
    old_path: str

    @property
    def kind(self) -> RenameKind:
        return classify_rename(self.old_path, self.entry.path)


@dataclass(frozen=True)
class CreateEvent:
    """An entry was created; `ctime` is its creation time (epoch seconds)."""

    entry: Entry
    ctime: float = 0.0


@dataclass(frozen=True)
class StripResult:
    """Minimal old/new paths affected by a rename."""

    source: str
    dest: str
