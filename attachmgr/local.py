"""Host implementations backed by a vault directory on disk."""

from __future__ import annotations

import json
import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Any, Iterator
from urllib.parse import quote

from .errors import StorageError
from .host import (
    AttachmentFolderSetting,
    Document,
    FileManager,
    Host,
    LinkGenerator,
    Storage,
    Workspace,
)
from .models import Entry, FileEntry, FolderEntry
from .paths import is_note_path, join_path, normalize_path

logger = logging.getLogger(__name__)


class LocalVault(Storage):
    """Storage over a directory. Dot-directories (.obsidian, .attachmgr) are not walked."""

    def __init__(self, root: Path):
        self.root = root.resolve()

    def abspath(self, path: str) -> Path:
        rel = normalize_path(path)
        return self.root if rel == "/" else self.root / rel

    def relpath(self, path: str | os.PathLike) -> str:
        """Convert an absolute path under the vault to a vault path."""
        rel = Path(os.path.abspath(path)).relative_to(self.root).as_posix()
        return "/" if rel == "." else rel

    def exists(self, path: str) -> bool:
        return self.abspath(path).exists()

    def mkdir(self, path: str) -> None:
        try:
            self.abspath(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create folder {path}: {e}", path) from e

    def rename(self, src: str, dst: str) -> None:
        source, target = self.abspath(src), self.abspath(dst)
        if not source.exists():
            raise StorageError(f"No such file or folder: {src}", src)
        if target.exists():
            raise StorageError(f"Destination already exists: {dst}", dst)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as e:
            raise StorageError(f"Cannot move {src} to {dst}: {e}", src) from e

    def walk(self, folder: str = "/") -> Iterator[Entry]:
        base = self.abspath(folder)
        if not base.is_dir():
            return
        for child in sorted(base.iterdir(), key=lambda p: p.name):
            if child.name.startswith("."):
                continue
            rel = self.relpath(child)
            if child.is_dir():
                yield FolderEntry(rel)
                yield from self.walk(rel)
            else:
                yield FileEntry(rel)

    def ctime(self, path: str) -> float:
        st = self.abspath(path).stat()
        return getattr(st, "st_birthtime", st.st_ctime)

    def read_text(self, path: str) -> str:
        try:
            return self.abspath(path).read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}", path) from e

    def write_text(self, path: str, text: str) -> None:
        try:
            self.abspath(path).write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}", path) from e

    def write_bytes(self, path: str, data: bytes) -> None:
        try:
            self.abspath(path).write_bytes(data)
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}", path) from e


def _reference_pattern(old: str) -> re.Pattern[str]:
    """Match vault-absolute references to `old` or to anything below it."""
    plain = re.escape(old)
    encoded = re.escape(quote(old))
    return re.compile(
        rf"(?P<wiki>\[\[){plain}(?=[/\]|#])"
        rf"|(?P<md>\]\()(?P<md_path>{plain}|{encoded})(?=[/)#\s])"
        rf"|(?P<canvas>\"file\"\s*:\s*\"){plain}(?=[/\"])"
    )


class LocalFileManager(FileManager):
    def __init__(self, storage: LocalVault, config: AttachmentFolderSetting):
        self.storage = storage
        self.config = config

    def rename_file(self, src: str, dst: str) -> None:
        self.storage.rename(src, dst)
        updated = self.update_references(src, dst)
        logger.debug("Moved %s -> %s, %d reference(s) updated", src, dst, updated)

    def update_references(self, old: str, new: str) -> int:
        """Rewrite references to `old` (or entries below it) in every note and canvas."""
        pattern = _reference_pattern(old)

        def _sub(m: re.Match) -> str:
            if m.group("wiki"):
                return "[[" + new
            if m.group("md"):
                return "](" + (quote(new) if m.group("md_path") == quote(old) else new)
            return m.group("canvas") + new

        total = 0
        for entry in list(self.storage.walk()):
            if not isinstance(entry, FileEntry) or not is_note_path(entry.path):
                continue
            text = self.storage.read_text(entry.path)
            updated, count = pattern.subn(_sub, text)
            if count:
                self.storage.write_text(entry.path, updated)
                total += count
        return total

    def _attachment_folder(self, source_path: str) -> str:
        folder = self.config.get()
        if folder.startswith("./"):
            return join_path(posixpath.dirname(source_path), folder[2:])
        return normalize_path(folder)

    def save_attachment(self, name: str, extension: str, data: bytes, source_path: str) -> str:
        folder = self._attachment_folder(source_path)
        if not self.storage.exists(folder):
            self.storage.mkdir(folder)

        candidate = join_path(folder, f"{name}.{extension}")
        n = 1
        while self.storage.exists(candidate):
            candidate = join_path(folder, f"{name} {n}.{extension}")
            n += 1

        self.storage.write_bytes(candidate, data)
        return candidate


class ObsidianAppConfig(AttachmentFolderSetting):
    """Reads `attachmentFolderPath` from <vault>/.obsidian/app.json.

    The value is held in memory; `set()` never writes back to the host's file.
    """

    KEY = "attachmentFolderPath"

    def __init__(self, vault_root: Path):
        super().__init__()
        self.path = vault_root / ".obsidian" / "app.json"
        self._data = self._read()
        value = self._data.get(self.KEY)
        self._value = value if isinstance(value, str) and value else "/"

    def _read(self) -> dict[str, Any]:
        try:
            data: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def use_markdown_links(self) -> bool:
        return self._data.get("useMarkdownLinks") is True

    @property
    def relative_links(self) -> bool:
        return self._data.get("newLinkFormat") == "relative"

    def get(self) -> str:
        return self._value

    def set(self, value: str) -> None:
        self._value = value


class FileDocument(Document):
    """A note whose buffer is the file itself."""

    def __init__(self, storage: Storage, path: str):
        self.storage = storage
        self.path = path

    def get_text(self) -> str:
        return self.storage.read_text(self.path)

    def set_text(self, text: str) -> None:
        self.storage.write_text(self.path, text)


class LocalWorkspace(Workspace):
    """The active document is either pinned, or the note most recently touched."""

    def __init__(self, storage: Storage, note: str | None = None):
        self.storage = storage
        self.pinned = note is not None
        self._active = normalize_path(note) if note else None

    def touch(self, path: str) -> None:
        """Record activity on `path` (a modified note becomes active unless pinned)."""
        if not self.pinned and is_note_path(path):
            self._active = path

    def set_active(self, path: str) -> None:
        self._active = normalize_path(path)

    def active_document(self) -> Document | None:
        if self._active is None or not self.storage.exists(self._active):
            return None
        return FileDocument(self.storage, self._active)


class WikiLinkGenerator(LinkGenerator):
    """Obsidian-style references.

    Wiki style: ![[Docs/img.png]]; markdown style: ![img.png](Docs/img.png).
    Notes are linked without the "!" embed prefix (and without ".md" in wiki style).
    """

    def __init__(self, markdown: bool = False, relative: bool = False):
        self.markdown = markdown
        self.relative = relative

    def generate(self, path: str, source_path: str) -> str:
        target = path
        if self.relative:
            target = posixpath.relpath(path, posixpath.dirname(source_path) or ".")

        note = is_note_path(path)
        embed = "" if note else "!"
        if self.markdown:
            return f"{embed}[{posixpath.basename(path)}]({quote(target)})"
        if note and target.lower().endswith(".md"):
            target = target[:-3]
        return f"{embed}[[{target}]]"


def open_local_host(
    vault_root: Path,
    note: str | None = None,
    markdown_links: bool | None = None,
    relative_links: bool | None = None,
) -> Host:
    """Build a Host over `vault_root`.

    Link style defaults to the vault's own Obsidian settings.
    """
    storage = LocalVault(vault_root)
    config = ObsidianAppConfig(storage.root)
    if markdown_links is None:
        markdown_links = config.use_markdown_links
    if relative_links is None:
        relative_links = config.relative_links
    return Host(
        storage=storage,
        files=LocalFileManager(storage, config),
        workspace=LocalWorkspace(storage, note),
        links=WikiLinkGenerator(markdown=markdown_links, relative=relative_links),
        config=config,
    )
