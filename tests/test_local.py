"""Tests for the on-disk host implementations."""

import json
from pathlib import Path

import pytest

from attachmgr.errors import StorageError
from attachmgr.host import Host
from attachmgr.local import LocalVault, ObsidianAppConfig, WikiLinkGenerator, open_local_host
from attachmgr.models import FileEntry, FolderEntry

from .conftest import MemoryDocument, write


def test_walk_is_depth_first_and_skips_hidden(vault: Path) -> None:
    write(vault, "b.md")
    write(vault, "a/z.png")
    write(vault, "a/c/d.md")
    write(vault, ".trash/old.md")

    entries = list(LocalVault(vault).walk())

    assert entries == [
        FolderEntry("a"),
        FolderEntry("a/c"),
        FileEntry("a/c/d.md"),
        FileEntry("a/z.png"),
        FileEntry("b.md"),
    ]


def test_rename_refuses_to_overwrite(vault: Path) -> None:
    write(vault, "a.png", b"a")
    write(vault, "b.png", b"b")
    storage = LocalVault(vault)

    with pytest.raises(StorageError, match="already exists"):
        storage.rename("a.png", "b.png")
    with pytest.raises(StorageError, match="No such"):
        storage.rename("missing.png", "c.png")

    storage.rename("a.png", "sub/dir/a.png")
    assert (vault / "sub/dir/a.png").read_bytes() == b"a"


def test_relpath_round_trip(vault: Path) -> None:
    storage = LocalVault(vault)
    assert storage.relpath(storage.abspath("Docs/Design.md")) == "Docs/Design.md"
    assert storage.relpath(storage.root) == "/"


def test_rename_file_updates_references(vault: Path, host: Host) -> None:
    write(vault, "Docs/Design.md", "![[Docs/Design-assets/a.png]] [x](Docs/Design-assets/b%20c.png) [[Docs/Design-assets-old/z.png]]")
    write(vault, "Board.canvas", '{"nodes":[{"file":"Docs/Design-assets/a.png"}]}')
    write(vault, "Docs/Design-assets/a.png", b"a")

    host.files.rename_file("Docs/Design-assets", "Docs/New assets")

    note = (vault / "Docs/Design.md").read_text(encoding="utf-8")
    assert note == "![[Docs/New assets/a.png]] [x](Docs/New%20assets/b%20c.png) [[Docs/Design-assets-old/z.png]]"
    canvas = (vault / "Board.canvas").read_text(encoding="utf-8")
    assert canvas == '{"nodes":[{"file":"Docs/New assets/a.png"}]}'


def test_save_attachment_uses_host_folder_and_avoids_clashes(vault: Path, host: Host) -> None:
    with host.config.scoped("Media"):
        first = host.files.save_attachment("shot", "png", b"1", "Docs/Design.md")
        second = host.files.save_attachment("shot", "png", b"2", "Docs/Design.md")
    with host.config.scoped("./local"):
        third = host.files.save_attachment("shot", "png", b"3", "Docs/Design.md")

    assert (first, second, third) == ("Media/shot.png", "Media/shot 1.png", "Docs/local/shot.png")
    assert (vault / "Media/shot 1.png").read_bytes() == b"2"


def test_app_config_reading(tmp_path: Path) -> None:
    assert ObsidianAppConfig(tmp_path).get() == "/"

    (tmp_path / ".obsidian").mkdir()
    (tmp_path / ".obsidian" / "app.json").write_text(
        json.dumps({"attachmentFolderPath": "./media", "useMarkdownLinks": True, "newLinkFormat": "relative"}),
        encoding="utf-8",
    )
    config = ObsidianAppConfig(tmp_path)

    assert config.get() == "./media"
    assert config.use_markdown_links and config.relative_links


def test_scoped_setting_restored_on_error(vault: Path) -> None:
    config = ObsidianAppConfig(vault)

    with pytest.raises(RuntimeError):
        with config.scoped("elsewhere"):
            assert config.get() == "elsewhere"
            raise RuntimeError("boom")

    assert config.get() == "/"


def test_backup_and_restore(vault: Path) -> None:
    config = ObsidianAppConfig(vault)
    config.backup()
    config.set("changed")
    config.restore()
    assert config.get() == "/"


@pytest.mark.parametrize(
    "markdown, relative, expected",
    [
        (False, False, "![[Docs/assets/a b.png]]"),
        (False, True, "![[assets/a b.png]]"),
        (True, False, "![a b.png](Docs/assets/a%20b.png)"),
        (True, True, "![a b.png](assets/a%20b.png)"),
    ],
)
def test_link_generator(markdown: bool, relative: bool, expected: str) -> None:
    links = WikiLinkGenerator(markdown=markdown, relative=relative)
    assert links.generate("Docs/assets/a b.png", "Docs/Design.md") == expected


def test_link_generator_notes_are_not_embedded() -> None:
    assert WikiLinkGenerator().generate("Docs/Other.md", "Docs/Design.md") == "[[Docs/Other]]"


def test_workspace_follows_touched_notes(vault: Path) -> None:
    write(vault, "a.md")
    write(vault, "b.md")
    host = open_local_host(vault)

    host.workspace.touch("a.md")
    host.workspace.touch("img.png")
    assert host.workspace.active_document().path == "a.md"

    pinned = open_local_host(vault, note="b.md")
    pinned.workspace.touch("a.md")
    assert pinned.workspace.active_document().path == "b.md"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("Docs/Design.md", "md"),
        ("Boards/Plan.Canvas", "canvas"),
        ("v1.2/README", ""),
        ("Docs.old/Notes", ""),
    ],
)
def test_document_extension_ignores_dotted_folders(path: str, expected: str) -> None:
    assert MemoryDocument(path).extension == expected
