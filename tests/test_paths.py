"""Tests for attachment path derivation and path stripping."""

import pendulum
import pytest

from attachmgr.paths import (
    join_path,
    normalize_path,
    render_file_name,
    resolve_attachment_path,
    resolve_root,
    strip_paths,
)
from attachmgr.settings import RootMode, Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Docs/Design", "Docs/Design"),
        ("/Docs//Design/", "Docs/Design"),
        ("./Docs/./Design", "Docs/Design"),
        ("Docs/../Design", "Design"),
        ("../../Design", "Design"),
        ("Docs\\Design", "Docs/Design"),
        ("", "/"),
        ("/", "/"),
    ],
)
def test_normalize_path(raw: str, expected: str) -> None:
    assert normalize_path(raw) == expected


def test_join_path_does_not_reset_on_leading_slash() -> None:
    assert join_path("attachments", "/Docs/Design") == "attachments/Docs/Design"
    assert join_path("/", "Design") == "Design"


@pytest.mark.parametrize("folder", ["", "Docs", "Projects/Alpha/Beta"])
@pytest.mark.parametrize("name", ["Design", "A note", "x.y"])
def test_template_without_placeholders_is_joined_to_root(folder: str, name: str) -> None:
    settings = Settings(root_mode=RootMode.IN_FOLDER, attachment_root="assets/", attachment_path="images/")
    expected = normalize_path(join_path(resolve_root(folder, settings), "images/"))

    assert resolve_attachment_path(name, folder, settings) == expected
    assert expected == "assets/images"


def test_resolve_is_idempotent() -> None:
    settings = Settings(root_mode=RootMode.NEXT_TO_NOTE, attachment_root="./files")
    first = resolve_attachment_path("Design", "Docs", settings)
    second = resolve_attachment_path("Design", "Docs", settings)
    assert first == second == "Docs/files/Docs/Design"


def test_next_to_note_root() -> None:
    settings = Settings(root_mode=RootMode.NEXT_TO_NOTE, attachment_root="./attachments", attachment_path="")
    assert resolve_attachment_path("Plan", "Projects/Alpha", settings) == "Projects/Alpha/attachments"


def test_directory_template_substitution() -> None:
    settings = Settings(root_mode=RootMode.IN_FOLDER, attachment_path="${notepath}/${notename}-assets")
    assert resolve_attachment_path("Design", "Docs", settings) == "Docs/Design-assets"
    assert resolve_attachment_path("Design", "", settings) == "Design-assets"


def test_placeholders_replaced_in_one_pass() -> None:
    settings = Settings(root_mode=RootMode.IN_FOLDER, attachment_path="${notepath}/${notename}")
    # A note literally named "${notepath}" keeps its name.
    assert resolve_attachment_path("${notepath}", "Docs", settings) == "Docs/${notepath}"


def test_unknown_placeholder_passes_through() -> None:
    settings = Settings(root_mode=RootMode.IN_FOLDER, attachment_path="${notepath}/${title}")
    assert resolve_attachment_path("Design", "Docs", settings) == "Docs/${title}"


@pytest.mark.parametrize(
    "host_folder, expected",
    [
        ("/", "Docs/Design"),
        ("./", "Docs/Docs/Design"),
        ("./media", "Docs/media/Docs/Design"),
        ("Media/Inbox", "Media/Inbox/Docs/Design"),
    ],
)
def test_host_default_root(host_folder: str, expected: str) -> None:
    settings = Settings(root_mode=RootMode.HOST_DEFAULT)
    assert resolve_attachment_path("Design", "Docs", settings, host_folder) == expected


def test_in_folder_root_ignores_note_location() -> None:
    settings = Settings(root_mode=RootMode.IN_FOLDER, attachment_root="attachments", attachment_path="${notename}")
    assert resolve_root("Deep/Folder", settings) == "attachments"
    assert resolve_attachment_path("Design", "Deep/Folder", settings) == "attachments/Design"


def test_render_file_name() -> None:
    moment = pendulum.datetime(2024, 1, 2, 3, 4, 5)
    settings = Settings(image_format="IMG-${date}")
    assert render_file_name("Design", settings, moment) == "IMG-20240102030405000"

    settings = Settings(image_format="${notename}-${date:YYYY-MM-DD}")
    assert render_file_name("Design", settings, moment) == "Design-2024-01-02"

    settings = Settings(image_format="${notename}", date_format="YYYY")
    assert render_file_name("Design", settings, moment) == "Design"


def test_strip_reduces_to_differing_folder() -> None:
    result = strip_paths("x/y/Note/img.png", "x/y/NoteRenamed/img.png")
    assert result is not None
    assert (result.source, result.dest) == ("x/y/Note", "x/y/NoteRenamed")


def test_strip_identical_paths_returns_full_paths() -> None:
    result = strip_paths("Docs/Design-assets", "Docs/Design-assets")
    assert result is not None
    assert (result.source, result.dest) == ("Docs/Design-assets", "Docs/Design-assets")


def test_strip_leaf_change_keeps_full_paths() -> None:
    result = strip_paths("Docs/Design-assets", "Docs/DesignV2-assets")
    assert result is not None
    assert (result.source, result.dest) == ("Docs/Design-assets", "Docs/DesignV2-assets")


def test_strip_ancestor_folder_rename() -> None:
    result = strip_paths("attachments/Docs/Design", "attachments/Papers/Design")
    assert result is not None
    assert (result.source, result.dest) == ("attachments/Docs", "attachments/Papers")


def test_strip_falls_back_when_reduction_would_nest() -> None:
    # Stripping "Design" would move attachments/Docs into attachments/Docs/Sub.
    result = strip_paths("attachments/Docs/Design", "attachments/Docs/Sub/Design")
    assert result is not None
    assert (result.source, result.dest) == ("attachments/Docs/Design", "attachments/Docs/Sub/Design")


@pytest.mark.parametrize(
    "src, dst",
    [
        ("A", "A/A"),
        ("Docs/Design", "Docs"),
        ("/", "Docs"),
    ],
)
def test_strip_unalignable_paths(src: str, dst: str) -> None:
    assert strip_paths(src, dst) is None
