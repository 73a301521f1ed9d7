"""Attachment path derivation.

Pure functions only: nothing in this module touches storage.

- normalize_path: platform-neutral, "/"-separated vault paths
- resolve_root / resolve_attachment_path: note identity + settings -> directory
- render_file_name: file name template with ${notename} and ${date[:FORMAT]}
- strip_paths: reduce an old/new attachment path pair to the part that moved
"""

from __future__ import annotations

import logging
import posixpath
import re

import pendulum

from .models import NOTE_EXTENSIONS, StripResult
from .settings import RootMode, Settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "bmp", "svg", "webp"}

# ${notename} / ${notepath}, substituted in one pass
_NOTE_VARS = re.compile(r"\$\{(notename|notepath)\}")
# ${notename}, ${date} and ${date:FORMAT}
_NAME_VARS = re.compile(r"\$\{(?:(notename)|date(?::([^}]*))?)\}")


def normalize_path(path: str) -> str:
    """Normalize a vault path.

    Backslashes become "/", empty and "." segments are dropped, ".." pops the
    previous segment (never above the vault root), and leading/trailing
    separators are removed. The vault root is "/".
    """
    parts: list[str] = []
    for part in path.replace("\\", "/").replace("\u00a0", " ").split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        parts.append(part)
    return "/".join(parts) or "/"


def join_path(*parts: str) -> str:
    """Join path parts verbatim and normalize (a leading "/" does not reset)."""
    return normalize_path("/".join(parts))


def is_note_path(path: str) -> bool:
    return posixpath.splitext(path)[1].lower() in NOTE_EXTENSIONS


def is_canvas_path(path: str) -> bool:
    return posixpath.splitext(path)[1].lower() == ".canvas"


def resolve_root(note_folder: str, settings: Settings, host_folder: str = "/") -> str:
    """Compute the attachment root directory for a note living in `note_folder`.

    `host_folder` is the host's own attachment-folder setting, only consulted
    in HOST_DEFAULT mode:
      "/"        -> vault root
      "./"       -> the note's folder
      "./<sub>"  -> <sub> under the note's folder
      otherwise  -> that literal path
    """
    if settings.root_mode == RootMode.IN_FOLDER:
        return normalize_path(settings.attachment_root)

    if settings.root_mode == RootMode.NEXT_TO_NOTE:
        return join_path(note_folder, settings.attachment_root.removeprefix("./"))

    if host_folder == "/":
        return "/"
    if host_folder == "./":
        return normalize_path(note_folder)
    if host_folder.startswith("./") and len(host_folder) > 2:
        return join_path(note_folder, host_folder[2:])
    return normalize_path(host_folder)


def resolve_attachment_path(
    note_name: str,
    note_folder: str,
    settings: Settings,
    host_folder: str = "/",
) -> str:
    """Resolve the attachment directory of a note.

    Unknown placeholders are left in place literally.
    """
    root = resolve_root(note_folder, settings, host_folder)
    values = {"notename": note_name, "notepath": note_folder}
    sub = _NOTE_VARS.sub(lambda m: values[m.group(1)], settings.attachment_path)
    return join_path(root, sub)


def render_file_name(
    note_name: str,
    settings: Settings,
    now: pendulum.DateTime | None = None,
) -> str:
    """Render the attachment file name template (without extension)."""
    moment = now or pendulum.now()

    def _sub(m: re.Match) -> str:
        if m.group(1):
            return note_name
        return moment.format(m.group(2) or settings.date_format)

    return _NAME_VARS.sub(_sub, settings.image_format)


def _is_ancestor(a: list[str], b: list[str]) -> bool:
    """True when path `a` is `b` itself or one of its ancestors."""
    return len(a) <= len(b) and b[: len(a)] == a


def strip_paths(src: str, dst: str) -> StripResult | None:
    """Reduce an attachment path change to the outermost entry that moved.

    Trailing segments shared by both paths are dropped, keeping at least the
    first differing segment:

        x/y/Note/img.png -> x/y/NoteRenamed/img.png
        gives x/y/Note -> x/y/NoteRenamed

    If dropping the shared tail would move a folder into itself, the full
    paths are used instead. Returns None when no valid move exists (empty
    paths, or one path contains the other).
    """
    if src == dst:
        return StripResult(source=src, dest=dst)

    src_parts = [p for p in src.split("/") if p]
    dst_parts = [p for p in dst.split("/") if p]
    if not src_parts or not dst_parts:
        return None

    shortest = min(len(src_parts), len(dst_parts))

    prefix = 0
    while prefix < shortest and src_parts[prefix] == dst_parts[prefix]:
        prefix += 1

    suffix = 0
    while (
        suffix < shortest - prefix
        and src_parts[len(src_parts) - 1 - suffix] == dst_parts[len(dst_parts) - 1 - suffix]
    ):
        suffix += 1

    nsrc = src_parts[: len(src_parts) - suffix]
    ndst = dst_parts[: len(dst_parts) - suffix]
    logger.debug("strip %s -> %s: prefix=%d suffix=%d", src, dst, prefix, suffix)

    if nsrc and ndst and not _is_ancestor(nsrc, ndst) and not _is_ancestor(ndst, nsrc):
        return StripResult(source="/".join(nsrc), dest="/".join(ndst))

    # The shared tail was the part that carried the change; move whole paths.
    if _is_ancestor(src_parts, dst_parts) or _is_ancestor(dst_parts, src_parts):
        return None
    return StripResult(source="/".join(src_parts), dest="/".join(dst_parts))
