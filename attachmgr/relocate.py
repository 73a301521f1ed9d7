"""Single-file relocation and in-document reference rewriting."""

from __future__ import annotations

import logging
import posixpath
import re
from urllib.parse import quote

from .context import Context
from .errors import ErrorKind, StorageError
from .host import Document
from .paths import join_path
from .results import RelocationResult, Status

logger = logging.getLogger(__name__)


class LinkRewriter:
    """Replaces the first reference to a moved file inside an open document."""

    def __init__(self, ctx: Context):
        self.ctx = ctx

    def rewrite(self, document: Document, old_link: str, new_link: str, old_path: str, new_path: str) -> bool:
        """Rewrite one reference. Returns True if the document now points at `new_path`.

        Notes get a literal substitution of the reference text. Canvases get
        their quoted `"file": "<path>"` attribute replaced.
        """
        text = document.get_text()
        if document.extension == "canvas":
            pattern = re.compile(r'("file"\s*:\s*")' + re.escape(old_path) + r'(")')
            updated, count = pattern.subn(lambda m: m.group(1) + new_path + m.group(2), text, count=1)
            current = f'"{new_path}"' in text
        else:
            candidates = (old_link, *_moved_forms(old_link, old_path, new_path))
            found = next((ref for ref in candidates if ref and ref in text), None)
            count = 1 if found and found != new_link else 0
            updated = text.replace(found, new_link, 1) if count else text
            current = new_link in text

        if count:
            document.set_text(updated)
            self.ctx.notifier.notice(f"update 1 link in {document.path}", style="green")
            return True
        if current:
            # The host already rewrote the reference while moving the file.
            logger.debug("Reference in %s already points at %s", document.path, new_path)
            return True

        self.ctx.notifier.notice(f"No reference to {old_path} found in {document.path}; link left unchanged")
        return False


def _moved_forms(old_link: str, old_path: str, new_path: str) -> list[str]:
    """`old_link` with only its target swapped to `new_path`, as a host move leaves it.

    The target is the last occurrence of the path in the reference text; the
    display text of a markdown link keeps the old name.
    """
    forms = []
    for old, new in ((quote(old_path), quote(new_path)), (old_path, new_path)):
        head, sep, tail = old_link.rpartition(old)
        if sep:
            forms.append(head + new + tail)
    return forms


def relocate_file(
    ctx: Context,
    path: str,
    attach_path: str,
    attach_name: str,
    source_path: str,
    update_link: bool = True,
) -> RelocationResult:
    """Move `path` to `attach_path/attach_name`, then fix its reference in `source_path`.

    Raises StorageError when the folder cannot be created or the move fails.
    """
    storage = ctx.host.storage
    try:
        if not storage.exists(attach_path):
            storage.mkdir(attach_path)
    except StorageError:
        ctx.notifier.notice(f"failed to create {attach_path}", style="red")
        raise

    dest = join_path(attach_path, attach_name)
    logger.debug("Source path: %s", path)
    logger.debug("Destination path: %s", dest)

    old_link = ctx.host.links.generate(path, source_path)
    old_name = posixpath.basename(path)

    try:
        ctx.host.files.rename_file(path, dest)
    except StorageError:
        ctx.notifier.notice(f"failed to move {path} to {dest}", style="red")
        raise
    ctx.notifier.notice(f"renamed {old_name} to {attach_name}", style="green")
    ctx.record("paste", path, dest, source_path)

    result = RelocationResult(source=path, dest=dest, old_link=old_link)
    if not update_link:
        return result

    new_link = ctx.host.links.generate(dest, source_path)
    result.new_link = new_link
    logger.debug("replace text %s -> %s", old_link, new_link)

    document = ctx.host.workspace.active_document()
    if document is None or document.path != source_path:
        message = f"Failed to replace linking in {source_path}: no active editor"
        ctx.notifier.notice(message)
        result.status = Status.PARTIAL
        result.kind = ErrorKind.STALE_LINK_WARNING
        result.message = message
        return result

    if not LinkRewriter(ctx).rewrite(document, old_link, new_link, path, dest):
        result.status = Status.PARTIAL
        result.kind = ErrorKind.STALE_LINK_WARNING
        result.message = f"reference to {path} not found in {source_path}"
    return result
