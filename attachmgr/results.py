"""Result types returned by the event handlers."""

from dataclasses import dataclass, field
from enum import Enum

from .errors import ErrorKind
from .models import RenameKind


class Status(str, Enum):
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"
    PARTIAL = "partial"  # the move happened, a follow-up step did not


@dataclass
class BaseResult:
    """Base class for handler results."""
    status: Status = Status.DONE
    kind: ErrorKind | None = None
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.status == Status.DONE


@dataclass
class RenameResult(BaseResult):
    """Outcome of synchronizing attachments after a note rename."""
    rename_kind: RenameKind | None = None
    old_attachment_path: str | None = None
    new_attachment_path: str | None = None
    source: str | None = None  # reduced path that was (or would be) moved
    dest: str | None = None


@dataclass
class RelocationResult(BaseResult):
    """Outcome of moving one captured file into its attachment folder."""
    source: str = ""
    dest: str = ""
    old_link: str | None = None
    new_link: str | None = None


@dataclass
class DropResult(BaseResult):
    """Outcome of saving dropped files."""
    saved: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
