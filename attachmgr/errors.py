"""Error types shared by the attachment engine."""

from enum import Enum


class ErrorKind(str, Enum):
    """How an event ended when it did not complete cleanly."""

    SKIPPED_NO_OP = "skipped_no_op"  # precondition not met, silent
    REDUCTION_FAILURE = "reduction_failure"  # old/new paths could not be aligned
    DESTINATION_COLLISION = "destination_collision"  # target already occupied
    STORAGE_FAILURE = "storage_failure"  # move/create failed, re-raised
    MISSING_SOURCE = "missing_source"  # path exists but the tree walk never reached it
    STALE_LINK_WARNING = "stale_link_warning"  # moved, but reference not rewritten


class AttachmentError(Exception):
    """Base class for attachmgr errors."""


class ConfigError(AttachmentError):
    """Settings could not be loaded or contain an invalid value."""


class StorageError(AttachmentError):
    """A storage operation (move, mkdir, write) failed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
