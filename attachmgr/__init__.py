"""attachmgr - keep note attachments next to the notes that own them."""

__version__ = "0.3.0"
