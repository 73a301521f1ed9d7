"""
Relocation journal.

Every completed move (rename synchronization, pasted file relocation, dropped
file save) is appended to <vault>/.attachmgr/journal.log as one JSON object
per line.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class JournalEntry:
    """A single journal entry."""
    timestamp: str
    operation: str  # "rename", "paste", "drop"
    source: str
    destination: str
    note: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        d = {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "source": self.source,
            "destination": self.destination,
            "note": self.note,
        }
        if self.metadata:
            d["metadata"] = self.metadata
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "JournalEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            source=data.get("source", ""),
            destination=data.get("destination", ""),
            note=data.get("note", ""),
            metadata=data.get("metadata", {}),
        )


def get_journal_path(vault_path: Path) -> Path:
    """Get the path to the journal file."""
    return vault_path / ".attachmgr" / "journal.log"


def log_move(
    vault_path: Path,
    operation: str,
    source: str,
    destination: str,
    note: str,
    metadata: dict[str, Any] | None = None,
) -> JournalEntry:
    """
    Append a completed move to the journal.

    Args:
        vault_path: Path to the vault root
        operation: Which flow performed the move ("rename", "paste", "drop")
        source: Vault path before the move ("" for newly saved files)
        destination: Vault path after the move
        note: The note that owns the attachment
        metadata: Additional context (e.g., rename kind)

    Returns:
        The created journal entry
    """
    entry = JournalEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        source=source,
        destination=destination,
        note=note,
        metadata=metadata or {},
    )

    log_path = get_journal_path(vault_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_journal(vault_path: Path, last_n: int | None = None) -> list[JournalEntry]:
    """
    Read entries from the journal.

    Args:
        vault_path: Path to the vault root
        last_n: Only return the last N entries (None = all)

    Returns:
        List of journal entries, oldest first
    """
    log_path = get_journal_path(vault_path)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(JournalEntry.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError):
                # Skip malformed lines
                continue

    if last_n is not None:
        entries = entries[-last_n:] if last_n > 0 else []

    return entries
