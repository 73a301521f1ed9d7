"""Persisted settings for the attachment engine.

Settings live in <vault>/.attachmgr/settings.json. Keys written by the
Obsidian plugin's data.json (camelCase) are accepted on load as well.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import ConfigError

VAR_NOTENAME = "${notename}"
VAR_NOTEPATH = "${notepath}"
VAR_DATE = "${date}"


class RootMode(str, Enum):
    """Where the attachment root directory is anchored."""

    IN_FOLDER = "inFolderBelow"  # fixed folder, independent of the note
    NEXT_TO_NOTE = "nextToNote"  # under the note's own folder
    HOST_DEFAULT = "obsFolder"  # whatever the host's attachment setting says


@dataclass
class Settings:
    root_mode: RootMode = RootMode.HOST_DEFAULT
    attachment_root: str = ""
    attachment_path: str = f"{VAR_NOTEPATH}/{VAR_NOTENAME}"
    image_format: str = f"IMG-{VAR_DATE}"
    date_format: str = "YYYYMMDDHHmmssSSS"
    auto_rename_folder: bool = True

    @property
    def path_is_note_coupled(self) -> bool:
        """True when the directory template depends on both note name and note path."""
        return VAR_NOTENAME in self.attachment_path and VAR_NOTEPATH in self.attachment_path

    def update(self, **changes: Any) -> Settings:
        """Return a copy with `changes` applied and validated."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        return _coerce(replace(self, **changes))

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["root_mode"] = self.root_mode.value
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        values: dict[str, Any] = {}
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            key = _PLUGIN_KEYS.get(key, key)
            if key in known:
                values[key] = value
        return _coerce(cls(**values))


# data.json keys used by the Obsidian plugin
_PLUGIN_KEYS = {
    "saveAttE": "root_mode",
    "attachmentRoot": "attachment_root",
    "attachmentPath": "attachment_path",
    "imageFormat": "image_format",
    "dateFormat": "date_format",
    "autoRenameFolder": "auto_rename_folder",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _coerce(settings: Settings) -> Settings:
    try:
        settings.root_mode = RootMode(settings.root_mode)
    except ValueError:
        choices = ", ".join(m.value for m in RootMode)
        raise ConfigError(f"Invalid root_mode {settings.root_mode!r} (expected one of: {choices})") from None

    flag = settings.auto_rename_folder
    if isinstance(flag, str):
        if flag.lower() in _TRUE:
            flag = True
        elif flag.lower() in _FALSE:
            flag = False
        else:
            raise ConfigError(f"Invalid auto_rename_folder {flag!r} (expected true/false)")
    settings.auto_rename_folder = bool(flag)

    for name in ("attachment_root", "attachment_path", "image_format", "date_format"):
        value = getattr(settings, name)
        if not isinstance(value, str):
            raise ConfigError(f"{name} must be a string, got {type(value).__name__}")
    return settings


def get_settings_path(vault_path: Path) -> Path:
    """Get the path to the settings file."""
    return vault_path / ".attachmgr" / "settings.json"


def load_settings(vault_path: Path) -> Settings:
    """Load settings, falling back to defaults when no file exists."""
    path = get_settings_path(vault_path)
    if not path.exists():
        return Settings()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return Settings.from_dict(data)


def save_settings(vault_path: Path, settings: Settings) -> Path:
    """Write settings and return the file path."""
    path = get_settings_path(vault_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path
