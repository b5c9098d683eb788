from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Config dataclasses for the spreadsheet <-> board sync tool.

These are the typed counterparts of config/sync.yml. The loader in
sheetboard/config/loader.py builds them; everything downstream only sees these.
"""

DEFAULT_API_URL = "https://api.monday.com/v2"


class SyncMode(Enum):
    """Push strategy.

    - REPLACE: archive the matching group, create a fresh one, repopulate (destructive)
    - INCREMENTAL: keep the group, diff items and update only what changed
    """
    REPLACE = "replace"
    INCREMENTAL = "incremental"


class Direction(Enum):
    PUSH = "push"
    PULL = "pull"


def fold(name: object) -> str:
    """Comparison form of a field/column/group name (trimmed, case-insensitive)."""
    if name is None:
        return ""
    return str(name).strip().casefold()


@dataclass(frozen=True)
class ApiConfig:
    """Board API connection settings."""
    url: str = DEFAULT_API_URL
    timeout_seconds: float = 30.0
    page_size: int = 500  # items_page limit
    api_version: str | None = None  # sent as API-Version header when set


@dataclass(frozen=True)
class SyncOptions:
    """Policy knobs that used to be hard-coded per script variant.

    key_field and display_column are protected independently: the key field
    column is only kept when protect_key_column is set, the display column
    (the board's item-name column) whenever it is not None.
    """
    mode: SyncMode = SyncMode.INCREMENTAL
    key_field: str = "Year"
    display_column: str | None = "Name"
    protect_key_column: bool = True
    protected_fields: frozenset[str] = field(default_factory=lambda: frozenset({"Comment"}))
    preserve_formatting: bool = True
    settle_delay_seconds: float = 1.0  # post-create settle delay
    group_name: str | None = None  # None -> derived from the file name

    def is_protected(self, name: str) -> bool:
        folded = fold(name)
        return any(fold(p) == folded for p in self.protected_fields)

    def is_key(self, name: str) -> bool:
        return fold(name) == fold(self.key_field)


@dataclass(frozen=True)
class ExtractionConfig:
    """External document parser launched out-of-band (e.g. ["node", "Docuparse.js"])."""
    command: tuple[str, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    api: ApiConfig = field(default_factory=ApiConfig)
    sync: SyncOptions = field(default_factory=SyncOptions)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
