from __future__ import annotations

from dataclasses import dataclass, field

from .config_models import Direction

"""Invocation surface models and per-run statistics."""


@dataclass(frozen=True)
class SyncRequest:
    """What a caller (CLI, UI) hands to run_sync()."""
    direction: Direction
    board_id: str
    api_key: str
    file_path: str


@dataclass
class SyncStats:
    """Counters accumulated by the engine during one run."""
    direction: str
    mode: str
    group: str = ""
    groups_created: int = 0
    groups_archived: int = 0
    columns_created: int = 0
    columns_deleted: int = 0
    items_created: int = 0
    items_updated: int = 0
    items_skipped: int = 0
    cells_updated: int = 0
    warnings: int = 0
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class SyncResult:
    """Whole-run outcome; no finer-grained partial status is reported."""
    success: bool
    message: str
    stats: SyncStats | None = field(default=None, compare=False)
