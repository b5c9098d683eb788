from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .board import Column

"""Transient plans produced by the reconcilers and consumed by the engine."""

__all__ = [
    "ItemAction",
    "FieldChange",
    "ItemOperation",
    "CellUpdate",
    "PullPlan",
    "MappedColumn",
    "ColumnMapping",
    "SchemaPlan",
]


class ItemAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


@dataclass(frozen=True)
class FieldChange:
    field: str
    old: str
    new: str


@dataclass(frozen=True)
class ItemOperation:
    """One item-level decision of a push.

    values is keyed by remote column id. For CREATE it only carries non-blank
    cells; for UPDATE it carries the full mapped field set.
    """
    action: ItemAction
    key: str
    row_number: int
    item_id: str | None = None
    values: dict[str, str] = field(default_factory=dict)
    changes: tuple[FieldChange, ...] = ()


@dataclass(frozen=True)
class CellUpdate:
    row_number: int  # 1-based worksheet row
    field_name: str
    old_value: str
    new_value: str
    key: str = ""


@dataclass(frozen=True)
class PullPlan:
    updates: list[CellUpdate]
    unmatched: list[str]  # remote item names with no spreadsheet row
    matched: int = 0
    duplicates: list[str] = field(default_factory=list)  # repeated item names, ignored


@dataclass(frozen=True)
class MappedColumn:
    field: str  # spreadsheet field name
    column_id: str
    title: str  # remote column title


@dataclass(frozen=True)
class ColumnMapping:
    """Spreadsheet field -> remote column, writable fields only (in sheet order)."""
    columns: tuple[MappedColumn, ...] = ()
    created: tuple[str, ...] = ()  # titles created during this run
    deleted: tuple[str, ...] = ()  # titles deleted during this run

    def column_id(self, field_name: str) -> str | None:
        for mc in self.columns:
            if mc.field == field_name:
                return mc.column_id
        return None


@dataclass(frozen=True)
class SchemaPlan:
    """Column decisions before any network call.

    keep:   field -> existing Column
    create: field names (sheet order) that need a new text column
    ensure: protected titles that must exist (created when missing)
    delete: remote columns to drop
    """
    keep: dict[str, Column]
    create: list[str]
    ensure: list[str]
    delete: list[Column]
    protected_existing: dict[str, Column] = field(default_factory=dict)
