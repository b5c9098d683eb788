from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config_models import fold

"""Spreadsheet-side domain model: Field, Schema, Record, SheetData."""

__all__ = [
    "Field",
    "Schema",
    "Record",
    "SheetData",
]


@dataclass(frozen=True)
class Field:
    name: str  # disambiguated header text
    position: int  # 0-based column index in the sheet
    protected: bool = False


@dataclass(frozen=True)
class Schema:
    """Ordered header fields of one sheet."""
    fields: tuple[Field, ...] = ()

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def find(self, name: str) -> Field | None:
        """Case-insensitive lookup by (trimmed) field name."""
        folded = fold(name)
        for f in self.fields:
            if fold(f.name) == folded:
                return f
        return None

    def __len__(self) -> int:
        return len(self.fields)


@dataclass(frozen=True)
class Record:
    """One data row of the sheet.

    row_number is the 1-based worksheet row (the first data row is 2).
    """
    row_number: int
    values: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> Any:
        return self.values.get(name)


@dataclass(frozen=True)
class SheetData:
    path_name: str
    sheet_name: str
    schema: Schema
    records: list[Record]
