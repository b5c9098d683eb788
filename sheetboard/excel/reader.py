from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from sheetboard.errors import SourceUnreadable
from sheetboard.models.config_models import SyncOptions, fold
from sheetboard.models.record import Field, Record, Schema, SheetData

"""Spreadsheet reader.

Row 1 is the header row, rows 2+ are data. Only the first worksheet is used.
pandas picks the engine from the extension (openpyxl for .xlsx/.xlsm, xlrd
for legacy .xls).
"""

READABLE_SUFFIXES = {".xlsx", ".xlsm", ".xls"}

__all__ = [
    "READABLE_SUFFIXES",
    "disambiguate",
    "group_label_for",
    "read_first_sheet",
    "load_schema_and_records",
    "inspect_sheet",
]


def disambiguate(names: Iterable[Any]) -> list[str]:
    """Trim header names and suffix repeats with their occurrence count.

    >>> disambiguate(["Name", "Make", "Name", " Name ", "MAKE"])
    ['Name', 'Make', 'Name (2)', 'Name (3)', 'MAKE (2)']

    Repeats are counted case-insensitively, the same way fields are matched to
    board columns; blank headers stay "" for their first occurrence.
    """
    seen: dict[str, int] = {}
    result: list[str] = []
    for raw in names:
        name = "" if raw is None or (not isinstance(raw, str) and pd.isna(raw)) else str(raw).strip()
        folded = fold(name)
        count = seen.get(folded, 0) + 1
        seen[folded] = count
        result.append(name if count == 1 else f"{name} ({count})")
    return result


def group_label_for(path: Path) -> str:
    """Group title for a spreadsheet: first word of the file name.

    ``"Acura 2015-2024 models.xlsx"`` -> ``"Acura"``
    """
    stem = Path(path).stem.strip()
    parts = stem.split()
    return parts[0] if parts else stem


def read_first_sheet(path: Path) -> tuple[str, pd.DataFrame]:
    """Read the first worksheet raw (no header inference, object dtype)."""
    path = Path(path)
    if not path.exists():
        raise SourceUnreadable(f"spreadsheet not found: {path}")
    if path.suffix.lower() not in READABLE_SUFFIXES:
        raise SourceUnreadable(f"unsupported spreadsheet format: {path.suffix or '<none>'}")
    try:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                raise SourceUnreadable(f"workbook has no sheets: {path}")
            sheet_name = str(xls.sheet_names[0])
            df = xls.parse(xls.sheet_names[0], header=None, dtype=object)
    except SourceUnreadable:
        raise
    except Exception as e:
        raise SourceUnreadable(f"cannot read {path.name}: {e}") from e
    return sheet_name, df


def load_schema_and_records(path: Path, options: SyncOptions | None = None) -> SheetData:
    """Load the header schema and data records of the first sheet.

    Fully blank rows are dropped; blank cells become None. Protected flags are
    set for the key field and the configured protected fields.
    """
    options = options or SyncOptions()
    path = Path(path)
    sheet_name, df = read_first_sheet(path)

    if df.shape[0] == 0:
        return SheetData(path_name=path.name, sheet_name=sheet_name, schema=Schema(), records=[])

    names = disambiguate(df.iloc[0].tolist())
    schema = Schema(
        fields=tuple(
            Field(
                name=name,
                position=idx,
                protected=options.is_key(name) or options.is_protected(name),
            )
            for idx, name in enumerate(names)
        )
    )

    records: list[Record] = []
    # df index 0 is worksheet row 1 (headers)
    for idx, raw in df.iloc[1:].iterrows():
        if raw.isna().all():
            continue
        values: dict[str, Any] = {}
        for name, val in zip(names, raw.tolist(), strict=False):
            if isinstance(val, str):
                values[name] = val if val.strip() else None
            elif val is None or pd.isna(val):
                values[name] = None
            else:
                values[name] = val
        records.append(Record(row_number=int(idx) + 1, values=values))

    return SheetData(path_name=path.name, sheet_name=sheet_name, schema=schema, records=records)


def inspect_sheet(path: Path, sample: int = 3) -> dict[str, Any]:
    """Headers plus a few sample rows (JSON-friendly), for the CLI inspect command."""
    sheet = load_schema_and_records(path)
    safe_rows = []
    for r in sheet.records[:sample]:
        safe_rows.append({k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.values.items()})
    return {
        "file": sheet.path_name,
        "sheet": sheet.sheet_name,
        "columns": sheet.schema.names,
        "rows": len(sheet.records),
        "sample_rows": safe_rows,
    }
