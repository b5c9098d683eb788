from __future__ import annotations

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter

from sheetboard.errors import SinkUnwritable
from sheetboard.logging.events import EventSink, NullSink, SyncEvent
from sheetboard.models.operations import CellUpdate
from sheetboard.models.record import Schema

from .values import to_text

"""Cell patching for the pull direction.

Only the addressed cells change. With preserve_formatting the workbook is
edited in place through openpyxl (styles, number formats, merged cells, other
sheets survive); without it a values-only copy is written. Either way the
result goes to a temp file next to the target and is swapped in with
os.replace, so a failed save never leaves a half-written spreadsheet behind.
"""

WRITABLE_SUFFIXES = {".xlsx", ".xlsm"}

__all__ = [
    "WRITABLE_SUFFIXES",
    "apply_cell_updates",
]


def _coerce(new_text: str, old_value: Any) -> Any:
    """Keep numeric cells numeric when the incoming text is a number."""
    if new_text == "":
        return None
    if isinstance(old_value, (int, float)) and not isinstance(old_value, bool):
        try:
            return int(new_text)
        except ValueError:
            pass
        try:
            return float(new_text)
        except ValueError:
            pass
    return new_text


def apply_cell_updates(
    path: Path,
    schema: Schema,
    updates: Sequence[CellUpdate],
    *,
    preserve_formatting: bool = True,
    events: EventSink | None = None,
) -> int:
    """Write updates into the first worksheet of path.

    Returns the number of cells written. Raises SinkUnwritable when the file
    cannot be opened for writing, an update names an unknown field, or the
    format cannot be written (legacy .xls).
    """
    events = events or NullSink()
    path = Path(path)
    if not updates:
        return 0
    if path.suffix.lower() not in WRITABLE_SUFFIXES:
        raise SinkUnwritable(f"cannot write {path.suffix or '<none>'} files (save the workbook as .xlsx): {path.name}")

    keep_vba = path.suffix.lower() == ".xlsm"
    try:
        wb = load_workbook(path, keep_vba=keep_vba)
    except Exception as e:
        raise SinkUnwritable(f"cannot open {path.name} for writing: {e}") from e

    ws = wb.worksheets[0]
    # emitted only once the save went through
    pending: list[SyncEvent] = []
    for u in updates:
        field = schema.find(u.field_name)
        if field is None:
            raise SinkUnwritable(f"unknown column '{u.field_name}' for {path.name}")
        cell = ws.cell(row=u.row_number, column=field.position + 1)
        old = cell.value
        cell.value = _coerce(u.new_value, old)
        pending.append(
            SyncEvent(
                action="update",
                entity="cell",
                identifier=f"{get_column_letter(field.position + 1)}{u.row_number}",
                detail=f"[Key: {u.key}][Column: {u.field_name}]",
                old=to_text(old),
                new=u.new_value,
            )
        )

    if not preserve_formatting:
        wb = _values_only_copy(wb)

    _atomic_save(wb, path)
    for event in pending:
        events.emit(event)
    return len(pending)


def _values_only_copy(source: Workbook) -> Workbook:
    target = Workbook()
    target.remove(target.active)
    for ws in source.worksheets:
        out = target.create_sheet(title=ws.title)
        for row in ws.iter_rows(values_only=True):
            out.append(list(row))
    return target


def _atomic_save(wb: Workbook, path: Path) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=path.suffix, dir=path.parent)
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        wb.save(tmp)
        os.replace(tmp, path)
    except OSError as e:
        raise SinkUnwritable(f"cannot write {path.name} (is it open in another program?): {e}") from e
    finally:
        tmp.unlink(missing_ok=True)
