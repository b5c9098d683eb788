from __future__ import annotations

from collections.abc import Sequence

from sheetboard.errors import DuplicateKey, KeyFieldMissing
from sheetboard.excel.values import same_text, to_text
from sheetboard.models.board import RemoteItem
from sheetboard.models.config_models import SyncMode, SyncOptions, fold
from sheetboard.models.operations import (
    CellUpdate,
    ColumnMapping,
    FieldChange,
    ItemAction,
    ItemOperation,
    PullPlan,
)
from sheetboard.models.record import Record, Schema, SheetData

"""Row-level diffing in both directions.

All comparisons are on trimmed text. Protected fields never take part in a
comparison, a create payload, an update payload or a cell update.
"""

__all__ = [
    "resolve_key_field",
    "index_records",
    "index_items",
    "plan_push",
    "plan_pull",
]


def resolve_key_field(schema: Schema, options: SyncOptions) -> str:
    """Header name of the key field as it appears in the sheet."""
    field = schema.find(options.key_field)
    if field is None:
        raise KeyFieldMissing(f"key field '{options.key_field}' not found in header row")
    return field.name


def index_records(records: Sequence[Record], key_field: str) -> dict[str, Record]:
    """Records by trimmed key text. Blank or repeated keys are errors."""
    index: dict[str, Record] = {}
    for record in records:
        key = to_text(record.get(key_field))
        if not key:
            raise KeyFieldMissing(f"row {record.row_number}: '{key_field}' is blank")
        if key in index:
            raise DuplicateKey(
                f"row {record.row_number}: '{key_field}' value \"{key}\" already used by row "
                f"{index[key].row_number}"
            )
        index[key] = record
    return index


def index_items(items: Sequence[RemoteItem]) -> tuple[dict[str, RemoteItem], list[str]]:
    """Items by trimmed name; the first item wins, later repeats are returned as duplicates."""
    index: dict[str, RemoteItem] = {}
    duplicates: list[str] = []
    for item in items:
        key = item.name.strip()
        if key in index:
            duplicates.append(key)
            continue
        index[key] = item
    return index, duplicates


def _remote_text(item: RemoteItem, title: str) -> str | None:
    folded = fold(title)
    for name, text in item.fields.items():
        if fold(name) == folded:
            return (text or "").strip()
    return None


def plan_push(
    records: Sequence[Record],
    key_field: str,
    mapping: ColumnMapping,
    remote_items: Sequence[RemoteItem] | None,
    options: SyncOptions,
) -> list[ItemOperation]:
    """Item operations for a push, in sheet order.

    REPLACE (or no remote match): CREATE with non-blank values only.
    INCREMENTAL match: UPDATE with the full mapped set when any field differs,
    SKIP otherwise.
    """
    index_records(records, key_field)
    writable = [mc for mc in mapping.columns if not options.is_protected(mc.field) and not options.is_key(mc.field)]
    existing: dict[str, RemoteItem] = {}
    if options.mode is SyncMode.INCREMENTAL and remote_items:
        existing, _ = index_items(remote_items)

    operations: list[ItemOperation] = []
    for record in records:
        key = to_text(record.get(key_field))
        item = existing.get(key)
        if item is None:
            values = {}
            for mc in writable:
                text = to_text(record.get(mc.field))
                if text:
                    values[mc.column_id] = text
            operations.append(
                ItemOperation(action=ItemAction.CREATE, key=key, row_number=record.row_number, values=values)
            )
            continue

        changes: list[FieldChange] = []
        full: dict[str, str] = {}
        for mc in writable:
            new = to_text(record.get(mc.field))
            full[mc.column_id] = new
            old = _remote_text(item, mc.title)
            if not same_text(old, new):
                changes.append(FieldChange(field=mc.field, old=old or "", new=new))

        operations.append(
            ItemOperation(
                action=ItemAction.UPDATE if changes else ItemAction.SKIP,
                key=key,
                row_number=record.row_number,
                item_id=item.id,
                values=full if changes else {},
                changes=tuple(changes),
            )
        )
    return operations


def plan_pull(
    sheet: SheetData,
    key_field: str,
    remote_items: Sequence[RemoteItem],
    options: SyncOptions,
) -> PullPlan:
    """Cell updates that bring the sheet in line with the board.

    Only fields present in both schemas are considered; board items without a
    matching row are reported, never appended; rows are never deleted. Repeated
    item names are reported as duplicates and only the first item is used.
    """
    records = index_records(sheet.records, key_field)
    items, duplicates = index_items(remote_items)

    fields = [
        f for f in sheet.schema.fields
        if f.name and not f.protected and not options.is_key(f.name) and not options.is_protected(f.name)
    ]

    updates: list[CellUpdate] = []
    unmatched: list[str] = []
    matched = 0
    for key, item in items.items():
        record = records.get(key)
        if record is None:
            unmatched.append(key)
            continue
        matched += 1
        for f in fields:
            remote = _remote_text(item, f.name)
            if remote is None:
                continue
            current = to_text(record.get(f.name))
            if not same_text(remote, current):
                updates.append(
                    CellUpdate(
                        row_number=record.row_number,
                        field_name=f.name,
                        old_value=current,
                        new_value=remote,
                        key=key,
                    )
                )
    return PullPlan(updates=updates, unmatched=unmatched, matched=matched, duplicates=duplicates)
