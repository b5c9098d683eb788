from __future__ import annotations

import logging
from typing import Protocol

from sheetboard.logging.events import EventSink, NullSink, SyncEvent
from sheetboard.models.board import Column
from sheetboard.models.config_models import SyncOptions, fold
from sheetboard.models.operations import ColumnMapping, MappedColumn, SchemaPlan
from sheetboard.models.record import Schema

"""Column alignment between the sheet header and the board.

Rules:
1. the key field never becomes a column (it is the item name)
2. every other writable field is matched case-insensitively or created (text type),
   in sheet order
3. protected fields (e.g. Comment) always exist on the board and are never deleted
4. any other board column that is not the display column, not the key field
   (when protect_key_column) and not a sheet field is deleted
"""

logger = logging.getLogger(__name__)


class ColumnPort(Protocol):
    def create_column(self, board_id: str, title: str, column_type: str = "text") -> str: ...

    def delete_column(self, board_id: str, column_id: str) -> str: ...


def plan_schema(schema: Schema, columns: list[Column], options: SyncOptions) -> SchemaPlan:
    """Decide keep / create / ensure / delete without touching the board."""
    by_title: dict[str, Column] = {}
    for col in columns:
        # first occurrence wins; titles are expected to be unique on the board
        by_title.setdefault(fold(col.title), col)

    display = fold(options.display_column) if options.display_column else None
    keep: dict[str, Column] = {}
    create: list[str] = []
    for field in schema.fields:
        if not field.name or field.protected or options.is_key(field.name) or options.is_protected(field.name):
            continue
        # the display column holds the item name; a sheet field of that name is not written
        if display is not None and fold(field.name) == display:
            continue
        match = by_title.get(fold(field.name))
        if match is not None:
            keep[field.name] = match
        elif field.name not in create:
            create.append(field.name)

    ensure: list[str] = []
    protected_existing: dict[str, Column] = {}
    for title in sorted(options.protected_fields, key=fold):
        match = by_title.get(fold(title))
        if match is None:
            ensure.append(title)
        else:
            protected_existing[title] = match

    retained = {fold(name) for name in schema.names if name}
    retained.update(fold(p) for p in options.protected_fields)
    if options.display_column:
        retained.add(fold(options.display_column))
    if options.protect_key_column:
        retained.add(fold(options.key_field))

    delete = [col for col in columns if fold(col.title) not in retained]
    return SchemaPlan(
        keep=keep,
        create=create,
        ensure=ensure,
        delete=delete,
        protected_existing=protected_existing,
    )


def apply_schema_plan(
    plan: SchemaPlan,
    schema: Schema,
    board: ColumnPort,
    board_id: str,
    events: EventSink | None = None,
) -> ColumnMapping:
    """Run the plan against the board; returns field -> column id for writable fields."""
    events = events or NullSink()
    created_ids: dict[str, str] = {}
    created_titles: list[str] = []

    for field_name in plan.create:
        column_id = board.create_column(board_id, field_name, "text")
        created_ids[field_name] = column_id
        created_titles.append(field_name)
        events.emit(SyncEvent("create", "column", f'"{field_name}"', f"(id={column_id})"))

    for title in plan.ensure:
        column_id = board.create_column(board_id, title, "text")
        created_titles.append(title)
        events.emit(SyncEvent("create", "column", f'"{title}"', f"(id={column_id}, protected)"))

    for field_name, col in plan.keep.items():
        events.emit(SyncEvent("keep", "column", f'"{field_name}"', f"(id={col.id})"))
    for title, col in plan.protected_existing.items():
        events.emit(SyncEvent("keep", "column", f'"{col.title}"', f"(id={col.id}, protected)"))

    deleted_titles: list[str] = []
    for col in plan.delete:
        board.delete_column(board_id, col.id)
        deleted_titles.append(col.title)
        events.emit(SyncEvent("delete", "column", f'"{col.title}"', f"(id={col.id})"))

    mapped: list[MappedColumn] = []
    for field in schema.fields:
        if field.name in plan.keep:
            col = plan.keep[field.name]
            mapped.append(MappedColumn(field=field.name, column_id=col.id, title=col.title))
        elif field.name in created_ids:
            mapped.append(MappedColumn(field=field.name, column_id=created_ids[field.name], title=field.name))

    logger.debug(
        f"column mapping fields={len(mapped)} created={len(created_titles)} deleted={len(deleted_titles)}"
    )
    return ColumnMapping(
        columns=tuple(mapped),
        created=tuple(created_titles),
        deleted=tuple(deleted_titles),
    )
