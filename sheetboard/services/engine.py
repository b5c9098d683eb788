from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..board.client import BoardClient
from ..errors import GroupNotFound, SyncError
from ..excel.reader import group_label_for, load_schema_and_records
from ..excel.writer import apply_cell_updates
from ..logging.events import EventSink, NullSink, SyncEvent
from ..models.board import Column, Group, RemoteItem
from ..models.config_models import AppConfig, Direction, SyncMode, SyncOptions, fold
from ..models.operations import ColumnMapping, ItemAction, ItemOperation
from ..models.record import Schema
from ..models.sync_result import SyncRequest, SyncResult, SyncStats
from .progress import ProgressTracker
from .row_reconciler import index_items, index_records, plan_pull, plan_push, resolve_key_field
from .schema_reconciler import apply_schema_plan, plan_schema

"""Sync engine.

One run = load the sheet once, align groups, align columns, align rows, apply.
Board calls are strictly sequential; each one completes before the next
starts. Between creating an item and filling its columns the engine waits
settle_delay_seconds (the board is eventually consistent right after
create_item). There is no rollback: a failure aborts the rest of the run and
whatever was already applied stays applied.
"""

logger = logging.getLogger(__name__)


class BoardPort(Protocol):
    def list_groups(self, board_id: str) -> list[Group]: ...

    def create_group(self, board_id: str, title: str) -> str: ...

    def archive_group(self, board_id: str, group_id: str) -> str: ...

    def list_columns(self, board_id: str) -> list[Column]: ...

    def create_column(self, board_id: str, title: str, column_type: str = "text") -> str: ...

    def delete_column(self, board_id: str, column_id: str) -> str: ...

    def list_items_in_group(self, board_id: str, group_id: str) -> list[RemoteItem]: ...

    def create_item(self, board_id: str, group_id: str, name: str) -> str: ...

    def update_item_fields(self, board_id: str, item_id: str, fields: dict[str, str]) -> str: ...


class ReplaceAborted(SyncError):
    """A replace-mode run failed after the previous group was archived."""


def find_group(groups: list[Group], title: str) -> Group | None:
    target = fold(title)
    for g in groups:
        if fold(g.title) == target:
            return g
    return None


class SyncEngine:
    def __init__(
        self,
        board: BoardPort,
        options: SyncOptions | None = None,
        events: EventSink | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.board = board
        self.options = options or SyncOptions()
        self.events = events or NullSink()
        self._sleep = sleep

    # ==================== push ====================

    def push(self, file_path: Path, board_id: str, group_name: str | None = None) -> SyncStats:
        """Spreadsheet -> board."""
        started = time.monotonic()
        opts = self.options
        file_path = Path(file_path)
        title = group_name or opts.group_name or group_label_for(file_path)
        stats = SyncStats(direction=Direction.PUSH.value, mode=opts.mode.value, group=title)

        sheet = load_schema_and_records(file_path, opts)
        key_field = resolve_key_field(sheet.schema, opts)
        # validate keys before the first board call
        index_records(sheet.records, key_field)
        logger.info(f"{sheet.path_name}: {len(sheet.records)} rows, columns={sheet.schema.names}")

        archived: Group | None = None
        existing = find_group(self.board.list_groups(board_id), title)
        try:
            if opts.mode is SyncMode.REPLACE:
                if existing is not None:
                    self.board.archive_group(board_id, existing.id)
                    archived = existing
                    stats.groups_archived += 1
                    self.events.emit(SyncEvent("archive", "group", f'"{existing.title}"', f"(id={existing.id})"))
                group_id = self._create_group(board_id, title, stats)
                reuse = False
            elif existing is not None:
                group_id = existing.id
                reuse = True
                self.events.emit(SyncEvent("keep", "group", f'"{existing.title}"', f"(id={existing.id})"))
            else:
                group_id = self._create_group(board_id, title, stats)
                reuse = False

            mapping = self._align_columns(board_id, sheet.schema, stats)

            remote_items: list[RemoteItem] = []
            if reuse:
                remote_items = self.board.list_items_in_group(board_id, group_id)
                logger.info(f'group "{title}": {len(remote_items)} existing items')
                _, duplicates = index_items(remote_items)
                self._warn_duplicates(duplicates, stats)

            operations = plan_push(sheet.records, key_field, mapping, remote_items, opts)
            self._apply_item_operations(board_id, group_id, operations, stats)
        except SyncError as e:
            if archived is not None:
                raise ReplaceAborted(
                    f"{e} (group \"{archived.title}\" was already archived; "
                    f"the board has no complete replacement group)"
                ) from e
            raise

        stats.elapsed_seconds = time.monotonic() - started
        return stats

    def _warn_duplicates(self, names: list[str], stats: SyncStats) -> None:
        for name in names:
            stats.warnings += 1
            self.events.emit(SyncEvent("warn", "item", f'"{name}"', "duplicate item name; only the first is synced"))

    def _create_group(self, board_id: str, title: str, stats: SyncStats) -> str:
        group_id = self.board.create_group(board_id, title)
        stats.groups_created += 1
        self.events.emit(SyncEvent("create", "group", f'"{title}"', f"(id={group_id})"))
        return group_id

    def _align_columns(self, board_id: str, schema: Schema, stats: SyncStats) -> ColumnMapping:
        columns = self.board.list_columns(board_id)
        plan = plan_schema(schema, columns, self.options)
        mapping = apply_schema_plan(plan, schema, self.board, board_id, self.events)
        stats.columns_created += len(mapping.created)
        stats.columns_deleted += len(mapping.deleted)
        return mapping

    def _apply_item_operations(
        self,
        board_id: str,
        group_id: str,
        operations: list[ItemOperation],
        stats: SyncStats,
    ) -> None:
        with ProgressTracker(len(operations), description="Syncing items") as progress:
            for op in operations:
                if op.action is ItemAction.CREATE:
                    self._create_item(board_id, group_id, op, stats)
                elif op.action is ItemAction.UPDATE:
                    self.board.update_item_fields(board_id, op.item_id, op.values)
                    stats.items_updated += 1
                    for change in op.changes:
                        self.events.emit(
                            SyncEvent(
                                "update", "item", f'"{op.key}"',
                                f"(id={op.item_id}) [Column: {change.field}]",
                                old=change.old, new=change.new,
                            )
                        )
                else:
                    stats.items_skipped += 1
                    self.events.emit(SyncEvent("skip", "item", f'"{op.key}"', f"(id={op.item_id}) unchanged"))
                progress.advance(op.key)
                progress.set_postfix(
                    created=stats.items_created, updated=stats.items_updated, skipped=stats.items_skipped
                )

    def _create_item(self, board_id: str, group_id: str, op: ItemOperation, stats: SyncStats) -> None:
        item_id = self.board.create_item(board_id, group_id, op.key)
        stats.items_created += 1
        self.events.emit(SyncEvent("create", "item", f'"{op.key}"', f"(id={item_id}, row {op.row_number})"))
        if not op.values:
            logger.debug(f'item "{op.key}": no column values, update skipped')
            return
        if self.options.settle_delay_seconds > 0:
            self._sleep(self.options.settle_delay_seconds)
        self.board.update_item_fields(board_id, item_id, op.values)
        self.events.emit(
            SyncEvent("update", "item", f'"{op.key}"', f"(id={item_id}) {len(op.values)} column values")
        )

    # ==================== pull ====================

    def pull(self, file_path: Path, board_id: str, group_name: str | None = None) -> SyncStats:
        """Board -> spreadsheet cells (rows are never added or deleted)."""
        started = time.monotonic()
        opts = self.options
        file_path = Path(file_path)
        title = group_name or opts.group_name or group_label_for(file_path)
        stats = SyncStats(direction=Direction.PULL.value, mode=opts.mode.value, group=title)

        sheet = load_schema_and_records(file_path, opts)
        key_field = resolve_key_field(sheet.schema, opts)

        group = find_group(self.board.list_groups(board_id), title)
        if group is None:
            raise GroupNotFound(f'group "{title}" not found on board {board_id}; nothing to pull')

        items = self.board.list_items_in_group(board_id, group.id)
        logger.info(f'group "{group.title}": {len(items)} items')

        plan = plan_pull(sheet, key_field, items, opts)
        self._warn_duplicates(plan.duplicates, stats)
        for key in plan.unmatched:
            stats.warnings += 1
            self.events.emit(SyncEvent("warn", "item", f'"{key}"', "has no matching spreadsheet row; ignored"))

        stats.cells_updated = apply_cell_updates(
            file_path,
            sheet.schema,
            plan.updates,
            preserve_formatting=opts.preserve_formatting,
            events=self.events,
        )
        if not plan.updates:
            self.events.emit(SyncEvent("skip", "run", f'"{sheet.path_name}"', "already up to date"))

        stats.elapsed_seconds = time.monotonic() - started
        return stats


# ==================== invocation surface ====================


def run_sync(
    request: SyncRequest,
    config: AppConfig | None = None,
    *,
    events: EventSink | None = None,
    board: BoardPort | None = None,
    group_name: str | None = None,
) -> SyncResult:
    """{direction, board_id, api_key, file_path} -> {success, message}.

    Every failure is reported as success=False with a readable message; nothing
    finer than whole-run success is reported.
    """
    config = config or AppConfig()
    direction = request.direction.value
    try:
        if board is None:
            board = BoardClient(request.api_key, config.api)
        engine = SyncEngine(board, config.sync, events)
        if request.direction is Direction.PUSH:
            stats = engine.push(Path(request.file_path), request.board_id, group_name)
        else:
            stats = engine.pull(Path(request.file_path), request.board_id, group_name)
    except SyncError as e:
        logger.error(f"{direction} failed: {e}")
        return SyncResult(success=False, message=str(e))
    except Exception as e:
        logger.exception(f"{direction} failed with an unexpected error")
        return SyncResult(success=False, message=f"unexpected error: {e}")

    logger.debug(f"{direction} finished in {stats.elapsed_seconds:.2f}s")
    return SyncResult(success=True, message="Done!", stats=stats)
