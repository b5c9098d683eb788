# Shared pytest fixtures
from __future__ import annotations

import itertools
import tempfile
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from sheetboard.logging.events import RecordingSink
from sheetboard.logging.init import reset_logging
from sheetboard.models.board import Column, Group, RemoteItem
from sheetboard.models.config_models import SyncMode, SyncOptions


class FakeBoard:
    """In-memory board implementing the adapter methods the engine uses.

    Column values are stored by column id; listing items maps them back to
    titles the way the real API does. Every call is recorded in ``calls``.
    """

    def __init__(self, columns: list[tuple[str, str]] | None = None) -> None:
        self._ids = itertools.count(1)
        self.groups: dict[str, Group] = {}
        self.archived: dict[str, Group] = {}
        self.columns: dict[str, Column] = {}
        self.items: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[Any, ...]] = []
        for col_id, title in columns or [("name", "Name")]:
            self.columns[col_id] = Column(id=col_id, title=title)

    def _next(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    # groups
    def list_groups(self, board_id: str) -> list[Group]:
        self.calls.append(("list_groups", board_id))
        return list(self.groups.values())

    def create_group(self, board_id: str, title: str) -> str:
        self.calls.append(("create_group", board_id, title))
        group = Group(id=self._next("group_"), title=title)
        self.groups[group.id] = group
        return group.id

    def archive_group(self, board_id: str, group_id: str) -> str:
        self.calls.append(("archive_group", board_id, group_id))
        self.archived[group_id] = self.groups.pop(group_id)
        return group_id

    # columns
    def list_columns(self, board_id: str) -> list[Column]:
        self.calls.append(("list_columns", board_id))
        return list(self.columns.values())

    def create_column(self, board_id: str, title: str, column_type: str = "text") -> str:
        self.calls.append(("create_column", board_id, title, column_type))
        col = Column(id=self._next("text_"), title=title)
        self.columns[col.id] = col
        return col.id

    def delete_column(self, board_id: str, column_id: str) -> str:
        self.calls.append(("delete_column", board_id, column_id))
        del self.columns[column_id]
        return column_id

    # items
    def add_item(self, group_id: str, name: str, values_by_title: dict[str, str]) -> str:
        """Seed an item directly (no call recorded)."""
        by_id = {}
        for title, text in values_by_title.items():
            col = next(c for c in self.columns.values() if c.title == title)
            by_id[col.id] = text
        item_id = self._next("item_")
        self.items[item_id] = {"name": name, "group_id": group_id, "values": by_id}
        return item_id

    def list_items_in_group(self, board_id: str, group_id: str) -> list[RemoteItem]:
        self.calls.append(("list_items_in_group", board_id, group_id))
        result = []
        for item_id, item in self.items.items():
            if item["group_id"] != group_id:
                continue
            fields = {
                col.title: item["values"].get(col.id, "")
                for col in self.columns.values()
                if col.id != "name"
            }
            result.append(RemoteItem(id=item_id, name=item["name"], group_id=group_id, fields=fields))
        return result

    def create_item(self, board_id: str, group_id: str, name: str) -> str:
        self.calls.append(("create_item", board_id, group_id, name))
        item_id = self._next("item_")
        self.items[item_id] = {"name": name, "group_id": group_id, "values": {}}
        return item_id

    def update_item_fields(self, board_id: str, item_id: str, fields: dict[str, str]) -> str:
        self.calls.append(("update_item_fields", board_id, item_id, dict(fields)))
        self.items[item_id]["values"].update(fields)
        return item_id

    # helpers for assertions
    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]

    def titles(self) -> set[str]:
        return {c.title for c in self.columns.values()}

    def value(self, item_name: str, title: str) -> str:
        col = next(c for c in self.columns.values() if c.title == title)
        item = next(i for i in self.items.values() if i["name"] == item_name)
        return item["values"].get(col.id, "")


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  url: https://board.example.test/v2
  timeout_seconds: 10
  page_size: 500
sync:
  mode: incremental
  key_field: Year
  display_column: Name
  protected_fields: [Comment]
  preserve_formatting: true
  settle_delay_seconds: 0
extraction:
  command: [node, Docuparse.js]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_workbook(path: Path, rows: list[list[Any]], title: str = "Models") -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


@pytest.fixture()
def workbook_factory(temp_workdir: Path):
    def _make(rows: list[list[Any]], name: str = "Acura models.xlsx") -> Path:
        return make_workbook(temp_workdir / "data" / name, rows)
    return _make


@pytest.fixture()
def acura_rows() -> list[list[Any]]:
    return [
        ["Year", "Make", "Model", "Comment"],
        [2020, "Acura", "MDX", "check trim"],
        [2021, "Acura", "RDX", None],
        [2022, "Acura", None, None],
    ]


@pytest.fixture()
def make_board():
    return FakeBoard


@pytest.fixture()
def fake_board() -> FakeBoard:
    return FakeBoard()


@pytest.fixture()
def events() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def incremental_options() -> SyncOptions:
    return SyncOptions(mode=SyncMode.INCREMENTAL, settle_delay_seconds=0)


@pytest.fixture()
def replace_options() -> SyncOptions:
    return SyncOptions(mode=SyncMode.REPLACE, settle_delay_seconds=0)
