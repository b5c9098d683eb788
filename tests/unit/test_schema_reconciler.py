from __future__ import annotations

from sheetboard.models.board import Column
from sheetboard.models.config_models import SyncOptions
from sheetboard.models.record import Field, Schema
from sheetboard.services.schema_reconciler import apply_schema_plan, plan_schema


def _schema(*names):
    return Schema(fields=tuple(Field(name=n, position=i) for i, n in enumerate(names)))


def test_plan_keeps_creates_and_deletes():
    """Sheet {Year, Make, Model} vs board {Name, Make, Foo}: Foo deleted, Model created, Comment ensured."""
    schema = _schema("Year", "Make", "Model")
    columns = [Column("name", "Name"), Column("text_1", "Make"), Column("text_2", "Foo")]

    plan = plan_schema(schema, columns, SyncOptions())

    assert list(plan.keep) == ["Make"]
    assert plan.create == ["Model"]
    assert plan.ensure == ["Comment"]
    assert [c.title for c in plan.delete] == ["Foo"]


def test_field_flagged_protected_is_not_created():
    schema = Schema(fields=(Field("Year", 0), Field("Make", 1), Field("Notes", 2, protected=True)))
    columns = [Column("name", "Name"), Column("text_1", "Make")]

    plan = plan_schema(schema, columns, SyncOptions())

    assert plan.create == []
    assert "Notes" not in plan.keep
    assert plan.delete == []


def test_matching_is_case_insensitive():
    schema = _schema("Year", "make", " MODEL ")
    columns = [Column("name", "Name"), Column("text_1", "Make"), Column("text_2", "Model")]

    plan = plan_schema(schema, columns, SyncOptions())

    assert plan.keep["make"].id == "text_1"
    assert plan.keep[" MODEL "].id == "text_2"
    assert plan.create == []
    assert plan.delete == []


def test_protected_column_never_deleted_or_written():
    schema = _schema("Year", "Make")
    columns = [Column("name", "Name"), Column("text_c", "comment")]

    plan = plan_schema(schema, columns, SyncOptions())

    assert plan.delete == []
    assert plan.ensure == []
    assert "comment" not in plan.keep and "Comment" not in plan.keep
    assert plan.protected_existing["Comment"].id == "text_c"


def test_key_field_is_skipped_and_protected_independently():
    schema = _schema("Year", "Make")
    columns = [Column("name", "Name"), Column("text_y", "Year"), Column("text_1", "Make")]

    kept = plan_schema(schema, columns, SyncOptions(protect_key_column=True))
    assert "Year" not in kept.keep and "Year" not in kept.create
    assert kept.delete == []

    # the key field is still in the sheet header, so it is not a stale column either way
    unprotected = plan_schema(_schema("Make"), columns, SyncOptions(protect_key_column=False))
    assert [c.title for c in unprotected.delete] == ["Year"]


def test_display_column_is_kept_and_not_written():
    schema = _schema("Year", "Name", "Make")
    columns = [Column("name", "Name")]

    plan = plan_schema(schema, columns, SyncOptions())
    assert "Name" not in plan.keep and "Name" not in plan.create
    assert plan.delete == []

    no_display = plan_schema(_schema("Year", "Make"), columns, SyncOptions(display_column=None))
    assert [c.title for c in no_display.delete] == ["Name"]


def test_apply_plan_returns_superset_mapping_in_sheet_order(make_board, events):
    board = make_board([("name", "Name"), ("text_m", "Model"), ("text_f", "Foo")])
    schema = _schema("Year", "Make", "Model", "Comment")
    plan = plan_schema(schema, board.list_columns("b1"), SyncOptions())

    mapping = apply_schema_plan(plan, schema, board, "b1", events)

    assert [mc.field for mc in mapping.columns] == ["Make", "Model"]
    assert mapping.column_id("Model") == "text_m"
    assert mapping.column_id("Comment") is None
    assert set(mapping.created) == {"Make", "Comment"}
    assert mapping.deleted == ("Foo",)
    # every sheet field and the protected field now exist on the board
    assert {"Make", "Model", "Comment"} <= board.titles()
    assert "Foo" not in board.titles()
    assert [e.identifier for e in events.of("delete", "column")] == ['"Foo"']
    assert len(events.of("create", "column")) == 2


def test_second_plan_after_apply_is_a_no_op(make_board):
    board = make_board()
    schema = _schema("Year", "Make", "Model")
    options = SyncOptions()
    apply_schema_plan(plan_schema(schema, board.list_columns("b1"), options), schema, board, "b1")

    again = plan_schema(schema, board.list_columns("b1"), options)

    assert again.create == [] and again.ensure == [] and again.delete == []
