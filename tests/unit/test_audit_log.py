from __future__ import annotations

import json
import re

from sheetboard.logging.audit_log import AuditLogBuffer
from sheetboard.logging.events import SyncEvent
from sheetboard.models.audit_record import AuditRecord


def test_flush_writes_one_json_line_per_event(temp_workdir):
    buf = AuditLogBuffer()
    buf.emit(SyncEvent("create", "item", '"2020"', "(id=1, row 2)"))
    buf.emit(SyncEvent("update", "cell", "C3", "[Key: 2021][Column: Model]", old="RDX", new="RDX A-Spec"))

    path = buf.flush()

    assert path is not None
    assert path.resolve().parent == (temp_workdir / "logs").resolve()
    assert re.fullmatch(r"sync-\d{8}-\d{6}\.log", path.name)
    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [r["action"] for r in records] == ["create", "update"]
    assert records[0]["old"] == "" and records[0]["new"] == ""
    assert records[1]["identifier"] == "C3"
    assert records[1]["new"] == "RDX A-Spec"


def test_empty_buffer_writes_nothing(tmp_path):
    buf = AuditLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_second_flush_appends_to_same_file(tmp_path):
    buf = AuditLogBuffer(tmp_path)
    buf.emit(SyncEvent("skip", "item", '"2020"'))
    first = buf.flush()
    buf.emit(SyncEvent("skip", "item", '"2021"'))
    second = buf.flush()

    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2


def test_audit_record_create_stamps_utc():
    record = AuditRecord.create("archive", "group", '"Acura"', "(id=g1)")
    assert record.timestamp.endswith("Z")
    assert json.loads(record.to_json_line())["entity"] == "group"
