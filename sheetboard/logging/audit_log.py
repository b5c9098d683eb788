from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from sheetboard.logging.events import SyncEvent
from sheetboard.models.audit_record import AuditRecord

"""Audit trail buffer (JSON Lines).

- one file per run: ``logs/sync-YYYYMMDD-HHMMSS.log`` (UTC), created on first flush
- fixed record schema (see AuditRecord)
- buffered in memory and written once per run; serial execution, no locking
"""

__all__ = [
    "AuditRecord",
    "AuditLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class AuditLogBuffer:
    """EventSink that buffers audit records and appends them on flush()."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[AuditRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"sync-{stamp}.log"
        return self._file_path

    def emit(self, event: SyncEvent) -> None:
        self.append(
            AuditRecord.create(
                action=event.action,
                entity=event.entity,
                identifier=event.identifier,
                detail=event.detail,
                old=event.old,
                new=event.new,
            )
        )

    def append(self, record: AuditRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the run file. Returns None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
