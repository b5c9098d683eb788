from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""AuditRecord model for the JSON Lines audit trail.

Every reconciliation decision (create / update / delete / skip / archive / warn)
becomes one record. The key set is fixed; consumers may rely on it.
"""

__all__ = [
    "AuditRecord",
]


@dataclass(frozen=True)
class AuditRecord:
    """Structured audit record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        action: create|update|delete|skip|archive|warn
        entity: group|column|item|cell|run
        identifier: id, title, key or cell address of the entity
        detail: free text context
        old: previous value (empty when not applicable)
        new: new value (empty when not applicable)
    """
    timestamp: str
    action: str
    entity: str
    identifier: str
    detail: str
    old: str
    new: str

    @staticmethod
    def create(
        action: str,
        entity: str,
        identifier: str,
        detail: str = "",
        old: str | None = None,
        new: str | None = None,
    ) -> AuditRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return AuditRecord(
            timestamp=ts,
            action=action,
            entity=entity,
            identifier=identifier,
            detail=detail,
            old="" if old is None else old,
            new="" if new is None else new,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
