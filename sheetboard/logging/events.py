from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

"""Event port between the sync engine and whatever presents its decisions.

The engine never touches a logger or a UI handle directly: it is constructed
with an EventSink and emits one SyncEvent per decision. Sinks decide where the
line goes (console, UI channel, JSON Lines audit file, a list in a test).
"""

__all__ = [
    "SyncEvent",
    "EventSink",
    "LoggerSink",
    "RecordingSink",
    "FanoutSink",
    "NullSink",
]

WARN_ACTIONS = {"warn"}


@dataclass(frozen=True)
class SyncEvent:
    action: str  # create|update|delete|skip|keep|archive|warn
    entity: str  # group|column|item|cell|run
    identifier: str
    detail: str = ""
    old: str | None = None
    new: str | None = None

    def describe(self) -> str:
        """Human-readable audit line, e.g. ``update cell C5 [Year: 2020][Column: Make]: "Honda" -> "Acura"``."""
        line = f"{self.action} {self.entity} {self.identifier}"
        if self.detail:
            line += f" {self.detail}"
        if self.old is not None or self.new is not None:
            line += f': "{self.old or ""}" -> "{self.new or ""}"'
        return line


class EventSink(Protocol):
    def emit(self, event: SyncEvent) -> None: ...


class LoggerSink:
    """Writes events as log lines (warn -> WARNING, everything else -> INFO)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("sheetboard.sync")

    def emit(self, event: SyncEvent) -> None:
        level = logging.WARNING if event.action in WARN_ACTIONS else logging.INFO
        self.logger.log(level, event.describe())


class RecordingSink:
    """Keeps events in memory (tests, UI replay)."""

    def __init__(self) -> None:
        self.events: list[SyncEvent] = []

    def emit(self, event: SyncEvent) -> None:
        self.events.append(event)

    def of(self, action: str, entity: str | None = None) -> list[SyncEvent]:
        return [
            e for e in self.events
            if e.action == action and (entity is None or e.entity == entity)
        ]

    def lines(self) -> list[str]:
        return [e.describe() for e in self.events]


class FanoutSink:
    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = list(sinks)

    def emit(self, event: SyncEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)


class NullSink:
    def emit(self, event: SyncEvent) -> None:
        return None
