from __future__ import annotations

from dataclasses import dataclass, field

"""Board-side records as returned by the board adapter."""

__all__ = [
    "Group",
    "Column",
    "RemoteItem",
    "Board",
    "Workspace",
]


@dataclass(frozen=True)
class Group:
    id: str
    title: str


@dataclass(frozen=True)
class Column:
    id: str
    title: str


@dataclass(frozen=True)
class RemoteItem:
    """A board item; fields maps column title -> displayed text ("" when empty)."""
    id: str
    name: str
    group_id: str | None = None
    fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Board:
    id: str
    name: str


@dataclass(frozen=True)
class Workspace:
    id: str
    name: str
    boards: tuple[Board, ...] = ()
