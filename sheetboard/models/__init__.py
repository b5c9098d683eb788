"""Domain models for the spreadsheet <-> board sync tool."""

from .audit_record import AuditRecord
from .board import Board, Column, Group, RemoteItem, Workspace
from .config_models import ApiConfig, AppConfig, Direction, ExtractionConfig, SyncMode, SyncOptions
from .operations import (
    CellUpdate,
    ColumnMapping,
    FieldChange,
    ItemAction,
    ItemOperation,
    MappedColumn,
    PullPlan,
    SchemaPlan,
)
from .record import Field, Record, Schema, SheetData
from .sync_result import SyncRequest, SyncResult, SyncStats

__all__ = [
    # Configuration models
    "ApiConfig",
    "AppConfig",
    "Direction",
    "ExtractionConfig",
    "SyncMode",
    "SyncOptions",
    # Spreadsheet side
    "Field",
    "Record",
    "Schema",
    "SheetData",
    # Board side
    "Board",
    "Column",
    "Group",
    "RemoteItem",
    "Workspace",
    # Plans
    "CellUpdate",
    "ColumnMapping",
    "FieldChange",
    "ItemAction",
    "ItemOperation",
    "MappedColumn",
    "PullPlan",
    "SchemaPlan",
    # Results
    "AuditRecord",
    "SyncRequest",
    "SyncResult",
    "SyncStats",
]
