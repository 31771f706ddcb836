"""Excel synchronization engine.

Maps domain objects onto worksheet rows and back.
"""

from sheetsync.excel.address import (
    CellAddress,
    CellRange,
    format_address,
    format_range,
    parse_address,
    parse_range,
)
from sheetsync.excel.config import FileSettings, PushConfig, SyncContext, WorkbookMetadata
from sheetsync.excel.objects import CellContents, DomainObject, GenericRecord, TableRow
from sheetsync.excel.projector import ReadBatch, RowOutcome, from_rows, to_rows
from sheetsync.excel.query import ContentsQuery, ObjectQuery, ValuesQuery
from sheetsync.excel.reconciler import SyncMode, TableReconciler
from sheetsync.excel.store import WorkbookStore
from sheetsync.excel.sync import QueryResult, SyncManager, SyncResult

__all__ = [
    "CellAddress",
    "CellContents",
    "CellRange",
    "ContentsQuery",
    "DomainObject",
    "FileSettings",
    "GenericRecord",
    "ObjectQuery",
    "PushConfig",
    "QueryResult",
    "ReadBatch",
    "RowOutcome",
    "SyncContext",
    "SyncManager",
    "SyncMode",
    "SyncResult",
    "TableReconciler",
    "TableRow",
    "ValuesQuery",
    "WorkbookMetadata",
    "WorkbookStore",
    "format_address",
    "format_range",
    "from_rows",
    "parse_address",
    "parse_range",
    "to_rows",
]
