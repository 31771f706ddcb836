"""Excel synchronization manager.

Public entry points of the adapter. Both ``synchronize`` and ``query``
always return a result object: failures are reported through its
``errors`` list, never raised.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sheetsync.excel.address import MAX_COLUMN, MAX_ROW, CellAddress
from sheetsync.excel.config import PushConfig, SyncContext
from sheetsync.excel.diagnostics import Diagnostics
from sheetsync.excel.exceptions import InputError, ResourceError, SheetSyncError
from sheetsync.excel.objects import DomainObject, TableRow
from sheetsync.excel.projector import RowOutcome, single_shape, to_rows
from sheetsync.excel.query import run_query
from sheetsync.excel.reconciler import SyncMode, TableReconciler, resolve_mode
from sheetsync.excel.store import WorkbookStore, clean_table_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Result of a push.

    ``objects`` holds the pushed objects on success and is empty otherwise.
    """

    success: bool
    objects: list[Any] = field(default_factory=list)
    worksheet: str | None = None
    records_processed: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QueryResult:
    """Result of a read."""

    success: bool
    results: list[DomainObject] = field(default_factory=list)
    skipped: list[RowOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def _check_fits(start: CellAddress, rows: list[TableRow]) -> None:
    """Raise if the block written from ``start`` runs past the worksheet grid."""
    width = max((len(row.content) for row in rows), default=0)
    last_column = start.column_index + max(width, 1) - 1
    last_row = start.row + max(len(rows), 1) - 1
    if last_column > MAX_COLUMN or last_row > MAX_ROW:
        raise ResourceError(
            f"{len(rows)} rows of {width} columns starting at {start} "
            "do not fit in a worksheet."
        )


class SyncManager:
    """Pushes objects to and reads them from a workbook file."""

    @staticmethod
    def compute_file_hash(file_path: str | Path) -> str:
        """Compute SHA-256 hash of a file for conflict detection."""
        sha256 = hashlib.sha256()
        with open(str(file_path), "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256.update(chunk)
        return sha256.hexdigest()

    @staticmethod
    def synchronize(
        context: SyncContext,
        objects: Iterable[Any] | None,
        mode: SyncMode | str = SyncMode.ADAPTER_DEFAULT,
        config: PushConfig | None = None,
    ) -> SyncResult:
        """Write objects to a worksheet according to ``mode``.

        Args:
            context: File location and write options.
            objects: Objects of a single type, or ``TableRow``s written as is.
            mode: Reconciliation policy; ``adapter_default`` means
                ``delete_then_create``.
            config: Target worksheet, starting cell, columns and metadata.

        Returns:
            SyncResult. On any failure ``objects`` is empty and ``errors``
            explains why; the file may still have been modified if the
            failure happened after the save started.
        """
        diagnostics = Diagnostics()
        items = [obj for obj in (objects or []) if obj is not None]

        try:
            success, worksheet, rows = SyncManager._push(
                context, items, mode, config, diagnostics
            )
        except SheetSyncError as e:
            diagnostics.error(str(e))
            return SyncResult(success=False, **diagnostics.as_dict())
        except Exception as e:
            logger.exception("Unexpected error while pushing to %s", context.file_path)
            diagnostics.error(f"Unexpected error: {e}")
            return SyncResult(success=False, **diagnostics.as_dict())

        if not success:
            return SyncResult(success=False, worksheet=worksheet, **diagnostics.as_dict())

        logger.info(
            "Pushed %d objects to worksheet %r in %s",
            len(items), worksheet, context.file_path,
        )
        return SyncResult(
            success=True,
            objects=items,
            worksheet=worksheet,
            records_processed=rows,
            **diagnostics.as_dict(),
        )

    @staticmethod
    def _push(
        context: SyncContext,
        items: list[Any],
        mode: SyncMode | str,
        config: PushConfig | None,
        diagnostics: Diagnostics,
    ) -> tuple[bool, str, int]:
        if not items:
            raise InputError("No objects were provided for the push.")

        mode = resolve_mode(mode)
        if config is None:
            diagnostics.note("PushConfig has not been provided, default config is used.")
            config = PushConfig()

        single_shape(items)
        start = config.starting_address()
        if start is None:
            raise ResourceError(
                f"Starting cell {config.starting_cell!r} is not a valid cell address."
            )

        if all(isinstance(obj, TableRow) for obj in items):
            rows = items
            records = len(rows)
        else:
            rows = to_rows(items, config.object_properties)
            # First row is the header
            records = len(rows) - 1
        _check_fits(start, rows)

        file_path = Path(context.file_path)
        wb = WorkbookStore.open(file_path)
        if wb is None:
            if mode is SyncMode.UPDATE_ONLY:
                raise ResourceError(f"There is no workbook to update under {file_path}")
            wb = WorkbookStore.create_empty()

        try:
            worksheet = clean_table_name(config.worksheet)
            reconciler = TableReconciler(wb, diagnostics)
            if mode is SyncMode.UPDATE_ONLY and not reconciler.exists(worksheet):
                raise InputError(
                    f"There is no worksheet named {worksheet} to update in {file_path}"
                )

            success = reconciler.reconcile(mode, worksheet, rows, start)

            if config.workbook_properties is not None:
                WorkbookStore.set_metadata(wb, config.workbook_properties)
            WorkbookStore.save(wb, file_path, backup=context.backup_on_write)
        finally:
            wb.close()

        return success, worksheet, records

    @staticmethod
    def query(context: SyncContext, request: object) -> QueryResult:
        """Run a read request; see ``sheetsync.excel.query``.

        Rows that cannot be rebuilt into the requested shape are reported in
        ``skipped`` and as warnings; the other rows are still returned.
        """
        diagnostics = Diagnostics()
        try:
            batch = run_query(context.file_path, request)
        except SheetSyncError as e:
            diagnostics.error(str(e))
            return QueryResult(success=False, **diagnostics.as_dict())
        except Exception as e:
            logger.exception("Unexpected error while reading %s", context.file_path)
            diagnostics.error(f"Unexpected error: {e}")
            return QueryResult(success=False, **diagnostics.as_dict())

        for outcome in batch.skipped:
            diagnostics.warning(outcome.reason or f"Row {outcome.row_number} was skipped.")

        return QueryResult(
            success=True,
            results=batch.objects,
            skipped=batch.skipped,
            **diagnostics.as_dict(),
        )
