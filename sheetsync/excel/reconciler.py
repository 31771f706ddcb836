"""Reconciliation of new rows with the worksheets already in a workbook.

| mode                | worksheet absent | worksheet present          |
|---------------------|------------------|----------------------------|
| create_non_existing | create           | leave as is                |
| delete_then_create  | create           | delete, then create        |
| update_only         | fail             | overwrite written region   |
| update_or_create    | create           | overwrite written region   |

Updates never clear cells outside the region being written.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from typing import Any

from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.workbook.workbook import Workbook

from sheetsync.excel.address import CellAddress
from sheetsync.excel.diagnostics import Diagnostics
from sheetsync.excel.exceptions import InputError
from sheetsync.excel.objects import TableRow
from sheetsync.excel.store import WorkbookStore


class SyncMode(str, enum.Enum):
    ADAPTER_DEFAULT = "adapter_default"
    CREATE_NON_EXISTING = "create_non_existing"
    DELETE_THEN_CREATE = "delete_then_create"
    UPDATE_ONLY = "update_only"
    UPDATE_OR_CREATE = "update_or_create"


def resolve_mode(mode: SyncMode | str | None) -> SyncMode:
    """Coerce a mode value, resolving ``adapter_default``.

    Raises:
        InputError: If the value is not a supported mode.
    """
    if mode is None:
        mode = SyncMode.ADAPTER_DEFAULT
    try:
        mode = SyncMode(mode)
    except ValueError:
        raise InputError(f"Sync mode {mode!r} is not supported by the Excel adapter.") from None
    if mode is SyncMode.ADAPTER_DEFAULT:
        return SyncMode.DELETE_THEN_CREATE
    return mode


def _row_values(rows: Sequence[TableRow | Sequence[Any]]) -> list[list[Any]]:
    return [list(row.content) if isinstance(row, TableRow) else list(row) for row in rows]


class TableReconciler:
    """Applies one sync mode to one workbook held in memory."""

    def __init__(self, wb: Workbook, diagnostics: Diagnostics) -> None:
        self._wb = wb
        self._diagnostics = diagnostics

    def exists(self, name: str) -> bool:
        return WorkbookStore.get_table(self._wb, name) is not None

    def reconcile(
        self,
        mode: SyncMode | str,
        name: str,
        rows: Sequence[TableRow | Sequence[Any]],
        start: CellAddress | None,
    ) -> bool:
        """Apply ``mode`` to worksheet ``name``.

        Returns:
            True only if every sub-operation succeeded.

        Raises:
            InputError: If the mode is not supported. Nothing is changed.
        """
        mode = resolve_mode(mode)
        success = True

        if mode is SyncMode.CREATE_NON_EXISTING:
            if not self.exists(name):
                success &= self.create(name, rows, start)
        elif mode is SyncMode.DELETE_THEN_CREATE:
            if self.exists(name):
                success &= self.delete(name)
            success &= self.create(name, rows, start)
        elif mode is SyncMode.UPDATE_ONLY:
            success &= self.update(name, rows, start)
        elif mode is SyncMode.UPDATE_OR_CREATE:
            if self.exists(name):
                success &= self.update(name, rows, start)
            else:
                success &= self.create(name, rows, start)

        return success

    def create(
        self,
        name: str,
        rows: Sequence[TableRow | Sequence[Any]],
        start: CellAddress | None,
    ) -> bool:
        if not rows:
            self._diagnostics.error(
                "Creation of a table failed: input table is empty or does not contain data."
            )
            return False
        if start is None:
            self._diagnostics.error(
                f"Creation of worksheet {name} failed: the starting cell is not a valid address."
            )
            return False

        try:
            ws = WorkbookStore.create_table(self._wb, name)
            WorkbookStore.write_region(ws, start, _row_values(rows))
        except (TypeError, ValueError, IllegalCharacterError) as e:
            self._diagnostics.error(
                f"Creation of worksheet {name} failed with the following error: {e}"
            )
            return False
        return True

    def update(
        self,
        name: str,
        rows: Sequence[TableRow | Sequence[Any]],
        start: CellAddress | None,
    ) -> bool:
        ws = WorkbookStore.get_table(self._wb, name)
        if ws is None:
            self._diagnostics.error(f"There is no worksheet named {name} to update.")
            return False
        if start is None:
            self._diagnostics.error(
                f"Update of worksheet {name} failed: the starting cell is not a valid address."
            )
            return False

        try:
            WorkbookStore.write_region(ws, start, _row_values(rows))
        except (TypeError, ValueError, IllegalCharacterError) as e:
            self._diagnostics.error(
                f"Update of worksheet {name} failed with the following error: {e}"
            )
            return False
        return True

    def delete(self, name: str) -> bool:
        if not WorkbookStore.delete_table(self._wb, name):
            self._diagnostics.error(f"Worksheet {name} could not be deleted: it does not exist.")
            return False
        return True
