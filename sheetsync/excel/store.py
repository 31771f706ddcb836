"""Workbook storage on top of openpyxl.

All file access goes through ``WorkbookStore``. Reads load the file into
memory and release the handle before parsing; saves go through a temporary
file that is renamed over the target, so an interrupted save never leaves a
half-written workbook behind.
"""

from __future__ import annotations

import datetime
import io
import logging
import os
import re
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

import openpyxl
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.formula import ArrayFormula
from openpyxl.worksheet.worksheet import Worksheet

from sheetsync.excel.address import CellAddress, CellRange, column_label
from sheetsync.excel.config import WorkbookMetadata
from sheetsync.excel.exceptions import PersistenceError, ResourceError
from sheetsync.excel.objects import CellContents

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH: Final[int] = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")

# openpyxl data_type codes
_DATA_TYPES: Final[dict[str, str]] = {
    "n": "number",
    "s": "text",
    "inlineStr": "text",
    "b": "boolean",
    "d": "date",
    "e": "error",
    "f": "formula",
}

# WorkbookMetadata field -> openpyxl DocumentProperties attribute
_METADATA_FIELDS: Final[dict[str, str]] = {
    "author": "creator",
    "title": "title",
    "subject": "subject",
    "description": "description",
    "keywords": "keywords",
    "category": "category",
    "status": "contentStatus",
    "last_modified_by": "lastModifiedBy",
}


def clean_table_name(name: str | None) -> str:
    """Make a name acceptable as a worksheet title.

    Replaces ``[]:*?/\\`` with ``_``, strips surrounding apostrophes and
    whitespace, and truncates to 31 characters. An empty result becomes
    ``"Sheet"``.
    """
    cleaned = _INVALID_SHEET_CHARS.sub("_", name or "").strip().strip("'").strip()
    return cleaned[:MAX_SHEET_NAME_LENGTH] or "Sheet"


def unique_table_name(name: str | None, existing: Sequence[str]) -> str:
    """Clean a name and add a ``" (n)"`` suffix if it clashes.

    Worksheet titles are compared case-insensitively, as Excel does.
    """
    base = clean_table_name(name)
    taken = {title.casefold() for title in existing}
    if base.casefold() not in taken:
        return base

    n = 2
    while True:
        suffix = f" ({n})"
        candidate = base[:MAX_SHEET_NAME_LENGTH - len(suffix)] + suffix
        if candidate.casefold() not in taken:
            return candidate
        n += 1


def _create_backup(file_path: Path) -> Path:
    """Copy the file into ``backups/`` next to it with a timestamp suffix."""
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_dir = file_path.parent / "backups"
    backup_dir.mkdir(parents=True, exist_ok=True)
    backup_path = backup_dir / f"{file_path.stem}_{timestamp}{file_path.suffix}"
    shutil.copy2(str(file_path), str(backup_path))
    return backup_path


class WorkbookStore:
    """File-format boundary for the synchronization core."""

    @staticmethod
    def open(file_path: str | Path, *, data_only: bool = False) -> Workbook | None:
        """Load a workbook fully into memory.

        Args:
            file_path: Path to an ``.xlsx`` file.
            data_only: Load cached values instead of formulas.

        Returns:
            The workbook, or None if the file does not exist.

        Raises:
            ResourceError: If the file exists but is not a readable workbook.
        """
        path = Path(file_path)
        if not path.is_file():
            return None
        try:
            with open(path, "rb") as f:
                data = f.read()
            return openpyxl.load_workbook(io.BytesIO(data), data_only=data_only)
        except Exception as e:
            raise ResourceError(
                f"The workbook '{path}' could not be opened: {e}"
            ) from e

    @staticmethod
    def create_empty() -> Workbook:
        """Create a workbook with no worksheets."""
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
        return wb

    @staticmethod
    def list_table_names(wb: Workbook) -> list[str]:
        return list(wb.sheetnames)

    @staticmethod
    def get_table(wb: Workbook, name: str) -> Worksheet | None:
        """Find a worksheet by exact title, then case-insensitively."""
        if name in wb.sheetnames:
            return wb[name]
        for title in wb.sheetnames:
            if title.casefold() == name.casefold():
                return wb[title]
        return None

    @staticmethod
    def create_table(wb: Workbook, name: str) -> Worksheet:
        """Add a worksheet under a cleaned, unique version of ``name``."""
        title = unique_table_name(name, wb.sheetnames)
        if title != name:
            logger.info("Worksheet name %r adjusted to %r", name, title)
        return wb.create_sheet(title)

    @staticmethod
    def delete_table(wb: Workbook, name: str) -> bool:
        ws = WorkbookStore.get_table(wb, name)
        if ws is None:
            return False
        wb.remove(ws)
        return True

    @staticmethod
    def write_region(
        ws: Worksheet,
        start: CellAddress,
        rows: Sequence[Sequence[Any]],
    ) -> CellRange | None:
        """Write a block of values with its top-left corner at ``start``.

        Only the cells inside the block are touched. Strings are stored as
        text even when they start with ``=``, so pushed data never becomes
        a formula.

        Returns:
            The range that was written, or None for an empty block.
        """
        first_col = start.column_index
        width = 0
        for row_offset, values in enumerate(rows):
            for col_offset, value in enumerate(values):
                cell = ws.cell(
                    row=start.row + row_offset,
                    column=first_col + col_offset,
                    value=value,
                )
                if isinstance(value, str) and cell.data_type == "f":
                    cell.data_type = "s"
            width = max(width, len(values))

        if not rows or width == 0:
            return None
        end = CellAddress(
            column=column_label(first_col + width - 1),
            row=start.row + len(rows) - 1,
        )
        return CellRange(start=start, end=end)

    @staticmethod
    def used_region(ws: Worksheet) -> CellRange | None:
        """Return the range covering every populated cell, or None if empty."""
        if ws.max_row == 1 and ws.max_column == 1 and ws.cell(row=1, column=1).value is None:
            return None
        return CellRange(
            start=CellAddress(column=column_label(ws.min_column), row=ws.min_row),
            end=CellAddress(column=column_label(ws.max_column), row=ws.max_row),
        )

    @staticmethod
    def _bounds(ws: Worksheet, cell_range: CellRange | None) -> tuple[int, int, int, int] | None:
        """Resolve a range to (min_row, min_col, max_row, max_col)."""
        if cell_range is None or cell_range.is_whole:
            cell_range = WorkbookStore.used_region(ws)
            if cell_range is None:
                return None
        start, end = cell_range.start, cell_range.end
        return (
            min(start.row, end.row),
            min(start.column_index, end.column_index),
            max(start.row, end.row),
            max(start.column_index, end.column_index),
        )

    @staticmethod
    def read_region(ws: Worksheet, cell_range: CellRange | None = None) -> list[list[Any]]:
        """Read cell values row by row; empty cells are None."""
        bounds = WorkbookStore._bounds(ws, cell_range)
        if bounds is None:
            return []
        min_row, min_col, max_row, max_col = bounds
        return [
            list(values)
            for values in ws.iter_rows(
                min_row=min_row,
                max_row=max_row,
                min_col=min_col,
                max_col=max_col,
                values_only=True,
            )
        ]

    @staticmethod
    def read_contents(
        ws: Worksheet,
        values_ws: Worksheet,
        cell_range: CellRange | None = None,
    ) -> list[list[CellContents]]:
        """Describe each cell in the range.

        Args:
            ws: Worksheet loaded with formulas.
            values_ws: The same worksheet loaded with cached values.
            cell_range: Range to read; whole used region when unset.
        """
        bounds = WorkbookStore._bounds(ws, cell_range)
        if bounds is None:
            return []
        min_row, min_col, max_row, max_col = bounds

        table: list[list[CellContents]] = []
        for row in ws.iter_rows(
            min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col,
        ):
            contents: list[CellContents] = []
            for cell in row:
                cached = values_ws.cell(row=cell.row, column=cell.column)
                formula = None
                if cell.data_type == "f":
                    raw = cell.value
                    formula = raw.text if isinstance(raw, ArrayFormula) else str(raw)
                data_type = "empty" if cached.value is None else _DATA_TYPES.get(
                    cached.data_type, cached.data_type
                )
                contents.append(CellContents(
                    address=cell.coordinate,
                    value=cached.value,
                    formula=formula,
                    data_type=data_type,
                    comment=cell.comment.text if cell.comment else None,
                    hyperlink=cell.hyperlink.target if cell.hyperlink else None,
                ))
            table.append(contents)
        return table

    @staticmethod
    def set_metadata(wb: Workbook, metadata: WorkbookMetadata) -> None:
        """Copy the set metadata fields onto the document properties."""
        props = wb.properties
        for field_name, attribute in _METADATA_FIELDS.items():
            value = getattr(metadata, field_name)
            if value is not None:
                setattr(props, attribute, value)

    @staticmethod
    def save(wb: Workbook, file_path: str | Path, *, backup: bool = False) -> None:
        """Persist the workbook by writing a sibling temp file and renaming it.

        Args:
            wb: Workbook to save.
            file_path: Destination path.
            backup: Copy an existing destination into ``backups/`` first.

        Raises:
            PersistenceError: If writing or renaming fails.
        """
        path = Path(file_path)
        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if backup and path.exists():
                backup_path = _create_backup(path)
                logger.info("Backed up %s to %s", path, backup_path)

            wb.properties.modified = datetime.datetime.now(
                datetime.timezone.utc
            ).replace(tzinfo=None)

            fd, tmp = tempfile.mkstemp(
                suffix=path.suffix or ".xlsx", prefix=f".{path.stem}-", dir=str(path.parent)
            )
            os.close(fd)
            tmp_path = Path(tmp)
            wb.save(str(tmp_path))
            os.replace(tmp_path, path)
            tmp_path = None
        except Exception as e:
            raise PersistenceError(str(path), str(e)) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
