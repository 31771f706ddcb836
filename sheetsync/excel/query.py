"""Read requests against a workbook.

Three request kinds are understood: typed objects, raw cell values and
full cell contents. Anything else is rejected.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet
from pydantic import BaseModel, ConfigDict

from sheetsync.excel.address import CellRange, parse_range
from sheetsync.excel.exceptions import InputError, ResourceError
from sheetsync.excel.objects import TableRow
from sheetsync.excel.projector import ReadBatch, from_rows
from sheetsync.excel.store import WorkbookStore


class _Query(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Empty means the first worksheet
    worksheet: str = ""
    # Empty means the whole used region
    range: CellRange | str | None = None


class ObjectQuery(_Query):
    """Read rows and rebuild them as objects of ``shape``."""

    kind: Literal["objects"] = "objects"
    shape: type[Any] | None = None


class ValuesQuery(_Query):
    """Read cached cell values as ``TableRow``s."""

    kind: Literal["values"] = "values"


class ContentsQuery(_Query):
    """Read ``CellContents`` (value, formula, comment...) as ``TableRow``s."""

    kind: Literal["contents"] = "contents"


Query = ObjectQuery | ValuesQuery | ContentsQuery


def _resolve_range(value: CellRange | str | None) -> CellRange:
    if isinstance(value, CellRange):
        return value
    cell_range = parse_range(value)
    if cell_range is None:
        raise ResourceError(
            f"Range {value!r} is not in the correct format for an Excel spreadsheet."
        )
    return cell_range


def _worksheet(wb: Workbook, name: str) -> Worksheet:
    if not name or not name.strip():
        if not wb.worksheets:
            raise ResourceError("The workbook does not contain any worksheet.")
        return wb.worksheets[0]
    ws = WorkbookStore.get_table(wb, name)
    if ws is None:
        raise ResourceError(f"Worksheet {name!r} cannot be found.")
    return ws


def _open(file_path: Path, *, data_only: bool) -> Workbook:
    wb = WorkbookStore.open(file_path, data_only=data_only)
    if wb is None:
        raise ResourceError(f"There is no workbook under {file_path}")
    return wb


def _read_values(file_path: Path, request: _Query) -> list[TableRow]:
    cell_range = _resolve_range(request.range)
    wb = _open(file_path, data_only=True)
    try:
        ws = _worksheet(wb, request.worksheet)
        return [TableRow(content=values) for values in WorkbookStore.read_region(ws, cell_range)]
    finally:
        wb.close()


def _read_contents(file_path: Path, request: ContentsQuery) -> list[TableRow]:
    cell_range = _resolve_range(request.range)
    wb = _open(file_path, data_only=False)
    values_wb = _open(file_path, data_only=True)
    try:
        ws = _worksheet(wb, request.worksheet)
        values_ws = values_wb[ws.title]
        return [
            TableRow(content=list(cells))
            for cells in WorkbookStore.read_contents(ws, values_ws, cell_range)
        ]
    finally:
        values_wb.close()
        wb.close()


def run_query(file_path: str | Path, request: object) -> ReadBatch:
    """Execute a read request.

    Raises:
        InputError: If the request kind is not supported or the shape is
            not a ``DomainObject``.
        ResourceError: If the file, worksheet or range cannot be resolved.
    """
    path = Path(file_path)
    if isinstance(request, ObjectQuery):
        return from_rows(_read_values(path, request), request.shape)
    if isinstance(request, ValuesQuery):
        return ReadBatch.of(_read_values(path, request))
    if isinstance(request, ContentsQuery):
        return ReadBatch.of(_read_contents(path, request))
    raise InputError(
        f"Requests of type {type(request).__name__} are not supported by the Excel adapter."
    )
