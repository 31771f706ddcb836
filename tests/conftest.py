"""Pytest configuration and shared fixtures."""

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at a scratch directory
# before any sheetsync module is imported.
_DATA_DIR = Path(tempfile.mkdtemp(prefix="sheetsync-tests-"))
os.environ.setdefault("SHEETSYNC_DATA_DIR", str(_DATA_DIR))
os.environ.setdefault("SHEETSYNC_EXCEL_DIR", str(_DATA_DIR / "excel"))

import openpyxl  # noqa: E402
import pytest  # noqa: E402

from sheetsync.excel.config import SyncContext  # noqa: E402


@pytest.fixture
def workbook_path(tmp_path: Path) -> Path:
    """Path of a workbook that does not exist yet."""
    return tmp_path / "book.xlsx"


@pytest.fixture
def context(workbook_path: Path) -> SyncContext:
    return SyncContext(file_path=workbook_path)


@pytest.fixture
def make_workbook(workbook_path: Path):
    """Write a workbook from {sheet title: rows} and return its path."""

    def _make(sheets: dict[str, list[list]]) -> Path:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title)
            for row in rows:
                ws.append(row)
        wb.save(str(workbook_path))
        wb.close()
        return workbook_path

    return _make


def sheet_values(path: Path, title: str) -> list[list]:
    """Read every used row of a worksheet as plain values."""
    wb = openpyxl.load_workbook(str(path), data_only=True)
    try:
        return [list(row) for row in wb[title].iter_rows(values_only=True)]
    finally:
        wb.close()


@pytest.fixture
def read_sheet():
    return sheet_values
