"""Cell and range addresses in spreadsheet notation.

Converts between structured coordinates and strings such as ``"B3"`` or
``"A1:C10"``. Parsing never raises: invalid text yields ``None`` so callers
can branch on it and report the problem themselves.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from openpyxl.utils import column_index_from_string, get_column_letter

_ADDRESS_RE = re.compile(r"^\s*[A-Za-z]+[0-9]+\s*$")
_COLUMN_RE = re.compile(r"[A-Za-z]+")
_ROW_RE = re.compile(r"[0-9]+")

# Worksheet grid limits (XFD1048576)
MAX_COLUMN = 16384
MAX_ROW = 1048576


@dataclass(frozen=True)
class CellAddress:
    """A single cell: column letters and a 1-based row number."""

    column: str = "A"
    row: int = 1

    def __post_init__(self) -> None:
        if not _COLUMN_RE.fullmatch(self.column or "") or self.column != self.column.upper():
            raise ValueError(f"Invalid column label: {self.column!r}")
        if self.row < 1:
            raise ValueError(f"Row number must be >= 1, got {self.row}")

    @property
    def column_index(self) -> int:
        return column_index(self.column)

    def __str__(self) -> str:
        return format_address(self)


@dataclass(frozen=True)
class CellRange:
    """A rectangular block between two corners.

    A range with both corners unset stands for the worksheet's whole used
    region.
    """

    start: CellAddress | None = None
    end: CellAddress | None = None

    @property
    def is_whole(self) -> bool:
        return self.start is None or self.end is None

    def __str__(self) -> str:
        return format_range(self)


def column_index(label: str) -> int:
    """Convert column letters to a 1-based index (A -> 1, AA -> 27)."""
    return column_index_from_string(label.upper())


def column_label(index: int) -> str:
    """Convert a 1-based column index to letters (1 -> A, 28 -> AB)."""
    return get_column_letter(index)


def in_grid(address: CellAddress) -> bool:
    """Return True if the address lies inside the worksheet grid."""
    try:
        index = column_index(address.column)
    except ValueError:
        return False
    return index <= MAX_COLUMN and address.row <= MAX_ROW


def is_valid_address(text: str | None) -> bool:
    """Return True if text is column letters followed by a positive row."""
    if not text or not _ADDRESS_RE.match(text):
        return False
    return int(_ROW_RE.search(text).group()) >= 1


def parse_address(text: str | None) -> CellAddress | None:
    """Parse ``"B3"`` into ``CellAddress("B", 3)``.

    Returns None when the text is not a valid address.
    """
    if not is_valid_address(text):
        return None
    column = _COLUMN_RE.search(text).group().upper()
    row = int(_ROW_RE.search(text).group())
    return CellAddress(column=column, row=row)


def format_address(address: CellAddress) -> str:
    return f"{address.column.upper()}{address.row}"


def parse_range(text: str | None) -> CellRange | None:
    """Parse ``"A1:C3"`` into a ``CellRange``.

    Empty text is the whole-used-region sentinel, not an error. A single
    address is a one-cell range. Returns None for anything unparsable.
    """
    if text is None or not text.strip():
        return CellRange()

    parts = text.split(":")
    if len(parts) == 1:
        address = parse_address(parts[0])
        return CellRange(start=address, end=address) if address else None
    if len(parts) != 2:
        return None

    start = parse_address(parts[0])
    end = parse_address(parts[1])
    if start is None or end is None:
        return None
    return CellRange(start=start, end=end)


def format_range(cell_range: CellRange) -> str:
    if cell_range.is_whole:
        return ""
    return f"{format_address(cell_range.start)}:{format_address(cell_range.end)}"
