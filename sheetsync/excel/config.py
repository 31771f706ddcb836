"""Per-call configuration for pushes and reads."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from sheetsync.excel.address import CellAddress, in_grid, parse_address

DEFAULT_WORKSHEET = "Sheet1"


class WorkbookMetadata(BaseModel):
    """Document properties stamped on the workbook when it is saved.

    Fields left as None keep whatever the workbook already has.
    """

    author: str | None = None
    title: str | None = None
    subject: str | None = None
    description: str | None = None
    keywords: str | None = None
    category: str | None = None
    status: str | None = None
    last_modified_by: str | None = None


class PushConfig(BaseModel):
    """Where and what to write during a push."""

    worksheet: str = DEFAULT_WORKSHEET
    # None means A1
    starting_cell: CellAddress | str | None = None
    # Empty means every property except the structural ones
    object_properties: list[str] = Field(default_factory=list)
    workbook_properties: WorkbookMetadata | None = None

    def starting_address(self) -> CellAddress | None:
        """Resolve ``starting_cell``.

        Returns None if it is not a valid address or lies outside the
        worksheet grid.
        """
        if self.starting_cell is None:
            return CellAddress()
        if isinstance(self.starting_cell, CellAddress):
            address = self.starting_cell
        else:
            address = parse_address(self.starting_cell)
        if address is None or not in_grid(address):
            return None
        return address


class FileSettings(BaseModel):
    """Location of the workbook file."""

    directory: Path = Path(".")
    file_name: str = "workbook.xlsx"

    def full_path(self) -> Path:
        name = self.file_name
        if not Path(name).suffix:
            name = f"{name}.xlsx"
        return Path(self.directory) / name


@dataclass(frozen=True)
class SyncContext:
    """Everything a single push or read needs to know about the file.

    Passed explicitly into each call; nothing is kept between calls.
    """

    file_path: Path
    backup_on_write: bool = False

    @classmethod
    def from_file_settings(
        cls, file_settings: FileSettings, *, backup_on_write: bool = False
    ) -> "SyncContext":
        return cls(file_path=file_settings.full_path(), backup_on_write=backup_on_write)
