from datetime import datetime
from pathlib import PurePath
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from sheetsync.excel.config import DEFAULT_WORKSHEET, WorkbookMetadata
from sheetsync.excel.reconciler import SyncMode
from sheetsync.models.sync_log import SyncOperation, SyncStatus


class _WorkbookRequest(BaseModel):
    # Bare file name inside the configured Excel directory
    file_name: str | None = Field(default=None, max_length=200)

    @field_validator("file_name")
    @classmethod
    def _bare_xlsx_name(cls, value: str | None) -> str | None:
        if value is None:
            return value
        path = PurePath(value)
        if path.name != value or value in (".", ".."):
            raise ValueError("file_name must not contain directories")
        if path.suffix.lower() != ".xlsx":
            raise ValueError("file_name must end with .xlsx")
        return value


class PushRequest(_WorkbookRequest):
    worksheet: str = Field(default=DEFAULT_WORKSHEET, min_length=1, max_length=100)
    mode: SyncMode = SyncMode.ADAPTER_DEFAULT
    starting_cell: str | None = None
    properties: list[str] = Field(default_factory=list)
    metadata: WorkbookMetadata | None = None
    # Registered DomainObject class name; None pushes generic records
    shape: str | None = None
    records: list[dict[str, Any]] = Field(..., min_length=1)


class QueryRequest(_WorkbookRequest):
    kind: Literal["objects", "values", "contents"] = "objects"
    worksheet: str = ""
    range: str | None = None
    shape: str | None = None


class SyncLogResponse(BaseModel):
    id: int
    workbook: str
    worksheet: str | None
    operation: SyncOperation
    mode: str | None
    status: SyncStatus
    rows_written: int
    rows_read: int
    rows_skipped: int
    error_message: str | None
    file_hash: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
