"""Sync router - push objects into workbooks and read them back."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import FileResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sheetsync.config import settings
from sheetsync.database import get_db
from sheetsync.excel.config import PushConfig, SyncContext
from sheetsync.excel.objects import DomainObject, GenericRecord, get_shape, registered_shapes
from sheetsync.excel.query import ContentsQuery, ObjectQuery, ValuesQuery
from sheetsync.excel.sync import QueryResult, SyncManager, SyncResult
from sheetsync.models.sync_log import SyncLog, SyncOperation, SyncStatus
from sheetsync.schemas.common import ApiResponse, DiagnosticsResponse
from sheetsync.schemas.sync import PushRequest, QueryRequest, SyncLogResponse

router = APIRouter(prefix="/sync", tags=["sync"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
_STRUCTURAL_FIELDS = {"name", "tags", "custom_data", "fragments"}


# --- Helpers ---

def _get_workbook_path(file_name: str | None) -> Path:
    return Path(settings.EXCEL_DIR) / (file_name or settings.DEFAULT_WORKBOOK)


def _context(file_name: str | None) -> SyncContext:
    return SyncContext(
        file_path=_get_workbook_path(file_name),
        backup_on_write=settings.BACKUP_ON_WRITE,
    )


def _diagnostics(result: SyncResult | QueryResult) -> DiagnosticsResponse:
    skipped = getattr(result, "skipped", [])
    return DiagnosticsResponse(
        errors=result.errors,
        warnings=result.warnings,
        notes=result.notes,
        skipped_rows=[outcome.row_number for outcome in skipped],
    )


def _file_hash(path: Path) -> str | None:
    if not path.is_file():
        return None
    return SyncManager.compute_file_hash(path)


def _unknown_shape(name: str) -> str:
    return f"Unknown shape {name!r}. Registered shapes: {', '.join(registered_shapes())}"


def _build_objects(body: PushRequest) -> list[DomainObject]:
    """Validate request records into the requested shape.

    Raises:
        LookupError: If the shape is not registered.
        ValidationError: If a record does not fit the shape.
    """
    if body.shape is None:
        return [GenericRecord.from_mapping(record) for record in body.records]
    shape = get_shape(body.shape)
    if shape is None:
        raise LookupError(_unknown_shape(body.shape))
    return [shape.model_validate(record) for record in body.records]


def _serialize(item: DomainObject, kind: str) -> Any:
    if kind == "objects":
        return item.model_dump(mode="json")
    if kind == "contents":
        return [
            cell.model_dump(mode="json", exclude=_STRUCTURAL_FIELDS)
            for cell in item.content
        ]
    return jsonable_encoder(item.content)


async def _log_sync(
    db: AsyncSession,
    file_path: Path,
    operation: SyncOperation,
    success: bool,
    worksheet: str | None = None,
    mode: str | None = None,
    rows_written: int = 0,
    rows_read: int = 0,
    rows_skipped: int = 0,
    errors: list[str] | None = None,
) -> SyncLog:
    error = "; ".join(errors or [])
    log = SyncLog(
        workbook=file_path.name,
        worksheet=worksheet,
        operation=operation,
        mode=mode,
        status=SyncStatus.SUCCESS if success else SyncStatus.FAILED,
        rows_written=rows_written,
        rows_read=rows_read,
        rows_skipped=rows_skipped,
        error_message=error[:1000] or None,
        file_hash=_file_hash(file_path),
    )
    db.add(log)
    await db.commit()
    return log


# --- Push ---

@router.post("/push")
async def push_records(
    body: PushRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[dict]:
    """Push records into a worksheet using the requested sync mode."""
    context = _context(body.file_name)

    try:
        objects = _build_objects(body)
    except LookupError as e:
        return ApiResponse.fail(str(e))
    except ValidationError as e:
        return ApiResponse.fail(f"Invalid records: {e}")

    config = PushConfig(
        worksheet=body.worksheet,
        starting_cell=body.starting_cell,
        object_properties=body.properties,
        workbook_properties=body.metadata,
    )
    result = SyncManager.synchronize(context, objects, body.mode, config)

    await _log_sync(
        db,
        context.file_path,
        SyncOperation.PUSH,
        result.success,
        worksheet=result.worksheet or body.worksheet,
        mode=body.mode.value,
        rows_written=result.records_processed,
        errors=result.errors,
    )

    if not result.success:
        return ApiResponse.fail(
            "; ".join(result.errors) or "Push failed", _diagnostics(result)
        )
    return ApiResponse.ok(
        {
            "file_name": context.file_path.name,
            "worksheet": result.worksheet,
            "records_processed": result.records_processed,
        },
        _diagnostics(result),
    )


# --- Query ---

@router.post("/query")
async def query_records(
    body: QueryRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list]:
    """Read typed objects, raw values or cell contents from a worksheet."""
    context = _context(body.file_name)

    if body.kind == "objects":
        shape = None
        if body.shape is not None:
            shape = get_shape(body.shape)
            if shape is None:
                return ApiResponse.fail(_unknown_shape(body.shape))
        request = ObjectQuery(worksheet=body.worksheet, range=body.range, shape=shape)
    elif body.kind == "values":
        request = ValuesQuery(worksheet=body.worksheet, range=body.range)
    else:
        request = ContentsQuery(worksheet=body.worksheet, range=body.range)

    result = SyncManager.query(context, request)

    await _log_sync(
        db,
        context.file_path,
        SyncOperation.QUERY,
        result.success,
        worksheet=body.worksheet or None,
        rows_read=len(result.results),
        rows_skipped=len(result.skipped),
        errors=result.errors,
    )

    if not result.success:
        return ApiResponse.fail(
            "; ".join(result.errors) or "Query failed", _diagnostics(result)
        )
    return ApiResponse.ok(
        [_serialize(item, body.kind) for item in result.results],
        _diagnostics(result),
    )


# --- Download ---

@router.get("/download")
async def download_workbook(
    file_name: str | None = Query(default=None, max_length=200),
) -> FileResponse:
    """Download a workbook file."""
    if file_name is not None and Path(file_name).name != file_name:
        raise HTTPException(status_code=400, detail="file_name must not contain directories")
    path = _get_workbook_path(file_name)
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Workbook not found: {path.name}")
    return FileResponse(
        path=str(path),
        filename=path.name,
        media_type=XLSX_MEDIA_TYPE,
    )


# --- History ---

@router.get("/history")
async def get_sync_history(
    file_name: str | None = Query(default=None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[dict]]:
    """Most recent pushes and queries, newest first."""
    stmt = select(SyncLog)
    if file_name is not None:
        stmt = stmt.where(SyncLog.workbook == file_name)
    result = await db.execute(
        stmt.order_by(SyncLog.created_at.desc(), SyncLog.id.desc())
        .limit(settings.HISTORY_LIMIT)
    )
    logs = result.scalars().all()
    return ApiResponse.ok([
        SyncLogResponse.model_validate(log).model_dump(mode="json")
        for log in logs
    ])
