import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sheetsync.models.base import Base


class SyncOperation(str, enum.Enum):
    PUSH = "push"
    QUERY = "query"


class SyncStatus(str, enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"


class SyncLog(Base):
    """One push or query against a workbook."""

    __tablename__ = "sync_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workbook: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    worksheet: Mapped[str | None] = mapped_column(String(100), nullable=True)
    operation: Mapped[SyncOperation] = mapped_column(
        Enum(SyncOperation),
        nullable=False,
    )
    # Only set for pushes
    mode: Mapped[str | None] = mapped_column(String(30), nullable=True)
    status: Mapped[SyncStatus] = mapped_column(Enum(SyncStatus), nullable=False)
    rows_written: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rows_read: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rows_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # SHA-256 of the workbook after the call, None if it does not exist
    file_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
