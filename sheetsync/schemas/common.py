from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DiagnosticsResponse(BaseModel):
    """Messages collected by the adapter during one call."""

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    # Table row numbers (header is row 1) that could not be rebuilt
    skipped_rows: list[int] = Field(default_factory=list)


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by all endpoints."""

    success: bool
    data: T | None = None
    error: str | None = None
    diagnostics: DiagnosticsResponse | None = None

    @classmethod
    def ok(cls, data: T, diagnostics: DiagnosticsResponse | None = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, diagnostics=diagnostics)

    @classmethod
    def fail(cls, error: str, diagnostics: DiagnosticsResponse | None = None) -> "ApiResponse[None]":
        return cls(success=False, error=error, diagnostics=diagnostics)
