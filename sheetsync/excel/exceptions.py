"""Exceptions raised inside the synchronization core.

They never escape ``SyncManager``: the adapter boundary converts them into
recorded diagnostics and an empty result.
"""

from __future__ import annotations


class SheetSyncError(Exception):
    """Base exception for synchronization errors."""

    pass


class InputError(SheetSyncError):
    """Raised for caller mistakes: empty or mixed input, unsupported mode or request."""

    pass


class ResourceError(SheetSyncError):
    """Raised when the workbook, a worksheet, or an address cannot be resolved."""

    pass


class PersistenceError(SheetSyncError):
    """Raised when the workbook cannot be written back to disk."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Saving workbook '{file_path}' failed: {reason}")
