from sheetsync.models.sync_log import SyncLog, SyncOperation, SyncStatus

__all__ = [
    "SyncLog",
    "SyncOperation",
    "SyncStatus",
]
