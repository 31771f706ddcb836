from sheetsync.schemas.common import ApiResponse, DiagnosticsResponse
from sheetsync.schemas.sync import PushRequest, QueryRequest, SyncLogResponse

__all__ = [
    "ApiResponse",
    "DiagnosticsResponse",
    "PushRequest",
    "QueryRequest",
    "SyncLogResponse",
]
