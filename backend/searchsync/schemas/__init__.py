"""Pydantic schemas and value types for searchsync."""

from searchsync.schemas.index import BulkImportResult, ImportOutcome, IndexRecord
from searchsync.schemas.route import (
    CollectionRoute,
    CompiledPattern,
    LiteralSegment,
    MatchParams,
    NamedWildcard,
    PositionalWildcard,
    RouteConfigEntry,
    RouteMatch,
)
from searchsync.schemas.sync_request import SyncRequest, WriteEvent
from searchsync.schemas.sync_result import (
    BatchError,
    BatchRunResult,
    CollectionSyncResult,
    PathSyncResult,
    SyncRunReport,
    SyncStatus,
)

__all__ = [
    "BatchError",
    "BatchRunResult",
    "BulkImportResult",
    "CollectionRoute",
    "CollectionSyncResult",
    "CompiledPattern",
    "ImportOutcome",
    "IndexRecord",
    "LiteralSegment",
    "MatchParams",
    "NamedWildcard",
    "PathSyncResult",
    "PositionalWildcard",
    "RouteConfigEntry",
    "RouteMatch",
    "SyncRequest",
    "SyncRunReport",
    "SyncStatus",
    "WriteEvent",
]
