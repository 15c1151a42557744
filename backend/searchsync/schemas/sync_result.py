"""Schemas for batch and run results.

Results serialize with camelCase keys because they are stored as-is on the sync
request record (``syncResults``).
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from searchsync.core.datetime_utils import format_duration
from searchsync.schemas.index import ImportOutcome


class SyncStatus(str, Enum):
    """Status written to the sync request record."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """Serialize for storage on the source store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BatchError(_ResultModel):
    """A failed (or partially failed) batch within a collection sync."""

    collection: str = Field(..., description="Target index collection")
    batch: str = Field(..., description="Boundary ids, 'first to last'")
    error: str = Field(..., description="Failure message")
    failed_documents: List[ImportOutcome] = Field(default_factory=list)


class BatchRunResult(_ResultModel):
    """Result of syncing one collection (or collection group)."""

    documents_processed: int = 0
    documents_skipped: int = 0
    pages_fetched: int = 0
    errors: List[BatchError] = Field(default_factory=list)

    @computed_field
    @property
    def success(self) -> bool:
        """True when no batch reported an error."""
        return not self.errors


class _ItemResult(_ResultModel):
    success: bool
    error: Optional[str] = None
    documents_processed: int = 0
    documents_skipped: int = 0
    errors: List[BatchError] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        """Errors this item contributes to the run total."""
        if self.errors:
            return len(self.errors)
        return 0 if self.success else 1

    def absorb(self, result: BatchRunResult) -> None:
        """Copy a collection sync result into this item."""
        self.success = result.success
        self.documents_processed = result.documents_processed
        self.documents_skipped = result.documents_skipped
        self.errors = list(result.errors)


class PathSyncResult(_ItemResult):
    """Result for one explicitly requested path."""

    path: str
    document_id: Optional[str] = None


class CollectionSyncResult(_ItemResult):
    """Result for one configured collection in "sync everything" mode."""

    collection: str
    typesense_collection: str


class SyncRunReport(_ResultModel):
    """Aggregate report of one orchestration run."""

    paths: List[PathSyncResult] = Field(default_factory=list)
    collections: List[CollectionSyncResult] = Field(default_factory=list)
    total_documents: int = 0
    total_errors: int = 0
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[str] = None
    error: Optional[str] = None

    @computed_field
    @property
    def success(self) -> bool:
        """True when the run recorded no errors."""
        return self.total_errors == 0

    def _count(self, item: _ItemResult) -> None:
        self.total_documents += item.documents_processed
        self.total_errors += item.error_count

    def add_path_result(self, item: PathSyncResult) -> None:
        """Append a path result and update the totals."""
        self.paths.append(item)
        self._count(item)

    def add_collection_result(self, item: CollectionSyncResult) -> None:
        """Append a collection result and update the totals."""
        self.collections.append(item)
        self._count(item)

    def record_error(self, message: str) -> None:
        """Record a run-level error that is not tied to a single item."""
        self.error = message
        self.total_errors += 1

    def finalize(self, end_time: datetime) -> "SyncRunReport":
        """Stamp the end time and duration."""
        self.end_time = end_time
        self.duration = format_duration(self.start_time, end_time)
        return self

    @property
    def status(self) -> SyncStatus:
        """Completion status for the sync request record."""
        return SyncStatus.COMPLETED if self.success else SyncStatus.COMPLETED_WITH_ERRORS
