"""Sync engine: document transfer, batch synchronization and orchestration."""

from searchsync.platform.sync.batch_synchronizer import BatchSynchronizer
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.sync.document_transfer import DocumentTransferUnit
from searchsync.platform.sync.exceptions import SyncFailureError
from searchsync.platform.sync.orchestrator import SyncOrchestrator

__all__ = [
    "BatchSynchronizer",
    "DocumentTransferUnit",
    "SyncContext",
    "SyncFailureError",
    "SyncOrchestrator",
]
