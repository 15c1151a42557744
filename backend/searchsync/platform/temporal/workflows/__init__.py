"""Temporal workflows for searchsync."""

from searchsync.platform.temporal.workflows.sync import (
    RunSyncRequestWorkflow,
    ScheduledSyncWorkflow,
    SyncWriteEventWorkflow,
)

__all__ = [
    "RunSyncRequestWorkflow",
    "ScheduledSyncWorkflow",
    "SyncWriteEventWorkflow",
]
