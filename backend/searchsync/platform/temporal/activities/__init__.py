"""Temporal activities for searchsync."""

from searchsync.platform.temporal.activities.sync import (
    create_scheduled_sync_request_activity,
    run_sync_request_activity,
    sync_write_event_activity,
)

__all__ = [
    "run_sync_request_activity",
    "sync_write_event_activity",
    "create_scheduled_sync_request_activity",
]
