"""Temporal workflows for searchsync."""

from datetime import timedelta
from typing import Any, Dict, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from searchsync.platform.temporal.activities import (
        create_scheduled_sync_request_activity,
        run_sync_request_activity,
        sync_write_event_activity,
    )

# A failed run is recorded on its request record; a new request is the retry
SYNC_REQUEST_RETRY_POLICY = RetryPolicy(maximum_attempts=1)

SCHEDULED_SYNC_RETRY_POLICY = RetryPolicy(
    maximum_attempts=3,
    initial_interval=timedelta(seconds=10),
    maximum_interval=timedelta(seconds=300),
)

WRITE_EVENT_RETRY_POLICY = RetryPolicy(
    maximum_attempts=5,
    initial_interval=timedelta(seconds=1),
    maximum_interval=timedelta(seconds=60),
)


def sync_request_workflow_id(request_id: str) -> str:
    """Workflow id for a sync request; one run per request record."""
    return f"sync-request-{request_id}"


@workflow.defn
class RunSyncRequestWorkflow:
    """Workflow for running one sync request."""

    @workflow.run
    async def run(
        self, request_id: str, fields: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Run the sync request activity."""
        return await workflow.execute_activity(
            run_sync_request_activity,
            args=[request_id, fields or {}],
            start_to_close_timeout=timedelta(hours=2),
            heartbeat_timeout=timedelta(minutes=1),
            retry_policy=SYNC_REQUEST_RETRY_POLICY,
        )


@workflow.defn
class SyncWriteEventWorkflow:
    """Workflow for mirroring one document write."""

    @workflow.run
    async def run(self, event_dict: Dict[str, Any]) -> str:
        """Run the write event activity."""
        return await workflow.execute_activity(
            sync_write_event_activity,
            event_dict,
            start_to_close_timeout=timedelta(minutes=5),
            heartbeat_timeout=timedelta(minutes=1),
            retry_policy=WRITE_EVENT_RETRY_POLICY,
        )


@workflow.defn
class ScheduledSyncWorkflow:
    """Workflow started by the recurring schedule.

    Creates a sync request record, then hands it to its own ``RunSyncRequestWorkflow``
    so firing and syncing stay decoupled.
    """

    @workflow.run
    async def run(self) -> Optional[str]:
        """Create the request record and start its sync."""
        request_id = await workflow.execute_activity(
            create_scheduled_sync_request_activity,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=SCHEDULED_SYNC_RETRY_POLICY,
        )
        if request_id is None:
            workflow.logger.info("Scheduled sync is disabled, nothing to start")
            return None

        await workflow.start_child_workflow(
            RunSyncRequestWorkflow.run,
            args=[request_id, {"scheduledSync": True}],
            id=sync_request_workflow_id(request_id),
            parent_close_policy=workflow.ParentClosePolicy.ABANDON,
        )
        return request_id
