"""Entry points for starting searchsync workflows."""

from typing import Any, Dict, Optional
from uuid import uuid4

from temporalio.client import WorkflowHandle

from searchsync.core.config import settings
from searchsync.core.logging import logger
from searchsync.platform.temporal.client import temporal_client
from searchsync.platform.temporal.workflows import RunSyncRequestWorkflow, SyncWriteEventWorkflow
from searchsync.platform.temporal.workflows.sync import sync_request_workflow_id
from searchsync.schemas.sync_request import WriteEvent


class TemporalService:
    """Starts workflows for sync requests and document writes."""

    async def run_sync_request_workflow(
        self, request_id: str, fields: Optional[Dict[str, Any]] = None
    ) -> WorkflowHandle:
        """Start the sync for a newly created request record.

        Args:
            request_id: Id of the request record
            fields: Content of the request record

        Returns:
            Handle of the started workflow
        """
        client = await temporal_client.get_client()
        handle = await client.start_workflow(
            RunSyncRequestWorkflow.run,
            args=[request_id, fields or {}],
            id=sync_request_workflow_id(request_id),
            task_queue=settings.TEMPORAL_TASK_QUEUE,
        )
        logger.info(f"Started sync request workflow {handle.id}")
        return handle

    async def run_write_event_workflow(self, event: WriteEvent) -> WorkflowHandle:
        """Start mirroring one document write.

        Args:
            event: The write notification

        Returns:
            Handle of the started workflow
        """
        client = await temporal_client.get_client()
        handle = await client.start_workflow(
            SyncWriteEventWorkflow.run,
            event.model_dump(mode="json"),
            id=f"write-event-{event.path.replace('/', '-')}-{uuid4().hex[:8]}",
            task_queue=settings.TEMPORAL_TASK_QUEUE,
        )
        logger.debug(f"Started write event workflow {handle.id}")
        return handle


temporal_service = TemporalService()
