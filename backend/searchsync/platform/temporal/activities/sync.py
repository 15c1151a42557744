"""Temporal activities for searchsync."""

import asyncio
from typing import Any, Awaitable, Dict, Optional

from temporalio import activity


async def _heartbeat_until_done(task: "asyncio.Task", message: str) -> Any:
    """Await a task, heartbeating every second while it runs."""
    while True:
        done, _ = await asyncio.wait({task}, timeout=1)
        if task in done:
            return await task
        activity.heartbeat(message)


async def _run_with_context(dimensions: Dict[str, Any], work) -> Any:
    """Build a sync context, run ``work(context)`` and close the context."""
    from searchsync.platform.sync.factory import SyncFactory

    context = await SyncFactory.create_context(dimensions=dimensions)
    try:
        task: "asyncio.Task" = asyncio.create_task(work(context))
        try:
            return await _heartbeat_until_done(task, "Sync in progress")
        except asyncio.CancelledError:
            context.logger.info("[ACTIVITY] Sync activity cancelled")
            task.cancel()
            raise
    finally:
        await context.close()


# Imports inside the activities avoid issues with Temporal's sandboxing
@activity.defn
async def run_sync_request_activity(
    request_id: str, fields: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Activity to run one sync request.

    Args:
        request_id: Id of the sync request record
        fields: Content of the request record

    Returns:
        The run report, serialized as stored on the request record
    """
    from searchsync.core.sync_request_service import sync_request_service

    def work(context) -> Awaitable:
        return sync_request_service.handle_request(context, request_id, fields)

    report = await _run_with_context({"sync_request_id": request_id}, work)
    return report.to_record()


@activity.defn
async def sync_write_event_activity(event_dict: Dict[str, Any]) -> str:
    """Activity to mirror one document write into the index.

    Args:
        event_dict: ``WriteEvent`` as dict

    Returns:
        The write outcome (``upserted``, ``deleted`` or ``skipped``)
    """
    from searchsync.core.automatic_sync_service import automatic_sync_service
    from searchsync.schemas.sync_request import WriteEvent

    event = WriteEvent.model_validate(event_dict)

    def work(context) -> Awaitable:
        return automatic_sync_service.handle_write(context, event)

    outcome = await _run_with_context({"document_path": event.path}, work)
    return outcome.value


@activity.defn
async def create_scheduled_sync_request_activity() -> Optional[str]:
    """Activity to create a sync request record for a schedule firing.

    Returns:
        The new request id, or None when scheduling is disabled
    """
    from searchsync.core.scheduled_sync_service import ScheduledSyncService
    from searchsync.platform.sources.firestore import FirestoreSourceStore

    service = ScheduledSyncService()
    if not service.enabled:
        return await service.fire(source=None)

    source = await FirestoreSourceStore.create()
    try:
        return await service.fire(source)
    finally:
        await source.close()
