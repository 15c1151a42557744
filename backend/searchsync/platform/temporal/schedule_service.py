"""Temporal schedule management for the recurring sync."""

from typing import Optional

from temporalio.client import (
    Client,
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleHandle,
    ScheduleSpec,
    ScheduleUpdate,
    ScheduleUpdateInput,
)
from temporalio.service import RPCError, RPCStatusCode

from searchsync.core.config import SCHEDULE_DISABLED, settings
from searchsync.core.logging import logger
from searchsync.platform.temporal.client import temporal_client
from searchsync.platform.temporal.workflows import ScheduledSyncWorkflow

SCHEDULED_SYNC_SCHEDULE_ID = "searchsync-scheduled-sync"


class TemporalScheduleService:
    """Keeps the Temporal schedule in line with ``SCHEDULED_SYNC_INTERVAL``."""

    def __init__(self, client: Optional[Client] = None):
        """Initialize the service.

        Args:
            client: Temporal client; the shared client is used when omitted
        """
        self._client = client

    async def _get_client(self) -> Client:
        if self._client is None:
            self._client = await temporal_client.get_client()
        return self._client

    @staticmethod
    def build_schedule(cron_expression: str) -> Schedule:
        """Build a UTC cron schedule that starts ``ScheduledSyncWorkflow``."""
        return Schedule(
            action=ScheduleActionStartWorkflow(
                ScheduledSyncWorkflow.run,
                id=f"{SCHEDULED_SYNC_SCHEDULE_ID}-workflow",
                task_queue=settings.TEMPORAL_TASK_QUEUE,
            ),
            spec=ScheduleSpec(cron_expressions=[cron_expression], time_zone_name="UTC"),
        )

    async def _get_existing_handle(self, schedule_id: str) -> Optional[ScheduleHandle]:
        client = await self._get_client()
        handle = client.get_schedule_handle(schedule_id)
        try:
            await handle.describe()
        except RPCError as e:
            if e.status == RPCStatusCode.NOT_FOUND:
                return None
            raise
        return handle

    async def ensure_schedule(self, interval: Optional[str] = None) -> Optional[str]:
        """Create, update or delete the recurring sync schedule.

        Args:
            interval: Cron expression; defaults to SCHEDULED_SYNC_INTERVAL. Absent or
                ``never`` removes the schedule.

        Returns:
            The schedule id, or None when scheduling is disabled
        """
        if interval is None:
            interval = settings.SCHEDULED_SYNC_INTERVAL
        interval = (interval or "").strip()

        existing = await self._get_existing_handle(SCHEDULED_SYNC_SCHEDULE_ID)

        if not interval or interval == SCHEDULE_DISABLED:
            if existing is not None:
                await existing.delete()
                logger.info(f"Deleted schedule {SCHEDULED_SYNC_SCHEDULE_ID}: sync is disabled")
            else:
                logger.info("Scheduled sync is disabled")
            return None

        schedule = self.build_schedule(interval)
        if existing is None:
            client = await self._get_client()
            await client.create_schedule(SCHEDULED_SYNC_SCHEDULE_ID, schedule)
            logger.info(f"Created schedule {SCHEDULED_SYNC_SCHEDULE_ID} with cron '{interval}'")
        else:

            def _update(_: ScheduleUpdateInput) -> ScheduleUpdate:
                return ScheduleUpdate(schedule=schedule)

            await existing.update(_update)
            logger.info(f"Updated schedule {SCHEDULED_SYNC_SCHEDULE_ID} to cron '{interval}'")
        return SCHEDULED_SYNC_SCHEDULE_ID

    async def delete_schedule_handle(self, schedule_id: str) -> None:
        """Delete a schedule by id.

        Raises:
            RPCError: If the schedule does not exist
        """
        client = await self._get_client()
        await client.get_schedule_handle(schedule_id).delete()


temporal_schedule_service = TemporalScheduleService()
