"""Sync request service.

Runs the orchestrator for one sync request record and writes the run metadata back
onto that record: ``syncStatus``, ``syncStartedAt``, ``syncCompletedAt``,
``syncDuration``, ``syncResults`` and ``syncError``.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from searchsync.core.config import settings
from searchsync.core.datetime_utils import format_duration, utc_now
from searchsync.core.logging import ContextualLogger
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.sync.orchestrator import SyncOrchestrator
from searchsync.schemas.sync_request import SyncRequest
from searchsync.schemas.sync_result import SyncRunReport, SyncStatus


class SyncRequestService:
    """Handles sync request records."""

    def __init__(self, request_collection: Optional[str] = None):
        """Initialize the service.

        Args:
            request_collection: Collection holding request records; defaults to
                SYNC_REQUEST_COLLECTION
        """
        self.request_collection = request_collection or settings.SYNC_REQUEST_COLLECTION

    def request_path(self, request_id: str) -> str:
        """Full path of a request record."""
        return f"{self.request_collection}/{request_id}"

    async def handle_request(
        self,
        context: SyncContext,
        request_id: str,
        fields: Optional[Dict[str, Any]] = None,
    ) -> SyncRunReport:
        """Run the sync described by a request record.

        Args:
            context: The sync context
            request_id: Id of the request record
            fields: Content of the request record; only ``paths`` is used

        Returns:
            The run report, also stored as ``syncResults``

        Raises:
            Exception: Any unexpected error, after ``failed`` has been recorded
        """
        path = self.request_path(request_id)
        logger = context.logger.with_context(sync_request_id=request_id)
        started_at = utc_now()
        logger.info(f"[SYNC REQUEST] Starting sync for request {request_id}")

        await self._mark_in_progress(context, path, started_at, logger)

        report: Optional[SyncRunReport] = None
        try:
            request = SyncRequest.model_validate(fields or {})
            if request.sync_all:
                logger.info("No paths requested, syncing all configured collections")
            report = await SyncOrchestrator(context).run(request.paths)

            completed_at = utc_now()
            await context.source.update_document(
                path,
                {
                    "syncStatus": report.status.value,
                    "syncCompletedAt": completed_at,
                    "syncDuration": format_duration(started_at, completed_at),
                    "syncResults": report.to_record(),
                    "syncError": (
                        None
                        if report.success
                        else f"{report.total_errors} errors occurred during sync"
                    ),
                },
            )
        except Exception as e:
            logger.error(f"[SYNC REQUEST] Sync request {request_id} failed: {e}")
            await self._mark_failed(context, path, started_at, e, logger, report)
            raise

        logger.info(
            f"[SYNC REQUEST] Request {request_id} {report.status.value}: "
            f"{report.total_documents} documents, {report.total_errors} errors"
        )
        return report

    async def _mark_in_progress(
        self,
        context: SyncContext,
        path: str,
        started_at: datetime,
        logger: ContextualLogger,
    ) -> None:
        try:
            await context.source.update_document(
                path,
                {
                    "syncStatus": SyncStatus.IN_PROGRESS.value,
                    "syncStartedAt": started_at,
                    "syncCompletedAt": None,
                    "syncError": None,
                    "syncResults": None,
                },
            )
        except Exception as e:
            logger.error(f"Failed to record in_progress status on {path}: {e}")

    async def _mark_failed(
        self,
        context: SyncContext,
        path: str,
        started_at: datetime,
        error: Exception,
        logger: ContextualLogger,
        report: Optional[SyncRunReport] = None,
    ) -> None:
        completed_at = utc_now()
        try:
            await context.source.update_document(
                path,
                {
                    "syncStatus": SyncStatus.FAILED.value,
                    "syncCompletedAt": completed_at,
                    "syncDuration": format_duration(started_at, completed_at),
                    "syncError": str(error) or error.__class__.__name__,
                    "syncResults": report.to_record() if report is not None else None,
                },
            )
        except Exception as e:
            logger.error(f"Failed to record failed status on {path}: {e}")


sync_request_service = SyncRequestService()
