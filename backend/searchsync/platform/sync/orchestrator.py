"""Sync orchestrator: run explicit paths or every configured collection."""

from typing import Optional, Sequence

from searchsync.core.datetime_utils import utc_now
from searchsync.core.exceptions import SearchSyncException
from searchsync.platform.routing.resolver import NOT_FOUND, is_document_path
from searchsync.platform.sync.batch_synchronizer import BatchSynchronizer
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.sync.document_transfer import DocumentTransferUnit
from searchsync.platform.sync.exceptions import SyncFailureError
from searchsync.schemas.route import CollectionRoute
from searchsync.schemas.sync_result import (
    CollectionSyncResult,
    PathSyncResult,
    SyncRunReport,
)

NO_CONFIGURATION_ERROR = "No collection configuration found"


class SyncOrchestrator:
    """Runs one sync request.

    Items run strictly one after another. Each per-item failure is recorded on the
    report and the run moves on; only ``SyncFailureError`` escapes.
    """

    def __init__(
        self,
        context: SyncContext,
        transfer: Optional[DocumentTransferUnit] = None,
        synchronizer: Optional[BatchSynchronizer] = None,
    ):
        """Initialize the orchestrator.

        Args:
            context: The sync context
            transfer: Document transfer unit; built from ``context`` when omitted
            synchronizer: Batch synchronizer; built from ``context`` when omitted
        """
        self.context = context
        self.transfer = transfer or DocumentTransferUnit(context)
        self.synchronizer = synchronizer or BatchSynchronizer(context, self.transfer)

    async def run(self, requested_paths: Optional[Sequence[str]] = None) -> SyncRunReport:
        """Run a sync.

        Args:
            requested_paths: Explicit document or collection paths. None or empty
                syncs every configured collection.

        Returns:
            The run report
        """
        report = SyncRunReport(start_time=utc_now())

        if requested_paths:
            self.context.logger.info(f"Syncing {len(requested_paths)} requested paths")
            for path in requested_paths:
                report.add_path_result(await self._sync_path(path))
        else:
            await self._sync_all(report)

        report.finalize(utc_now())
        self.context.logger.info(
            f"Sync finished in {report.duration}: {report.total_documents} documents, "
            f"{report.total_errors} errors"
        )
        return report

    async def _sync_all(self, report: SyncRunReport) -> None:
        if not self.context.routes:
            self.context.logger.error(NO_CONFIGURATION_ERROR)
            report.record_error(NO_CONFIGURATION_ERROR)
            return

        self.context.logger.info(f"Syncing all {len(self.context.routes)} configured collections")
        for route in self.context.routes:
            report.add_collection_result(await self._sync_route(route))

    async def _sync_route(self, route: CollectionRoute) -> CollectionSyncResult:
        item = CollectionSyncResult(
            collection=route.source_pattern,
            typesense_collection=route.target_name,
            success=False,
        )
        try:
            item.absorb(await self.synchronizer.sync_collection(route))
        except SyncFailureError:
            raise
        except Exception as e:
            self._log_item_failure(route.source_pattern, e)
            item.error = self._message(e)
            return item
        if item.errors:
            item.error = f"{len(item.errors)} batch errors"
        return item

    async def _sync_path(self, raw_path: Optional[str]) -> PathSyncResult:
        path = (raw_path or "").strip()
        if not path:
            self.context.logger.warning("Skipping empty path in sync request")
            return PathSyncResult(path=raw_path or "", success=False, error="Empty path")

        match = self.context.resolver.resolve(path)
        if match is NOT_FOUND:
            message = f"Path {path} does not match any configured collection"
            self.context.logger.warning(message)
            return PathSyncResult(path=path, success=False, error=message)

        if is_document_path(path):
            return await self._sync_document_path(path, match)
        return await self._sync_collection_path(path, match)

    async def _sync_document_path(self, path: str, match) -> PathSyncResult:
        try:
            record = await self.transfer.sync_document(path, match)
        except SyncFailureError:
            raise
        except Exception as e:
            self._log_item_failure(path, e)
            return PathSyncResult(path=path, success=False, error=self._message(e))
        return PathSyncResult(
            path=path,
            success=True,
            document_id=record["id"],
            documents_processed=1,
        )

    async def _sync_collection_path(self, path: str, match) -> PathSyncResult:
        item = PathSyncResult(path=path, success=False)
        try:
            item.absorb(
                await self.synchronizer.sync_collection(match.route, source_path_override=path)
            )
        except SyncFailureError:
            raise
        except Exception as e:
            self._log_item_failure(path, e)
            item.error = self._message(e)
            return item
        if item.errors:
            item.error = f"{len(item.errors)} batch errors"
        return item

    @staticmethod
    def _message(error: Exception) -> str:
        if isinstance(error, SearchSyncException):
            return error.message
        return str(error) or error.__class__.__name__

    def _log_item_failure(self, item: str, error: Exception) -> None:
        self.context.logger.error(f"Failed to sync {item}: {self._message(error)}")
