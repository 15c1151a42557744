"""Automatic sync: mirror single document writes into the index."""

from enum import Enum

from searchsync.platform.routing.resolver import NOT_FOUND, is_document_path
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.sync.document_transfer import DocumentTransferUnit
from searchsync.schemas.sync_request import WriteEvent


class WriteOutcome(str, Enum):
    """What a write event led to."""

    SKIPPED = "skipped"
    UPSERTED = "upserted"
    DELETED = "deleted"


class AutomaticSyncService:
    """Routes a document write to its collection and upserts or deletes the record."""

    async def handle_write(self, context: SyncContext, event: WriteEvent) -> WriteOutcome:
        """Handle one write event.

        Args:
            context: The sync context
            event: The write notification

        Returns:
            The outcome; writes outside every configured collection are skipped

        Raises:
            IndexWriteError: If the index rejects the upsert or a non-404 delete fails
        """
        if not is_document_path(event.path):
            context.logger.debug(f"{event.path} is not a document path, skipping")
            return WriteOutcome.SKIPPED

        match = context.resolver.resolve(event.path)
        if match is NOT_FOUND:
            context.logger.debug(
                f"Document {event.path} doesn't match any configured collection, skipping"
            )
            return WriteOutcome.SKIPPED

        logger = context.logger.with_context(target_collection=match.route.target_name)
        logger.info(f"Processing document {event.path} for collection {match.route.target_name}")
        transfer = DocumentTransferUnit(context)

        if event.is_delete:
            await transfer.delete(event.path, match.route, match.params)
            return WriteOutcome.DELETED

        # The event payload may be stale by the time it is delivered
        latest = await context.source.get_document(event.path)
        if not latest.exists:
            logger.info(f"Document {event.path} no longer exists, skipping upsert")
            return WriteOutcome.SKIPPED

        await transfer.upsert(latest.path, match.route, latest.data, match.params)
        return WriteOutcome.UPSERTED


automatic_sync_service = AutomaticSyncService()
