"""Batch synchronizer: paginate a collection and bulk import it into the index."""

import asyncio
from typing import List, Optional, Tuple

from searchsync.core.exceptions import PaginationLimitExceededError
from searchsync.platform.routing.pattern import (
    NO_MATCH,
    compile_pattern,
    has_wildcard,
    join_path,
    match_exact,
    parent_path,
    split_path,
)
from searchsync.platform.sources._base import SourceDocument, SourceQuery
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.sync.document_transfer import DocumentTransferUnit
from searchsync.schemas.index import ImportOutcome, IndexRecord
from searchsync.schemas.route import CollectionRoute, CompiledPattern, MatchParams
from searchsync.schemas.sync_result import BatchError, BatchRunResult


class BatchSynchronizer:
    """Backfills one collection (or collection group) page by page.

    Pages are fetched in cursor order and imported one bulk call per page. A failed
    page is recorded and pagination moves on, so a run can partially succeed.
    """

    def __init__(self, context: SyncContext, transfer: DocumentTransferUnit):
        """Initialize the batch synchronizer.

        Args:
            context: The sync context
            transfer: Converts documents into index records
        """
        self.context = context
        self.transfer = transfer

    @staticmethod
    def build_query(path: str) -> Tuple[SourceQuery, Optional[CompiledPattern]]:
        """Choose the source query for a collection path.

        Paths with more than one segment and a wildcard need a collection group query
        on the last segment; its results must be filtered against the returned pattern.

        Returns:
            The query and the membership pattern (None for single collection queries)
        """
        segments = split_path(path)
        if len(segments) > 1 and has_wildcard(path):
            return SourceQuery.collection_group(segments[-1]), compile_pattern(path)
        return SourceQuery.collection(join_path(segments)), None

    async def sync_collection(
        self, route: CollectionRoute, source_path_override: Optional[str] = None
    ) -> BatchRunResult:
        """Sync every document under a route, or under an explicit collection path.

        Args:
            route: The route that owns the collection
            source_path_override: Concrete collection path to sync instead of the
                route's own pattern

        Returns:
            Processed and skipped counts plus per-batch errors
        """
        path = join_path(split_path(source_path_override or route.source_pattern))
        query, membership = self.build_query(path)
        logger = self.context.logger.with_context(
            source_path=path, target_collection=route.target_name
        )
        logger.info(
            f"Syncing {query.kind.value} {query.target} into {route.target_name} "
            f"(fields: {route.fields_label}, batch size: {self.context.batch_size})"
        )

        # Single collection queries share one set of captured parameters
        collection_params = match_exact(path, route.pattern) or {}

        result = BatchRunResult()
        cursor: Optional[SourceDocument] = None
        while True:
            at_cap = result.pages_fetched >= self.context.max_pages
            # Past the cap, one document is enough to tell "done" from "exceeded"
            limit = 1 if at_cap else self.context.batch_size
            page = await self.context.source.fetch_page(query, limit, start_after=cursor)
            if not page:
                break
            if at_cap:
                error = PaginationLimitExceededError(path, self.context.max_pages)
                logger.error(error.message)
                result.errors.append(
                    BatchError(
                        collection=route.target_name,
                        batch=f"page {result.pages_fetched + 1}",
                        error=error.message,
                    )
                )
                break
            result.pages_fetched += 1

            await self._process_page(route, page, membership, collection_params, result, logger)

            if len(page) < self.context.batch_size:
                break
            cursor = page[-1]
            await asyncio.sleep(0)

        logger.info(
            f"Finished {path}: {result.documents_processed} processed, "
            f"{result.documents_skipped} skipped, {len(result.errors)} errors "
            f"in {result.pages_fetched} pages"
        )
        return result

    def _select(
        self,
        route: CollectionRoute,
        page: List[SourceDocument],
        membership: Optional[CompiledPattern],
        collection_params: MatchParams,
    ) -> Tuple[List[Tuple[SourceDocument, MatchParams]], int]:
        if membership is None:
            return [(doc, collection_params) for doc in page], 0

        selected = []
        skipped = 0
        for doc in page:
            prefix = parent_path(doc.path)
            if match_exact(prefix, membership) is NO_MATCH:
                skipped += 1
                continue
            selected.append((doc, match_exact(prefix, route.pattern) or {}))
        return selected, skipped

    async def _convert(
        self, route: CollectionRoute, doc: SourceDocument, params: MatchParams
    ) -> IndexRecord:
        return self.transfer.build_index_record(doc.path, route, doc.data or {}, params)

    async def _process_page(
        self,
        route: CollectionRoute,
        page: List[SourceDocument],
        membership: Optional[CompiledPattern],
        collection_params: MatchParams,
        result: BatchRunResult,
        logger,
    ) -> None:
        batch_label = f"{page[0].id} to {page[-1].id}"
        selected, skipped = self._select(route, page, membership, collection_params)
        result.documents_skipped += skipped
        if skipped:
            logger.debug(f"Skipped {skipped} documents outside {route.source_pattern}")

        converted = await asyncio.gather(
            *(self._convert(route, doc, params) for doc, params in selected),
            return_exceptions=True,
        )
        records: List[IndexRecord] = []
        conversion_failures: List[ImportOutcome] = []
        for (doc, _), outcome in zip(selected, converted):
            if isinstance(outcome, Exception):
                logger.warning(f"Failed to convert {doc.path}: {outcome}")
                conversion_failures.append(ImportOutcome(id=doc.id, ok=False, error=str(outcome)))
            else:
                records.append(outcome)

        if conversion_failures:
            result.errors.append(
                BatchError(
                    collection=route.target_name,
                    batch=batch_label,
                    error=f"{len(conversion_failures)} documents could not be converted",
                    failed_documents=conversion_failures,
                )
            )

        if not records:
            return

        if self.context.log_record_bodies:
            logger.info(f"Importing batch {batch_label}: {records}")
        try:
            import_result = await self.context.destination.bulk_import(route.target_name, records)
        except Exception as e:
            logger.error(f"Bulk import of batch {batch_label} failed: {e}")
            result.errors.append(
                BatchError(collection=route.target_name, batch=batch_label, error=str(e))
            )
            return

        result.documents_processed += len(records)
        failures = import_result.failures
        if failures:
            for failure in failures:
                logger.warning(f"Document {failure.id} rejected by index: {failure.error}")
            result.errors.append(
                BatchError(
                    collection=route.target_name,
                    batch=batch_label,
                    error=f"{len(failures)} documents failed to import",
                    failed_documents=failures,
                )
            )
        else:
            logger.info(f"Imported {len(records)} documents from batch {batch_label}")
