"""Document transfer: convert one source document and write it to the index."""

from typing import Any, Dict, Optional

from searchsync.core.exceptions import DocumentNotFoundError, IndexNotFoundError
from searchsync.platform.routing.pattern import DOC_ID_PARAM, last_segment
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.transformers.projection import map_value, shape_fields
from searchsync.schemas.index import IndexRecord
from searchsync.schemas.route import CollectionRoute, MatchParams, RouteMatch

ORIGINAL_ID_FIELD = "_id"
PATH_FIELD = "_path"


class DocumentTransferUnit:
    """Converts source documents into index records and upserts or deletes them.

    No retries happen here; the index client owns its transport retry policy.
    """

    def __init__(self, context: SyncContext):
        """Initialize the transfer unit.

        Args:
            context: The sync context
        """
        self.context = context

    def build_index_record(
        self,
        path: str,
        route: CollectionRoute,
        data: Dict[str, Any],
        params: Optional[MatchParams] = None,
    ) -> IndexRecord:
        """Convert raw source data into an index record.

        Args:
            path: Full source document path
            route: The route the document resolved to
            data: Raw source fields
            params: Parameters captured while matching ``path``

        Returns:
            The index record; ``id`` is always the document's own identifier
        """
        params = params or {}
        document_id = params.get(DOC_ID_PARAM) or last_segment(path)

        record = shape_fields(data, route.projected_fields, flatten=self.context.flatten)
        # A source field named "id" is kept as "_id", whatever the projection
        if "id" in data:
            record[ORIGINAL_ID_FIELD] = map_value(data["id"])
        record["id"] = document_id

        if self.context.include_path:
            record[PATH_FIELD] = path
        if self.context.include_path_params:
            for name, value in params.items():
                if name != DOC_ID_PARAM:
                    record.setdefault(name, value)
        return record

    def _log_record(self, action: str, route: CollectionRoute, record: IndexRecord) -> None:
        if self.context.log_record_bodies:
            self.context.logger.info(f"{action} {route.target_name}: {record}")
        else:
            self.context.logger.debug(f"{action} {route.target_name}: id={record['id']}")

    async def upsert(
        self,
        path: str,
        route: CollectionRoute,
        data: Dict[str, Any],
        params: Optional[MatchParams] = None,
    ) -> IndexRecord:
        """Convert a document and upsert it into the route's target collection.

        Raises:
            IndexWriteError: If the index rejects the record
        """
        record = self.build_index_record(path, route, data, params)
        self._log_record("Upserting into", route, record)
        await self.context.destination.upsert_document(route.target_name, record)
        return record

    async def delete(
        self, path: str, route: CollectionRoute, params: Optional[MatchParams] = None
    ) -> str:
        """Delete a document from the route's target collection.

        A record that is already gone counts as deleted.

        Returns:
            The deleted record id
        """
        document_id = (params or {}).get(DOC_ID_PARAM) or last_segment(path)
        try:
            await self.context.destination.delete_document(route.target_name, document_id)
        except IndexNotFoundError:
            self.context.logger.debug(
                f"Document {document_id} was not in {route.target_name}, nothing to delete"
            )
            return document_id
        self.context.logger.info(f"Deleted {document_id} from {route.target_name}")
        return document_id

    async def sync_document(self, path: str, match: RouteMatch) -> IndexRecord:
        """Read one document from the source and upsert it.

        Args:
            path: Full document path
            match: Route match for ``path``

        Returns:
            The record written to the index

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = await self.context.source.get_document(path)
        if not document.exists:
            raise DocumentNotFoundError(path)
        return await self.upsert(document.path, match.route, document.data, match.params)
