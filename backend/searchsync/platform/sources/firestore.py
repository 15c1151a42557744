"""Firestore source store.

Wraps ``google.cloud.firestore.AsyncClient``. The client library is an optional
dependency (``pip install searchsync[firestore]``) and is imported lazily in
:meth:`FirestoreSourceStore.create`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from searchsync.core.config import settings
from searchsync.core.exceptions import DocumentNotFoundError, SourceReadError
from searchsync.core.logging import ContextualLogger
from searchsync.core.logging import logger as default_logger
from searchsync.platform.sources._base import BaseSourceStore, SourceDocument, SourceQuery

if TYPE_CHECKING:
    from google.cloud.firestore import AsyncClient


class FirestoreSourceStore(BaseSourceStore):
    """Source store backed by Cloud Firestore."""

    def __init__(self):
        """Initialize the Firestore source store."""
        super().__init__()
        self.client: Optional[AsyncClient] = None

    @classmethod
    async def create(
        cls,
        project_id: Optional[str] = None,
        database: Optional[str] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> "FirestoreSourceStore":
        """Create a store connected with application default credentials.

        Args:
            project_id: GCP project; defaults to FIRESTORE_PROJECT_ID or the environment
            database: Firestore database id; defaults to FIRESTORE_DATABASE
            logger: Logger instance

        Returns:
            Connected FirestoreSourceStore
        """
        from google.cloud.firestore import AsyncClient

        instance = cls()
        instance.set_logger(logger or default_logger)
        kwargs: Dict[str, Any] = {}
        if project_id or settings.FIRESTORE_PROJECT_ID:
            kwargs["project"] = project_id or settings.FIRESTORE_PROJECT_ID
        if database or settings.FIRESTORE_DATABASE:
            kwargs["database"] = database or settings.FIRESTORE_DATABASE
        instance.client = AsyncClient(**kwargs)
        instance.logger.info(f"Connected to Firestore project {instance.client.project}")
        return instance

    def _require_client(self) -> "AsyncClient":
        if not self.client:
            raise RuntimeError("Firestore client not initialized. Call create() first.")
        return self.client

    @staticmethod
    def _to_document(snapshot) -> SourceDocument:
        return SourceDocument(
            id=snapshot.id,
            path=snapshot.reference.path,
            data=snapshot.to_dict() if snapshot.exists else None,
            snapshot=snapshot,
        )

    async def get_document(self, path: str) -> SourceDocument:
        """Read one document by path."""
        client = self._require_client()
        try:
            snapshot = await client.document(path).get()
        except Exception as e:
            raise SourceReadError(f"Failed to read document {path}: {e}") from e
        return self._to_document(snapshot)

    async def fetch_page(
        self,
        query: SourceQuery,
        limit: int,
        start_after: Optional[SourceDocument] = None,
    ) -> List[SourceDocument]:
        """Fetch one page, ordered by document name, strictly after the cursor."""
        client = self._require_client()
        if query.is_group:
            base = client.collection_group(query.target)
        else:
            base = client.collection(query.target)

        if start_after is not None:
            cursor = start_after.snapshot
            if cursor is None:
                cursor = await client.document(start_after.path).get()
            base = base.start_after(cursor)

        try:
            snapshots = await base.limit(limit).get()
        except Exception as e:
            raise SourceReadError(f"Failed to query {query.kind.value} {query.target}: {e}") from e
        return [self._to_document(s) for s in snapshots]

    async def update_document(self, path: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document."""
        from google.api_core.exceptions import NotFound

        client = self._require_client()
        try:
            await client.document(path).update(fields)
        except NotFound as e:
            raise DocumentNotFoundError(path) from e

    async def add_document(self, collection_path: str, fields: Dict[str, Any]) -> str:
        """Create a document with a generated id."""
        client = self._require_client()
        _, reference = await client.collection(collection_path).add(fields)
        return reference.id

    async def close(self) -> None:
        """Close the underlying client."""
        if self.client is not None:
            self.client.close()
            self.client = None
