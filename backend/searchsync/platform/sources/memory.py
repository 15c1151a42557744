"""In-memory source store.

Holds documents in a dict keyed by full path. Queries return documents ordered by
path, which gives the same stable cursor semantics as a real store. Used for tests
and local runs.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from searchsync.core.exceptions import DocumentNotFoundError
from searchsync.platform.routing.pattern import join_path, last_segment, split_path
from searchsync.platform.sources._base import BaseSourceStore, SourceDocument, SourceQuery


class InMemorySourceStore(BaseSourceStore):
    """Dictionary-backed source store."""

    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None):
        """Initialize the store.

        Args:
            documents: Initial documents keyed by full document path
        """
        super().__init__()
        self._documents: Dict[str, Dict[str, Any]] = {}
        for path, data in (documents or {}).items():
            self.set_document(path, data)

    def set_document(self, path: str, data: Dict[str, Any]) -> None:
        """Create or replace a document."""
        self._documents[join_path(split_path(path))] = copy.deepcopy(data)

    def delete_document(self, path: str) -> None:
        """Remove a document if present."""
        self._documents.pop(join_path(split_path(path)), None)

    def _snapshot(self, path: str) -> SourceDocument:
        data = self._documents.get(path)
        return SourceDocument(
            id=last_segment(path),
            path=path,
            data=copy.deepcopy(data) if data is not None else None,
        )

    def _query_paths(self, query: SourceQuery) -> Iterable[str]:
        for path in self._documents:
            segments = split_path(path)
            if query.is_group:
                if len(segments) >= 2 and segments[-2] == query.target:
                    yield path
            elif join_path(segments[:-1]) == join_path(split_path(query.target)):
                yield path

    def _sort_key(self, path: str) -> Tuple[str, ...]:
        return tuple(split_path(path))

    async def get_document(self, path: str) -> SourceDocument:
        """Read one document by path."""
        return self._snapshot(join_path(split_path(path)))

    async def fetch_page(
        self,
        query: SourceQuery,
        limit: int,
        start_after: Optional[SourceDocument] = None,
    ) -> List[SourceDocument]:
        """Fetch one page of documents ordered by path."""
        paths = sorted(self._query_paths(query), key=self._sort_key)
        if start_after is not None:
            cursor = self._sort_key(start_after.path)
            paths = [p for p in paths if self._sort_key(p) > cursor]
        return [self._snapshot(p) for p in paths[:limit]]

    async def update_document(self, path: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document."""
        key = join_path(split_path(path))
        if key not in self._documents:
            raise DocumentNotFoundError(key)
        self._documents[key].update(copy.deepcopy(fields))

    async def add_document(self, collection_path: str, fields: Dict[str, Any]) -> str:
        """Create a document with a generated id."""
        document_id = uuid4().hex[:20]
        self.set_document(f"{collection_path}/{document_id}", fields)
        return document_id
