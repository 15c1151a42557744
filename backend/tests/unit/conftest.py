"""Unit test conftest for setting up test environment."""

import os

# Set environment variables before importing any searchsync modules so Settings
# is built from known values during test collection
os.environ.setdefault("TYPESENSE_HOSTS", "typesense.test")
os.environ.setdefault("TYPESENSE_API_KEY", "test-api-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.pop("COLLECTIONS_CONFIG", None)
os.environ.pop("SCHEDULED_SYNC_INTERVAL", None)

from typing import Dict, List  # noqa: E402

import pytest  # noqa: E402

from searchsync.core.exceptions import IndexNotFoundError, IndexTransportError  # noqa: E402
from searchsync.core.logging import logger  # noqa: E402
from searchsync.platform.destinations._base import BaseIndexDestination  # noqa: E402
from searchsync.platform.sources.memory import InMemorySourceStore  # noqa: E402
from searchsync.platform.sync.context import SyncContext  # noqa: E402
from searchsync.schemas.index import BulkImportResult, ImportOutcome, IndexRecord  # noqa: E402


class RecordingDestination(BaseIndexDestination):
    """In-memory index destination that records every call.

    Attributes:
        fail_imports: 1-based bulk import call numbers that fail wholesale
        reject_ids: Record ids rejected inside otherwise successful imports
    """

    def __init__(self):
        super().__init__()
        self.collections: Dict[str, Dict[str, IndexRecord]] = {}
        self.import_calls: List[tuple] = []
        self.upserts: List[tuple] = []
        self.deletes: List[tuple] = []
        self.fail_imports = set()
        self.reject_ids = set()

    async def create_collection(self, name: str) -> None:
        self.collections.setdefault(name, {})

    async def delete_collection(self, name: str) -> None:
        if name not in self.collections:
            raise IndexNotFoundError(f"Collection {name} not found")
        del self.collections[name]

    async def upsert_document(self, collection: str, record: IndexRecord) -> None:
        self.upserts.append((collection, record))
        self.collections.setdefault(collection, {})[record["id"]] = record

    async def delete_document(self, collection: str, document_id: str) -> None:
        documents = self.collections.get(collection, {})
        if document_id not in documents:
            raise IndexNotFoundError(f"Document {document_id} not found")
        del documents[document_id]
        self.deletes.append((collection, document_id))

    async def bulk_import(self, collection: str, records: List[IndexRecord]) -> BulkImportResult:
        self.import_calls.append((collection, list(records)))
        if len(self.import_calls) in self.fail_imports:
            raise IndexTransportError("Connection reset by peer")

        outcomes = []
        for record in records:
            if record["id"] in self.reject_ids:
                outcomes.append(
                    ImportOutcome(id=record["id"], ok=False, error="Field `age` must be an int32")
                )
            else:
                self.collections.setdefault(collection, {})[record["id"]] = record
                outcomes.append(ImportOutcome(id=record["id"], ok=True))
        return BulkImportResult(outcomes=outcomes)

    @property
    def imported_ids(self) -> List[str]:
        return [record["id"] for _, records in self.import_calls for record in records]


@pytest.fixture
def memory_store():
    """Create an empty in-memory source store."""
    return InMemorySourceStore()


@pytest.fixture
def destination():
    """Create a recording index destination."""
    return RecordingDestination()


@pytest.fixture
def make_context(memory_store, destination):
    """Build a SyncContext over the memory store and recording destination."""

    def _make(routes, **kwargs):
        return SyncContext(
            source=memory_store,
            destination=destination,
            routes=routes,
            logger=logger,
            **kwargs,
        )

    return _make
