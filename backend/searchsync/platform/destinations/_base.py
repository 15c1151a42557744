"""Base index destination classes."""

from abc import ABC, abstractmethod
from typing import List, Optional

from searchsync.core.logging import ContextualLogger
from searchsync.core.logging import logger as default_logger
from searchsync.schemas.index import BulkImportResult, IndexRecord


class BaseIndexDestination(ABC):
    """Common interface for search index destinations."""

    def __init__(self):
        """Initialize the base destination."""
        self._logger: Optional[ContextualLogger] = None

    @property
    def logger(self):
        """Get the logger for this destination, falling back to default if not set."""
        if self._logger is not None:
            return self._logger
        return default_logger

    def set_logger(self, logger: ContextualLogger) -> None:
        """Set a contextual logger for this destination."""
        self._logger = logger

    @abstractmethod
    async def create_collection(self, name: str) -> None:
        """Create a target collection."""
        pass

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        """Delete a target collection.

        Raises:
            IndexNotFoundError: If the collection does not exist
        """
        pass

    @abstractmethod
    async def upsert_document(self, collection: str, record: IndexRecord) -> None:
        """Insert or replace one record by its ``id``.

        Raises:
            IndexWriteError: If the index rejects the record or cannot be reached
        """
        pass

    @abstractmethod
    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete one record by id.

        Raises:
            IndexNotFoundError: If the record does not exist
            IndexWriteError: For any other failure
        """
        pass

    @abstractmethod
    async def bulk_import(self, collection: str, records: List[IndexRecord]) -> BulkImportResult:
        """Upsert many records in one call.

        Per-document rejections are reported in the result, not raised.

        Raises:
            IndexTransportError: If the call fails outright and nothing landed
        """
        pass

    async def close(self) -> None:
        """Release client resources."""
        return None
