"""Base source store classes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from searchsync.core.logging import ContextualLogger
from searchsync.core.logging import logger as default_logger


@dataclass
class SourceDocument:
    """A document read from the source store.

    Attributes:
        id: The document's own identifier (last path segment)
        path: Full document path
        data: Field data; None when the document does not exist
        snapshot: Store-native handle, used as the pagination cursor
    """

    id: str
    path: str
    data: Optional[Dict[str, Any]] = field(default=None)
    snapshot: Any = field(default=None, repr=False, compare=False)

    @property
    def exists(self) -> bool:
        """Whether the document exists in the store."""
        return self.data is not None


class QueryKind(str, Enum):
    """How a paginated query selects documents."""

    COLLECTION = "collection"
    COLLECTION_GROUP = "collection_group"


@dataclass(frozen=True)
class SourceQuery:
    """A paginated query over one collection or a collection group.

    Attributes:
        kind: Collection or collection group
        target: Collection path, or the collection group name
    """

    kind: QueryKind
    target: str

    @classmethod
    def collection(cls, path: str) -> "SourceQuery":
        """Query the documents of one concrete collection."""
        return cls(QueryKind.COLLECTION, path)

    @classmethod
    def collection_group(cls, name: str) -> "SourceQuery":
        """Query every collection named ``name``, whatever its ancestors."""
        return cls(QueryKind.COLLECTION_GROUP, name)

    @property
    def is_group(self) -> bool:
        """Whether this is a collection group query."""
        return self.kind is QueryKind.COLLECTION_GROUP


class BaseSourceStore(ABC):
    """Common interface for hierarchical document stores."""

    def __init__(self):
        """Initialize the base source store."""
        self._logger: Optional[ContextualLogger] = None

    @property
    def logger(self):
        """Get the logger for this store, falling back to default if not set."""
        if self._logger is not None:
            return self._logger
        return default_logger

    def set_logger(self, logger: ContextualLogger) -> None:
        """Set a contextual logger for this store."""
        self._logger = logger

    @abstractmethod
    async def get_document(self, path: str) -> SourceDocument:
        """Read one document by path. Missing documents come back with ``data=None``."""
        pass

    @abstractmethod
    async def fetch_page(
        self,
        query: SourceQuery,
        limit: int,
        start_after: Optional[SourceDocument] = None,
    ) -> List[SourceDocument]:
        """Fetch one page of a query.

        Args:
            query: Collection or collection group query
            limit: Maximum number of documents in the page
            start_after: Cursor; the last document of the previous page

        Returns:
            Up to ``limit`` documents, ordered strictly after ``start_after``
        """
        pass

    @abstractmethod
    async def update_document(self, path: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document."""
        pass

    @abstractmethod
    async def add_document(self, collection_path: str, fields: Dict[str, Any]) -> str:
        """Create a document with a generated id in a collection.

        Returns:
            The new document's id
        """
        pass

    async def close(self) -> None:
        """Release client resources."""
        return None
