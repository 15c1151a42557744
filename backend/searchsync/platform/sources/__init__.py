"""Source document stores."""

from searchsync.platform.sources._base import (
    BaseSourceStore,
    QueryKind,
    SourceDocument,
    SourceQuery,
)
from searchsync.platform.sources.memory import InMemorySourceStore

__all__ = [
    "BaseSourceStore",
    "InMemorySourceStore",
    "QueryKind",
    "SourceDocument",
    "SourceQuery",
]
