"""Exception taxonomy for searchsync.

Per-item errors (routing misses, vanished documents, single-document index writes)
are caught by the orchestrator and recorded on the run report. Only unexpected errors
escape a sync run.
"""

from typing import Optional


class SearchSyncException(Exception):
    """Base exception for all searchsync errors."""

    def __init__(self, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            message: Human readable description
        """
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class ConfigurationError(SearchSyncException):
    """Raised when configuration is missing or malformed."""

    pass


class SourceReadError(SearchSyncException):
    """Raised when the source document store cannot be read."""

    pass


class DocumentNotFoundError(SourceReadError):
    """Raised when a requested source document does not exist."""

    def __init__(self, path: str):
        """Initialize with the missing document path."""
        self.path = path
        super().__init__(f"Document {path} does not exist")


class IndexWriteError(SearchSyncException):
    """Raised when a single-document call to the index fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize the exception.

        Args:
            message: Description of the failure
            status_code: HTTP status returned by the index, when there was one
        """
        self.status_code = status_code
        super().__init__(message)


class IndexNotFoundError(IndexWriteError):
    """Raised when the index answers 404 for a document or collection."""

    def __init__(self, message: str):
        """Initialize with status code 404."""
        super().__init__(message, status_code=404)


class IndexTransportError(SearchSyncException):
    """Raised when a bulk import fails outright and nothing landed."""

    pass


class PaginationLimitExceededError(SearchSyncException):
    """Raised when a collection sync exceeds its page budget."""

    def __init__(self, path: str, max_pages: int):
        """Initialize with the collection path and the exhausted page budget."""
        self.path = path
        self.max_pages = max_pages
        super().__init__(
            f"Pagination limit of {max_pages} pages exceeded while syncing {path}; "
            "stopping this collection"
        )
