"""Sync-specific exceptions for error handling."""


class SyncFailureError(Exception):
    """Raised when a critical error occurs that should fail the entire sync run.

    This is a non-recoverable error. Per-path and per-collection failures are recorded
    on the run report instead; this one escapes the orchestrator.

    Examples:
    - No index nodes configured
    - Source store client could not be created

    Usage:
        raise SyncFailureError("Typesense destination could not be created")
    """

    pass
