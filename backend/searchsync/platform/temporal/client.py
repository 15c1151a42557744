"""Shared Temporal client."""

from typing import Optional

from temporalio.client import Client

from searchsync.core.config import settings
from searchsync.core.logging import logger


class TemporalClient:
    """Lazily connected, process-wide Temporal client."""

    def __init__(self) -> None:
        """Initialize without connecting."""
        self._client: Optional[Client] = None

    async def get_client(self) -> Client:
        """Return the connected client, connecting on first use."""
        if self._client is None:
            target = f"{settings.TEMPORAL_HOST}:{settings.TEMPORAL_PORT}"
            logger.info(
                f"Connecting to Temporal at {target} (namespace {settings.TEMPORAL_NAMESPACE})"
            )
            self._client = await Client.connect(target, namespace=settings.TEMPORAL_NAMESPACE)
        return self._client

    async def close(self) -> None:
        """Drop the client; the next ``get_client`` reconnects."""
        self._client = None


temporal_client = TemporalClient()
