"""Typesense destination over the Typesense REST API.

Uses ``httpx.AsyncClient`` directly. Rate limits (429), gateway errors and transport
failures are retried with exponential backoff, rotating through the configured nodes
on every attempt.
"""

import json
from itertools import cycle
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from searchsync.core.config import settings
from searchsync.core.exceptions import (
    ConfigurationError,
    IndexNotFoundError,
    IndexTransportError,
    IndexWriteError,
)
from searchsync.core.logging import ContextualLogger
from searchsync.core.logging import logger as default_logger
from searchsync.platform.destinations._base import BaseIndexDestination
from searchsync.schemas.index import BulkImportResult, ImportOutcome, IndexRecord

RETRYABLE_STATUS_CODES = {429, 502, 503, 504}

AUTO_SCHEMA_FIELDS = [{"name": ".*", "type": "auto"}]


def should_retry_request(exception: BaseException) -> bool:
    """Check if a failed Typesense request should be retried.

    Args:
        exception: Exception raised by the request

    Returns:
        True for transport errors and retryable HTTP statuses
    """
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exception, httpx.TransportError)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(body)


class TypesenseDestination(BaseIndexDestination):
    """Typesense search index destination."""

    def __init__(self):
        """Initialize the Typesense destination."""
        super().__init__()
        self.client: Optional[httpx.AsyncClient] = None
        self.nodes: List[str] = []
        self.dirty_values: str = "coerce_or_drop"
        self.max_retries: int = 3
        self._node_cycle = None
        self._owns_client = True

    @classmethod
    async def create(
        cls,
        nodes: Optional[List[str]] = None,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> "TypesenseDestination":
        """Create and return a configured Typesense destination.

        Args:
            nodes: Base URLs (``https://host:443``); defaults to TYPESENSE_HOSTS
            api_key: Admin API key; defaults to TYPESENSE_API_KEY
            http_client: Pre-built client (tests inject one with a mock transport)
            logger: Logger instance

        Returns:
            Configured TypesenseDestination instance

        Raises:
            ConfigurationError: If no Typesense node is configured
        """
        instance = cls()
        instance.set_logger(logger or default_logger)
        instance.nodes = nodes or [
            f"{settings.TYPESENSE_PROTOCOL}://{host}:{settings.TYPESENSE_PORT}"
            for host in settings.typesense_hosts
        ]
        if not instance.nodes:
            raise ConfigurationError("No Typesense nodes configured (TYPESENSE_HOSTS is empty)")
        instance._node_cycle = cycle(instance.nodes)
        instance.dirty_values = settings.DIRTY_VALUES
        instance.max_retries = max(1, settings.TYPESENSE_MAX_RETRIES)

        headers = {"X-TYPESENSE-API-KEY": api_key or settings.TYPESENSE_API_KEY or ""}
        if http_client is not None:
            http_client.headers.update(headers)
            instance.client = http_client
            instance._owns_client = False
        else:
            instance.client = httpx.AsyncClient(
                headers=headers, timeout=settings.TYPESENSE_TIMEOUT_SECONDS
            )

        instance.logger.info(f"Configured Typesense destination with nodes {instance.nodes}")
        return instance

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        content: Optional[str] = None,
    ) -> httpx.Response:
        """Send a request, retrying transport errors and retryable statuses.

        Non-retryable error statuses are returned to the caller, not raised.
        """
        if not self.client:
            raise RuntimeError("Typesense client not initialized. Call create() first.")

        @retry(
            stop=stop_after_attempt(self.max_retries),
            retry=retry_if_exception(should_retry_request),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )
        async def _send() -> httpx.Response:
            url = f"{next(self._node_cycle)}{path}"
            response = await self.client.request(
                method,
                url,
                params=params,
                json=json_body,
                content=content,
                headers={"Content-Type": "text/plain"} if content is not None else None,
            )
            if response.status_code in RETRYABLE_STATUS_CODES:
                self.logger.warning(
                    f"Typesense {method} {path} returned {response.status_code}, retrying"
                )
                response.raise_for_status()
            return response

        return await _send()

    async def _write(
        self, method: str, path: str, description: str, **kwargs
    ) -> httpx.Response:
        """Send a single-document or collection call and map failures."""
        try:
            response = await self._request(method, path, **kwargs)
        except httpx.HTTPStatusError as e:
            raise IndexWriteError(
                f"Failed to {description}: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise IndexWriteError(f"Failed to {description}: {e}") from e

        if response.status_code == 404:
            raise IndexNotFoundError(f"Failed to {description}: {_error_message(response)}")
        if response.is_error:
            raise IndexWriteError(
                f"Failed to {description}: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    async def create_collection(self, name: str) -> None:
        """Create a collection with an auto-detected schema."""
        await self._write(
            "POST",
            "/collections",
            f"create collection {name}",
            json_body={
                "name": name,
                "fields": AUTO_SCHEMA_FIELDS,
                "enable_nested_fields": True,
            },
        )
        self.logger.info(f"Created Typesense collection {name}")

    async def delete_collection(self, name: str) -> None:
        """Delete a collection."""
        await self._write("DELETE", f"/collections/{_segment(name)}", f"delete collection {name}")
        self.logger.info(f"Deleted Typesense collection {name}")

    async def upsert_document(self, collection: str, record: IndexRecord) -> None:
        """Insert or replace one record."""
        await self._write(
            "POST",
            f"/collections/{_segment(collection)}/documents",
            f"upsert document {record.get('id')} into {collection}",
            params={"action": "upsert", "dirty_values": self.dirty_values},
            json_body=record,
        )

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete one record by id."""
        await self._write(
            "DELETE",
            f"/collections/{_segment(collection)}/documents/{_segment(document_id)}",
            f"delete document {document_id} from {collection}",
        )

    async def bulk_import(self, collection: str, records: List[IndexRecord]) -> BulkImportResult:
        """Upsert records through the JSONL import endpoint.

        Returns:
            Per-document outcomes, in submission order
        """
        if not records:
            return BulkImportResult()

        body = "\n".join(json.dumps(record, default=str) for record in records)
        try:
            response = await self._request(
                "POST",
                f"/collections/{_segment(collection)}/documents/import",
                params={
                    "action": "upsert",
                    "return_id": "true",
                    "dirty_values": self.dirty_values,
                },
                content=body,
            )
        except (httpx.HTTPStatusError, httpx.TransportError) as e:
            raise IndexTransportError(f"Bulk import into {collection} failed: {e}") from e

        if response.is_error:
            raise IndexTransportError(
                f"Bulk import into {collection} failed: HTTP {response.status_code} "
                f"{_error_message(response)}"
            )

        return BulkImportResult(
            batch_accepted=True,
            outcomes=self._parse_import_response(response.text, records),
        )

    @staticmethod
    def _parse_import_response(text: str, records: List[IndexRecord]) -> List[ImportOutcome]:
        outcomes: List[ImportOutcome] = []
        lines = [line for line in text.splitlines() if line.strip()]
        for index, line in enumerate(lines):
            fallback_id = records[index].get("id") if index < len(records) else None
            try:
                item = json.loads(line)
            except ValueError:
                outcomes.append(
                    ImportOutcome(id=fallback_id, ok=False, error=f"Unparseable response: {line}")
                )
                continue
            document_id = item.get("id", fallback_id)
            outcomes.append(
                ImportOutcome(
                    id=str(document_id) if document_id is not None else None,
                    ok=bool(item.get("success")),
                    error=item.get("error"),
                )
            )
        # Records the index never answered for did not land
        for record in records[len(lines) :]:
            outcomes.append(
                ImportOutcome(id=record.get("id"), ok=False, error="No import result returned")
            )
        return outcomes

    async def close(self) -> None:
        """Close the HTTP client if this destination created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
        self.client = None
