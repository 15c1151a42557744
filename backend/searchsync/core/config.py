"""Process-wide configuration, loaded once from the environment.

All settings are read at import time into an immutable ``Settings`` instance. The
collection routes are compiled separately through :meth:`Settings.load_routes` so a
malformed ``COLLECTIONS_CONFIG`` degrades to an empty route set instead of failing
startup.
"""

import json
from typing import List, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from searchsync.core.exceptions import ConfigurationError
from searchsync.schemas.route import CollectionRoute, RouteConfigEntry

SCHEDULE_DISABLED = "never"


class Settings(BaseSettings):
    """Searchsync settings.

    Attributes mirror the environment variable names.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Routes
    COLLECTIONS_CONFIG: Optional[str] = None
    FIRESTORE_COLLECTION_PATH: Optional[str] = None
    FIRESTORE_COLLECTION_FIELDS: str = ""
    TYPESENSE_COLLECTION_NAME: Optional[str] = None

    # Record shaping
    FLATTEN_NESTED_DOCUMENTS: bool = False
    LOG_TYPESENSE_INSERTS: bool = False
    INCLUDE_FIRESTORE_PATH: bool = False
    INCLUDE_PATH_PARAMS: bool = False
    DIRTY_VALUES: str = "coerce_or_drop"

    # Typesense
    TYPESENSE_HOSTS: str = ""
    TYPESENSE_PORT: int = 443
    TYPESENSE_PROTOCOL: str = "https"
    TYPESENSE_API_KEY: Optional[str] = None
    TYPESENSE_TIMEOUT_SECONDS: float = 60.0
    TYPESENSE_MAX_RETRIES: int = 3

    # Sync behavior
    TYPESENSE_BACKFILL_BATCH_SIZE: int = 1000
    SYNC_MAX_PAGES: int = 1000
    SYNC_REQUEST_COLLECTION: str = "typesense_manual_sync"
    SCHEDULED_SYNC_INTERVAL: Optional[str] = None

    # Source store
    FIRESTORE_PROJECT_ID: Optional[str] = None
    FIRESTORE_DATABASE: Optional[str] = None

    # Temporal
    TEMPORAL_HOST: str = "localhost"
    TEMPORAL_PORT: int = 7233
    TEMPORAL_NAMESPACE: str = "default"
    TEMPORAL_TASK_QUEUE: str = "searchsync"
    TEMPORAL_GRACEFUL_SHUTDOWN_TIMEOUT: int = 60
    TEMPORAL_DISABLE_SANDBOX: bool = False
    WORKER_CONTROL_PORT: int = 8888

    # Logging
    LOG_LEVEL: str = "INFO"
    LOCAL_DEVELOPMENT: bool = False

    @property
    def typesense_hosts(self) -> List[str]:
        """Configured Typesense hosts, trimmed, without empties."""
        return [h.strip() for h in self.TYPESENSE_HOSTS.split(",") if h.strip()]

    @property
    def legacy_collection_fields(self) -> List[str]:
        """Field list of the legacy single-collection configuration."""
        return [f.strip() for f in self.FIRESTORE_COLLECTION_FIELDS.split(",") if f.strip()]

    @property
    def scheduled_sync_enabled(self) -> bool:
        """Whether a recurring sync schedule is configured."""
        interval = (self.SCHEDULED_SYNC_INTERVAL or "").strip()
        return bool(interval) and interval != SCHEDULE_DISABLED

    def parse_collections_config(self) -> List[RouteConfigEntry]:
        """Parse ``COLLECTIONS_CONFIG`` into validated entries.

        Returns:
            Validated entries, or an empty list when the value is missing or malformed
        """
        from searchsync.core.logging import logger

        raw = self.COLLECTIONS_CONFIG
        if not raw or not raw.strip():
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("COLLECTIONS_CONFIG must be a JSON list")
            entries = [RouteConfigEntry.model_validate(item) for item in data]
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"[CONFIG ERROR] Failed to parse COLLECTIONS_CONFIG: {e}")
            logger.error(f"[CONFIG ERROR] Raw config was: {raw}")
            return []

        for index, entry in enumerate(entries, start=1):
            logger.info(
                f"[CONFIG] Collection {index}: firestorePath={entry.firestore_path}, "
                f"typesenseCollection={entry.typesense_collection}, "
                f"fields={len(entry.firestore_fields)}"
            )
        return entries

    def load_routes(self) -> List[CollectionRoute]:
        """Compile the configured routes, in declaration order.

        Falls back to the legacy single-collection variables when ``COLLECTIONS_CONFIG``
        yields nothing.

        Returns:
            The ordered routes; empty when nothing usable is configured
        """
        from searchsync.core.logging import logger

        routes = [entry.to_route() for entry in self.parse_collections_config()]
        if routes:
            return routes

        legacy_path = (self.FIRESTORE_COLLECTION_PATH or "").strip().strip("/")
        if legacy_path and self.TYPESENSE_COLLECTION_NAME:
            logger.info(
                f"[CONFIG] Using legacy single collection configuration: "
                f"{legacy_path} -> {self.TYPESENSE_COLLECTION_NAME}"
            )
            try:
                route = CollectionRoute(
                    source_pattern=legacy_path,
                    target_name=self.TYPESENSE_COLLECTION_NAME,
                    projected_fields=tuple(self.legacy_collection_fields),
                )
            except ConfigurationError as e:
                logger.error(f"[CONFIG ERROR] Invalid FIRESTORE_COLLECTION_PATH: {e.message}")
                return []
            return [route]
        if legacy_path:
            logger.error(
                "[CONFIG ERROR] FIRESTORE_COLLECTION_PATH is set but "
                "TYPESENSE_COLLECTION_NAME is missing"
            )
        return []


settings = Settings()
