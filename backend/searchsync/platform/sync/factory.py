"""Module for sync factory that creates context and orchestrator instances."""

from typing import Any, Dict, List, Optional

from searchsync.core.config import Settings
from searchsync.core.config import settings as default_settings
from searchsync.core.logging import LoggerConfigurator
from searchsync.platform.destinations._base import BaseIndexDestination
from searchsync.platform.destinations.typesense import TypesenseDestination
from searchsync.platform.sources._base import BaseSourceStore
from searchsync.platform.sync.context import SyncContext
from searchsync.platform.sync.exceptions import SyncFailureError
from searchsync.platform.sync.orchestrator import SyncOrchestrator
from searchsync.schemas.route import CollectionRoute


class SyncFactory:
    """Factory for sync contexts and orchestrators."""

    @classmethod
    async def create_context(
        cls,
        settings: Optional[Settings] = None,
        source: Optional[BaseSourceStore] = None,
        destination: Optional[BaseIndexDestination] = None,
        routes: Optional[List[CollectionRoute]] = None,
        dimensions: Optional[Dict[str, Any]] = None,
    ) -> SyncContext:
        """Create a sync context from settings.

        Collaborators that are not passed in are created from settings: Firestore
        for the source store and Typesense for the index.

        Args:
            settings: Configuration; defaults to the process-wide settings
            source: Source store to use instead of Firestore
            destination: Index destination to use instead of Typesense
            routes: Routes to use instead of ``settings.load_routes()``
            dimensions: Logging dimensions for this run (e.g. ``sync_request_id``)

        Returns:
            A ready SyncContext

        Raises:
            SyncFailureError: If a collaborator cannot be created
        """
        settings = settings or default_settings
        logger = LoggerConfigurator.configure_logger(
            "searchsync.platform.sync", dimensions=dimensions or {}
        )

        if routes is None:
            routes = settings.load_routes()

        try:
            if source is None:
                from searchsync.platform.sources.firestore import FirestoreSourceStore

                source = await FirestoreSourceStore.create(logger=logger)
            if destination is None:
                destination = await TypesenseDestination.create(logger=logger)
        except Exception as e:
            raise SyncFailureError(f"Failed to create sync collaborators: {e}") from e

        source.set_logger(logger)
        destination.set_logger(logger)

        return SyncContext(
            source=source,
            destination=destination,
            routes=routes,
            logger=logger,
            batch_size=settings.TYPESENSE_BACKFILL_BATCH_SIZE,
            max_pages=settings.SYNC_MAX_PAGES,
            include_path=settings.INCLUDE_FIRESTORE_PATH,
            include_path_params=settings.INCLUDE_PATH_PARAMS,
            flatten=settings.FLATTEN_NESTED_DOCUMENTS,
            log_record_bodies=settings.LOG_TYPESENSE_INSERTS,
        )

    @classmethod
    def create_orchestrator(cls, context: SyncContext) -> SyncOrchestrator:
        """Create a dedicated orchestrator for one run."""
        return SyncOrchestrator(context)
