"""Module for sync context."""

from typing import List

from searchsync.core.logging import ContextualLogger
from searchsync.platform.destinations._base import BaseIndexDestination
from searchsync.platform.routing.resolver import RouteResolver
from searchsync.platform.sources._base import BaseSourceStore
from searchsync.schemas.route import CollectionRoute


class SyncContext:
    """Context container for a sync run.

    Contains everything the transfer unit, batch synchronizer and orchestrator need:
    - source - the source store instance
    - destination - the index destination instance
    - routes - the configured routes, in priority order
    - resolver - route resolver over ``routes``
    - logger - contextual logger with run metadata

    Record shaping and pagination knobs are copied from settings once, so nothing
    below the factory reads the global configuration.
    """

    source: BaseSourceStore
    destination: BaseIndexDestination
    routes: List[CollectionRoute]
    resolver: RouteResolver
    logger: ContextualLogger

    batch_size: int = 1000
    max_pages: int = 1000
    include_path: bool = False
    include_path_params: bool = False
    flatten: bool = False
    log_record_bodies: bool = False

    def __init__(
        self,
        source: BaseSourceStore,
        destination: BaseIndexDestination,
        routes: List[CollectionRoute],
        logger: ContextualLogger,
        batch_size: int = 1000,
        max_pages: int = 1000,
        include_path: bool = False,
        include_path_params: bool = False,
        flatten: bool = False,
        log_record_bodies: bool = False,
    ):
        """Initialize the sync context."""
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.source = source
        self.destination = destination
        self.routes = list(routes)
        self.resolver = RouteResolver(self.routes)
        self.logger = logger

        self.batch_size = batch_size
        self.max_pages = max_pages
        self.include_path = include_path
        self.include_path_params = include_path_params
        self.flatten = flatten
        self.log_record_bodies = log_record_bodies

    async def close(self) -> None:
        """Close the source and destination clients."""
        await self.source.close()
        await self.destination.close()
