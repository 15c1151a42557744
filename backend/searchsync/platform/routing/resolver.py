"""Route resolution for concrete store paths.

A path is a *document path* when it has an even number of segments
(``collection/doc/collection/doc``) and a *collection path* when odd. That parity rule
is the only place path shape is decided; everything else calls :func:`classify_path`.
"""

from enum import Enum
from typing import Optional, Sequence

from searchsync.platform.routing.pattern import (
    DOC_ID_PARAM,
    NO_MATCH,
    join_path,
    match_document,
    match_exact,
    split_path,
)
from searchsync.schemas.route import CollectionRoute, RouteMatch

NOT_FOUND = None


class PathKind(str, Enum):
    """Shape of a concrete path."""

    DOCUMENT = "document"
    COLLECTION = "collection"


def classify_path(path: str) -> PathKind:
    """Classify a path by segment-count parity."""
    if len(split_path(path)) % 2 == 0:
        return PathKind.DOCUMENT
    return PathKind.COLLECTION


def is_document_path(path: str) -> bool:
    """Whether the path addresses a single document."""
    return classify_path(path) is PathKind.DOCUMENT


class RouteResolver:
    """Finds the first configured route matching a concrete path.

    Routes are tried in declaration order; the first match wins.
    """

    def __init__(self, routes: Sequence[CollectionRoute]):
        """Initialize the resolver.

        Args:
            routes: Configured routes, in priority order
        """
        self._routes = tuple(routes)

    @property
    def routes(self) -> Sequence[CollectionRoute]:
        """The routes this resolver matches against."""
        return self._routes

    def resolve(self, path: str) -> Optional[RouteMatch]:
        """Resolve a path to its route and captured parameters.

        Args:
            path: Concrete document or collection path

        Returns:
            The matching route with its parameters, or ``NOT_FOUND``. Callers treat a
            miss as "skip", not as an error.
        """
        segments = split_path(path)
        if not segments:
            return NOT_FOUND

        if classify_path(path) is PathKind.DOCUMENT:
            return self._resolve_document(segments)
        return self._resolve_collection(segments)

    def _resolve_document(self, segments) -> Optional[RouteMatch]:
        collection_path = join_path(segments[:-1])
        full_path = join_path(segments)
        for route in self._routes:
            # Fast path: literal pattern equal to the collection prefix
            if route.source_pattern == collection_path:
                return RouteMatch(route, {DOC_ID_PARAM: segments[-1]})
            params = match_document(full_path, route.pattern)
            if params is not NO_MATCH:
                return RouteMatch(route, params)
        return NOT_FOUND

    def _resolve_collection(self, segments) -> Optional[RouteMatch]:
        full_path = join_path(segments)
        for route in self._routes:
            if route.source_pattern == full_path:
                return RouteMatch(route, {})
            params = match_exact(full_path, route.pattern)
            if params is not NO_MATCH:
                return RouteMatch(route, params)
        return NOT_FOUND
