"""Search index destinations."""

from searchsync.platform.destinations._base import BaseIndexDestination
from searchsync.platform.destinations.typesense import TypesenseDestination

__all__ = ["BaseIndexDestination", "TypesenseDestination"]
