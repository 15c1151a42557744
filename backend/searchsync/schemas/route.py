"""Schemas for collection routes and their compiled path patterns."""

from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from searchsync.core.exceptions import ConfigurationError

# Parameter name -> captured path segment
MatchParams = Dict[str, str]


@dataclass(frozen=True)
class LiteralSegment:
    """Pattern segment that must equal the path segment exactly."""

    value: str


@dataclass(frozen=True)
class PositionalWildcard:
    """``*`` segment; captured as ``param0``, ``param1``, ..."""


@dataclass(frozen=True)
class NamedWildcard:
    """``{name}`` segment; captured under its own name."""

    name: str


Segment = Union[LiteralSegment, PositionalWildcard, NamedWildcard]


@dataclass(frozen=True)
class CompiledPattern:
    """A collection pattern compiled once into tagged segments.

    Attributes:
        source: The pattern string as configured (e.g. ``products/{productId}/reviews``)
        segments: One entry per ``/``-separated segment of ``source``
    """

    source: str
    segments: Tuple[Segment, ...]

    def __len__(self) -> int:
        """Number of segments in the pattern."""
        return len(self.segments)

    @property
    def has_wildcard(self) -> bool:
        """Whether any segment is a wildcard."""
        return any(not isinstance(s, LiteralSegment) for s in self.segments)


@dataclass(frozen=True)
class CollectionRoute:
    """A compiled source pattern paired with its target index collection.

    Immutable once loaded; the ordered list of routes is process-wide configuration.

    Attributes:
        source_pattern: The collection pattern as configured
        target_name: Name of the target index collection
        projected_fields: Fields to keep on each record (empty = all fields)
        pattern: ``source_pattern`` compiled into segments
    """

    source_pattern: str
    target_name: str
    projected_fields: Tuple[str, ...] = ()
    pattern: CompiledPattern = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        """Compile the source pattern once, at load time."""
        if self.pattern is None:
            from searchsync.platform.routing.pattern import compile_pattern

            object.__setattr__(self, "pattern", compile_pattern(self.source_pattern))

    @property
    def fields_label(self) -> str:
        """Human readable description of the projected fields."""
        return ",".join(self.projected_fields) if self.projected_fields else "all"


class RouteMatch(NamedTuple):
    """A resolved route plus the parameters captured from the matched path."""

    route: CollectionRoute
    params: MatchParams


class RouteConfigEntry(BaseModel):
    """One entry of the ``COLLECTIONS_CONFIG`` JSON list."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    firestore_path: str = Field(..., alias="firestorePath", min_length=1)
    typesense_collection: str = Field(..., alias="typesenseCollection", min_length=1)
    firestore_fields: List[str] = Field(default_factory=list, alias="firestoreFields")

    @field_validator("firestore_path")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Drop leading and trailing slashes and check the pattern compiles."""
        stripped = v.strip().strip("/")
        if not stripped:
            raise ValueError("firestorePath must not be empty")

        from searchsync.platform.routing.pattern import compile_pattern

        try:
            compile_pattern(stripped)
        except ConfigurationError as e:
            raise ValueError(e.message) from e
        return stripped

    @field_validator("firestore_fields", mode="before")
    @classmethod
    def default_fields(cls, v):
        """Treat a null field list as 'all fields'."""
        return v or []

    def to_route(self) -> CollectionRoute:
        """Compile this entry into a CollectionRoute."""
        return CollectionRoute(
            source_pattern=self.firestore_path,
            target_name=self.typesense_collection,
            projected_fields=tuple(self.firestore_fields),
        )
