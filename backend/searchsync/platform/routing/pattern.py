"""Collection pattern matching.

A collection pattern is a ``/``-separated path whose segments are literals, positional
wildcards (``*``) or named wildcards (``{name}``). Patterns are compiled once into
tagged segments; matching compares segment by segment, so literal segments never need
escaping.

Two matching modes exist:

- :func:`match_exact` - the path has exactly as many segments as the pattern. Used for
  collection paths and for collection-group membership tests.
- :func:`match_document` - the path has exactly one extra trailing segment, captured
  as ``docId``. Used for matching a document path against a collection pattern.

Capture naming: named wildcards are keyed by their name. Positional wildcards are keyed
``param0``, ``param1``, ... counting positional wildcards only, left to right.
"""

import re
from typing import List, Optional, Union

from searchsync.core.exceptions import ConfigurationError
from searchsync.schemas.route import (
    CompiledPattern,
    LiteralSegment,
    MatchParams,
    NamedWildcard,
    PositionalWildcard,
    Segment,
)

POSITIONAL_WILDCARD = "*"
DOC_ID_PARAM = "docId"

# Named wildcards may not shadow the keys the matcher assigns itself
_RESERVED_NAME = re.compile(r"^(docId|param\d+)$")

# Returned by the match functions when the path does not match. Distinct from ``{}``,
# which means "matched, nothing captured".
NO_MATCH = None

PatternLike = Union[str, CompiledPattern]


def split_path(path: str) -> List[str]:
    """Split a path into its non-empty segments."""
    return [segment for segment in path.split("/") if segment]


def join_path(segments: List[str]) -> str:
    """Join segments back into a path."""
    return "/".join(segments)


def parent_path(path: str) -> str:
    """Return the collection prefix of a document path (all but the last segment)."""
    return join_path(split_path(path)[:-1])


def last_segment(path: str) -> str:
    """Return the final segment of a path (the document id for document paths)."""
    segments = split_path(path)
    return segments[-1] if segments else ""


def _named_wildcard_name(segment: str) -> Optional[str]:
    if len(segment) > 2 and segment.startswith("{") and segment.endswith("}"):
        return segment[1:-1]
    return None


def is_wildcard_segment(segment: str) -> bool:
    """Whether a raw pattern segment is a wildcard of either kind."""
    return segment == POSITIONAL_WILDCARD or _named_wildcard_name(segment) is not None


def compile_segment(segment: str) -> Segment:
    """Compile one raw pattern segment.

    Raises:
        ConfigurationError: If a named wildcard uses a reserved name
    """
    if segment == POSITIONAL_WILDCARD:
        return PositionalWildcard()
    name = _named_wildcard_name(segment)
    if name is not None:
        if _RESERVED_NAME.match(name):
            raise ConfigurationError(
                f"Wildcard name {{{name}}} is reserved (docId and paramN are assigned "
                "by the matcher)"
            )
        return NamedWildcard(name)
    return LiteralSegment(segment)


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a collection pattern into tagged segments.

    Args:
        pattern: e.g. ``tenants/{tenantId}/projects/*/tasks``

    Returns:
        The compiled pattern
    """
    return CompiledPattern(
        source=pattern,
        segments=tuple(compile_segment(s) for s in split_path(pattern)),
    )


def normalize_wildcards(pattern: str) -> str:
    """Rewrite named wildcards to ``*`` (``a/{x}/b`` -> ``a/*/b``). Idempotent."""
    return join_path(
        [POSITIONAL_WILDCARD if is_wildcard_segment(s) else s for s in split_path(pattern)]
    )


def has_wildcard(path: str) -> bool:
    """Whether a path or pattern contains any wildcard segment."""
    return any(is_wildcard_segment(s) for s in split_path(path))


def _ensure_compiled(pattern: PatternLike) -> CompiledPattern:
    if isinstance(pattern, CompiledPattern):
        return pattern
    return compile_pattern(pattern)


def _capture(path_segments: List[str], pattern: CompiledPattern) -> Optional[MatchParams]:
    """Match equal-length segment lists, capturing wildcard values."""
    params: MatchParams = {}
    positional_count = 0
    for segment, value in zip(pattern.segments, path_segments):
        if isinstance(segment, LiteralSegment):
            if segment.value != value:
                return NO_MATCH
        elif isinstance(segment, NamedWildcard):
            params[segment.name] = value
        else:
            params[f"param{positional_count}"] = value
            positional_count += 1
    return params


def match_exact(path: str, pattern: PatternLike) -> Optional[MatchParams]:
    """Match a path with exactly as many segments as the pattern.

    Args:
        path: Concrete path, e.g. ``products/prodA/reviews``
        pattern: Pattern string or compiled pattern, e.g. ``products/*/reviews``

    Returns:
        Captured parameters (possibly empty), or ``NO_MATCH``
    """
    compiled = _ensure_compiled(pattern)
    segments = split_path(path)
    if len(segments) != len(compiled):
        return NO_MATCH
    return _capture(segments, compiled)


def match_document(path: str, pattern: PatternLike) -> Optional[MatchParams]:
    """Match a document path against a collection pattern.

    The path must have exactly one segment more than the pattern; that trailing segment
    is captured as ``docId``. A path of the pattern's own length does not match here,
    use :func:`match_exact` for that.

    Args:
        path: Concrete document path, e.g. ``products/prodA/reviews/rev1``
        pattern: Pattern string or compiled pattern, e.g. ``products/*/reviews``

    Returns:
        Captured parameters including ``docId``, or ``NO_MATCH``
    """
    compiled = _ensure_compiled(pattern)
    segments = split_path(path)
    if len(segments) != len(compiled) + 1:
        return NO_MATCH
    params = _capture(segments[:-1], compiled)
    if params is NO_MATCH:
        return NO_MATCH
    params[DOC_ID_PARAM] = segments[-1]
    return params
