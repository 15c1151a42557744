"""Path-pattern routing: compile patterns, match paths, resolve routes."""

from searchsync.platform.routing.pattern import (
    DOC_ID_PARAM,
    NO_MATCH,
    compile_pattern,
    has_wildcard,
    match_document,
    match_exact,
    normalize_wildcards,
)
from searchsync.platform.routing.resolver import (
    NOT_FOUND,
    PathKind,
    RouteResolver,
    classify_path,
    is_document_path,
)

__all__ = [
    "DOC_ID_PARAM",
    "NO_MATCH",
    "NOT_FOUND",
    "PathKind",
    "RouteResolver",
    "classify_path",
    "compile_pattern",
    "has_wildcard",
    "is_document_path",
    "match_document",
    "match_exact",
    "normalize_wildcards",
]
