"""Tests for route resolution."""

import pytest

from searchsync.platform.routing.resolver import (
    NOT_FOUND,
    PathKind,
    RouteResolver,
    classify_path,
    is_document_path,
)
from searchsync.schemas.route import CollectionRoute


@pytest.fixture
def routes():
    """Create routes covering literal, positional and named patterns."""
    return [
        CollectionRoute(source_pattern="users", target_name="users_idx"),
        CollectionRoute(source_pattern="products/*/reviews", target_name="reviews"),
        CollectionRoute(source_pattern="tenants/{tenantId}/projects", target_name="projects"),
    ]


@pytest.fixture
def resolver(routes):
    return RouteResolver(routes)


@pytest.mark.parametrize(
    "path,kind",
    [
        ("users", PathKind.COLLECTION),
        ("users/u1", PathKind.DOCUMENT),
        ("products/p1/reviews", PathKind.COLLECTION),
        ("products/p1/reviews/r1", PathKind.DOCUMENT),
    ],
)
def test_classify_path_by_parity(path, kind):
    assert classify_path(path) is kind
    assert is_document_path(path) == (kind is PathKind.DOCUMENT)


def test_resolve_literal_document(resolver, routes):
    match = resolver.resolve("users/u1")

    assert match.route is routes[0]
    assert match.params == {"docId": "u1"}


def test_resolve_literal_collection(resolver, routes):
    match = resolver.resolve("users")

    assert match.route is routes[0]
    assert match.params == {}


def test_resolve_wildcard_document(resolver, routes):
    match = resolver.resolve("products/p1/reviews/r1")

    assert match.route is routes[1]
    assert match.params == {"param0": "p1", "docId": "r1"}


def test_resolve_wildcard_collection(resolver, routes):
    match = resolver.resolve("products/p1/reviews")

    assert match.route is routes[1]
    assert match.params == {"param0": "p1"}


def test_resolve_keeps_named_parameters(resolver, routes):
    match = resolver.resolve("tenants/t1/projects/pr1")

    assert match.route is routes[2]
    assert match.params == {"tenantId": "t1", "docId": "pr1"}


@pytest.mark.parametrize("path", ["orders/o1", "bad/unmatched/path", "archive/x/reviews/r9", ""])
def test_resolve_unmatched_returns_not_found(resolver, path):
    assert resolver.resolve(path) is NOT_FOUND


def test_resolve_first_route_wins():
    """Test that declaration order decides between overlapping routes."""
    first = CollectionRoute(source_pattern="products/*/reviews", target_name="first")
    second = CollectionRoute(source_pattern="products/{productId}/reviews", target_name="second")

    match = RouteResolver([first, second]).resolve("products/p1/reviews/r1")

    assert match.route is first


def test_resolve_ignores_surrounding_slashes(resolver, routes):
    match = resolver.resolve("/users/u1/")

    assert match.route is routes[0]
    assert match.params == {"docId": "u1"}
