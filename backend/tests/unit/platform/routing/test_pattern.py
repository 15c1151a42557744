"""Tests for collection pattern compilation and matching."""

import pytest

from searchsync.core.exceptions import ConfigurationError
from searchsync.platform.routing.pattern import (
    NO_MATCH,
    compile_pattern,
    has_wildcard,
    match_document,
    match_exact,
    normalize_wildcards,
    parent_path,
    split_path,
)
from searchsync.schemas.route import LiteralSegment, NamedWildcard, PositionalWildcard


def test_compile_pattern_tags_segments():
    """Test that each segment is compiled to its kind once."""
    compiled = compile_pattern("tenants/{tenantId}/projects/*/tasks")

    assert compiled.segments == (
        LiteralSegment("tenants"),
        NamedWildcard("tenantId"),
        LiteralSegment("projects"),
        PositionalWildcard(),
        LiteralSegment("tasks"),
    )
    assert len(compiled) == 5
    assert compiled.has_wildcard


def test_compile_pattern_ignores_surrounding_slashes():
    assert compile_pattern("/users/").segments == (LiteralSegment("users"),)


@pytest.mark.parametrize(
    "pattern", ["users/{docId}/orders", "shops/{param0}/items", "a/*/b/{param12}/c"]
)
def test_compile_pattern_rejects_reserved_wildcard_names(pattern):
    with pytest.raises(ConfigurationError):
        compile_pattern(pattern)


def test_similar_wildcard_names_are_allowed():
    compiled = compile_pattern("shops/{params}/items/{docIds}/x")

    assert match_exact("shops/s1/items/d1/x", compiled) == {"params": "s1", "docIds": "d1"}


@pytest.mark.parametrize(
    "pattern,path,expected",
    [
        ("products/*/reviews", "products/prodA/reviews", {"param0": "prodA"}),
        ("a/*/b/*/c", "a/1/b/2/c", {"param0": "1", "param1": "2"}),
        ("users", "users", {}),
    ],
)
def test_match_exact_captures_positional_wildcards_in_order(pattern, path, expected):
    """Test that positional wildcards are keyed param0..paramN left to right."""
    assert match_exact(path, pattern) == expected


def test_match_exact_with_no_wildcards_is_empty_but_not_no_match():
    params = match_exact("users", "users")

    assert params == {}
    assert params is not NO_MATCH


def test_match_exact_mixed_named_and_positional():
    """Test that named wildcards keep their name and do not shift positional keys."""
    params = match_exact("a/1/b/2/c/3", "a/*/b/{name}/c/*")

    assert params == {"param0": "1", "name": "2", "param1": "3"}


@pytest.mark.parametrize(
    "path",
    [
        "products/prodA/reviews/rev1",  # one segment too many
        "products/prodA",  # too short
        "archive/x/reviews",  # literal mismatch
    ],
)
def test_match_exact_rejects(path):
    assert match_exact(path, "products/*/reviews") is NO_MATCH


def test_match_exact_treats_literals_as_plain_text():
    """Test that regex metacharacters in literal segments match only themselves."""
    assert match_exact("usersXv2/a", "users.v2/*") is NO_MATCH
    assert match_exact("users.v2/a", "users.v2/*") == {"param0": "a"}


def test_match_document_captures_doc_id():
    pattern = "tenants/{tenantId}/projects/{projectId}/tasks"

    params = match_document("tenants/t1/projects/p2/tasks/task3", pattern)

    assert params == {"tenantId": "t1", "projectId": "p2", "docId": "task3"}


def test_match_document_literal_pattern():
    assert match_document("users/u1", "users") == {"docId": "u1"}


def test_exact_and_document_modes_are_mutually_exclusive():
    """Test that a path one segment longer than the pattern only matches as a document."""
    pattern = compile_pattern("products/*/reviews")

    assert match_exact("products/p1/reviews/r1", pattern) is NO_MATCH
    assert match_document("products/p1/reviews/r1", pattern) == {
        "param0": "p1",
        "docId": "r1",
    }
    assert match_document("products/p1/reviews", pattern) is NO_MATCH
    assert match_document("products/p1/reviews/r1/extra", pattern) is NO_MATCH


def test_match_document_literal_mismatch():
    assert match_document("archive/x/reviews/rev9", "products/*/reviews") is NO_MATCH


def test_normalize_wildcards():
    assert normalize_wildcards("a/{x}/b") == "a/*/b"
    assert normalize_wildcards("a/*/b/{y}") == "a/*/b/*"


@pytest.mark.parametrize("pattern", ["a/{x}/b", "users", "t/{a}/p/*/x", "*"])
def test_normalize_wildcards_is_idempotent(pattern):
    once = normalize_wildcards(pattern)
    assert normalize_wildcards(once) == once


def test_has_wildcard():
    assert has_wildcard("products/*/reviews")
    assert has_wildcard("tenants/{tenantId}/projects")
    assert not has_wildcard("products/p1/reviews")
    # Braces must wrap a name to count as a wildcard
    assert not has_wildcard("weird/{}/x")


def test_path_helpers():
    assert split_path("/a//b/c/") == ["a", "b", "c"]
    assert parent_path("users/u1") == "users"
    assert parent_path("products/p1/reviews/r1") == "products/p1/reviews"
