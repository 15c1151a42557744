"""Tests for the batch synchronizer."""

from unittest.mock import AsyncMock

import pytest

from searchsync.core.exceptions import SourceReadError
from searchsync.platform.sources import QueryKind
from searchsync.platform.sync.batch_synchronizer import BatchSynchronizer
from searchsync.platform.sync.document_transfer import DocumentTransferUnit
from searchsync.schemas.route import CollectionRoute

USERS = CollectionRoute(source_pattern="users", target_name="users_idx")
REVIEWS = CollectionRoute(source_pattern="products/*/reviews", target_name="reviews")


def seed_users(store, count):
    for i in range(count):
        store.set_document(f"users/u{i:04d}", {"name": f"user {i}"})


def make_synchronizer(make_context, routes, **kwargs):
    context = make_context(routes, **kwargs)
    return BatchSynchronizer(context, DocumentTransferUnit(context))


def spy_fetches(memory_store):
    spy = AsyncMock(wraps=memory_store.fetch_page)
    memory_store.fetch_page = spy
    return spy


@pytest.mark.parametrize(
    "count,batch_size,fetches,pages",
    [
        (25, 10, 3, 3),  # last page short, no extra fetch
        (20, 10, 3, 2),  # full last page needs one empty fetch
        (0, 10, 1, 0),
        (1, 1, 2, 1),
    ],
)
@pytest.mark.asyncio
async def test_paginates_until_exhausted(
    make_context, memory_store, destination, count, batch_size, fetches, pages
):
    seed_users(memory_store, count)
    spy = spy_fetches(memory_store)
    synchronizer = make_synchronizer(make_context, [USERS], batch_size=batch_size)

    result = await synchronizer.sync_collection(USERS)

    assert spy.await_count == fetches
    assert result.pages_fetched == pages
    assert result.documents_processed == count
    assert result.success
    assert len(destination.import_calls) == pages


@pytest.mark.asyncio
async def test_pages_are_imported_in_cursor_order(make_context, memory_store, destination):
    seed_users(memory_store, 7)
    synchronizer = make_synchronizer(make_context, [USERS], batch_size=3)

    await synchronizer.sync_collection(USERS)

    assert destination.imported_ids == [f"u{i:04d}" for i in range(7)]
    assert [len(records) for _, records in destination.import_calls] == [3, 3, 1]


@pytest.mark.asyncio
async def test_collection_group_filters_unrelated_ancestors(
    make_context, memory_store, destination
):
    memory_store.set_document("products/p1/reviews/r1", {"stars": 5})
    memory_store.set_document("products/p2/reviews/r2", {"stars": 4})
    memory_store.set_document("archive/x/reviews/r9", {"stars": 1})
    spy = spy_fetches(memory_store)
    synchronizer = make_synchronizer(make_context, [REVIEWS], include_path_params=True)

    result = await synchronizer.sync_collection(REVIEWS)

    query = spy.await_args.args[0]
    assert query.kind is QueryKind.COLLECTION_GROUP
    assert query.target == "reviews"
    assert result.documents_processed == 2
    assert result.documents_skipped == 1
    assert destination.collections["reviews"] == {
        "r1": {"stars": 5, "param0": "p1", "id": "r1"},
        "r2": {"stars": 4, "param0": "p2", "id": "r2"},
    }


@pytest.mark.asyncio
async def test_concrete_override_queries_one_collection(make_context, memory_store, destination):
    memory_store.set_document("products/p1/reviews/r1", {"stars": 5})
    memory_store.set_document("products/p2/reviews/r2", {"stars": 4})
    spy = spy_fetches(memory_store)
    synchronizer = make_synchronizer(make_context, [REVIEWS], include_path_params=True)

    result = await synchronizer.sync_collection(REVIEWS, source_path_override="products/p1/reviews")

    query = spy.await_args.args[0]
    assert query.kind is QueryKind.COLLECTION
    assert query.target == "products/p1/reviews"
    assert result.documents_processed == 1
    assert destination.collections["reviews"] == {
        "r1": {"stars": 5, "param0": "p1", "id": "r1"},
    }


@pytest.mark.asyncio
async def test_group_page_with_no_members_skips_import(make_context, memory_store, destination):
    memory_store.set_document("archive/x/reviews/r9", {"stars": 1})
    synchronizer = make_synchronizer(make_context, [REVIEWS])

    result = await synchronizer.sync_collection(REVIEWS)

    assert result.documents_skipped == 1
    assert result.documents_processed == 0
    assert destination.import_calls == []
    assert result.success


@pytest.mark.asyncio
async def test_wholesale_batch_failure_is_contained(make_context, memory_store, destination):
    """Test that a failed batch is recorded once and later batches still run."""
    seed_users(memory_store, 30)
    destination.fail_imports = {2}
    synchronizer = make_synchronizer(make_context, [USERS], batch_size=10)

    result = await synchronizer.sync_collection(USERS)

    assert result.documents_processed == 20
    assert len(destination.import_calls) == 3
    assert not result.success
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.collection == "users_idx"
    assert error.batch == "u0010 to u0019"
    assert "Connection reset" in error.error
    assert error.failed_documents == []


@pytest.mark.asyncio
async def test_per_document_rejections_are_reported(make_context, memory_store, destination):
    seed_users(memory_store, 10)
    destination.reject_ids = {"u0003", "u0007"}
    synchronizer = make_synchronizer(make_context, [USERS], batch_size=20)

    result = await synchronizer.sync_collection(USERS)

    # The call itself succeeded, so the whole batch counts as processed
    assert result.documents_processed == 10
    assert len(result.errors) == 1
    assert result.errors[0].error == "2 documents failed to import"
    assert [d.id for d in result.errors[0].failed_documents] == ["u0003", "u0007"]


@pytest.mark.asyncio
async def test_page_cap_stops_with_error(make_context, memory_store, destination):
    seed_users(memory_store, 50)
    spy = spy_fetches(memory_store)
    synchronizer = make_synchronizer(make_context, [USERS], batch_size=10, max_pages=2)

    result = await synchronizer.sync_collection(USERS)

    # Two full pages, then a single-document lookahead finds more
    assert spy.await_count == 3
    assert spy.await_args.args[1] == 1
    assert result.pages_fetched == 2
    assert result.documents_processed == 20
    assert len(result.errors) == 1
    assert "Pagination limit of 2 pages exceeded" in result.errors[0].error
    assert result.errors[0].batch == "page 3"


@pytest.mark.asyncio
async def test_collection_filling_page_cap_exactly_succeeds(
    make_context, memory_store, destination
):
    seed_users(memory_store, 20)
    spy = spy_fetches(memory_store)
    synchronizer = make_synchronizer(make_context, [USERS], batch_size=10, max_pages=2)

    result = await synchronizer.sync_collection(USERS)

    assert result.errors == []
    assert result.documents_processed == 20
    assert result.pages_fetched == 2
    assert spy.await_count == 3


@pytest.mark.asyncio
async def test_source_read_errors_propagate(make_context, memory_store):
    memory_store.fetch_page = AsyncMock(side_effect=SourceReadError("query failed"))
    synchronizer = make_synchronizer(make_context, [USERS])

    with pytest.raises(SourceReadError):
        await synchronizer.sync_collection(USERS)


def test_build_query():
    query, membership = BatchSynchronizer.build_query("products/{productId}/reviews")
    assert query.is_group and query.target == "reviews"
    assert membership.source == "products/{productId}/reviews"

    query, membership = BatchSynchronizer.build_query("users")
    assert not query.is_group and query.target == "users"
    assert membership is None
