"""Tests for the automatic (write event) sync service."""

from unittest.mock import AsyncMock

import pytest

from searchsync.core.automatic_sync_service import AutomaticSyncService, WriteOutcome
from searchsync.core.exceptions import IndexWriteError
from searchsync.schemas.route import CollectionRoute
from searchsync.schemas.sync_request import WriteEvent

USERS = CollectionRoute(source_pattern="users", target_name="users_idx", projected_fields=("name",))
TASKS = CollectionRoute(
    source_pattern="tenants/{tenantId}/projects/{projectId}/tasks", target_name="tasks"
)


@pytest.fixture
def service():
    return AutomaticSyncService()


@pytest.fixture
def context(make_context):
    return make_context([USERS, TASKS], include_path=True)


@pytest.mark.asyncio
async def test_create_or_update_upserts_latest_data(service, context, memory_store, destination):
    memory_store.set_document("users/u1", {"name": "Ada Lovelace", "age": 36})
    event = WriteEvent(path="users/u1", before={"name": "Ada"}, after={"name": "Ada L."})

    outcome = await service.handle_write(context, event)

    assert outcome is WriteOutcome.UPSERTED
    # The latest stored data wins over the event payload
    assert destination.collections["users_idx"]["u1"] == {
        "name": "Ada Lovelace",
        "id": "u1",
        "_path": "users/u1",
    }


@pytest.mark.asyncio
async def test_nested_wildcard_document(service, context, memory_store, destination):
    path = "tenants/t1/projects/p2/tasks/task3"
    memory_store.set_document(path, {"title": "Write tests"})

    outcome = await service.handle_write(context, WriteEvent(path=path, after={"title": "x"}))

    assert outcome is WriteOutcome.UPSERTED
    assert destination.collections["tasks"]["task3"]["title"] == "Write tests"


@pytest.mark.asyncio
async def test_delete_removes_record(service, context, destination):
    destination.collections["users_idx"] = {"u1": {"id": "u1"}}

    outcome = await service.handle_write(
        context, WriteEvent(path="users/u1", before={"name": "Ada"}, after=None)
    )

    assert outcome is WriteOutcome.DELETED
    assert destination.collections["users_idx"] == {}


@pytest.mark.asyncio
async def test_delete_of_unindexed_document_is_success(service, context, destination):
    outcome = await service.handle_write(context, WriteEvent(path="users/u1", before={}))

    assert outcome is WriteOutcome.DELETED
    assert destination.deletes == []


@pytest.mark.asyncio
async def test_vanished_document_is_skipped(service, context, destination):
    outcome = await service.handle_write(
        context, WriteEvent(path="users/u1", after={"name": "Ada"})
    )

    assert outcome is WriteOutcome.SKIPPED
    assert destination.upserts == []


@pytest.mark.parametrize("path", ["orders/o1", "users", "archive/x/reviews/r9"])
@pytest.mark.asyncio
async def test_unrouted_paths_are_skipped(service, context, destination, path):
    outcome = await service.handle_write(context, WriteEvent(path=path, after={"a": 1}))

    assert outcome is WriteOutcome.SKIPPED
    assert destination.upserts == []


@pytest.mark.asyncio
async def test_upsert_failure_propagates(service, context, memory_store, destination):
    memory_store.set_document("users/u1", {"name": "Ada"})
    destination.upsert_document = AsyncMock(side_effect=IndexWriteError("rejected", 400))

    with pytest.raises(IndexWriteError):
        await service.handle_write(context, WriteEvent(path="users/u1", after={"name": "Ada"}))
