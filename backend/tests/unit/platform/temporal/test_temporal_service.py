"""Tests for starting searchsync workflows."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from searchsync.platform.temporal.service import TemporalService
from searchsync.platform.temporal.workflows import RunSyncRequestWorkflow, SyncWriteEventWorkflow
from searchsync.schemas.sync_request import WriteEvent


@pytest.fixture
def client():
    mock = MagicMock()
    mock.start_workflow = AsyncMock(return_value=MagicMock(id="wf-1"))
    with patch(
        "searchsync.platform.temporal.service.temporal_client.get_client",
        new=AsyncMock(return_value=mock),
    ):
        yield mock


@pytest.mark.asyncio
async def test_sync_request_workflow_is_keyed_by_request(client):
    handle = await TemporalService().run_sync_request_workflow("req1", {"paths": ["users"]})

    assert handle.id == "wf-1"
    call = client.start_workflow.await_args
    assert call.args[0] == RunSyncRequestWorkflow.run
    assert call.kwargs["args"] == ["req1", {"paths": ["users"]}]
    assert call.kwargs["id"] == "sync-request-req1"
    assert call.kwargs["task_queue"] == "searchsync"


@pytest.mark.asyncio
async def test_write_event_workflow_gets_event_payload(client):
    event = WriteEvent(path="users/u1", after={"name": "Ada"})

    await TemporalService().run_write_event_workflow(event)

    call = client.start_workflow.await_args
    assert call.args[0] == SyncWriteEventWorkflow.run
    assert call.args[1] == {"path": "users/u1", "before": None, "after": {"name": "Ada"}}
    assert call.kwargs["id"].startswith("write-event-users-u1-")
