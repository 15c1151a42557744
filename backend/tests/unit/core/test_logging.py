"""Tests for contextual logging."""

import logging

from searchsync.core.logging import ContextualLogger, LoggerConfigurator, _DimensionFormatter


def test_with_context_returns_new_logger_with_merged_dimensions():
    base = ContextualLogger(logging.getLogger("searchsync.test"), {"sync_request_id": "r1"})

    child = base.with_context(target_collection="users", ignored=None)

    assert child.dimensions == {"sync_request_id": "r1", "target_collection": "users"}
    assert base.dimensions == {"sync_request_id": "r1"}


def test_process_merges_dimensions_into_extra():
    log = ContextualLogger(logging.getLogger("searchsync.test"), {"a": 1})

    _, kwargs = log.process("msg", {"extra": {"dimensions": {"b": 2}, "other": True}})

    assert kwargs["extra"] == {"dimensions": {"a": 1, "b": 2}, "other": True}


def test_formatter_appends_sorted_dimensions():
    record = logging.makeLogRecord(
        {"msg": "hello", "levelname": "INFO", "name": "searchsync", "dimensions": {"b": 2, "a": 1}}
    )

    line = _DimensionFormatter(local_development=True).format(record)

    assert line.endswith("hello [a=1 b=2]")


def test_configure_logger_prefixes_name_and_shares_handler():
    first = LoggerConfigurator.configure_logger("sync", dimensions={"x": 1})
    second = LoggerConfigurator.configure_logger("searchsync.other")

    assert first.logger.name == "searchsync.sync"
    assert first.dimensions == {"x": 1}
    assert second.logger.name == "searchsync.other"
    root = logging.getLogger("searchsync")
    handlers = [h for h in root.handlers if h.name == "searchsync-stream"]
    assert len(handlers) == 1
