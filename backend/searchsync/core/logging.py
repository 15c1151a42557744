"""Contextual logging for searchsync.

Every log line can carry a set of *dimensions* (e.g. ``sync_request_id``,
``target_collection``) that are appended to the message so a single sync run can be
followed across the orchestrator, synchronizers and collaborators.

Usage:
    from searchsync.core.logging import LoggerConfigurator, logger

    run_logger = LoggerConfigurator.configure_logger(
        "searchsync.platform.sync",
        dimensions={"sync_request_id": request_id},
    )
    run_logger.with_context(target_collection="users").info("Imported 1000 documents")
"""

import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

from searchsync.core.config import settings

_HANDLER_NAME = "searchsync-stream"


class _DimensionFormatter(logging.Formatter):
    """Formatter that renders dimensions as trailing ``key=value`` pairs."""

    def __init__(self, local_development: bool):
        """Initialize the formatter.

        Args:
            local_development: Use the short human-readable layout when True
        """
        if local_development:
            fmt = "%(asctime)s %(levelname)-8s %(message)s"
        else:
            fmt = "%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        """Format the record and append its dimensions."""
        line = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if dimensions:
            rendered = " ".join(f"{key}={value}" for key, value in sorted(dimensions.items()))
            line = f"{line} [{rendered}]"
        return line


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches dimensions to every record."""

    def __init__(self, logger: logging.Logger, dimensions: Optional[Dict[str, Any]] = None):
        """Initialize the contextual logger.

        Args:
            logger: Underlying standard library logger
            dimensions: Key/value pairs attached to every record
        """
        super().__init__(logger, {})
        self.dimensions: Dict[str, Any] = dict(dimensions or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Merge dimensions into the record's ``extra`` mapping."""
        extra = dict(kwargs.get("extra") or {})
        merged = dict(self.dimensions)
        merged.update(extra.pop("dimensions", {}))
        extra["dimensions"] = merged
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions.

        Args:
            **dimensions: Extra dimensions, overriding existing keys

        Returns:
            A new ContextualLogger; this one is left untouched
        """
        merged = dict(self.dimensions)
        merged.update({key: value for key, value in dimensions.items() if value is not None})
        return ContextualLogger(self.logger, merged)


class LoggerConfigurator:
    """Creates contextual loggers sharing a single configured handler."""

    @staticmethod
    def _ensure_handler(base: logging.Logger) -> None:
        if any(getattr(h, "name", None) == _HANDLER_NAME for h in base.handlers):
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(_DimensionFormatter(settings.LOCAL_DEVELOPMENT))
        base.addHandler(handler)
        base.setLevel(settings.LOG_LEVEL.upper())
        base.propagate = False

    @staticmethod
    def configure_logger(
        name: str, dimensions: Optional[Dict[str, Any]] = None
    ) -> ContextualLogger:
        """Configure and return a contextual logger.

        Args:
            name: Logger name, normally a dotted module path under ``searchsync``
            dimensions: Dimensions attached to every record of this logger

        Returns:
            ContextualLogger bound to ``name``
        """
        LoggerConfigurator._ensure_handler(logging.getLogger("searchsync"))
        if not name.startswith("searchsync"):
            name = f"searchsync.{name}"
        return ContextualLogger(logging.getLogger(name), dimensions)


logger = LoggerConfigurator.configure_logger("searchsync")
