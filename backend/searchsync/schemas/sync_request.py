"""Schemas for trigger payloads: sync request records and write events."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SyncRequest(BaseModel):
    """Content of a sync request record.

    The record is free-form; only ``paths`` drives the sync. A missing, empty or
    non-list ``paths`` means "sync every configured collection".
    """

    model_config = ConfigDict(extra="allow")

    paths: Optional[List[str]] = Field(None, description="Explicit paths to sync")

    @field_validator("paths", mode="before")
    @classmethod
    def coerce_paths(cls, v: Any) -> Optional[List[str]]:
        """Ignore anything that is not a non-empty list."""
        if not isinstance(v, (list, tuple)) or not v:
            return None
        return ["" if p is None else str(p) for p in v]

    @property
    def sync_all(self) -> bool:
        """Whether this request asks for every configured collection."""
        return not self.paths


class WriteEvent(BaseModel):
    """A change notification for one document path."""

    path: str = Field(..., description="Full document path that changed")
    before: Optional[Dict[str, Any]] = Field(None, description="Data before the write")
    after: Optional[Dict[str, Any]] = Field(None, description="Data after the write")

    @property
    def is_delete(self) -> bool:
        """True when the document no longer exists after the write."""
        return self.after is None
