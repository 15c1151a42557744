"""Schemas for records sent to the search index and bulk import outcomes."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Index-ready record: arbitrary fields plus a mandatory, stable ``id``
IndexRecord = Dict[str, Any]


class ImportOutcome(BaseModel):
    """Outcome of one document inside a bulk import."""

    id: Optional[str] = Field(None, description="Document id, when the index echoed it")
    ok: bool = Field(..., description="Whether the document was accepted")
    error: Optional[str] = Field(None, description="Rejection reason for failed documents")


class BulkImportResult(BaseModel):
    """Result of a bulk import call that reached the index.

    A transport failure never produces this object; the destination raises
    ``IndexTransportError`` instead, so "nothing landed" and "some documents rejected"
    stay distinguishable.
    """

    batch_accepted: bool = True
    outcomes: List[ImportOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> List[ImportOutcome]:
        """Outcomes of the documents the index rejected."""
        return [o for o in self.outcomes if not o.ok]

    @property
    def success_count(self) -> int:
        """Number of documents the index accepted."""
        return sum(1 for o in self.outcomes if o.ok)
