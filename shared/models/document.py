"""Pydantic models for documents.

Hierarchy:
  DocumentStatus  : lifecycle state, only ever moves forward.
  DocumentMetadata: classification and counts captured at upload.
  Document        : the unit that is indexed and evaluated.
  ExtractedText   : output of a text extractor for a raw upload.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class DocumentStatus(str, Enum):
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    EVALUATED = "EVALUATED"
    FAILED = "FAILED"


# UPLOADED -> PROCESSING -> {EVALUATED | FAILED}
_ALLOWED_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    DocumentStatus.UPLOADED: {DocumentStatus.PROCESSING},
    DocumentStatus.PROCESSING: {DocumentStatus.EVALUATED, DocumentStatus.FAILED},
    DocumentStatus.EVALUATED: set(),
    DocumentStatus.FAILED: set(),
}


class DocumentMetadata(BaseModel):
    """Metadata captured when a document is uploaded.

    document_type is read by the evaluation planner; "UNKNOWN" until a
    classifier assigns something better.
    """

    document_type: str = "UNKNOWN"
    page_count: int | None = None
    word_count: int | None = None
    extracted_fields: dict[str, str] = Field(default_factory=dict)
    confidence_scores: dict[str, float] = Field(default_factory=dict)


class Document(BaseModel):
    """A document as indexed and evaluated by the service.

    The embedding is assigned once at ingestion. status is changed only
    through advance_status(), which refuses to move backwards.
    """

    id: str
    content: str
    filename: str | None = None
    content_type: str | None = None
    embedding: list[float] | None = None
    status: DocumentStatus = DocumentStatus.UPLOADED
    uploaded_at: datetime | None = None
    evaluated_at: datetime | None = None
    metadata: DocumentMetadata | None = None

    def can_advance_to(self, status: DocumentStatus) -> bool:
        return status in _ALLOWED_TRANSITIONS[self.status]

    def advance_status(self, status: DocumentStatus) -> bool:
        """Move to the given status if the lifecycle allows it.

        Returns:
            bool: True if the status changed, False if the transition is not allowed.
        """
        if not self.can_advance_to(status):
            return False
        self.status = status
        return True


class ExtractedText(BaseModel):
    """Plain text and counts extracted from a raw document upload."""

    content: str
    page_count: int = 1
    word_count: int = 0
