from datetime import datetime

from pydantic import BaseModel

from shared.models.document import DocumentMetadata, DocumentStatus


class DocumentResponse(BaseModel):
    """A stored document without its content and embedding."""

    id: str
    filename: str | None
    content_type: str | None
    status: DocumentStatus
    uploaded_at: datetime | None
    evaluated_at: datetime | None
    metadata: DocumentMetadata | None


class ErrorResponse(BaseModel):
    timestamp: datetime
    status: int
    error: str
    message: str


class HealthResponse(BaseModel):
    status: str
    version: str
    indexed_documents: int
    rules: int
