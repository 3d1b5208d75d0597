from pydantic import BaseModel, Field

from shared.models.rule import RuleType


class UploadRequest(BaseModel):
    filename: str
    content: str
    content_type: str = "text/plain"
    document_type: str | None = None


class SearchRequest(BaseModel):
    query: str
    limit: int = Field(default=5, ge=1, le=100)


class RuleRequest(BaseModel):
    id: str
    name: str
    description: str
    type: RuleType
    priority: int = 1
    weight: float = 0.0
    mandatory: bool = False
    condition: str | None = None
