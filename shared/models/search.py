"""Pydantic models for similarity search over indexed documents."""

from pydantic import BaseModel


class SearchResultItem(BaseModel):
    """A single indexed document matching a search query."""

    document_id: str
    filename: str | None = None
    score: float
    excerpt: str | None = None


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResultItem]
    total: int
