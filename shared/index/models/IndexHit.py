"""IndexHit model: a single ranked entry returned by a vector index query."""

from typing import Any

from pydantic import BaseModel, Field


class IndexHit(BaseModel):
    """A ranked query result.

    Attributes:
        id:      Id the vector was upserted under.
        score:   Cosine similarity to the query vector, in [-1, 1].
        payload: Data stored alongside the vector (the document service stores
                 "content" and "filename").
    """

    id: str
    score: float
    payload: dict[str, Any] = Field(default_factory=dict)
