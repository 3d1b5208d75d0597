"""Compliance rule model."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class RuleType(str, Enum):
    KEYWORD_PRESENCE = "KEYWORD_PRESENCE"   # must contain specific keywords
    SIGNATURE_CHECK = "SIGNATURE_CHECK"     # must have a signature section
    DATE_VALIDATION = "DATE_VALIDATION"     # date must be within range
    SEMANTIC_MATCH = "SEMANTIC_MATCH"       # judged against similar documents
    CUSTOM_REASONING = "CUSTOM_REASONING"   # free-form check by the reasoning model


class Rule(BaseModel):
    """A single compliance rule. Identity is ``id``; instances are immutable.

    Attributes:
        priority: Lower values are sent to the reasoning model first.
        weight:   Advisory importance, not used in any computation.
        condition: Optional machine-readable hint, e.g. a keyword list.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    type: RuleType
    priority: int = 1
    weight: float = 0.0
    mandatory: bool = False
    condition: str | None = None
