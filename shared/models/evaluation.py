"""Pydantic models for evaluation verdicts."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ApprovalStatus(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    NEEDS_REVIEW = "NEEDS_REVIEW"


class RuleCheckResult(BaseModel):
    """Outcome of one rule as judged by the reasoning model.

    Accepts both snake_case and camelCase keys when parsed from a response.
    """

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    rule_name: str = Field(validation_alias=AliasChoices("rule_name", "ruleName"))
    passed: bool
    details: str
    confidence: float = Field(ge=0.0, le=1.0)


class DraftAssessment(BaseModel):
    """Verdict exactly as returned by the reasoning model, before calibration.

    A missing rule_checks array is read as empty; every other field is required.
    """

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    approval_status: ApprovalStatus = Field(validation_alias=AliasChoices("approval_status", "approvalStatus"))
    reason: str
    confidence_score: float = Field(ge=0.0, le=1.0, validation_alias=AliasChoices("confidence_score", "confidenceScore"))
    rule_checks: list[RuleCheckResult] = Field(
        default_factory=list, validation_alias=AliasChoices("rule_checks", "ruleChecks")
    )


class EvaluationResult(BaseModel):
    """Final, calibrated verdict for one document. Immutable once returned."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    approval_status: ApprovalStatus
    reason: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    rule_checks: list[RuleCheckResult] = Field(default_factory=list)
    relevant_context: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    evaluated_at: datetime | None = None
