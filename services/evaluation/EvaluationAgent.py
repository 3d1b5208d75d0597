"""Evaluation agent: retrieval-augmented compliance review of a single document.

Workflow per call, strictly in this order:

1. Plan:      select the applicable rules from the RuleRegistry
2. Retrieve:  embed a sample of the document and fetch similar documents
              from the vector index as supporting context
3. Assess:    ask the reasoning model for a verdict against the rules
4. Merge:     stamp the verdict with the document id, context and trace
5. Calibrate: adjust the confidence by the amount of context found
6. Complete:  attach the full execution trace and return

Every step runs through _run_step(), which hands back a StepResult instead of
raising. The first failed step turns the evaluation into a NEEDS_REVIEW result
with zero confidence, so do_evaluate() never raises to its caller.
"""

import inspect
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from pytz import timezone

from services.evaluation.ExecutionTrace import ExecutionTrace
from services.evaluation.ReasoningService import ReasoningService
from services.evaluation.RuleRegistry import RuleRegistry
from services.evaluation.calibration import calibrate_confidence
from shared.exceptions.errors import ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndexInterface import VectorIndexInterface
from shared.models.document import Document, DocumentStatus
from shared.models.evaluation import ApprovalStatus, DraftAssessment, EvaluationResult
from shared.models.rule import Rule

DEFAULT_DOCUMENT_TYPE = "GENERAL"


class EvaluationState(str, Enum):
    PENDING = "PENDING"
    PLANNED = "PLANNED"
    CONTEXT_RETRIEVED = "CONTEXT_RETRIEVED"
    ASSESSED = "ASSESSED"
    CALIBRATED = "CALIBRATED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass
class StepResult:
    """Value or error produced by one workflow step."""

    step: str
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class EvaluationAgent:
    """Runs the evaluation workflow. Holds no per-call state, so concurrent
    evaluations of different documents are independent."""

    def __init__(
        self,
        helper_config: HelperConfig,
        reasoning_service: ReasoningService,
        vector_index: VectorIndexInterface,
        rule_registry: RuleRegistry,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._reasoning = reasoning_service
        self._index = vector_index
        self._rules = rule_registry

        self._context_top_k = int(helper_config.get_number_val("EVAL_CONTEXT_TOP_K", default=3))
        self._query_max_words = int(helper_config.get_number_val("EVAL_QUERY_MAX_WORDS", default=200))
        self._tz_name = helper_config.get_string_val("TIMEZONE", default="Europe/Berlin")

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_evaluate(self, document: Document) -> EvaluationResult:
        """Evaluate a document against all applicable rules.

        Args:
            document (Document): The document to evaluate. Its status is moved to
                PROCESSING and then to EVALUATED or FAILED where the lifecycle allows.

        Returns:
            EvaluationResult: The calibrated verdict, or a NEEDS_REVIEW result with
                confidence 0.0 and no rule checks if any step failed.
        """
        document_id = document.id or ""
        trace = ExecutionTrace(document_id, tz_name=self._tz_name)
        state = EvaluationState.PENDING
        self.logging.info("Starting agent evaluation for document: %s", document_id)

        outcome = await self._run_step("validate", self._validate, document)
        if not outcome.ok:
            return self._fail(document, trace, state, outcome.error)
        self._advance_status(document, DocumentStatus.PROCESSING)
        document_type = self._document_type(document)

        outcome = await self._run_step("plan", self._plan, document_type)
        if not outcome.ok:
            return self._fail(document, trace, state, outcome.error)
        rules: list[Rule] = outcome.value
        state = EvaluationState.PLANNED
        trace.add_step(f"Planning complete: {len(rules)} rules identified")

        outcome = await self._run_step("retrieve", self._retrieve_context, document)
        if not outcome.ok:
            return self._fail(document, trace, state, outcome.error)
        context: list[str] = outcome.value
        state = EvaluationState.CONTEXT_RETRIEVED
        trace.add_step(f"Context retrieved: {len(context)} similar documents")

        outcome = await self._run_step("assess", self._assess, document, rules)
        if not outcome.ok:
            return self._fail(document, trace, state, outcome.error)
        draft: DraftAssessment = outcome.value
        state = EvaluationState.ASSESSED
        trace.add_step("LLM evaluation complete")

        outcome = await self._run_step("merge", self._merge, document_id, draft, context, trace)
        if not outcome.ok:
            return self._fail(document, trace, state, outcome.error)
        result: EvaluationResult = outcome.value

        outcome = await self._run_step("calibrate", calibrate_confidence, result.confidence_score, len(context))
        if not outcome.ok:
            return self._fail(document, trace, state, outcome.error)
        result = result.model_copy(update={"confidence_score": outcome.value})
        state = EvaluationState.CALIBRATED
        trace.add_step("Confidence adjustment complete")

        state = EvaluationState.COMPLETED
        trace.add_step(f"Evaluation complete: {result.approval_status.value}")
        self._advance_status(document, DocumentStatus.EVALUATED)
        evaluated_at = datetime.now(timezone(self._tz_name))
        document.evaluated_at = evaluated_at

        self.logging.info(
            "Evaluation complete for %s: %s (confidence: %.3f)",
            document_id,
            result.approval_status.value,
            result.confidence_score,
        )
        return result.model_copy(update={
            "evaluated_at": evaluated_at,
            "metadata": self._build_metadata(trace, state, document, document_type, len(rules), len(context)),
        })

    ##########################################
    ################ STEPS ###################
    ##########################################

    async def _run_step(self, name: str, func: Callable[..., Any], *args: Any) -> StepResult:
        """Run one step and capture its value or error."""
        try:
            value = func(*args)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            self.logging.error("Evaluation step '%s' failed: %s", name, e)
            return StepResult(step=name, error=e)
        return StepResult(step=name, value=value)

    def _validate(self, document: Document) -> None:
        if not document.id:
            raise ValidationError("Document id is missing.")
        if not document.content or not document.content.strip():
            raise ValidationError(f"Document {document.id} has no content.")

    def _plan(self, document_type: str) -> list[Rule]:
        """Select the rules for this document, lowest priority value first."""
        rules = sorted(self._rules.get_all(), key=lambda r: r.priority)
        rules = self._filter_rules_for_type(rules, document_type)
        self.logging.debug("Planning evaluation: %d rules applicable for type %s", len(rules), document_type)
        return rules

    def _filter_rules_for_type(self, rules: list[Rule], document_type: str) -> list[Rule]:
        # every rule applies to every document type for now
        return rules

    async def _retrieve_context(self, document: Document) -> list[str]:
        """Fetch the contents of the documents most similar to this one."""
        query_text = self._representative_sample(document.content)
        query_vector = await self._reasoning.embed(query_text)
        hits = self._index.query(query_vector, self._context_top_k)

        context: list[str] = []
        for hit in hits:
            content = hit.payload.get("content")
            if not content:
                self.logging.warning("Index entry %s has no stored content; skipping it as context.", hit.id)
                continue
            context.append(content)
        self.logging.debug("Retrieved %d context documents for %s", len(context), document.id)
        return context

    def _representative_sample(self, content: str) -> str:
        """The first EVAL_QUERY_MAX_WORDS whitespace-separated words of the content."""
        return " ".join(content.split()[: self._query_max_words])

    async def _assess(self, document: Document, rules: list[Rule]) -> DraftAssessment:
        return await self._reasoning.assess(document.content, [rule.description for rule in rules])

    def _merge(self, document_id: str, draft: DraftAssessment, context: list[str], trace: ExecutionTrace) -> EvaluationResult:
        return EvaluationResult(
            document_id=document_id,
            approval_status=draft.approval_status,
            reason=draft.reason,
            confidence_score=draft.confidence_score,
            rule_checks=list(draft.rule_checks),
            relevant_context=context,
            metadata=trace.to_metadata(),
        )

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _fail(self, document: Document, trace: ExecutionTrace, state: EvaluationState, error: Exception) -> EvaluationResult:
        """Build the degraded NEEDS_REVIEW result for a failed evaluation."""
        cause = str(error) or type(error).__name__
        self.logging.error("Agent evaluation failed for document %s in state %s: %s", document.id, state.value, cause)
        trace.add_step(f"Error: {cause}")
        self._advance_status(document, DocumentStatus.FAILED)
        return EvaluationResult(
            document_id=document.id or "",
            approval_status=ApprovalStatus.NEEDS_REVIEW,
            reason=f"Evaluation failed: {cause}",
            confidence_score=0.0,
            rule_checks=[],
            relevant_context=[],
            metadata={
                **trace.to_metadata(),
                "state": EvaluationState.FAILED.value,
                "failed_after": state.value,
                "error_type": type(error).__name__,
                "document_status": document.status.value,
            },
            evaluated_at=datetime.now(timezone(self._tz_name)),
        )

    def _advance_status(self, document: Document, status: DocumentStatus) -> None:
        previous = document.status
        if document.advance_status(status):
            self.logging.debug("Document %s status %s -> %s", document.id, previous.value, status.value)
        else:
            self.logging.debug("Document %s keeps status %s (no transition to %s)", document.id, previous.value, status.value)

    def _document_type(self, document: Document) -> str:
        if document.metadata is None or not document.metadata.document_type:
            return DEFAULT_DOCUMENT_TYPE
        return document.metadata.document_type

    def _build_metadata(
        self,
        trace: ExecutionTrace,
        state: EvaluationState,
        document: Document,
        document_type: str,
        rule_count: int,
        context_count: int,
    ) -> dict:
        return {
            **trace.to_metadata(),
            "state": state.value,
            "document_status": document.status.value,
            "document_type": document_type,
            "rules_applied": rule_count,
            "context_count": context_count,
        }
