"""Reasoning service: delegates compliance judgement and embeddings to the LLM backend.

assess(): prompt the chat model with the document and the rule descriptions,
then parse its JSON verdict against a strict schema.
embed():  embed a text with the configured embedding model.
"""

import re

from pydantic import ValidationError as SchemaValidationError

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.exceptions.errors import ResponseFormatError, UpstreamError
from shared.helper.HelperConfig import HelperConfig
from shared.models.evaluation import DraftAssessment

SYSTEM_PROMPT = "You are a precise document compliance analyst. Always return valid JSON."

RESPONSE_FORMAT = """{
  "approval_status": "APPROVED" or "REJECTED" or "NEEDS_REVIEW",
  "reason": "Brief explanation of the decision",
  "confidence_score": 0.0 to 1.0,
  "rule_checks": [
    {
      "rule_name": "Rule description",
      "passed": true or false,
      "details": "Specific findings",
      "confidence": 0.0 to 1.0
    }
  ]
}"""

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")


def build_evaluation_prompt(content: str, rules: list[str]) -> str:
    """Build the user prompt asking for a JSON verdict on content against rules."""
    numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    return (
        "You are a document compliance evaluator. "
        "Analyze the following document and check if it meets the specified rules.\n\n"
        f"DOCUMENT CONTENT:\n{content}\n\n"
        f"RULES TO CHECK:\n{numbered}\n\n"
        "You must respond ONLY with valid JSON in this exact format:\n"
        f"{RESPONSE_FORMAT}\n"
    )


def strip_code_fences(raw: str) -> str:
    """Remove a leading ```/```json fence line and a trailing ``` fence."""
    cleaned = raw.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_assessment(raw: str) -> DraftAssessment:
    """Parse a reasoning response into a DraftAssessment.

    Raises:
        ResponseFormatError: If the text is not JSON, misses a required field,
            carries a wrong type or out-of-range confidence, or names an
            unknown approval status.
    """
    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ResponseFormatError("Reasoning response is empty.")
    try:
        return DraftAssessment.model_validate_json(cleaned)
    except SchemaValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise ResponseFormatError(f"Invalid reasoning response: {problems}") from e


class ReasoningService:
    """Wraps an LLM client with the compliance prompt and response contract."""

    def __init__(self, helper_config: HelperConfig, llm_client: LLMClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Raises:
            UpstreamError: If the embedding call fails.
        """
        vectors = await self._llm_client.do_embed([text])
        if not vectors or not vectors[0]:
            raise UpstreamError("Embedding backend returned no vector.")
        return vectors[0]

    async def assess(self, document_content: str, rules: list[str]) -> DraftAssessment:
        """Ask the reasoning model for a verdict on document_content.

        Args:
            document_content (str): Full document text.
            rules (list[str]): Rule descriptions in the order they should be checked.

        Returns:
            DraftAssessment: The uncalibrated verdict.

        Raises:
            UpstreamError: If the chat call fails or times out.
            ResponseFormatError: If the reply does not match the response schema.
        """
        self.logging.debug("Starting LLM evaluation for document with %d rules", len(rules))
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_evaluation_prompt(document_content, rules)},
        ]
        raw = await self._llm_client.do_chat(messages)
        self.logging.debug("Raw reasoning response: %s", raw[:500])
        assessment = parse_assessment(raw)
        self.logging.debug(
            "Parsed assessment: %s with %d rule checks",
            assessment.approval_status.value,
            len(assessment.rule_checks),
        )
        return assessment
