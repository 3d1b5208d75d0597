import asyncio

import pytest

from services.evaluation.EvaluationAgent import EvaluationAgent
from services.evaluation.ReasoningService import ReasoningService
from services.evaluation.RuleRegistry import RuleRegistry
from shared.exceptions.errors import UpstreamError
from shared.index.linear.VectorIndexLinear import VectorIndexLinear
from shared.models.document import Document, DocumentMetadata, DocumentStatus
from shared.models.evaluation import ApprovalStatus
from shared.models.rule import Rule, RuleType
from tests.fakes import APPROVED_REPLY, FakeLLMClient

CONTRACT = "Service agreement between ACME GmbH and Globex Ltd. Approved by both parties on 2024-03-01. Signed: J. Doe"


@pytest.fixture
def index(helper_config):
    return VectorIndexLinear(helper_config=helper_config)


@pytest.fixture
def registry(helper_config):
    return RuleRegistry(helper_config=helper_config)


def make_agent(helper_config, index, registry, llm: FakeLLMClient) -> EvaluationAgent:
    return EvaluationAgent(
        helper_config=helper_config,
        reasoning_service=ReasoningService(helper_config, llm),
        vector_index=index,
        rule_registry=registry,
    )


def evaluate(agent: EvaluationAgent, document: Document):
    return asyncio.run(agent.do_evaluate(document))


def test_no_context_lowers_confidence(helper_config, index, registry):
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))
    document = Document(id="doc-1", content=CONTRACT)

    result = evaluate(agent, document)

    assert result.document_id == "doc-1"
    assert result.approval_status == ApprovalStatus.APPROVED
    assert result.confidence_score == pytest.approx(0.855)
    assert result.relevant_context == []
    assert len(result.rule_checks) == 1
    assert document.status == DocumentStatus.EVALUATED
    assert document.evaluated_at is not None


def test_retrieved_context_raises_confidence(helper_config, index, registry):
    index.upsert("prior-1", [1.0, 0.0, 0.0], payload={"content": "Earlier approved contract"})
    index.upsert("prior-2", [0.9, 0.1, 0.0], payload={"content": "Another approved contract"})
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))

    result = evaluate(agent, Document(id="doc-2", content=CONTRACT))

    assert result.confidence_score == pytest.approx(0.96)
    assert result.relevant_context == ["Earlier approved contract", "Another approved contract"]
    assert result.metadata["context_count"] == 2


def test_context_is_capped_at_top_k(helper_config, index, registry):
    for i in range(5):
        index.upsert(f"prior-{i}", [1.0, float(i), 0.0], payload={"content": f"contract {i}"})
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))

    result = evaluate(agent, Document(id="doc-3", content=CONTRACT))

    assert len(result.relevant_context) == 3
    assert result.confidence_score == pytest.approx(0.99)


def test_hits_without_content_are_skipped(helper_config, index, registry):
    index.upsert("bare", [1.0, 0.0, 0.0])
    index.upsert("full", [0.5, 0.5, 0.0], payload={"content": "usable precedent"})
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))

    result = evaluate(agent, Document(id="doc-4", content=CONTRACT))

    assert result.relevant_context == ["usable precedent"]


def test_trace_and_metadata(helper_config, index, registry):
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))
    document = Document(id="doc-5", content=CONTRACT, metadata=DocumentMetadata(document_type="CONTRACT"))

    metadata = evaluate(agent, document).metadata

    assert metadata["document_id"] == "doc-5"
    assert metadata["state"] == "COMPLETED"
    assert metadata["document_status"] == "EVALUATED"
    assert metadata["document_type"] == "CONTRACT"
    assert metadata["rules_applied"] == 5
    assert metadata["context_count"] == 0
    assert metadata["total_steps"] == 5
    steps = metadata["execution_steps"]
    assert steps[0].endswith("Planning complete: 5 rules identified")
    assert steps[1].endswith("Context retrieved: 0 similar documents")
    assert steps[2].endswith("LLM evaluation complete")
    assert steps[3].endswith("Confidence adjustment complete")
    assert steps[4].endswith("Evaluation complete: APPROVED")


def test_rules_are_sent_by_priority(helper_config, index, registry):
    registry.add_rule(Rule(id="urgent", name="Urgent", description="Must state a reference number",
                           type=RuleType.KEYWORD_PRESENCE, priority=0))
    llm = FakeLLMClient(reply=APPROVED_REPLY)
    agent = make_agent(helper_config, index, registry, llm)

    evaluate(agent, Document(id="doc-6", content=CONTRACT))

    prompt = llm.chats[0][1]["content"]
    assert "1. Must state a reference number" in prompt
    assert prompt.index("Must state a reference number") < prompt.index("signature block")
    assert prompt.index("signature block") < prompt.index("placeholders")


def test_query_uses_leading_words(helper_config, index, registry, monkeypatch):
    monkeypatch.setenv("EVAL_QUERY_MAX_WORDS", "4")
    llm = FakeLLMClient(reply=APPROVED_REPLY)
    agent = make_agent(helper_config, index, registry, llm)

    evaluate(agent, Document(id="doc-7", content="one  two\nthree four five six"))

    assert llm.embedded == ["one two three four"]


def test_reasoning_failure_needs_review(helper_config, index, registry):
    llm = FakeLLMClient(chat_error=UpstreamError("reasoning backend timed out"))
    agent = make_agent(helper_config, index, registry, llm)
    document = Document(id="doc-8", content=CONTRACT)

    result = evaluate(agent, document)

    assert result.approval_status == ApprovalStatus.NEEDS_REVIEW
    assert result.confidence_score == 0.0
    assert result.rule_checks == []
    assert result.reason == "Evaluation failed: reasoning backend timed out"
    assert result.metadata["state"] == "FAILED"
    assert result.metadata["failed_after"] == "CONTEXT_RETRIEVED"
    assert result.metadata["error_type"] == "UpstreamError"
    assert result.metadata["document_status"] == "FAILED"
    assert result.metadata["execution_steps"][-1].endswith("Error: reasoning backend timed out")
    assert document.status == DocumentStatus.FAILED


def test_unparsable_reply_needs_review(helper_config, index, registry):
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply="I think it is fine."))

    result = evaluate(agent, Document(id="doc-9", content=CONTRACT))

    assert result.approval_status == ApprovalStatus.NEEDS_REVIEW
    assert result.confidence_score == 0.0
    assert result.metadata["error_type"] == "ResponseFormatError"


def test_embedding_failure_needs_review(helper_config, index, registry):
    llm = FakeLLMClient(reply=APPROVED_REPLY, embed_error=UpstreamError("embedding backend down"))
    agent = make_agent(helper_config, index, registry, llm)

    result = evaluate(agent, Document(id="doc-10", content=CONTRACT))

    assert result.approval_status == ApprovalStatus.NEEDS_REVIEW
    assert result.metadata["failed_after"] == "PLANNED"
    assert llm.chats == []


def test_dimension_mismatch_needs_review(helper_config, index, registry):
    index.upsert("other", [1.0, 0.0], payload={"content": "two-dimensional"})
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))

    result = evaluate(agent, Document(id="doc-11", content=CONTRACT))

    assert result.approval_status == ApprovalStatus.NEEDS_REVIEW
    assert result.metadata["error_type"] == "DimensionMismatchError"


@pytest.mark.parametrize("document", [
    Document(id="doc-12", content="   \n "),
    Document(id="", content=CONTRACT),
])
def test_invalid_document_needs_review(helper_config, index, registry, document):
    llm = FakeLLMClient(reply=APPROVED_REPLY)
    agent = make_agent(helper_config, index, registry, llm)

    result = evaluate(agent, document)

    assert result.approval_status == ApprovalStatus.NEEDS_REVIEW
    assert result.metadata["error_type"] == "ValidationError"
    assert document.status == DocumentStatus.UPLOADED
    assert llm.embedded == [] and llm.chats == []


def test_concurrent_evaluations_are_independent(helper_config, index, registry):
    agent = make_agent(helper_config, index, registry, FakeLLMClient(reply=APPROVED_REPLY))
    documents = [Document(id=f"doc-c{i}", content=CONTRACT) for i in range(4)]

    async def run_all():
        return await asyncio.gather(*(agent.do_evaluate(d) for d in documents))

    results = asyncio.run(run_all())

    assert [r.document_id for r in results] == [d.id for d in documents]
    assert all(r.metadata["total_steps"] == 5 for r in results)
