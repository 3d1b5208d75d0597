import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from server.errors import register_exception_handlers
from server.routers.DocumentRouter import router as document_router
from server.routers.HealthRouter import router as health_router
from server.routers.RuleRouter import router as rule_router
from server.routers.SearchRouter import router as search_router
from services.documents.DocumentService import DocumentService
from services.evaluation.EvaluationAgent import EvaluationAgent
from services.evaluation.ReasoningService import ReasoningService
from services.evaluation.RuleRegistry import RuleRegistry
from shared.exceptions.errors import UpstreamError
from shared.extract.plain.TextExtractorPlain import TextExtractorPlain
from shared.index.linear.VectorIndexLinear import VectorIndexLinear
from shared.store.memory.KeyValueStoreMemory import KeyValueStoreMemory
from tests.fakes import APPROVED_REPLY, FakeLLMClient


@pytest.fixture
def llm():
    return FakeLLMClient(reply=APPROVED_REPLY)


@pytest.fixture
def client(helper_config, llm):
    app = FastAPI()
    register_exception_handlers(app)
    for router in (document_router, search_router, rule_router, health_router):
        app.include_router(router)

    reasoning = ReasoningService(helper_config, llm)
    app.state.logging = helper_config.get_logger()
    app.state.app_version = "test"
    app.state.vector_index = VectorIndexLinear(helper_config=helper_config)
    app.state.rule_registry = RuleRegistry(helper_config=helper_config)
    app.state.document_service = DocumentService(
        helper_config=helper_config,
        reasoning_service=reasoning,
        vector_index=app.state.vector_index,
        store=KeyValueStoreMemory(helper_config=helper_config),
        evaluation_agent=EvaluationAgent(helper_config, reasoning, app.state.vector_index, app.state.rule_registry),
        extractors=[TextExtractorPlain()],
    )
    return TestClient(app)


def upload(client, content="Contract approved by both parties. Signed: J. Doe"):
    response = client.post("/documents", json={"filename": "contract.txt", "content": content})
    assert response.status_code == 201
    return response.json()


def test_upload_and_fetch(client):
    document = upload(client)
    assert document["status"] == "UPLOADED"
    assert "content" not in document and "embedding" not in document

    assert client.get(f"/documents/{document['id']}").json()["filename"] == "contract.txt"
    assert [d["id"] for d in client.get("/documents").json()] == [document["id"]]


def test_evaluate_and_fetch_result(client):
    document = upload(client)
    assert client.get(f"/documents/{document['id']}/result").status_code == 404

    response = client.post(f"/documents/{document['id']}/evaluate")
    assert response.status_code == 200
    result = response.json()
    assert result["approval_status"] == "APPROVED"
    assert result["document_id"] == document["id"]
    assert result["metadata"]["state"] == "COMPLETED"

    stored = client.get(f"/documents/{document['id']}/result").json()
    assert stored["approval_status"] == "APPROVED"
    assert stored["metadata"] == result["metadata"]
    assert client.get(f"/documents/{document['id']}").json()["status"] == "EVALUATED"


def test_failed_evaluation_is_still_a_result(client, llm):
    document = upload(client)
    llm.chat_error = UpstreamError("backend unavailable")

    response = client.post(f"/documents/{document['id']}/evaluate")

    assert response.status_code == 200
    assert response.json()["approval_status"] == "NEEDS_REVIEW"
    assert response.json()["confidence_score"] == 0.0


def test_unknown_document_error_body(client):
    response = client.post("/documents/nope/evaluate")
    assert response.status_code == 404
    body = response.json()
    assert body["status"] == 404
    assert body["error"] == "Not Found"
    assert "nope" in body["message"]
    assert body["timestamp"]


def test_upload_validation_errors(client):
    response = client.post("/documents", json={"filename": "scan.pdf", "content": "x", "content_type": "application/pdf"})
    assert response.status_code == 400
    assert client.post("/documents", json={"filename": "empty.txt", "content": "  "}).status_code == 400


def test_dimension_mismatch_is_conflict(client, llm):
    upload(client)
    llm.embed_fn = lambda text: [1.0, 0.0]
    response = client.post("/documents", json={"filename": "other.txt", "content": "other"})
    assert response.status_code == 409


def test_search(client, llm):
    document = upload(client)
    response = client.post("/search", json={"query": "approved contract", "limit": 3})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["results"][0]["document_id"] == document["id"]

    llm.embed_error = UpstreamError("embedding backend down")
    assert client.post("/search", json={"query": "x"}).status_code == 502


def test_rule_endpoints(client):
    assert len(client.get("/rules").json()) == 5
    assert client.get("/rules/signature-check").json()["mandatory"] is True
    assert client.get("/rules/unknown").status_code == 404

    rule = {"id": "iban", "name": "IBAN", "description": "Must contain an IBAN", "type": "KEYWORD_PRESENCE"}
    response = client.put("/rules", json=rule)
    assert response.status_code == 200
    assert response.json()["priority"] == 1
    assert len(client.get("/rules").json()) == 6

    assert client.delete("/rules/iban").status_code == 204
    assert client.delete("/rules/iban").status_code == 204
    assert len(client.get("/rules").json()) == 5


def test_health(client):
    upload(client)
    body = client.get("/health").json()
    assert body == {"status": "ok", "version": "test", "indexed_documents": 1, "rules": 5}


def test_upload_and_evaluate(client):
    response = client.post("/documents/upload-and-evaluate", json={"filename": "contract.txt", "content": "Signed contract"})

    assert response.status_code == 200
    result = response.json()
    assert result["approval_status"] == "APPROVED"
    assert result["metadata"]["document_status"] == "EVALUATED"
    assert client.get(f"/documents/{result['document_id']}").json()["status"] == "EVALUATED"
    assert client.get(f"/documents/{result['document_id']}/result").status_code == 200


def test_upload_and_evaluate_validation_error(client):
    response = client.post("/documents/upload-and-evaluate", json={"filename": "empty.txt", "content": " "})
    assert response.status_code == 400
    assert client.get("/documents").json() == []
