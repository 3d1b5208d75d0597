from fastapi import APIRouter, Request

from server.models.requests import UploadRequest
from server.models.responses import DocumentResponse
from shared.exceptions.errors import NotFoundError
from shared.models.document import Document
from shared.models.evaluation import EvaluationResult

router = APIRouter(prefix="/documents", tags=["documents"])


def _to_response(document: Document) -> DocumentResponse:
    return DocumentResponse.model_validate(document.model_dump(exclude={"content", "embedding"}))


@router.post("", status_code=201)
async def upload_document(request: Request, body: UploadRequest) -> DocumentResponse:
    """Store, embed and index a text document.

    Args:
        request (Request): FastAPI request (provides app.state.document_service).
        body (UploadRequest): File name, text content and optional document type.

    Returns:
        DocumentResponse: The stored document with status UPLOADED.
    """
    document_service = request.app.state.document_service
    document = await document_service.do_upload(
        filename=body.filename,
        content_type=body.content_type,
        blob=body.content.encode("utf-8"),
        document_type=body.document_type,
    )
    return _to_response(document)


@router.post("/upload-and-evaluate")
async def upload_and_evaluate(request: Request, body: UploadRequest) -> EvaluationResult:
    """Store a text document and evaluate it in the same call.

    Args:
        request (Request): FastAPI request (provides app.state.document_service).
        body (UploadRequest): File name, text content and optional document type.

    Returns:
        EvaluationResult: The verdict for the new document; its id is result.document_id.
    """
    return await request.app.state.document_service.do_upload_and_evaluate(
        filename=body.filename,
        content_type=body.content_type,
        blob=body.content.encode("utf-8"),
        document_type=body.document_type,
    )


@router.get("")
async def list_documents(request: Request) -> list[DocumentResponse]:
    return [_to_response(d) for d in request.app.state.document_service.list_documents()]


@router.get("/{document_id}")
async def get_document(request: Request, document_id: str) -> DocumentResponse:
    return _to_response(request.app.state.document_service.require_document(document_id))


@router.post("/{document_id}/evaluate")
async def evaluate_document(request: Request, document_id: str) -> EvaluationResult:
    """Run the compliance evaluation for a stored document.

    A failed evaluation still answers 200 with a NEEDS_REVIEW verdict; only an
    unknown document id is an error.
    """
    return await request.app.state.document_service.do_evaluate(document_id)


@router.get("/{document_id}/result")
async def get_evaluation_result(request: Request, document_id: str) -> EvaluationResult:
    document_service = request.app.state.document_service
    document_service.require_document(document_id)
    result = document_service.get_evaluation_result(document_id)
    if result is None:
        raise NotFoundError(f"No evaluation result for document: {document_id}")
    return result
