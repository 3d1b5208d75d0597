from fastapi import APIRouter, Request

from server.models.responses import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(request: Request) -> HealthResponse:
    state = request.app.state
    return HealthResponse(
        status="ok",
        version=getattr(state, "app_version", "unknown"),
        indexed_documents=state.vector_index.size(),
        rules=len(state.rule_registry),
    )
