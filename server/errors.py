"""Maps the service's exception hierarchy to HTTP error responses."""

from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from server.models.responses import ErrorResponse
from shared.exceptions.errors import (
    DimensionMismatchError,
    EvaluationServiceError,
    NotFoundError,
    ResponseFormatError,
    UpstreamError,
    ValidationError,
)

_STATUS_BY_ERROR: list[tuple[type[EvaluationServiceError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (DimensionMismatchError, 409),
    (UpstreamError, 502),
    (ResponseFormatError, 502),
]


def _status_for(error: EvaluationServiceError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


async def handle_service_error(request: Request, exc: EvaluationServiceError) -> JSONResponse:
    status = _status_for(exc)
    logging = getattr(request.app.state, "logging", None)
    if logging is not None:
        if status >= 500:
            logging.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logging.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    body = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status,
        error=HTTPStatus(status).phrase,
        message=str(exc),
    )
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EvaluationServiceError, handle_service_error)
