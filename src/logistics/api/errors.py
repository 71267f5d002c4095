"""Mapping of operation failures onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from logistics.api.schemas import ErrorResponse
from logistics.shared.errors import VALIDATION_FAILED, LogisticsError
from logistics.shared.results import OperationResult, format_validation_messages

HTTP_STATUS = {
    VALIDATION_FAILED: 422,
    "EDGE_NOT_ALLOWED": 400,
    "TERMINAL_STATE": 400,
    "NOTES_REQUIRED": 400,
    "UNKNOWN_STATUS": 400,
    "UNKNOWN_FAMILY": 400,
    "ROLE_NOT_PERMITTED": 403,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "DUPLICATE": 409,
    "PERSISTENCE_FAILED": 503,
}


class OperationFailed(Exception):
    """Raised by routes to return a failed ``OperationResult``."""

    def __init__(self, result: OperationResult):
        super().__init__(result.message)
        self.result = result


def unwrap(result: OperationResult):
    if not result.ok:
        raise OperationFailed(result)
    return result.data


def _response(reason_code: str, message: str, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS.get(reason_code, 400),
        content=ErrorResponse(reason_code=reason_code, message=message, details=details or {}).model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OperationFailed)
    async def operation_failed(_request: Request, exc: OperationFailed) -> JSONResponse:
        return _response(exc.result.reason_code, exc.result.message, exc.result.details)

    @app.exception_handler(LogisticsError)
    async def logistics_error(_request: Request, exc: LogisticsError) -> JSONResponse:
        return _response(exc.reason_code, exc.message)

    @app.exception_handler(ValidationError)
    async def validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        return _response(VALIDATION_FAILED, format_validation_messages(exc.messages), {"errors": exc.messages})
