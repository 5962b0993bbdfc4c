import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockwatch.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

logger = structlog.get_logger()

# Most specific first; AppError is the catch-all.
STATUS_CODES: dict[type[AppError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    ConflictError: 409,
    UpstreamError: 502,
    AppError: 500,
}


def _handler_for(status_code: int):
    async def handle(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if status_code >= 500 else logger.info
        log("request_failed", path=request.url.path, status=status_code, code=exc.code)
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
        )

    return handle


def register_exception_handlers(app: FastAPI) -> None:
    for exc_type, status_code in STATUS_CODES.items():
        app.add_exception_handler(exc_type, _handler_for(status_code))
