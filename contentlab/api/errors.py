from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contentlab.domain.errors import (
    Conflict,
    InvalidContent,
    InvalidSchedule,
    InvalidTransition,
    LifecycleError,
    NotFound,
    StoreUnavailable,
)

STATUS_CODES: list[tuple[type[LifecycleError], int]] = [
    (NotFound, 404),
    (InvalidTransition, 409),
    (Conflict, 409),
    (InvalidSchedule, 400),
    (InvalidContent, 400),
    (StoreUnavailable, 503),
]


def status_for(error: LifecycleError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 400


def error_response(exc: LifecycleError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content={"detail": exc.to_dict()})


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LifecycleError)
    async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
        return error_response(exc)
