from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from donorhub.domain.errors import DonorHubError

logger = structlog.get_logger()


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # Drop pydantic's `ctx`/`input`: they may hold exceptions or secrets.
    return [
        {
            "loc": [str(part) for part in err.get("loc", ()) if part != "body"],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


def _summarize(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Validation error"
    first = errors[0]
    field = ".".join(first["loc"])
    msg = first["msg"].removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as {"detail", "code"} with the taxonomy's status codes."""

    @app.exception_handler(DonorHubError)
    async def _donorhub_error_handler(request: Request, exc: DonorHubError) -> Response:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_public_dict(), headers=headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        payload: dict[str, Any] = {
            "detail": exc.detail,
            "code": f"http.{exc.status_code}",
        }
        headers = dict(exc.headers or {})
        return JSONResponse(status_code=int(exc.status_code), content=payload, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        errors = _field_errors(exc)
        payload: dict[str, Any] = {
            "detail": _summarize(errors),
            "code": "request.validation_error",
            "errors": errors,
        }
        return JSONResponse(status_code=400, content=payload)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        logger.exception(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "code": "internal.unhandled"},
        )
