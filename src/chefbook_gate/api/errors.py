"""
chefbook_gate.api.errors

Exception handlers that render every failure as `{"success": false, "message": ...}`.

Responsibilities:
- Map gate rejections to their status code and generic public message.
- Render request-schema failures as `InvalidInput` without echoing values.
- Keep unexpected faults opaque (500) while logging them in full.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_500_INTERNAL_SERVER_ERROR

from chefbook_gate.gate.errors import GateError, InvalidInput
from chefbook_gate.observability.logging import get_logger

log = get_logger(__name__)


def error_body(message: str) -> dict[str, Any]:
    return {"success": False, "message": message}


async def _gate_error(_: Request, exc: GateError) -> JSONResponse:
    log.warning(
        "request_rejected",
        code=exc.code,
        status=exc.status_code,
        reason=exc.reason,
    )
    headers = getattr(exc, "headers", None) or {}
    if exc.status_code == HTTP_401_UNAUTHORIZED:
        headers = {**headers, "WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.public_message),
        headers=headers or None,
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Log where the payload was wrong, never what it contained.
    locations = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    return await _gate_error(request, InvalidInput(f"schema violation at {locations}"))


async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error(_: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_error", exc_info=exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GateError, _gate_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)


# --- Module Notes -----------------------------------------------------------
# Starlette re-raises after the catch-all handler responds so servers can log it;
# the client still only sees the generic 500 body.
