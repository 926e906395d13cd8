import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas.common import ErrorDetail, ErrorResponse
from services.forms import FormValidationError
from services.upstream import UpstreamError

logger = logging.getLogger(__name__)

# upstream statuses the console can act on are passed through, the rest become 502
_PASS_THROUGH = {400, 404, 409, 422, 503, 504}


def _error(status_code: int, code: str, message: str, fields: Optional[Dict[str, str]] = None,
           service: Optional[str] = None, headers=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, fields=fields or None, service=service))
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def _field_path(loc) -> str:
    # ("body", "course", "code") -> "course.code"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "request"


def _clean_message(msg: str) -> str:
    # pydantic prefixes ValueError messages with "Value error, "
    return msg.split(", ", 1)[1] if msg.startswith("Value error, ") else msg


def upstream_status(exc: UpstreamError) -> int:
    return exc.status_code if exc.status_code in _PASS_THROUGH else 502


def add_error_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields: Dict[str, str] = {}
        for err in exc.errors():
            fields.setdefault(_field_path(err.get("loc", ())), _clean_message(err.get("msg", "invalid")))
        return _error(422, "VALIDATION_ERROR", "Please correct the highlighted fields", fields)

    @app.exception_handler(FormValidationError)
    async def form_validation_handler(request: Request, exc: FormValidationError):
        return _error(422, "VALIDATION_ERROR", "Please correct the highlighted fields", exc.errors)

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        status = upstream_status(exc)
        if status >= 500:
            logger.error(f"{request.method} {request.url.path} failed upstream: {exc}")
        return _error(status, "UPSTREAM_ERROR", exc.message, service=exc.service)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail),
                      headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "INTERNAL_ERROR", "Unexpected server error")
