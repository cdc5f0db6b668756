"""Centralized error handling for the support assistant API.

Errors raised anywhere below the routes are rendered here into the
``{success: false, error, ...}`` envelope the widget expects.
"""

from typing import Any, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..entities import (
    HEADER_CORRELATION_ID,
    NotConfiguredError,
    RecordDecodeError,
    RunTimeoutError,
    SupportAssistantError,
)
from ..entities.schemas import ErrorResponse
from ..structured_logging import get_correlation_id, get_logger

logger = get_logger("ERROR_HANDLERS")


def clean_issues(issues: Iterable[Any]) -> list[Any]:
    """Drop the parts of pydantic error dicts that do not serialize (``ctx`` holds exception objects)."""
    cleaned = []
    for issue in issues:
        if isinstance(issue, dict):
            issue = {key: value for key, value in issue.items() if key not in ("ctx", "url")}
        cleaned.append(issue)
    return jsonable_encoder(cleaned)  # type: ignore[no-any-return]


class ErrorHandler:
    """Renders errors as JSON envelopes with consistent logging."""

    @staticmethod
    def _render(status_code: int, body: ErrorResponse, correlation_id: Optional[str]) -> JSONResponse:
        headers = {HEADER_CORRELATION_ID: correlation_id} if correlation_id else None
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(by_alias=True, exclude_none=True),
            headers=headers,
        )

    @staticmethod
    def handle_service_error(err: SupportAssistantError, correlation_id: Optional[str], **context: Any) -> JSONResponse:
        log = logger.warning if err.status_code < 500 else logger.error
        log(
            err.message,
            correlation_id=correlation_id,
            error_type=type(err).__name__,
            status_code=err.status_code,
            details=err.details,
            **context,
        )

        body = ErrorResponse(error=err.message, correlation_id=correlation_id)
        if isinstance(err, RecordDecodeError):
            body.issues = clean_issues(err.details or [])
        elif err.details is not None:
            body.details = jsonable_encoder(err.details)
        if isinstance(err, NotConfiguredError):
            body.needs_setup = True
        if isinstance(err, RunTimeoutError):
            body.retryable = True
        return ErrorHandler._render(err.status_code, body, correlation_id)

    @staticmethod
    def handle_validation_error(issues: Iterable[Any], correlation_id: Optional[str], **context: Any) -> JSONResponse:
        cleaned = clean_issues(issues)
        logger.warning("Invalid request", correlation_id=correlation_id, issue_count=len(cleaned), **context)
        body = ErrorResponse(error="Invalid request data", issues=cleaned, correlation_id=correlation_id)
        return ErrorHandler._render(400, body, correlation_id)

    @staticmethod
    def handle_unexpected_error(err: Exception, correlation_id: Optional[str], **context: Any) -> JSONResponse:
        logger.error(
            "Unexpected error",
            correlation_id=correlation_id,
            error_type=type(err).__name__,
            error=str(err),
            exc_info=err,
            **context,
        )
        body = ErrorResponse(error="Internal server error", correlation_id=correlation_id)
        return ErrorHandler._render(500, body, correlation_id)


def _request_context(request: Request) -> dict[str, Any]:
    return {"method": request.method, "path": request.url.path}


async def service_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, SupportAssistantError)
    return ErrorHandler.handle_service_error(exc, get_correlation_id(), **_request_context(request))


async def request_validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    return ErrorHandler.handle_validation_error(exc.errors(), get_correlation_id(), **_request_context(request))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return ErrorHandler.handle_unexpected_error(exc, get_correlation_id(), **_request_context(request))


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the exception handlers with the FastAPI application."""
    app.add_exception_handler(SupportAssistantError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
