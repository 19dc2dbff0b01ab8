import traceback
from typing import Any, Dict, List, Optional
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from ..config import settings
from ..core.database import SessionLocal, get_db_transaction
from ..repositories import ErrorLogRepository
from ..utils import clean_object, create_response, find_deep
from .middleware import recorded_json_body
import logging

logger = logging.getLogger(__name__)


def _format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return messages


def build_error_payload(
    request: Request,
    exc: Exception,
    status_code: int,
    message: str,
    validation_errors: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Everything known about a failed request, as stored in ErrorLog"""
    body = recorded_json_body(request)
    details = dict(getattr(exc, "details", None) or {})
    details.update({
        "email": find_deep(body, ["email"]),
        "id": find_deep(body, ["id"]) or request.path_params.get("id"),
        "errors": validation_errors,
    })
    return {
        "status": str(status_code),
        "message": message,
        "method": request.method,
        "url": str(request.url),
        "logged_user": getattr(request.state, "logged_user", None),
        "name": type(exc).__name__,
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        "details": clean_object(details),
    }


def persist_error_log(request: Request, payload: Dict[str, Any]) -> None:
    """Store the failure as an ErrorLog row; failures here are only logged"""
    session_factory = getattr(request.app.state, "session_factory", SessionLocal)
    try:
        with get_db_transaction(session_factory) as db:
            ErrorLogRepository(db).create(payload)
    except Exception as e:
        logger.error(f"Failed to persist error log for {payload['method']} {payload['url']}: {e}")


async def _error_response(
    request: Request,
    exc: Exception,
    status_code: int,
    message: str,
    validation_errors: Optional[List[str]] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    payload = build_error_payload(request, exc, status_code, message, validation_errors)
    if not settings.structured_logging:
        await run_in_threadpool(persist_error_log, request, payload)

    data = {"method": payload["method"], "url": payload["url"]}
    if not settings.is_production:
        data.update({
            "name": payload["name"],
            "loggedUser": payload["logged_user"],
            "details": payload["details"],
            "stack": payload["stack"],
        })
    content = create_response(
        data=clean_object(data),
        message=message,
        status_code=status_code,
        success=False,
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle ApiException subclasses and framework HTTP errors"""
    message = str(exc.detail)
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{type(exc).__name__}: {message} - {request.method} {request.url}")
    else:
        logger.warning(f"{type(exc).__name__}: {message} - {request.method} {request.url}")
    return await _error_response(request, exc, exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors as 400s"""
    messages = _format_validation_errors(exc.errors())
    message = f"Validation Error: {'; '.join(messages)}"
    logger.warning(f"{message} - {request.method} {request.url}")
    return await _error_response(
        request, exc, status.HTTP_400_BAD_REQUEST, message, validation_errors=messages
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc} - {request.method} {request.url}", exc_info=True)
    return await _error_response(
        request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )
