"""
handlers.py — Exception → HTTP Response Translation

Registered once on the app by main.py.

- TaskApiError subclasses map to their own status code.
- NotFoundError and infrastructure failures answer with an empty body so
  nothing about other users' data or internals leaks.
- FastAPI request validation failures (bad JSON, forbidden extra fields,
  missing multipart parts) become 400s in the same shape as ValidationError.
"""

from typing import Any, Dict, List

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskapi.core.errors import NotFoundError, TaskApiError, ValidationError
from taskapi.core.logging import get_logger

logger = get_logger(__name__)

INVALID_UPDATES = "Invalid updates!"

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}
_VALUE_ERROR_PREFIX = "Value error, "


def _field_name(loc) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _clean_message(msg: str) -> str:
    # pydantic prefixes messages raised from field validators
    if msg.startswith(_VALUE_ERROR_PREFIX):
        return msg[len(_VALUE_ERROR_PREFIX):]
    return msg


def describe_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Build the 400 body for a list of pydantic/FastAPI error dicts."""
    fields = [
        {"field": _field_name(err.get("loc", ())), "message": _clean_message(err.get("msg", ""))}
        for err in errors
    ]
    if any(err.get("type") == "extra_forbidden" for err in errors):
        message = INVALID_UPDATES
    elif fields:
        message = fields[0]["message"]
    else:
        message = ValidationError.message
    return {"error": message, "fields": fields}


async def handle_domain_error(request: Request, exc: TaskApiError) -> Response:
    if isinstance(exc, NotFoundError):
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    body: Dict[str, Any] = {"error": exc.message}
    if isinstance(exc, ValidationError) and exc.fields:
        body["fields"] = exc.fields
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> Response:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=describe_validation_errors(list(exc.errors())),
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> Response:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskApiError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
