"""
HTTP Envelope Helpers

Every endpoint answers with the same JSON envelope:

- success: ``{"success": true, ...payload}``
- failure: ``{"error": "..."}`` or ``{"error": "...", "details": ...}``

CORS headers are attached to every envelope so the browser client can read
error responses as well as successful ones.
"""

import json
import logging
from collections.abc import Collection
from typing import Any, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fest_api.core.auth import AuthenticationError, AuthorizationError
from fest_api.core.config import settings
from fest_api.core.exceptions import FestServiceError, ValidationFailedError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def success_response(payload: dict[str, Any] | None = None) -> JSONResponse:
    """Build a 200 response with ``success: true`` merged into the payload."""
    content = {"success": True, **(payload or {})}
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder(content),
        headers=CORS_HEADERS,
    )


def error_response(
    status_code: int,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build an error envelope."""
    content: dict[str, Any] = {"error": message, **extra}
    if details is not None:
        content["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers={**CORS_HEADERS, **(headers or {})},
    )


def service_error_response(e: FestServiceError) -> JSONResponse:
    """Convert a service error to its envelope."""
    return error_response(
        e.status_code,
        e.message,
        details=getattr(e, "details", None),
        code=e.error_code,
    )


def internal_error_response(e: Exception) -> JSONResponse:
    """Envelope for unexpected failures; the message is exposed as details."""
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        details=str(e),
    )


def preflight_response() -> Response:
    """Answer an OPTIONS preflight."""
    return Response(status_code=status.HTTP_200_OK, content=b"", headers=CORS_HEADERS)


async def parse_json_body(request: Request) -> dict[str, Any]:
    """
    Parse the request body as a JSON object.

    An empty body is treated as ``{}``.

    Raises:
        ValidationFailedError: If the body is not valid JSON or not an object
    """
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationFailedError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise ValidationFailedError("Invalid JSON body")
    return body


def validate_body(schema: type[ModelT], body: dict[str, Any], message: str) -> ModelT:
    """
    Validate an action body against its request schema.

    Raises:
        ValidationFailedError: With ``message`` and the field errors as details
    """
    try:
        return schema.model_validate(body)
    except ValidationError as e:
        details = e.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationFailedError(message, details=details) from e


def require_action(body: dict[str, Any], actions: Collection[str]) -> str:
    """
    Read the ``action`` field of a multi-action endpoint.

    Raises:
        ValidationFailedError: If the action is missing or not one of ``actions``
    """
    action = body.get("action")
    if not action:
        raise ValidationFailedError("action is required")
    if action not in actions:
        raise ValidationFailedError("Invalid action")
    return action


def register_exception_handlers(app: FastAPI) -> None:
    """Render auth and framework errors in the common envelope."""

    @app.exception_handler(AuthenticationError)
    async def _authentication_error(_request: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "success": False,
                "message": exc.message,
                "redirect": settings.login_redirect_url,
            },
            headers={**CORS_HEADERS, "WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationError)
    async def _authorization_error(_request: Request, exc: AuthorizationError) -> JSONResponse:
        return error_response(status.HTTP_401_UNAUTHORIZED, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = "Method not allowed"
        else:
            message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


__all__ = [
    "CORS_HEADERS",
    "error_response",
    "internal_error_response",
    "parse_json_body",
    "preflight_response",
    "register_exception_handlers",
    "require_action",
    "service_error_response",
    "success_response",
    "validate_body",
]
