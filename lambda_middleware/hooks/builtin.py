"""Built-in hooks for body parsing, CORS and error responses."""

from __future__ import annotations

import base64
import json
import logging

from ..config import CorsConfig
from ..errors import BadRequest, ErrorKind, classify_error
from ..responses import format_json_response
from . import HookFn, InvocationContext, Request, Response

logger = logging.getLogger("lambda-middleware.hooks")

GENERIC_ERROR_BODY = {
    "error": "InternalServerError",
    "code": "INTERNAL_SERVER_ERROR",
    "message": "An unexpected error occurred",
}
VALIDATION_ERROR_MESSAGE = "Bad request, please correct and resend again."


def make_cors_hook(config: CorsConfig | None = None) -> HookFn:
    """Build a CORS hook emitting the headers described by ``config``."""
    cors_headers = (config or CorsConfig()).to_headers()

    async def cors(
        request: Request,
        context: InvocationContext,
        response: Response | None = None,
    ) -> Response | None:
        if response is not None:
            response.headers = {**(response.headers or {}), **cors_headers}
            return response

        # Pre-flight request
        if request.http_method.upper() == "OPTIONS":
            return Response(status_code=204, headers=dict(cors_headers), body="")

        return None

    return cors


cors = make_cors_hook()


async def json_body_transformer(
    request: Request,
    context: InvocationContext,
    response: Response | None = None,
) -> None:
    """Decode a JSON request body in place.

    Only string bodies sent with ``content-type: application/json`` are
    touched. Base64-encoded bodies are decoded first.
    """
    content_type = request.header("content-type")
    if not request.body or not content_type or content_type.lower() != "application/json":
        return None
    if not isinstance(request.body, (str, bytes)):
        return None

    try:
        raw = request.body
        if request.is_base64_encoded:
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        request.body = json.loads(raw)
    except ValueError as e:
        raise BadRequest(
            message="Invalid JSON in request body.",
            code="INVALID_JSON_BODY",
        ) from e
    return None


async def error_handler(
    request: Request,
    context: InvocationContext,
    response: Response | None = None,
) -> Response | None:
    """Turn ``context.error`` into a JSON error response.

    Recognized errors keep their status and code. Anything else is
    logged with its traceback and answered with a generic 500 that
    leaks no detail.
    """
    error = context.error
    if error is None:
        return None

    try:
        kind = classify_error(error)

        if kind is ErrorKind.HTTP:
            body = {"message": error.message, "code": error.code}
            if error.meta is not None:
                body["meta"] = error.meta
            return format_json_response(body, error.status)
        elif kind is ErrorKind.VALIDATION:
            return format_json_response(
                {
                    "message": VALIDATION_ERROR_MESSAGE,
                    "code": "BAD_REQUEST",
                    "meta": error.issues,
                },
                400,
            )
        else:
            logger.error(
                "Unhandled error on %s %s: %s",
                request.http_method,
                request.path,
                str(error) or type(error).__name__,
                exc_info=error,
            )
            return format_json_response(GENERIC_ERROR_BODY, 500)

    except Exception:
        logger.error(
            "Error handler itself encountered an error (original error: %r)",
            error,
            exc_info=True,
        )
        return format_json_response(GENERIC_ERROR_BODY, 500)
