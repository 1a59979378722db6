"""
Ready-made middleware stack for API Gateway Lambda handlers.

    from lambda_middleware.http_lambda import http_lambda_middleware, lambda_handler

    async def get_item(request, context):
        ...

    handler = lambda_handler(http_lambda_middleware(get_item))
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from .config import MiddlewareConfig
from .hooks import HandlerFn, InvocationContext, Request, WrappedHandler
from .hooks.builtin import error_handler, json_body_transformer, make_cors_hook
from .hooks.chain import Composer


def register_http_preset(
    composer: Composer, config: MiddlewareConfig | None = None
) -> Composer:
    """Register JSON body decoding, error mapping and CORS headers on ``composer``."""
    config = config or MiddlewareConfig()
    composer.register_before(json_body_transformer)
    composer.register_finally(make_cors_hook(config.cors), name="cors")
    composer.register_on_error(error_handler)
    return composer


def http_lambda_middleware(
    handler: HandlerFn, config: MiddlewareConfig | None = None
) -> WrappedHandler:
    """Wrap ``handler`` with the HTTP preset on a fresh composer."""
    return register_http_preset(Composer(), config).wrap(handler)


def lambda_handler(
    wrapped: WrappedHandler,
) -> Callable[[dict[str, Any], Any], dict[str, Any] | None]:
    """Adapt a wrapped handler to the synchronous Lambda entry point shape.

    Each call gets a fresh :class:`InvocationContext`; the Lambda context
    object is kept on ``lambda_context``.
    """

    def entry(event: dict[str, Any], lambda_context: Any = None) -> dict[str, Any] | None:
        request = Request.from_event(event or {})
        context = InvocationContext(lambda_context=lambda_context)
        response = asyncio.run(wrapped(request, context))
        return response.to_dict() if response is not None else None

    entry.__name__ = getattr(wrapped, "__name__", "entry")
    entry.__doc__ = getattr(wrapped, "__doc__", None)
    return entry
