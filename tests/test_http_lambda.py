"""End-to-end tests for the HTTP Lambda middleware stack."""

from __future__ import annotations

import asyncio
import json

import pytest

from lambda_middleware.config import CorsConfig, MiddlewareConfig
from lambda_middleware.errors import Forbidden
from lambda_middleware.hooks import InvocationContext, Request, Response
from lambda_middleware.hooks.chain import Composer
from lambda_middleware.http_lambda import (
    http_lambda_middleware,
    lambda_handler,
    register_http_preset,
)


def _run(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


async def echo_handler(request, context):
    return Response(
        status_code=200,
        headers={"Content-Type": "application/json"},
        body=json.dumps({"received": request.body}),
    )


class TestHttpLambdaMiddleware:
    def test_json_body_decoded_and_cors_added(self):
        wrapped = http_lambda_middleware(echo_handler)
        req = Request(
            http_method="POST",
            headers={"content-type": "application/json"},
            body='{"a":1}',
        )
        result = _run(wrapped(req, InvocationContext()))

        assert result.status_code == 200
        assert json.loads(result.body) == {"received": {"a": 1}}
        assert result.headers["Content-Type"] == "application/json"
        assert result.headers["Access-Control-Allow-Origin"] == "*"

    def test_malformed_json_gives_400_with_cors(self):
        wrapped = http_lambda_middleware(echo_handler)
        req = Request(
            http_method="POST",
            headers={"content-type": "application/json"},
            body="{bad",
        )
        ctx = InvocationContext()
        result = _run(wrapped(req, ctx))

        assert result.status_code == 400
        assert json.loads(result.body)["code"] == "INVALID_JSON_BODY"
        assert result.headers["Access-Control-Allow-Origin"] == "*"
        assert ctx.error is not None

    def test_domain_error_mapped(self):
        async def handler(request, context):
            raise Forbidden(code="NOT_OWNER", message="You do not own this item")

        result = _run(http_lambda_middleware(handler)(Request(), InvocationContext()))
        assert result.status_code == 403
        assert json.loads(result.body)["code"] == "NOT_OWNER"

    def test_unrecognized_error_gives_generic_500(self):
        async def handler(request, context):
            raise ZeroDivisionError("secret internals")

        result = _run(http_lambda_middleware(handler)(Request(), InvocationContext()))
        assert result.status_code == 500
        assert "secret internals" not in result.body
        assert result.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"

    def test_custom_cors_config(self):
        config = MiddlewareConfig(cors=CorsConfig(allow_origin="https://app.example.com"))
        result = _run(http_lambda_middleware(echo_handler, config)(Request(), InvocationContext()))
        assert result.headers["Access-Control-Allow-Origin"] == "https://app.example.com"


class TestRegisterHttpPreset:
    def test_registers_stack_in_order(self):
        composer = register_http_preset(Composer())
        assert composer.list_hooks() == [
            "before:json_body_transformer",
            "on_error:error_handler",
            "finally:cors",
        ]

    def test_uses_cors_config(self):
        config = MiddlewareConfig(cors=CorsConfig(allow_origin="https://a.example"))
        wrapped = register_http_preset(Composer(), config).wrap(echo_handler)
        result = _run(wrapped(Request(), InvocationContext()))
        assert result.headers["Access-Control-Allow-Origin"] == "https://a.example"


class TestLambdaHandler:
    def test_event_round_trip(self):
        entry = lambda_handler(http_lambda_middleware(echo_handler))
        event = {
            "httpMethod": "POST",
            "path": "/echo",
            "headers": {"Content-Type": "application/json"},
            "body": '{"x": [1, 2]}',
            "isBase64Encoded": False,
        }
        result = entry(event, object())

        assert result["statusCode"] == 200
        assert json.loads(result["body"]) == {"received": {"x": [1, 2]}}
        assert result["headers"]["Access-Control-Allow-Headers"] == "Content-Type, Authorization"
        assert entry.__name__ == "echo_handler"

    def test_lambda_context_exposed(self):
        seen = {}
        marker = object()

        async def handler(request, context):
            seen["ctx"] = context.lambda_context
            return Response()

        lambda_handler(http_lambda_middleware(handler))({"httpMethod": "GET"}, marker)
        assert seen["ctx"] is marker

    def test_handler_returning_none_for_options(self):
        async def handler(request, context):
            return None

        result = lambda_handler(http_lambda_middleware(handler))({"httpMethod": "OPTIONS"}, None)
        # CORS finally hook answers the pre-flight
        assert result["statusCode"] == 204
        assert result["body"] == ""

    def test_unhandled_error_propagates(self):
        async def handler(request, context):
            raise ValueError("nobody handles this")

        entry = lambda_handler(Composer().wrap(handler))
        with pytest.raises(ValueError, match="nobody handles this"):
            entry({"httpMethod": "GET"}, None)
