"""
lambda-middleware - Lifecycle hooks for serverless HTTP handlers.

Wraps a terminal handler with before, after, on-error and finally
phases so body parsing, CORS and error formatting stay out of it.
"""

from .hooks import InvocationContext, Phase, Request, Response
from .hooks.chain import Composer
from .http_lambda import http_lambda_middleware, lambda_handler

__version__ = "0.1.0"

__all__ = [
    "Composer",
    "InvocationContext",
    "Phase",
    "Request",
    "Response",
    "http_lambda_middleware",
    "lambda_handler",
]
