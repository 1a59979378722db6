"""Request lifecycle hooks for serverless HTTP handlers.

Defines the phase model and the values that flow through a wrapped
handler: the request, the per-invocation context and the response.
Hooks run sequentially per phase — see :mod:`.chain` for the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union


class Phase(Enum):
    """Phases a hook can be registered for."""

    BEFORE = "before"  # Before the terminal handler
    AFTER = "after"  # After a successful terminal handler
    ON_ERROR = "on_error"  # When the handler or a before/after hook fails
    FINALLY = "finally"  # On every exit path


@dataclass
class Request:
    """Protocol-level request data.

    Hooks are free to rewrite fields in place, e.g. replace the raw
    ``body`` string with its decoded value.
    """

    http_method: str = "GET"
    path: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    is_base64_encoded: bool = False
    path_parameters: dict[str, str] = field(default_factory=dict)
    query_string_parameters: dict[str, str] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> Request:
        """Build a request from an API Gateway proxy event."""
        return cls(
            http_method=event.get("httpMethod") or "GET",
            path=event.get("path") or "/",
            headers=dict(event.get("headers") or {}),
            body=event.get("body"),
            is_base64_encoded=bool(event.get("isBase64Encoded", False)),
            path_parameters=dict(event.get("pathParameters") or {}),
            query_string_parameters=dict(event.get("queryStringParameters") or {}),
            raw=event,
        )


@dataclass
class Response:
    """Output of a handler or hook."""

    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    is_base64_encoded: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }
        if self.is_base64_encoded:
            result["isBase64Encoded"] = True
        return result


@dataclass
class InvocationContext:
    """State scoped to exactly one invocation.

    ``error`` is written once, by the failure path, so on-error hooks
    can see what went wrong. Anything else a hook wants to share goes
    into ``extensions``.
    """

    lambda_context: Any = None
    error: BaseException | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def record_error(self, error: BaseException) -> None:
        """Store the failure of this invocation."""
        if self.error is not None:
            raise RuntimeError("An error was already recorded for this invocation")
        self.error = error


HookResult = Optional[Response]

# Hooks may be sync or async; the composer awaits both.
HookFn = Callable[
    [Request, InvocationContext, Optional[Response]],
    Union[HookResult, Awaitable[HookResult]],
]
AsyncHookFn = Callable[
    [Request, InvocationContext, Optional[Response]], Awaitable[HookResult]
]
HandlerFn = Callable[
    [Request, InvocationContext], Union[Response, Awaitable[Response]]
]
WrappedHandler = Callable[[Request, InvocationContext], Awaitable[Optional[Response]]]
