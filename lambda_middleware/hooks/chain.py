"""Hook composer that wraps a terminal handler with lifecycle phases."""

from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Callable, Optional

from . import (
    AsyncHookFn,
    HandlerFn,
    HookFn,
    InvocationContext,
    Phase,
    Request,
    Response,
    WrappedHandler,
)

logger = logging.getLogger("lambda-middleware.hooks")


def ensure_async(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Return an async callable that awaits ``fn`` if it produced an awaitable."""
    if inspect.iscoroutinefunction(fn):
        return fn

    @functools.wraps(fn)
    async def async_wrapper(*args: Any) -> Any:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    return async_wrapper


class Composer:
    """Sequence before/after/on-error/finally hooks around one handler.

    Hooks run in registration order within a phase, each awaited to
    completion before the next starts. Registration is append-only and
    closes the first time the wrapped handler is invoked; from then on
    the hook lists are immutable and can be shared by concurrent
    invocations.
    """

    def __init__(self) -> None:
        self._hooks: dict[Phase, list[tuple[str, AsyncHookFn]]] = {
            p: [] for p in Phase
        }
        self._frozen: dict[Phase, tuple[tuple[str, AsyncHookFn], ...]] | None = None

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    def register(self, phase: Phase, hook: HookFn, name: str | None = None) -> None:
        """Append a hook to a phase."""
        if self._frozen is not None:
            raise RuntimeError(
                f"Cannot register {phase.value} hook: handler has already been invoked"
            )
        if name is None:
            name = getattr(hook, "__name__", type(hook).__name__)
        self._hooks[phase].append((name, ensure_async(hook)))
        logger.debug("Registered hook: %s for %s", name, phase.value)

    def register_before(self, hook: HookFn, name: str | None = None) -> None:
        self.register(Phase.BEFORE, hook, name)

    def register_after(self, hook: HookFn, name: str | None = None) -> None:
        self.register(Phase.AFTER, hook, name)

    def register_on_error(self, hook: HookFn, name: str | None = None) -> None:
        self.register(Phase.ON_ERROR, hook, name)

    def register_finally(self, hook: HookFn, name: str | None = None) -> None:
        self.register(Phase.FINALLY, hook, name)

    def list_hooks(self, phase: Phase | None = None) -> list[str]:
        """Return registered hook names, optionally filtered by phase."""
        if phase:
            return [name for name, _ in self._hooks[phase]]
        return [
            f"{p.value}:{name}"
            for p in Phase
            for name, _ in self._hooks[p]
        ]

    def wrap(self, handler: HandlerFn) -> WrappedHandler:
        """Wrap ``handler`` so every call runs through the registered phases."""
        call_handler = ensure_async(handler)

        @functools.wraps(handler)
        async def wrapped(
            request: Request, context: InvocationContext
        ) -> Optional[Response]:
            return await self._invoke(call_handler, request, context)

        return wrapped

    def _freeze(self) -> dict[Phase, tuple[tuple[str, AsyncHookFn], ...]]:
        if self._frozen is None:
            self._frozen = {p: tuple(hooks) for p, hooks in self._hooks.items()}
            logger.debug("Hook lists frozen: %s", ", ".join(self.list_hooks()) or "(none)")
        return self._frozen

    async def _invoke(
        self,
        handler: Callable[..., Any],
        request: Request,
        context: InvocationContext,
    ) -> Optional[Response]:
        hooks = self._freeze()
        response: Optional[Response] = None

        try:
            try:
                response = await self._run_first(
                    Phase.BEFORE, hooks[Phase.BEFORE], request, context
                )
                if response is None:
                    response = await handler(request, context)
                    response = await self._run_all(
                        Phase.AFTER, hooks[Phase.AFTER], request, context, response
                    )
            except Exception as exc:
                context.record_error(exc)
                logger.debug("Captured %s: %s", type(exc).__name__, exc)
                response = None
                response = await self._run_first(
                    Phase.ON_ERROR, hooks[Phase.ON_ERROR], request, context
                )
                if response is None:
                    logger.debug("No on_error hook handled %s, re-raising", type(exc).__name__)
                    raise
        finally:
            # Replacements from finally hooks are discarded when an
            # exception is propagating.
            response = await self._run_all(
                Phase.FINALLY, hooks[Phase.FINALLY], request, context, response
            )

        return response

    async def _run_first(
        self,
        phase: Phase,
        hooks: tuple[tuple[str, AsyncHookFn], ...],
        request: Request,
        context: InvocationContext,
    ) -> Optional[Response]:
        """Run hooks until one returns a response."""
        for name, hook in hooks:
            result = await hook(request, context, None)
            if result is not None:
                logger.debug("Hook %s short-circuited %s phase", name, phase.value)
                return result
        return None

    async def _run_all(
        self,
        phase: Phase,
        hooks: tuple[tuple[str, AsyncHookFn], ...],
        request: Request,
        context: InvocationContext,
        response: Optional[Response],
    ) -> Optional[Response]:
        """Run every hook, threading replacement responses forward."""
        for name, hook in hooks:
            result = await hook(request, context, response)
            if result is not None:
                if result is not response:
                    logger.debug("Hook %s replaced response in %s phase", name, phase.value)
                response = result
        return response
