#!/usr/bin/env python3
"""
lambda-middleware - Local tooling for wrapped Lambda handlers.

Lists configured hooks and invokes a handler against an event file.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import logging
import sys
from pathlib import Path

from .config import MiddlewareConfig

logger = logging.getLogger("lambda-middleware.cli")


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="lambda-middleware",
        description="Inspect hook configuration and invoke wrapped handlers locally",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug output")
    parser.add_argument("--config", "-c", help="Middleware config file (default: $LAMBDA_MIDDLEWARE_CONFIG or ./lambda-middleware.yaml)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # hooks
    hooks_p = subparsers.add_parser("hooks", help="List hooks registered from a hooks file")
    hooks_p.add_argument("--file", "-f", help="Hooks file (default: hooks_file from config)")

    # invoke
    invoke_p = subparsers.add_parser("invoke", help="Invoke a handler against an event file")
    invoke_p.add_argument("handler", help="Handler as module:function")
    invoke_p.add_argument("event", help="Path to a JSON API Gateway event")
    invoke_p.add_argument("--hooks", help="Hooks file to register (default: hooks_file from config)")
    invoke_p.add_argument("--preset", "-p", action="store_true", help="Apply the JSON body / CORS / error handler stack")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    from . import config as config_mod
    from .errors import ConfigError

    try:
        cfg = config_mod.load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.debug else getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Dispatch
    if args.command == "hooks":
        return cmd_hooks(args, cfg)
    elif args.command == "invoke":
        return cmd_invoke(args, cfg)
    else:
        parser.print_help()
        return 1


def _resolve_hooks_file(explicit: str | None, cfg: MiddlewareConfig) -> Path | None:
    if explicit:
        return Path(explicit)
    return cfg.hooks_file


def cmd_hooks(args: argparse.Namespace, cfg: MiddlewareConfig) -> int:
    """Handle hooks command."""
    from .hooks.chain import Composer
    from .hooks.loader import load_hooks_from_config

    hooks_file = _resolve_hooks_file(args.file, cfg)
    if hooks_file is None:
        print("Error: no hooks file given and none configured", file=sys.stderr)
        return 1
    if not hooks_file.exists():
        print(f"Error: hooks file not found: {hooks_file}", file=sys.stderr)
        return 1

    composer = Composer()
    count = load_hooks_from_config(hooks_file, composer)

    print(f"Hooks ({count} registered from {hooks_file}):")
    names = composer.list_hooks()
    if names:
        for name in names:
            print(f"  {name}")
    else:
        print("  (none)")
    return 0


def _import_handler(spec: str):
    module_name, sep, func_name = spec.partition(":")
    if not sep or not module_name or not func_name:
        raise ValueError(f"Handler must be given as module:function, got {spec!r}")
    module = importlib.import_module(module_name)
    return getattr(module, func_name)


def cmd_invoke(args: argparse.Namespace, cfg: MiddlewareConfig) -> int:
    """Handle invoke command."""
    from .hooks import InvocationContext, Request
    from .http_lambda import register_http_preset
    from .hooks.chain import Composer
    from .hooks.loader import load_hooks_from_config

    # Make handlers in the working directory importable
    if "" not in sys.path and "." not in sys.path:
        sys.path.insert(0, ".")

    try:
        handler = _import_handler(args.handler)
    except (ImportError, AttributeError, ValueError) as e:
        print(f"Error: cannot load handler {args.handler}: {e}", file=sys.stderr)
        return 1

    event_path = Path(args.event)
    try:
        event = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read event {event_path}: {e}", file=sys.stderr)
        return 1

    composer = Composer()
    if args.preset:
        register_http_preset(composer, cfg)

    hooks_file = _resolve_hooks_file(args.hooks, cfg)
    if hooks_file is not None:
        count = load_hooks_from_config(hooks_file, composer)
        logger.debug("Registered %d hooks from %s", count, hooks_file)

    wrapped = composer.wrap(handler)
    request = Request.from_event(event)
    context = InvocationContext()

    try:
        response = asyncio.run(wrapped(request, context))
    except Exception as e:
        logger.debug("Handler failed", exc_info=True)
        print(f"Error: unhandled {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    result = response.to_dict() if response is not None else None
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
