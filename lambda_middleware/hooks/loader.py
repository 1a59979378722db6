"""Load hooks from YAML configuration."""

from __future__ import annotations

import importlib
import logging
import os
import sys
from pathlib import Path

import yaml

from . import HookFn, Phase
from .chain import Composer, ensure_async

logger = logging.getLogger("lambda-middleware.hooks")


def load_hooks_from_config(config_path: Path, composer: Composer) -> int:
    """Register the hooks listed in a YAML file on ``composer``.

    Returns the number of hooks successfully registered.
    """
    try:
        config = yaml.safe_load(config_path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        logger.error("Failed to parse hooks config: %s", config_path, exc_info=True)
        return 0

    if not isinstance(config, dict):
        logger.error("Hooks config %s is not a mapping", config_path)
        return 0

    # Add custom python paths
    python_path = config.get("python_path") or []
    if isinstance(python_path, str):
        python_path = [python_path]
    for p in python_path:
        expanded = os.path.expandvars(str(p))
        if expanded not in sys.path:
            sys.path.insert(0, expanded)

    hooks = config.get("hooks") or {}
    if not isinstance(hooks, dict):
        logger.error("'hooks' in %s is not a mapping", config_path)
        return 0

    count = 0

    for phase_name, hook_list in hooks.items():
        try:
            phase = Phase(phase_name)
        except ValueError:
            logger.warning("Unknown hook phase: %s", phase_name)
            continue

        if not isinstance(hook_list, list):
            logger.warning("Hook list for %s is not a list", phase_name)
            continue

        for hook_def in hook_list:
            if not isinstance(hook_def, dict):
                logger.warning("Skipping malformed hook entry for %s: %r", phase_name, hook_def)
                continue
            if not hook_def.get("enabled", True):
                continue

            name = hook_def.get("name", "unnamed")
            try:
                fn = _load_hook_function(hook_def)
            except Exception:
                logger.error("Failed to load hook %s", name, exc_info=True)
                continue

            # Inject config into context extensions if provided
            hook_config = hook_def.get("config", {})
            if hook_config:
                fn = _wrap_with_config(fn, hook_config)

            composer.register(phase, fn, name=name)
            count += 1

    return count


def _load_hook_function(hook_def: dict) -> HookFn:
    """Import and return a hook function from a module path."""
    module = importlib.import_module(hook_def["module"])
    fn = getattr(module, hook_def["function"])
    if not callable(fn):
        raise TypeError(f"{hook_def['module']}.{hook_def['function']} is not callable")
    return fn


def _wrap_with_config(fn: HookFn, hook_config: dict) -> HookFn:
    """Wrap a hook function to inject config into the invocation context."""
    original_fn = ensure_async(fn)

    async def configured_wrapper(request, context, response=None, _fn=original_fn, _cfg=hook_config):
        had_previous = "hook_config" in context.extensions
        previous = context.extensions.get("hook_config")
        context.extensions["hook_config"] = _cfg
        try:
            return await _fn(request, context, response)
        finally:
            # Config is visible only while its own hook runs
            if had_previous:
                context.extensions["hook_config"] = previous
            else:
                context.extensions.pop("hook_config", None)

    return configured_wrapper
