from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .config import DispatcherConfig, load_config
from .dispatch_log import DispatchLog
from .dispatcher import Dispatcher, DispatchResult
from .registry import CommandRegistry
from .schema import SchemaRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    config: DispatcherConfig
    registry: CommandRegistry
    dispatcher: Dispatcher
    dispatch_log: DispatchLog


def load_commands(registry: CommandRegistry, handler_module: str) -> None:
    mod = importlib.import_module(handler_module)
    register = getattr(mod, "register_commands", None)
    if register is None:
        raise RuntimeError(f"handler module must expose `register_commands(registry)`: {handler_module}")
    register(registry)


def build_context(*, handler_module: str, config_path: Path | None = None) -> AppContext:
    schemas = SchemaRegistry()
    cfg = load_config(config_path, schemas) if config_path is not None else DispatcherConfig()
    validating = schemas if cfg.schema_validation_enabled else None
    registry = CommandRegistry()
    load_commands(registry, handler_module)
    dispatcher = Dispatcher(
        registry,
        schemas=validating,
        preview_chars=cfg.payload_preview_chars,
    )
    logger.info("loaded %d command(s) from %s", registry.count(), handler_module)
    return AppContext(
        config=cfg,
        registry=registry,
        dispatcher=dispatcher,
        dispatch_log=DispatchLog(cfg.dispatch_log, schemas=validating),
    )


def run_lines(ctx: AppContext, lines: Iterable[str]) -> list[DispatchResult]:
    results: list[DispatchResult] = []
    for line in lines:
        if not line.strip():
            continue
        result = ctx.dispatcher.dispatch(line)
        ctx.dispatch_log.record(result)
        results.append(result)
    return results


def run(*, handler_module: str, input_path: Path, config_path: Path | None = None) -> int:
    ctx = build_context(handler_module=handler_module, config_path=config_path)
    if str(input_path) == "-":
        results = run_lines(ctx, sys.stdin)
    else:
        with input_path.open(encoding="utf-8") as f:
            results = run_lines(ctx, f)
    failed = sum(1 for r in results if not r.ok)
    logger.info("dispatched %d envelope(s), %d failed", len(results), failed)
    return 0 if failed == 0 else 1
