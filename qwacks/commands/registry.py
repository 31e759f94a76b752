from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from .errors import DuplicateRegistrationWarning, InvalidNameError, UnknownCommandError, UnsupportedArityError
from .types import TypeDescriptor, as_descriptor

logger = logging.getLogger(__name__)

MAX_ARITY = 2


@dataclass(frozen=True)
class Handler:
    callback: Callable[..., Any]
    param_types: tuple[TypeDescriptor, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.param_types)

    def __call__(self, *args: Any) -> Any:
        return self.callback(*args)


class CommandRegistry:
    """Name -> Handler table.

    Parameter types are captured at registration time and stored next to the
    callback; nothing inspects the callback's signature later. Handlers accept
    at most ``MAX_ARITY`` positional arguments.

    A single lock guards the table. Callers get the ``Handler`` back and
    invoke it after the lock is released, so handlers may register or
    unregister commands themselves.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Handler] = {}
        self._lock = threading.Lock()
        self._warnings: list[DuplicateRegistrationWarning] = []

    def register(self, name: str, callback: Callable[..., Any], param_types: Iterable[Any] = ()) -> Handler:
        if not isinstance(name, str) or not name:
            logger.error("command name cannot be empty")
            raise InvalidNameError(code="INVALID_NAME", message="command name cannot be empty")
        descriptors = tuple(as_descriptor(t) for t in param_types)
        if len(descriptors) > MAX_ARITY:
            raise UnsupportedArityError(
                code="UNSUPPORTED_ARITY",
                message=f"commands take at most {MAX_ARITY} parameters, got {len(descriptors)}",
                command=name,
            )
        handler = Handler(callback=callback, param_types=descriptors)
        with self._lock:
            replaced = name in self._entries
            self._entries[name] = handler
            if replaced:
                warning = DuplicateRegistrationWarning(f"command {name!r} is already registered; overwriting")
                self._warnings.append(warning)
        if replaced:
            logger.warning("command %r is already registered; overwriting", name)
        logger.info("registered command %s(%s)", name, ", ".join(d.name for d in descriptors))
        return handler

    def command(self, name: str, *param_types: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name, fn, param_types)
            return fn

        return decorator

    def lookup(self, name: str) -> Handler:
        with self._lock:
            handler = self._entries.get(name)
        if handler is None:
            raise UnknownCommandError(
                code="UNKNOWN_COMMAND",
                message=f"command {name!r} is not registered",
                command=name,
            )
        return handler

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def unregister(self, name: str) -> bool:
        with self._lock:
            removed = self._entries.pop(name, None) is not None
        if removed:
            logger.info("unregistered command %s", name)
        else:
            logger.info("command %r was not registered", name)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("all commands cleared")

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.count()

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def describe(self) -> list[dict[str, Any]]:
        with self._lock:
            items = sorted(self._entries.items())
        return [
            {"name": name, "arity": h.arity, "parameters": [d.name for d in h.param_types]}
            for name, h in items
        ]

    @property
    def warnings(self) -> list[DuplicateRegistrationWarning]:
        with self._lock:
            return list(self._warnings)

    def clear_warnings(self) -> None:
        with self._lock:
            self._warnings.clear()
