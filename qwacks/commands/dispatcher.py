from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .decoder import PayloadDecoder
from .errors import (
    ArgumentDecodeError,
    DecodeError,
    DispatchError,
    EmptyMessageError,
    HandlerExecutionError,
    MalformedJsonError,
    MissingArgumentError,
    MissingCommandNameError,
    UnsupportedArityError,
)
from .model import SINGLE_PAYLOAD_FIELD, Envelope, looks_like_json, parse_envelope
from .registry import MAX_ARITY, CommandRegistry, Handler
from .schema import SchemaRegistry

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_CHARS = 64

_SLOTS_BY_ARITY: dict[int, tuple[str, ...]] = {0: (), 1: (SINGLE_PAYLOAD_FIELD,), 2: ("param1", "param2")}


def preview(text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)] + "..."


@dataclass(frozen=True)
class DispatchResult:
    ok: bool
    command: str | None = None
    arity: int | None = None
    error: DispatchError | None = None

    @property
    def code(self) -> str | None:
        return None if self.error is None else self.error.code

    @property
    def message(self) -> str | None:
        return None if self.error is None else self.error.message

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        details: dict[str, Any] = {}
        if self.arity is not None:
            details["arity"] = self.arity
        if isinstance(self.error, MissingArgumentError):
            details["slot"] = self.error.slot
        elif isinstance(self.error, ArgumentDecodeError):
            details.update(
                {
                    "slot": self.error.slot,
                    "target_type": self.error.target_type,
                    "raw_payload": self.error.raw_payload,
                    "decode_code": None if self.error.cause is None else self.error.cause.code,
                }
            )
        elif isinstance(self.error, HandlerExecutionError) and self.error.original is not None:
            details["exception_type"] = type(self.error.original).__name__
        return {
            "ok": self.ok,
            "command": self.command,
            "code": self.code,
            "message": self.message,
            "details": details or None,
        }


class Dispatcher:
    """Runs one envelope from raw text through lookup, decoding and invocation.

    ``dispatch`` never raises for bad input or failing handlers; the outcome
    is returned as a ``DispatchResult``. Dispatch is not deduplicated: the
    same envelope text runs its handler again every time.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        *,
        decoder: PayloadDecoder | None = None,
        schemas: SchemaRegistry | None = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ):
        self.registry = registry
        self.decoder = decoder or PayloadDecoder()
        self.schemas = schemas
        self.preview_chars = preview_chars

    def dispatch(self, raw_message: str | None) -> DispatchResult:
        command: str | None = None
        arity: int | None = None
        try:
            envelope = self._parse(raw_message)
            command = envelope.command
            handler = self.registry.lookup(command)
            arity = handler.arity
            args = self._decode_arguments(command, handler, envelope)
        except DispatchError as e:
            logger.warning("dispatch failed: %s", e)
            return DispatchResult(ok=False, command=e.command or command, arity=arity, error=e)

        try:
            handler(*args)
        except Exception as e:
            err = HandlerExecutionError(
                code="HANDLER_EXECUTION_ERROR",
                message=f"command {command!r} raised {type(e).__name__}: {e}",
                command=command,
                original=e,
            )
            logger.warning("dispatch failed: %s", err, exc_info=e)
            return DispatchResult(ok=False, command=command, arity=arity, error=err)

        logger.debug("executed command %s with %d parameter(s)", command, arity)
        return DispatchResult(ok=True, command=command, arity=arity)

    def dispatch_many(self, lines: Iterable[str]) -> list[DispatchResult]:
        return [self.dispatch(line) for line in lines if line.strip()]

    def _parse(self, raw_message: str | None) -> Envelope:
        if not raw_message:
            raise EmptyMessageError(code="EMPTY_MESSAGE", message="message is empty")
        if not looks_like_json(raw_message):
            raise MalformedJsonError(
                code="MALFORMED_JSON",
                message=f"not a JSON object or array: {preview(raw_message.strip(), self.preview_chars)!r}",
            )
        envelope = parse_envelope(raw_message, schemas=self.schemas)
        if not envelope.command:
            raise MissingCommandNameError(code="MISSING_COMMAND_NAME", message="command name is missing")
        return envelope

    def _decode_arguments(self, command: str, handler: Handler, envelope: Envelope) -> list[Any]:
        slots = _SLOTS_BY_ARITY.get(handler.arity)
        if slots is None:
            raise UnsupportedArityError(
                code="UNSUPPORTED_ARITY",
                message=f"commands take at most {MAX_ARITY} parameters, {command!r} declares {handler.arity}",
                command=command,
            )
        # every payload must be present before anything is decoded
        for slot in slots:
            if not envelope.payload(slot):
                raise MissingArgumentError(
                    code="MISSING_ARGUMENT",
                    message=f"command {command!r} expects {handler.arity} parameter(s); {slot!r} is missing",
                    command=command,
                    slot=slot,
                )
        args: list[Any] = []
        for slot, descriptor in zip(slots, handler.param_types):
            raw = envelope.payload(slot)
            try:
                args.append(self.decoder.decode(raw, descriptor))
            except DecodeError as e:
                raise ArgumentDecodeError(
                    code="ARGUMENT_DECODE_ERROR",
                    message=f"{slot} -> {descriptor.name}: {e.message}",
                    command=command,
                    slot=slot,
                    target_type=descriptor.name,
                    raw_payload=preview(raw, self.preview_chars),
                    cause=e,
                ) from e
        return args
