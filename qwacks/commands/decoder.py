from __future__ import annotations

import json
import math
import re
from typing import Any, Callable

from .errors import BoolFormatError, DecodeError, NumberFormatError, StructureParseError
from .types import FieldSpec, Record, TypeDescriptor

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_QUOTES = ('"', "'")

CustomDecoder = Callable[[str, TypeDescriptor], Any]


def strip_quotes(text: str) -> str:
    """Remove one layer of matching surrounding quotes, if any."""
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


def decode_int(raw: str, descriptor: TypeDescriptor) -> int:
    cleaned = strip_quotes(raw.strip())
    if not _INT_RE.fullmatch(cleaned):
        raise NumberFormatError(
            code="NUMBER_FORMAT",
            message=f"invalid integer literal: {cleaned!r}",
            target_type=descriptor.name,
            raw_payload=raw,
        )
    return int(cleaned)


def decode_float(raw: str, descriptor: TypeDescriptor) -> float:
    cleaned = strip_quotes(raw.strip())
    if not _FLOAT_RE.fullmatch(cleaned):
        raise NumberFormatError(
            code="NUMBER_FORMAT",
            message=f"invalid number literal: {cleaned!r}",
            target_type=descriptor.name,
            raw_payload=raw,
        )
    value = float(cleaned)
    if not math.isfinite(value):
        raise NumberFormatError(
            code="NUMBER_FORMAT",
            message=f"number out of range: {cleaned!r}",
            target_type=descriptor.name,
            raw_payload=raw,
        )
    return value


def decode_bool(raw: str, descriptor: TypeDescriptor) -> bool:
    cleaned = strip_quotes(raw.strip()).lower()
    if cleaned == "true":
        return True
    if cleaned == "false":
        return False
    raise BoolFormatError(
        code="BOOL_FORMAT",
        message=f"expected true or false, got {cleaned!r}",
        target_type=descriptor.name,
        raw_payload=raw,
    )


def decode_string(raw: str, descriptor: TypeDescriptor) -> str:
    return strip_quotes(raw)


def _structure_error(descriptor: TypeDescriptor, raw: str, message: str) -> StructureParseError:
    return StructureParseError(
        code="STRUCTURE_PARSE",
        message=message,
        target_type=descriptor.name,
        raw_payload=raw,
    )


def _coerce_field(spec: FieldSpec, value: Any) -> Any:
    if spec.kind == "string":
        if isinstance(value, str):
            return value
    elif spec.kind == "bool":
        if isinstance(value, bool):
            return value
    elif isinstance(value, bool):
        pass
    elif spec.kind == "int":
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif spec.kind == "float":
        if isinstance(value, (int, float)) and math.isfinite(value):
            return float(value)
    raise ValueError(f"field {spec.name!r} expects {spec.kind}, got {type(value).__name__}")


def decode_record(raw: str, descriptor: TypeDescriptor) -> Any:
    try:
        obj = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise _structure_error(descriptor, raw, f"invalid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise _structure_error(descriptor, raw, f"expected a JSON object, got {type(obj).__name__}")

    values = descriptor.defaults()
    for spec in descriptor.fields:
        if spec.name not in obj or obj[spec.name] is None:
            continue
        try:
            values[spec.name] = _coerce_field(spec, obj[spec.name])
        except ValueError as e:
            raise _structure_error(descriptor, raw, str(e)) from e

    if descriptor.factory is None:
        return Record(descriptor.name, values)
    try:
        return descriptor.factory(**values)
    except Exception as e:
        raise _structure_error(descriptor, raw, f"{descriptor.name} rejected fields: {e}") from e


_BUILTIN: dict[str, CustomDecoder] = {
    "int": decode_int,
    "float": decode_float,
    "bool": decode_bool,
    "string": decode_string,
    "record": decode_record,
}

_FAILURE_BY_KIND: dict[str, tuple[type[DecodeError], str]] = {
    "int": (NumberFormatError, "NUMBER_FORMAT"),
    "float": (NumberFormatError, "NUMBER_FORMAT"),
    "bool": (BoolFormatError, "BOOL_FORMAT"),
}


class PayloadDecoder:
    """Type-directed payload decoding.

    Decoders registered for a descriptor name take precedence over the
    built-in decoder for the descriptor's kind. Whatever a decoder raises is
    normalized to a ``DecodeError`` subclass.
    """

    def __init__(self, custom: dict[str, CustomDecoder] | None = None):
        self._custom: dict[str, CustomDecoder] = dict(custom or {})

    def register(self, type_name: str, fn: CustomDecoder) -> None:
        self._custom[type_name] = fn

    def decode(self, raw: str, descriptor: TypeDescriptor) -> Any:
        fn = self._custom.get(descriptor.name) or _BUILTIN[descriptor.kind]
        try:
            return fn(raw, descriptor)
        except DecodeError:
            raise
        except Exception as e:
            error_cls, code = _FAILURE_BY_KIND.get(descriptor.kind, (StructureParseError, "STRUCTURE_PARSE"))
            raise error_cls(code=code, message=str(e), target_type=descriptor.name, raw_payload=raw) from e
