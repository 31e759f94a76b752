from __future__ import annotations

import json
from dataclasses import dataclass

from .errors import EnvelopeParseError, SchemaInvalid
from .schema import ENVELOPE_SCHEMA, SchemaRegistry

SINGLE_PAYLOAD_FIELD = "parameters"
STRING_FIELDS = ("command", SINGLE_PAYLOAD_FIELD, "param1", "param2")


@dataclass(frozen=True)
class Envelope:
    raw: dict

    @property
    def command(self) -> str | None:
        return self.raw.get("command")

    @property
    def single_payload(self) -> str | None:
        return self.raw.get(SINGLE_PAYLOAD_FIELD)

    @property
    def param1(self) -> str | None:
        return self.raw.get("param1")

    @property
    def param2(self) -> str | None:
        return self.raw.get("param2")

    def payload(self, slot: str) -> str | None:
        return self.raw.get(slot)


def looks_like_json(text: str) -> bool:
    """Shallow check that the outer delimiters of a JSON root are present."""
    stripped = text.strip()
    if not stripped:
        return False
    return (stripped.startswith("{") and stripped.endswith("}")) or (
        stripped.startswith("[") and stripped.endswith("]")
    )


def parse_envelope(text: str, *, schemas: SchemaRegistry | None = None) -> Envelope:
    try:
        obj = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise EnvelopeParseError(code="ENVELOPE_PARSE_ERROR", message=str(e)) from e

    if schemas is not None:
        try:
            schemas.validate(obj, ENVELOPE_SCHEMA)
        except SchemaInvalid as e:
            raise EnvelopeParseError(code="ENVELOPE_PARSE_ERROR", message=e.message) from e
        return Envelope(raw=obj)

    if not isinstance(obj, dict):
        raise EnvelopeParseError(
            code="ENVELOPE_PARSE_ERROR",
            message=f"envelope root must be an object, got {type(obj).__name__}",
        )
    for key in STRING_FIELDS:
        value = obj.get(key)
        if value is not None and not isinstance(value, str):
            raise EnvelopeParseError(
                code="ENVELOPE_PARSE_ERROR",
                message=f"{key}: expected string, got {type(value).__name__}",
            )
    return Envelope(raw=obj)
