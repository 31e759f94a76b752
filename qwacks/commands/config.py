from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .dispatcher import DEFAULT_PREVIEW_CHARS
from .errors import ConfigInvalid, SchemaInvalid
from .io import read_json
from .schema import CONFIG_SCHEMA, SchemaRegistry


@dataclass(frozen=True)
class DispatcherConfig:
    schema_version: str = "1.0"
    payload_preview_chars: int = DEFAULT_PREVIEW_CHARS
    dispatch_log: Path = Path("dispatch.jsonl")
    schema_validation_enabled: bool = True


def load_config(config_path: Path, schemas: SchemaRegistry | None = None) -> DispatcherConfig:
    raw = read_json(config_path)
    schemas = schemas or SchemaRegistry()
    try:
        schemas.validate(raw, CONFIG_SCHEMA)
    except SchemaInvalid as e:
        raise ConfigInvalid(code="CONFIG_INVALID", message=f"{config_path}: {e.message}") from e

    schema_validation = raw.get("schema_validation") or {}
    log_path = Path(raw.get("dispatch_log") or "dispatch.jsonl")
    if not log_path.is_absolute():
        log_path = (config_path.parent / log_path).resolve()

    return DispatcherConfig(
        schema_version=str(raw["schema_version"]),
        payload_preview_chars=int(raw.get("payload_preview_chars", DEFAULT_PREVIEW_CHARS)),
        dispatch_log=log_path,
        schema_validation_enabled=bool(schema_validation.get("enabled", True)),
    )
