from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from jsonschema import ValidationError
from jsonschema.validators import Draft202012Validator

from .errors import SchemaInvalid
from .io import read_json

DEFAULT_SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"

ENVELOPE_SCHEMA = "remote_command.schema.json"
CONFIG_SCHEMA = "dispatcher_config.schema.json"
LOG_ENTRY_SCHEMA = "dispatch_log_entry.schema.json"


@lru_cache(maxsize=None)
def _validator(schema_path: Path) -> Draft202012Validator:
    schema = read_json(schema_path)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


@dataclass(frozen=True)
class SchemaRegistry:
    schemas_base_dir: Path = DEFAULT_SCHEMAS_DIR

    def validate(self, document: object, schema_filename: str) -> None:
        validator = _validator((self.schemas_base_dir / schema_filename).resolve())
        try:
            validator.validate(document)
        except ValidationError as e:
            where = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise SchemaInvalid(code="SCHEMA_INVALID", message=f"{where}: {e.message}") from e
