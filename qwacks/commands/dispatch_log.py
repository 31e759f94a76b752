from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from .dispatcher import DispatchResult
from .io import atomic_write_bytes
from .schema import LOG_ENTRY_SCHEMA, SchemaRegistry


def iso_z(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def new_dispatch_id(now: datetime) -> str:
    return f"dsp_{now.strftime('%Y%m%dT%H%M%SZ')}_{uuid4().hex[:8]}"


def log_entry(result: DispatchResult, *, now: datetime | None = None) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    entry: dict[str, Any] = {
        "schema_version": "1.0",
        "dispatch_id": new_dispatch_id(now),
        "dispatched_at": iso_z(now),
    }
    entry.update(result.to_dict())
    return entry


@dataclass(frozen=True)
class DispatchLog:
    path: Path
    schemas: SchemaRegistry | None = None

    def append(self, entry: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry, ensure_ascii=False) + "\n"
        if not self.path.exists():
            atomic_write_bytes(self.path, line.encode("utf-8"))
            return
        with self.path.open("ab") as f:
            f.write(line.encode("utf-8"))

    def record(self, result: DispatchResult, *, now: datetime | None = None) -> dict[str, Any]:
        entry = log_entry(result, now=now)
        if self.schemas is not None:
            self.schemas.validate(entry, LOG_ENTRY_SCHEMA)
        self.append(entry)
        return entry

    def read_entries(self) -> list[dict]:
        if not self.path.exists():
            return []
        entries: list[dict] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            try:
                entries.append(json.loads(line))
            except ValueError:
                continue
        return entries


def count_by_code(entries: list[dict]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for e in entries:
        key = "OK" if e.get("ok") else str(e.get("code") or "UNKNOWN")
        counts[key] = counts.get(key, 0) + 1
    return counts
