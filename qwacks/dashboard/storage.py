from __future__ import annotations

from typing import Any


def paginate(items: list[Any], *, offset: int, limit: int) -> dict:
    total = len(items)
    offset = max(0, offset)
    limit = max(1, min(limit, 500))
    sliced = items[offset : offset + limit]
    return {"total": total, "offset": offset, "limit": limit, "items": sliced}


def filter_entries(
    entries: list[dict],
    *,
    command: str | None = None,
    code: str | None = None,
    include_ok: bool = True,
) -> list[dict]:
    rows = entries
    if command:
        rows = [r for r in rows if r.get("command") == command]
    if code:
        rows = [r for r in rows if r.get("code") == code]
    if not include_ok:
        rows = [r for r in rows if not r.get("ok")]
    return rows
