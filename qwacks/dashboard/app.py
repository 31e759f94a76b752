from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse

from qwacks.commands.dispatch_log import DispatchLog, count_by_code

from .storage import filter_entries, paginate


def create_app(*, dispatch_log: Path) -> FastAPI:
    log = DispatchLog(path=dispatch_log)
    app = FastAPI(title="Qwacks Dispatch Dashboard API", version="0.1.0")

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return """
<!doctype html>
<html>
  <head><meta charset="utf-8"/><title>Qwacks Dispatch Dashboard</title></head>
  <body>
    <h1>Qwacks Dispatch Dashboard</h1>
    <p>API: <a href="/api/dispatches">/api/dispatches</a>, <a href="/api/dispatches/stats">/api/dispatches/stats</a></p>
  </body>
</html>
"""

    @app.get("/api/dispatches")
    def list_dispatches(
        offset: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=500),
        command: str | None = None,
        code: str | None = None,
        include_ok: bool = True,
    ) -> dict:
        rows = filter_entries(log.read_entries(), command=command, code=code, include_ok=include_ok)
        return paginate(rows, offset=offset, limit=limit)

    @app.get("/api/dispatches/stats")
    def dispatch_stats() -> dict:
        entries = log.read_entries()
        return {"total": len(entries), "by_code": count_by_code(entries)}

    return app
