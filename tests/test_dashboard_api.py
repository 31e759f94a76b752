from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from qwacks.commands.dispatch_log import DispatchLog
from qwacks.commands.dispatcher import Dispatcher
from qwacks.commands.registry import CommandRegistry

pytest.importorskip("fastapi")


def seed_log(path: Path) -> None:
    reg = CommandRegistry()
    reg.register("AwardPoints", lambda points: None, [int])
    dispatcher = Dispatcher(reg)
    log = DispatchLog(path)
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    for raw in [
        '{"command": "AwardPoints", "parameters": "10"}',
        '{"command": "AwardPoints", "parameters": "ten"}',
        '{"command": "Unknown"}',
        '{"command": "AwardPoints"}',
    ]:
        log.record(dispatcher.dispatch(raw), now=now)


def test_dashboard_endpoints(tmp_path: Path):
    from fastapi.testclient import TestClient

    from qwacks.dashboard.app import create_app

    log_path = tmp_path / "dispatch.jsonl"
    seed_log(log_path)
    client = TestClient(create_app(dispatch_log=log_path))

    assert client.get("/").status_code == 200

    page = client.get("/api/dispatches?limit=2&offset=0").json()
    assert page["total"] == 4
    assert len(page["items"]) == 2

    failures = client.get("/api/dispatches?include_ok=false").json()
    assert failures["total"] == 3

    decode = client.get("/api/dispatches?code=ARGUMENT_DECODE_ERROR").json()
    assert decode["items"][0]["details"]["slot"] == "parameters"

    by_command = client.get("/api/dispatches?command=Unknown").json()
    assert by_command["total"] == 1

    stats = client.get("/api/dispatches/stats").json()
    assert stats == {
        "total": 4,
        "by_code": {"OK": 1, "ARGUMENT_DECODE_ERROR": 1, "UNKNOWN_COMMAND": 1, "MISSING_ARGUMENT": 1},
    }


def test_dashboard_handles_missing_log(tmp_path: Path):
    from fastapi.testclient import TestClient

    from qwacks.dashboard.app import create_app

    client = TestClient(create_app(dispatch_log=tmp_path / "absent.jsonl"))
    assert client.get("/api/dispatches").json()["total"] == 0
    assert client.get("/api/dispatches/stats").json() == {"total": 0, "by_code": {}}
