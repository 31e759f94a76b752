from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from qwacks.commands.config import DispatcherConfig, load_config
from qwacks.commands.dispatch_log import DispatchLog, count_by_code, iso_z, log_entry
from qwacks.commands.dispatcher import Dispatcher, DispatchResult
from qwacks.commands.errors import ConfigInvalid, SchemaInvalid
from qwacks.commands.io import atomic_write_json
from qwacks.commands.registry import CommandRegistry
from qwacks.commands.schema import ENVELOPE_SCHEMA, LOG_ENTRY_SCHEMA, SchemaRegistry


def test_load_config_resolves_log_path(tmp_path: Path):
    cfg_path = tmp_path / "dispatcher_config.json"
    atomic_write_json(
        cfg_path,
        {
            "schema_version": "1.0",
            "payload_preview_chars": 32,
            "dispatch_log": "logs/dispatch.jsonl",
            "schema_validation": {"enabled": False},
        },
    )
    cfg = load_config(cfg_path)
    assert cfg.payload_preview_chars == 32
    assert cfg.dispatch_log == (tmp_path / "logs" / "dispatch.jsonl").resolve()
    assert cfg.schema_validation_enabled is False


def test_load_config_defaults(tmp_path: Path):
    cfg_path = tmp_path / "dispatcher_config.json"
    atomic_write_json(cfg_path, {"schema_version": "1.0"})
    cfg = load_config(cfg_path)
    assert cfg.payload_preview_chars == DispatcherConfig().payload_preview_chars
    assert cfg.dispatch_log.name == "dispatch.jsonl"
    assert cfg.schema_validation_enabled is True


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"schema_version": "1.0", "payload_preview_chars": "64"},
        {"schema_version": "1.0", "unknown": 1},
    ],
)
def test_load_config_rejects_invalid(tmp_path: Path, raw: dict):
    cfg_path = tmp_path / "dispatcher_config.json"
    atomic_write_json(cfg_path, raw)
    with pytest.raises(ConfigInvalid) as excinfo:
        load_config(cfg_path)
    assert excinfo.value.code == "CONFIG_INVALID"


def test_envelope_schema_allows_extra_fields_and_rejects_numbers():
    schemas = SchemaRegistry()
    schemas.validate({"command": "A", "sender": {"id": 1}}, ENVELOPE_SCHEMA)
    with pytest.raises(SchemaInvalid, match="param1"):
        schemas.validate({"command": "A", "param1": 3}, ENVELOPE_SCHEMA)


def test_dispatch_log_records_results(tmp_path: Path):
    reg = CommandRegistry()
    reg.register("ShowStatus", lambda: None)
    dispatcher = Dispatcher(reg)
    log = DispatchLog(tmp_path / "dispatch.jsonl")
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    log.record(dispatcher.dispatch('{"command": "ShowStatus"}'), now=now)
    log.record(dispatcher.dispatch('{"command": "Missing"}'), now=now)
    log.record(dispatcher.dispatch("nope"), now=now)

    entries = log.read_entries()
    assert len(entries) == 3
    assert entries[0]["dispatched_at"] == iso_z(now)
    assert entries[0]["dispatch_id"].startswith("dsp_20260101T000000Z_")
    assert entries[1]["code"] == "UNKNOWN_COMMAND"
    assert entries[1]["command"] == "Missing"
    assert count_by_code(entries) == {"OK": 1, "UNKNOWN_COMMAND": 1, "MALFORMED_JSON": 1}

    schemas = SchemaRegistry()
    for e in entries:
        schemas.validate(e, LOG_ENTRY_SCHEMA)


def test_read_entries_skips_corrupt_lines(tmp_path: Path):
    path = tmp_path / "dispatch.jsonl"
    path.write_text('{"ok": true}\nnot json\n\n', encoding="utf-8")
    assert DispatchLog(path).read_entries() == [{"ok": True}]


def test_log_entry_without_clock_has_timestamp():
    reg = CommandRegistry()
    entry = log_entry(Dispatcher(reg).dispatch(""))
    assert entry["code"] == "EMPTY_MESSAGE"
    assert entry["dispatched_at"].endswith("Z")


def test_dispatch_log_validates_entries_before_writing(tmp_path: Path):
    path = tmp_path / "dispatch.jsonl"
    log = DispatchLog(path, schemas=SchemaRegistry())
    reg = CommandRegistry()
    reg.register("ShowStatus", lambda: None)

    entry = log.record(Dispatcher(reg).dispatch('{"command": "ShowStatus"}'))
    assert entry["ok"] is True

    with pytest.raises(SchemaInvalid):
        log.record(DispatchResult(ok="yes"))  # type: ignore[arg-type]
    assert len(log.read_entries()) == 1
