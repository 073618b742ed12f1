"""Tests for the cron refresh script.

The script lives in scripts/, so it is imported by putting that directory on sys.path.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

_scripts_dir = str(Path(__file__).resolve().parent.parent / "scripts")
if _scripts_dir not in sys.path:
    sys.path.insert(0, _scripts_dir)

import run_scheduled_update  # noqa: E402

from tmsync.sync import CatalogSync  # noqa: E402


@pytest.fixture
def fake_sync(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    sync = MagicMock()
    sync.update_all_data.return_value = {"player": 2, "team": 1, "competition": 0}
    monkeypatch.setattr(CatalogSync, "from_settings", lambda settings: sync)
    return sync


def _run(monkeypatch, *argv) -> int:
    monkeypatch.setattr(sys, "argv", ["run_scheduled_update.py", *argv])
    return run_scheduled_update.main()


def test_state_round_trip(tmp_path):
    state = tmp_path / "state" / "last.json"
    when = datetime(2026, 5, 1, 8, 30, tzinfo=timezone.utc)

    run_scheduled_update._write_last_run(state, when, {"player": 1})

    assert run_scheduled_update._read_last_run(state) == when


def test_naive_state_timestamp_is_utc(tmp_path):
    state = tmp_path / "last.json"
    state.write_text(json.dumps({"last_run": "2026-10-01T00:00:00"}))
    assert run_scheduled_update._read_last_run(state) == datetime(2026, 10, 1, tzinfo=timezone.utc)


def test_unreadable_state_is_ignored(tmp_path):
    state = tmp_path / "last.json"
    state.write_text("not json")
    assert run_scheduled_update._read_last_run(state) is None


def test_first_run_updates_and_records(monkeypatch, tmp_path, fake_sync):
    fake_sync.is_update_due.return_value = True
    state = tmp_path / "last.json"

    assert _run(monkeypatch, "--state", str(state)) == 0

    fake_sync.update_all_data.assert_called_once()
    fake_sync.close.assert_called_once()
    with open(state) as f:
        recorded = json.load(f)
    assert recorded["counts"] == {"player": 2, "team": 1, "competition": 0}


def test_not_due_skips_update(monkeypatch, tmp_path, fake_sync):
    fake_sync.is_update_due.return_value = False
    state = tmp_path / "last.json"
    run_scheduled_update._write_last_run(state, datetime.now(timezone.utc) - timedelta(minutes=5), {})

    assert _run(monkeypatch, "--state", str(state)) == 0

    fake_sync.update_all_data.assert_not_called()


def test_force_ignores_schedule(monkeypatch, tmp_path, fake_sync):
    fake_sync.is_update_due.return_value = False

    assert _run(monkeypatch, "--state", str(tmp_path / "last.json"), "--force") == 0

    fake_sync.update_all_data.assert_called_once()
