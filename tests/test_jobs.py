from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from study_tracker.config import Settings
from study_tracker.db import Database
from study_tracker.jobs_runner import run_backup, run_job, write_backup_file


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


def _settings(tmp_path) -> Settings:
    return Settings(
        telegram_bot_token="x",
        database_path=tmp_path / "app.db",
        tz="Europe/Lisbon",
        admin_panel_token=None,
        admin_host="127.0.0.1",
        admin_port=8080,
        timer_presets_path=Path("timer_presets.yaml"),
        backup_dir=tmp_path / "backups",
        book_search_url="https://openlibrary.org/search.json",
    )


def test_write_backup_file_layout(tmp_path) -> None:
    path = write_backup_file({"version": 1}, tmp_path, 42, _dt(2026, 2, 11, 9, 5))
    assert path == tmp_path / "2026-02-11" / "user_42_090500.json"
    assert json.loads(path.read_text(encoding="utf-8")) == {"version": 1}


def test_backup_job_writes_one_file_per_user(tmp_path) -> None:
    settings = _settings(tmp_path)
    db = Database(settings.database_path)
    now = _dt(2026, 2, 11)
    for user_id in (1, 2):
        db.upsert_user_profile(user_id=user_id, chat_id=user_id * 10, seen_at=now)
    db.save_daily_goal(2, 45)

    records = run_backup(db, settings, now)

    assert sorted(r.user_id for r in records) == [1, 2]
    payload = json.loads(next(r.path for r in records if r.user_id == 2).read_text(encoding="utf-8"))
    assert payload["dailyGoal"] == "45"
    assert db.restore_backup(3, payload) is True
    assert db.get_daily_goal(3) == 45


def test_unknown_job_exits(tmp_path) -> None:
    settings = _settings(tmp_path)
    with pytest.raises(SystemExit):
        run_job("nope", Database(settings.database_path), settings)
