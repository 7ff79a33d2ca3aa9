from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from study_tracker.admin_app import build_admin_app
from study_tracker.db import Database
from study_tracker.models import Session


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


def _db(tmp_path) -> Database:
    db = Database(tmp_path / "app.db")
    db.upsert_user_profile(user_id=42, chat_id=99, seen_at=_dt(2026, 3, 1))
    now = datetime.now(tz=ZoneInfo("Europe/Lisbon"))
    db.save_sessions(
        42,
        [
            Session(id=i, subject="Math", duration=60, questions=0, correct_questions=0, date=now - timedelta(days=i))
            for i in range(3)
        ],
    )
    return db


def test_requires_token(tmp_path) -> None:
    client = TestClient(build_admin_app(_db(tmp_path), "secret"))
    assert client.get("/api/users").status_code == 401
    assert client.get("/api/users", headers={"x-admin-token": "secret"}).status_code == 200
    assert client.get("/api/users?token=secret").status_code == 200


def test_backup_endpoint(tmp_path) -> None:
    client = TestClient(build_admin_app(_db(tmp_path), None))
    res = client.get("/api/users/42/backup")
    assert res.status_code == 200
    body = res.json()
    assert body["version"] == 1
    assert len(body["sessions"]) == 3


def test_restore_endpoint_rejects_invalid_backup(tmp_path) -> None:
    db = _db(tmp_path)
    client = TestClient(build_admin_app(db, None))
    res = client.post("/api/users/42/restore", json={"backup": {"subjects": "x", "sessions": []}})
    assert res.status_code == 400
    assert len(db.get_sessions(42)) == 3
    assert db.get_revision(42) == 0


def test_restore_endpoint_replaces_data(tmp_path) -> None:
    db = _db(tmp_path)
    client = TestClient(build_admin_app(db, None))
    backup = client.get("/api/users/42/backup").json()

    res = client.post("/api/users/7/restore", json={"backup": backup, "actor": "test"})
    assert res.status_code == 200
    assert res.json() == {"ok": True}
    assert db.get_sessions(7) == db.get_sessions(42)
    assert db.get_revision(7) == 1


def test_profile_endpoint(tmp_path) -> None:
    client = TestClient(build_admin_app(_db(tmp_path), None))
    body = client.get("/api/users/42/profile").json()
    assert body["streak"] == 3
    unlocked = {a["id"] for a in body["achievements"] if a["is_unlocked"]}
    assert unlocked == {"first_step", "iron_focus", "trinity"}
    assert body["unlocked"] == 3
    assert body["rank"] == "Apprentice"
    assert body["next_rank"] == {"title": "Dedicated Student", "needed": 4, "remaining": 1}
    assert body["total_minutes"] == 180
