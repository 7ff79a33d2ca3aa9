from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from study_tracker.config import Settings
from study_tracker.db import Database
from study_tracker.time_utils import now_local

logger = logging.getLogger(__name__)

JOB_NAMES = ("backup",)


@dataclass(frozen=True)
class BackupRecord:
    user_id: int
    path: Path


def write_backup_file(payload: dict[str, Any], backup_dir: Path, user_id: int, now: datetime) -> Path:
    day_dir = backup_dir / now.date().isoformat()
    day_dir.mkdir(parents=True, exist_ok=True)
    path = day_dir / f"user_{user_id}_{now.strftime('%H%M%S')}.json"
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def run_backup(db: Database, settings: Settings, now: datetime | None = None) -> list[BackupRecord]:
    now = now or now_local(settings.tz)
    records: list[BackupRecord] = []
    for profile in db.get_all_user_profiles():
        user_id = int(profile["user_id"])
        try:
            path = write_backup_file(db.create_backup(user_id, now), settings.backup_dir, user_id, now)
        except OSError:
            logger.exception("backup failed for user_id=%s", user_id)
            continue
        records.append(BackupRecord(user_id=user_id, path=path))
        logger.info("wrote backup user_id=%s path=%s", user_id, path)
    return records


def run_job(job_name: str, db: Database, settings: Settings) -> None:
    if job_name == "backup":
        records = run_backup(db, settings)
        logger.info("backup completed: users=%s", len(records))
    else:
        raise SystemExit(f"Unknown job '{job_name}'. Expected one of: {', '.join(JOB_NAMES)}")
