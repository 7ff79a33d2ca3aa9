from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from study_tracker.config import load_settings
from study_tracker.db import Database
from study_tracker.jobs_runner import JOB_NAMES, run_job
from study_tracker.logging_setup import setup_logging


def main() -> None:
    if len(sys.argv) != 2:
        raise SystemExit(f"Usage: python jobs.py <{'|'.join(JOB_NAMES)}>")

    setup_logging()
    settings = load_settings(require_token=False)
    db = Database(settings.database_path, tz=settings.tz)
    run_job(sys.argv[1], db, settings)


if __name__ == "__main__":
    main()
