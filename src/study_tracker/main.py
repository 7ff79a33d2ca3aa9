from __future__ import annotations

import asyncio

from study_tracker.config import load_settings
from study_tracker.db import Database
from study_tracker.logging_setup import setup_logging
from study_tracker.telegram_bot import build_application


def run_bot() -> None:
    setup_logging()
    settings = load_settings()
    db = Database(settings.database_path, tz=settings.tz)

    # Python 3.14 does not auto-create a default event loop in main thread.
    try:
        asyncio.get_event_loop()
    except RuntimeError:
        asyncio.set_event_loop(asyncio.new_event_loop())

    application = build_application(settings, db)
    application.run_polling()
