from __future__ import annotations

from pathlib import Path

import pytest

from study_tracker.config import DEFAULT_BOOK_SEARCH_URL, load_settings
from study_tracker.minutes import MinutesParseError, coerce_minutes, parse_minutes
from study_tracker.timer_presets import TimerPresets, load_timer_presets

ENV_KEYS = (
    "TELEGRAM_BOT_TOKEN",
    "DATABASE_PATH",
    "TZ",
    "ADMIN_PANEL_TOKEN",
    "ADMIN_HOST",
    "ADMIN_PORT",
    "TIMER_PRESETS",
    "BACKUP_DIR",
    "BOOK_SEARCH_URL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        # register an undo so values loaded from .env are removed afterwards
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


def test_settings_defaults(clean_env) -> None:
    settings = load_settings(require_token=False)
    assert settings.telegram_bot_token == ""
    assert settings.database_path == Path("./data/app.db")
    assert settings.tz == "Europe/Lisbon"
    assert settings.admin_panel_token is None
    assert settings.admin_port == 8080
    assert settings.timer_presets_path == Path("./timer_presets.yaml")
    assert settings.backup_dir == Path("./data/backups")
    assert settings.book_search_url == DEFAULT_BOOK_SEARCH_URL


def test_token_is_required_for_the_bot(clean_env) -> None:
    with pytest.raises(RuntimeError):
        load_settings()


def test_env_file_is_loaded_but_env_wins(clean_env, tmp_path) -> None:
    (tmp_path / ".env").write_text(
        "# comment\nTELEGRAM_BOT_TOKEN='abc'\nTZ=Europe/Oslo\nADMIN_PORT=notaport\n",
        encoding="utf-8",
    )
    clean_env.setenv("TZ", "Asia/Tokyo")

    settings = load_settings()
    assert settings.telegram_bot_token == "abc"
    assert settings.tz == "Asia/Tokyo"
    assert settings.admin_port == 8080


def test_timer_presets_from_yaml(tmp_path) -> None:
    path = tmp_path / "presets.yaml"
    path.write_text("study_minutes: 50\nbreak_minutes: 10\ndaily_goal_minutes: 240\n", encoding="utf-8")
    assert load_timer_presets(path) == TimerPresets(study_minutes=50, break_minutes=10, daily_goal_minutes=240)


def test_timer_presets_fallbacks(tmp_path) -> None:
    assert load_timer_presets(tmp_path / "missing.yaml") == TimerPresets()

    broken = tmp_path / "broken.yaml"
    broken.write_text("study_minutes: [1, 2\n", encoding="utf-8")
    assert load_timer_presets(broken) == TimerPresets()

    odd = tmp_path / "odd.yaml"
    odd.write_text("study_minutes: soon\nbreak_minutes: 0\n", encoding="utf-8")
    presets = load_timer_presets(odd)
    assert presets.study_minutes == 25
    assert presets.break_minutes == 1
    assert presets.daily_goal_minutes == 120


def test_parse_minutes() -> None:
    assert parse_minutes("25") == 25
    assert parse_minutes("50m") == 50
    assert parse_minutes(" 90 min ") == 90
    for raw in ("", "abc", "0", "-5", "1.5"):
        with pytest.raises(MinutesParseError):
            parse_minutes(raw)


def test_coerce_minutes() -> None:
    assert coerce_minutes(None) == 1
    assert coerce_minutes("") == 1
    assert coerce_minutes(0) == 1
    assert coerce_minutes(-10) == 1
    assert coerce_minutes("45") == 45
