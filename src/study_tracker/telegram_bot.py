from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    Job,
    JobQueue,
    MessageHandler,
    filters,
)

from study_tracker.config import Settings
from study_tracker.db import Database
from study_tracker.i18n import normalize_language_code, t
from study_tracker.library import BookSearchError, DuplicateBookError, search_book
from study_tracker.messages import (
    calendar_message,
    goal_message,
    help_message,
    library_message,
    profile_message,
    session_recorded_message,
    stats_message,
    streak_message,
    subjects_message,
    timer_event_message,
    timer_message,
)
from study_tracker.minutes import MinutesParseError, parse_minutes
from study_tracker.models import BACKGROUND_MODES, COLOR_MODES, Chapter, Subject, Task
from study_tracker.notifications import Permission
from study_tracker.service import StudyController
from study_tracker.stats import month_view, today_progress
from study_tracker.subjects import (
    SubjectCatalogError,
    add_chapter,
    add_task,
    delete_chapter,
    delete_task,
    find_chapter,
    find_subject,
    rename_chapter,
    rename_task,
    task_at,
    toggle_task,
)
from study_tracker.time_utils import now_local
from study_tracker.timer import SubjectRequiredError, TimerEngine, TimerEvent
from study_tracker.timer_presets import TimerPresets, load_timer_presets

logger = logging.getLogger(__name__)

HEX_COLOR_CHARS = set("0123456789abcdefABCDEF")


class _JobHandle:
    def __init__(self, job: Job) -> None:
        self._job = job
        self._cancelled = False

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._job.schedule_removal()


class JobQueueScheduler:
    """Recurring tick source backed by the application's JobQueue."""

    def __init__(self, job_queue: JobQueue, name: str) -> None:
        self._job_queue = job_queue
        self._name = name

    def schedule(self, callback: Callable[[], None], interval: float) -> _JobHandle:
        async def _run(_: ContextTypes.DEFAULT_TYPE) -> None:
            callback()

        job = self._job_queue.run_repeating(_run, interval=interval, first=interval, name=self._name)
        return _JobHandle(job)


class TelegramNotifier:
    permission: Permission = "granted"

    def __init__(self, application: Application, chat_id: int) -> None:
        self._application = application
        self._chat_id = chat_id

    def request_permission(self) -> None:
        return None

    def notify(self, title: str, body: str) -> None:
        self._application.create_task(self._application.bot.send_message(self._chat_id, f"{title}\n{body}"))


def _db(context: ContextTypes.DEFAULT_TYPE) -> Database:
    db = context.application.bot_data.get("db")
    assert isinstance(db, Database)
    return db


def _settings(context: ContextTypes.DEFAULT_TYPE) -> Settings:
    settings = context.application.bot_data.get("settings")
    assert isinstance(settings, Settings)
    return settings


def _presets(context: ContextTypes.DEFAULT_TYPE) -> TimerPresets:
    presets = context.application.bot_data.get("presets")
    return presets if isinstance(presets, TimerPresets) else TimerPresets()


def _touch_user(update: Update, context: ContextTypes.DEFAULT_TYPE) -> tuple[int, int, datetime]:
    assert update.effective_user is not None
    assert update.effective_chat is not None
    user_id = update.effective_user.id
    chat_id = update.effective_chat.id
    now = now_local(_settings(context).tz)
    _db(context).upsert_user_profile(user_id=user_id, chat_id=chat_id, seen_at=now)
    return user_id, chat_id, now


def _controller(update: Update, context: ContextTypes.DEFAULT_TYPE) -> tuple[StudyController, datetime]:
    user_id, chat_id, now = _touch_user(update, context)
    controllers: dict[int, StudyController] = context.application.bot_data.setdefault("controllers", {})
    controller = controllers.get(user_id)
    if controller is None:
        controller = StudyController(_db(context), user_id, presets=_presets(context))
        _attach_timer(controller, context.application, chat_id, _settings(context).tz)
        controllers[user_id] = controller
    else:
        controller.sync()
    return controller, now


def _attach_timer(controller: StudyController, application: Application, chat_id: int, tz: str) -> TimerEngine:
    assert application.job_queue is not None

    def _on_event(event: TimerEvent) -> None:
        text = timer_event_message(event, controller.state.language)
        if text:
            application.create_task(application.bot.send_message(chat_id, text, disable_notification=True))

    return controller.attach_timer(
        JobQueueScheduler(application.job_queue, name=f"timer:{controller.user_id}"),
        notifier=TelegramNotifier(application, chat_id),
        clock=lambda: now_local(tz),
        on_event=_on_event,
    )


def _timer(controller: StudyController) -> TimerEngine:
    assert controller.timer is not None
    return controller.timer


def _arg_text(context: ContextTypes.DEFAULT_TYPE) -> str:
    return " ".join(context.args or []).strip()


def _pipe_args(context: ContextTypes.DEFAULT_TYPE) -> list[str]:
    return [part.strip() for part in _arg_text(context).split("|")]


async def _reply(update: Update, text: str, **kwargs: object) -> None:
    assert update.effective_message is not None
    await update.effective_message.reply_text(text, **kwargs)


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    await _reply(update, help_message(controller.state.language))


async def cmd_subjects(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_subject_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    try:
        subject = controller.add_subject(_arg_text(context), now)
    except SubjectCatalogError as exc:
        await _reply(update, f"{exc}. Usage: /subject_add <name>")
        return
    await _reply(update, f"Added subject {subject.name} ({subject.color})")


async def cmd_subject_del(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    subject = find_subject(controller.state.subjects, _arg_text(context))
    if subject is None:
        await _reply(update, "Subject not found. Usage: /subject_del <name>")
        return
    controller.delete_subject(subject.id)
    await _reply(update, f"Deleted subject {subject.name}. Its sessions are kept in the history.")


async def cmd_chapter_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    parts = _pipe_args(context)
    subject = find_subject(controller.state.subjects, parts[0])
    if subject is None or len(parts) != 2:
        await _reply(update, "Usage: /chapter_add <subject> | <chapter>")
        return
    controller.save_subjects(add_chapter(controller.state.subjects, subject.id, now, name=parts[1]))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_chapter_rename(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    parts = _pipe_args(context)
    subject = find_subject(controller.state.subjects, parts[0])
    chapter = find_chapter(subject, parts[1]) if subject is not None and len(parts) == 3 else None
    if subject is None or chapter is None or not parts[2]:
        await _reply(update, "Usage: /chapter_rename <subject> | <chapter> | <new name>")
        return
    controller.save_subjects(rename_chapter(controller.state.subjects, subject.id, chapter.id, parts[2]))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_chapter_del(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    parts = _pipe_args(context)
    subject = find_subject(controller.state.subjects, parts[0])
    chapter = find_chapter(subject, parts[1]) if subject is not None and len(parts) == 2 else None
    if subject is None or chapter is None:
        await _reply(update, "Usage: /chapter_del <subject> | <chapter>")
        return
    controller.save_subjects(delete_chapter(controller.state.subjects, subject.id, chapter.id))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_task_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    parts = _pipe_args(context)
    subject = find_subject(controller.state.subjects, parts[0])
    if subject is None or len(parts) != 3:
        await _reply(update, "Usage: /task_add <subject> | <chapter> | <task>")
        return
    chapter = find_chapter(subject, parts[1])
    if chapter is None:
        await _reply(update, f"Chapter '{parts[1]}' not found in {subject.name}")
        return
    controller.save_subjects(add_task(controller.state.subjects, subject.id, chapter.id, now, name=parts[2]))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


def _resolve_task(controller: StudyController, parts: list[str]) -> tuple[Subject, Chapter, Task] | None:
    if len(parts) < 3:
        return None
    subject = find_subject(controller.state.subjects, parts[0])
    chapter = find_chapter(subject, parts[1]) if subject is not None else None
    task = task_at(chapter, parts[2]) if chapter is not None else None
    if subject is None or chapter is None or task is None:
        return None
    return subject, chapter, task


async def cmd_task_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    parts = _pipe_args(context)
    found = _resolve_task(controller, parts) if len(parts) == 3 else None
    if found is None:
        await _reply(update, "Usage: /task_done <subject> | <chapter> | <task number>")
        return
    subject, chapter, task = found
    controller.save_subjects(toggle_task(controller.state.subjects, subject.id, chapter.id, task.id))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_task_rename(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    parts = _pipe_args(context)
    found = _resolve_task(controller, parts) if len(parts) == 4 and parts[3] else None
    if found is None:
        await _reply(update, "Usage: /task_rename <subject> | <chapter> | <task number> | <new name>")
        return
    subject, chapter, task = found
    controller.save_subjects(rename_task(controller.state.subjects, subject.id, chapter.id, task.id, parts[3]))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_task_del(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    parts = _pipe_args(context)
    found = _resolve_task(controller, parts) if len(parts) == 3 else None
    if found is None:
        await _reply(update, "Usage: /task_del <subject> | <chapter> | <task number>")
        return
    subject, chapter, task = found
    controller.save_subjects(delete_task(controller.state.subjects, subject.id, chapter.id, task.id))
    await _reply(update, subjects_message(controller.state.subjects, controller.state.language))


async def cmd_pick(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    subject = find_subject(controller.state.subjects, _arg_text(context))
    if subject is None:
        await _reply(update, t("select_subject", controller.state.language))
        return
    if not _timer(controller).select_subject(subject.name):
        await _reply(update, "Pause the timer before switching subjects")
        return
    await _reply(update, f"Subject: {subject.name}")


async def _set_minutes(update: Update, context: ContextTypes.DEFAULT_TYPE, phase: str) -> None:
    controller, _ = _controller(update, context)
    engine = _timer(controller)
    try:
        minutes = parse_minutes(_arg_text(context))
    except MinutesParseError as exc:
        await _reply(update, f"{exc}. Example: /{phase} 25")
        return

    if phase == "study":
        engine.set_study_minutes(minutes)
        minutes = engine.commit_study_minutes()
    else:
        engine.set_break_minutes(minutes)
        minutes = engine.commit_break_minutes()
    suffix = " (applies to the next phase)" if engine.is_running else ""
    await _reply(update, f"{phase.capitalize()} length set to {minutes} min{suffix}")


async def cmd_study(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _set_minutes(update, context, "study")


async def cmd_break(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _set_minutes(update, context, "break")


async def cmd_go(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    engine = _timer(controller)
    try:
        engine.start()
    except SubjectRequiredError:
        await _reply(update, t("select_subject", controller.state.language))
        return
    await _reply(update, timer_message(engine, controller.state.language))


async def cmd_pause(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    engine = _timer(controller)
    engine.pause()
    await _reply(update, timer_message(engine, controller.state.language))


async def cmd_stop(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    session = _timer(controller).stop()
    if session is None:
        await _reply(update, "Timer reset")
        return
    await _reply(update, session_recorded_message(session, controller.state.language))


async def cmd_questions(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    args = context.args or []
    if len(args) != 2 or not all(a.isdigit() for a in args):
        await _reply(update, "Usage: /questions <total> <correct>")
        return
    engine = _timer(controller)
    engine.set_questions(int(args[0]), int(args[1]))
    await _reply(update, f"Questions for this session: {engine.correct_questions}/{engine.questions}")


async def cmd_timer(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    lang = controller.state.language
    progress = today_progress(controller.state.sessions, now, controller.state.preferences.daily_goal_minutes)
    await _reply(update, f"{timer_message(_timer(controller), lang)}\n\n{goal_message(progress, lang)}")


async def cmd_streak(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    await _reply(update, streak_message(controller.profile(now), controller.state.language))


async def cmd_achievements(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    await _reply(update, profile_message(controller.profile(now), controller.state.language))


async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    await _reply(update, stats_message(controller.state.sessions, controller.state.language))


async def cmd_calendar(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    raw = _arg_text(context)
    year, month = now.year, now.month
    if raw:
        try:
            parsed = datetime.strptime(raw, "%Y-%m")
        except ValueError:
            await _reply(update, "Usage: /calendar [YYYY-MM]")
            return
        year, month = parsed.year, parsed.month

    days = month_view(
        controller.state.sessions,
        year,
        month,
        controller.state.preferences.daily_goal_minutes,
        now.tzinfo,
    )
    await _reply(update, calendar_message(days, controller.state.language))


async def cmd_goal(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    if context.args:
        try:
            controller.set_daily_goal(parse_minutes(_arg_text(context)))
        except MinutesParseError as exc:
            await _reply(update, f"{exc}. Example: /goal 120")
            return
    progress = today_progress(controller.state.sessions, now, controller.state.preferences.daily_goal_minutes)
    await _reply(update, goal_message(progress, controller.state.language))


async def cmd_library(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    await _reply(update, library_message(controller.state.library, controller.state.language))


async def cmd_book(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    query = _arg_text(context)
    if not query:
        await _reply(update, "Usage: /book <title or author>")
        return
    try:
        book = search_book(query, now, base_url=_settings(context).book_search_url)
        controller.add_book(book)
    except (BookSearchError, DuplicateBookError) as exc:
        await _reply(update, str(exc))
        return
    await _reply(update, f"Added {book.title} by {', '.join(book.authors)}\n{book.thumbnail}")


def _book_index(controller: StudyController, context: ContextTypes.DEFAULT_TYPE) -> int | None:
    raw = _arg_text(context)
    if not raw.isdigit():
        return None
    index = int(raw) - 1
    return index if 0 <= index < len(controller.state.library) else None


async def cmd_book_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    index = _book_index(controller, context)
    if index is None:
        await _reply(update, "Usage: /book_done <number from /library>")
        return
    controller.toggle_book(controller.state.library[index].id)
    await _reply(update, library_message(controller.state.library, controller.state.language))


async def cmd_book_del(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    index = _book_index(controller, context)
    if index is None:
        await _reply(update, "Usage: /book_del <number from /library>")
        return
    controller.remove_book(controller.state.library[index].id)
    await _reply(update, library_message(controller.state.library, controller.state.language))


async def cmd_volume(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    raw = _arg_text(context).rstrip("%")
    if not raw:
        await _reply(update, f"Volume: {round(controller.state.preferences.volume * 100)}%")
        return
    if not raw.isdigit():
        await _reply(update, "Usage: /volume <0-100>")
        return
    controller.set_volume(int(raw) / 100)
    await _reply(update, f"Volume set to {round(controller.state.preferences.volume * 100)}%")


async def cmd_notify(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    raw = _arg_text(context).lower()
    if raw not in {"on", "off"}:
        state = "on" if controller.state.preferences.notifications_enabled else "off"
        await _reply(update, f"Notifications are {state}. Usage: /notify on|off")
        return
    controller.set_notifications(raw == "on")
    await _reply(update, f"Notifications {raw}")


async def cmd_color(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    raw = _arg_text(context)
    if len(raw) != 7 or not raw.startswith("#") or not set(raw[1:]) <= HEX_COLOR_CHARS:
        await _reply(update, f"Primary color: {controller.state.preferences.primary_color}. Usage: /color #rrggbb")
        return
    controller.set_primary_color(raw.lower())
    await _reply(update, f"Primary color set to {raw.lower()}")


async def cmd_colormode(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    raw = _arg_text(context).lower()
    if not raw:
        current = controller.state.preferences.color_mode
        raw = COLOR_MODES[(COLOR_MODES.index(current) + 1) % len(COLOR_MODES)]
    try:
        controller.set_color_mode(raw)
    except ValueError:
        await _reply(update, f"Usage: /colormode [{'|'.join(COLOR_MODES)}]")
        return
    await _reply(update, f"Color mode: {raw}. New subjects use this palette.")


async def cmd_background(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    raw = _arg_text(context).lower()
    try:
        controller.set_background_mode(raw)
    except ValueError:
        current = controller.state.preferences.background_mode
        await _reply(update, f"Background: {current}. Options: {', '.join(BACKGROUND_MODES)}")
        return
    await _reply(update, f"Background set to {raw}")


async def cmd_lang(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    lang = controller.state.language
    if not context.args:
        await _reply(update, t("lang_show", lang, code=lang))
        return
    raw = context.args[0].strip().lower()
    if raw not in {"en", "pt"}:
        await _reply(update, t("lang_usage", lang))
        return
    controller.set_language(normalize_language_code(raw))
    await _reply(update, t("lang_set", controller.state.language, code=controller.state.language))


async def cmd_backup(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, now = _controller(update, context)
    payload = controller.backup(now)
    assert update.effective_message is not None
    await update.effective_message.reply_document(
        document=json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8"),
        filename=f"study-backup-{now.date().isoformat()}.json",
    )


async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    message = update.effective_message
    assert message is not None and message.document is not None
    lang = controller.state.language
    if not (message.document.file_name or "").lower().endswith(".json"):
        await _reply(update, t("restore_failed", lang))
        return

    if controller.timer is not None and controller.timer.is_running:
        controller.timer.pause()
    tg_file = await message.document.get_file()
    raw = bytes(await tg_file.download_as_bytearray())
    ok = controller.restore(raw)
    await _reply(update, t("restore_ok" if ok else "restore_failed", controller.state.language))


async def cmd_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    keyboard = InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("Yes, delete everything", callback_data="reset:confirm"),
                InlineKeyboardButton("Cancel", callback_data="reset:cancel"),
            ]
        ]
    )
    await _reply(update, t("reset_confirm", controller.state.language), reply_markup=keyboard)


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    assert query is not None
    await query.answer()

    controller, _ = _controller(update, context)
    data = query.data or ""
    if data == "reset:confirm":
        controller.reset()
        await query.edit_message_text(t("reset_done", controller.state.language))
        return
    if data == "reset:cancel":
        await query.edit_message_text("Cancelled")


async def cmd_unknown(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    controller, _ = _controller(update, context)
    await _reply(update, t("unknown_command", controller.state.language))


def build_application(settings: Settings, db: Database) -> Application:
    app = Application.builder().token(settings.telegram_bot_token).build()
    app.bot_data["db"] = db
    app.bot_data["settings"] = settings
    app.bot_data["presets"] = load_timer_presets(settings.timer_presets_path)
    app.bot_data["controllers"] = {}

    app.add_handler(CommandHandler(["start", "help"], cmd_help))
    app.add_handler(CommandHandler("subjects", cmd_subjects))
    app.add_handler(CommandHandler("subject_add", cmd_subject_add))
    app.add_handler(CommandHandler("subject_del", cmd_subject_del))
    app.add_handler(CommandHandler("chapter_add", cmd_chapter_add))
    app.add_handler(CommandHandler("chapter_rename", cmd_chapter_rename))
    app.add_handler(CommandHandler("chapter_del", cmd_chapter_del))
    app.add_handler(CommandHandler("task_add", cmd_task_add))
    app.add_handler(CommandHandler("task_done", cmd_task_done))
    app.add_handler(CommandHandler("task_rename", cmd_task_rename))
    app.add_handler(CommandHandler("task_del", cmd_task_del))
    app.add_handler(CommandHandler("pick", cmd_pick))
    app.add_handler(CommandHandler("study", cmd_study))
    app.add_handler(CommandHandler("break", cmd_break))
    app.add_handler(CommandHandler("go", cmd_go))
    app.add_handler(CommandHandler("pause", cmd_pause))
    app.add_handler(CommandHandler("stop", cmd_stop))
    app.add_handler(CommandHandler("questions", cmd_questions))
    app.add_handler(CommandHandler("timer", cmd_timer))
    app.add_handler(CommandHandler("streak", cmd_streak))
    app.add_handler(CommandHandler("achievements", cmd_achievements))
    app.add_handler(CommandHandler("stats", cmd_stats))
    app.add_handler(CommandHandler("calendar", cmd_calendar))
    app.add_handler(CommandHandler("goal", cmd_goal))
    app.add_handler(CommandHandler("library", cmd_library))
    app.add_handler(CommandHandler("book", cmd_book))
    app.add_handler(CommandHandler("book_done", cmd_book_done))
    app.add_handler(CommandHandler("book_del", cmd_book_del))
    app.add_handler(CommandHandler("volume", cmd_volume))
    app.add_handler(CommandHandler("notify", cmd_notify))
    app.add_handler(CommandHandler("color", cmd_color))
    app.add_handler(CommandHandler("colormode", cmd_colormode))
    app.add_handler(CommandHandler("background", cmd_background))
    app.add_handler(CommandHandler("lang", cmd_lang))
    app.add_handler(CommandHandler("backup", cmd_backup))
    app.add_handler(CommandHandler("reset", cmd_reset))
    app.add_handler(CallbackQueryHandler(handle_callback))
    app.add_handler(MessageHandler(filters.Document.ALL, handle_document))
    app.add_handler(MessageHandler(filters.COMMAND, cmd_unknown))

    return app
