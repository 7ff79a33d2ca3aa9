from __future__ import annotations

from collections.abc import Sequence

from study_tracker.i18n import localize
from study_tracker.models import Book, Session, Subject
from study_tracker.service import ProfileView
from study_tracker.stats import CalendarDay, GoalProgress, format_minutes_hm, questions_by_subject, time_by_subject
from study_tracker.time_utils import format_clock
from study_tracker.timer import Phase, TimerEngine, TimerEvent

STATUS_MARKS = {"met": "🟩", "partial": "🟨", "empty": "⬜"}


def _bar(ratio: float, width: int = 20) -> str:
    filled = max(0, min(width, int(round(ratio * width))))
    return "█" * filled + "░" * (width - filled)


def _phase_label(phase: Phase, lang: str) -> str:
    if phase is Phase.BREAK:
        return localize(lang, "☕ Break", "☕ Pausa")
    return localize(lang, "📖 Focus", "📖 Foco")


def timer_message(engine: TimerEngine, lang: str = "en") -> str:
    if engine.is_running:
        state = localize(lang, "running", "em andamento")
    else:
        state = localize(lang, "paused", "pausado")
    lines = [
        f"{_phase_label(engine.phase, lang)}: {format_clock(engine.time_left)} ({state})",
        localize(
            lang,
            "Subject: {subject}",
            "Matéria: {subject}",
            subject=engine.subject or localize(lang, "none", "nenhuma"),
        ),
        localize(
            lang,
            "Focus {study} min | Break {brk} min",
            "Foco {study} min | Pausa {brk} min",
            study=engine.study_minutes,
            brk=engine.break_minutes,
        ),
    ]
    if engine.questions:
        lines.append(
            localize(
                lang,
                "Questions: {correct}/{total}",
                "Questões: {correct}/{total}",
                correct=engine.correct_questions,
                total=engine.questions,
            )
        )
    return "\n".join(lines)


def session_recorded_message(session: Session, lang: str = "en") -> str:
    text = localize(
        lang,
        "✅ Logged {mins} of {subject}.",
        "✅ Registrado {mins} de {subject}.",
        mins=format_minutes_hm(session.duration),
        subject=session.subject,
    )
    if session.questions:
        text += localize(
            lang,
            " Questions: {correct}/{total}.",
            " Questões: {correct}/{total}.",
            correct=session.correct_questions,
            total=session.questions,
        )
    return text


def timer_event_message(event: TimerEvent, lang: str = "en") -> str | None:
    if event.kind != "completed":
        return None
    if event.phase is Phase.STUDY:
        lines = [localize(lang, "🔔 Focus finished! Time for a break.", "🔔 Foco concluído! Hora da pausa.")]
        if event.session is not None:
            lines.append(session_recorded_message(event.session, lang))
        lines.append(localize(lang, "Use /go to start the break.", "Use /go para iniciar a pausa."))
        return "\n".join(lines)
    return localize(lang, "🔔 Break finished! Back to studying.", "🔔 Pausa concluída! De volta aos estudos.")


def goal_message(progress: GoalProgress, lang: str = "en") -> str:
    lines = [
        localize(
            lang,
            "🎯 Today: {done} / {goal}",
            "🎯 Hoje: {done} / {goal}",
            done=format_minutes_hm(progress.minutes),
            goal=format_minutes_hm(progress.goal),
        ),
        f"{_bar(progress.ratio)} {progress.ratio * 100:.0f}%",
    ]
    if progress.met:
        lines.append(localize(lang, "Daily goal reached!", "Meta diária atingida!"))
    else:
        lines.append(
            localize(
                lang,
                "{left} left to reach the goal.",
                "Faltam {left} para a meta.",
                left=format_minutes_hm(progress.remaining),
            )
        )
    return "\n".join(lines)


def streak_message(view: ProfileView, lang: str = "en") -> str:
    return "\n".join(
        [
            localize(lang, "🔥 Streak: {days} days", "🔥 Sequência: {days} dias", days=view.streak),
            localize(lang, "🏅 Best: {days} days", "🏅 Recorde: {days} dias", days=view.longest_streak),
        ]
    )


def profile_message(view: ProfileView, lang: str = "en") -> str:
    lines = [
        localize(lang, "👤 Rank: {rank}", "👤 Nível: {rank}", rank=view.rank),
        localize(
            lang,
            "🏆 Achievements: {unlocked}/{total}",
            "🏆 Conquistas: {unlocked}/{total}",
            unlocked=view.unlocked,
            total=view.total,
        ),
    ]
    if view.next_rank is None:
        lines.append(localize(lang, "Maximum level reached!", "Nível máximo alcançado!"))
    else:
        lines.append(
            localize(
                lang,
                "Next: {title} ({remaining} more)",
                "Próximo: {title} (faltam {remaining})",
                title=view.next_rank.title,
                remaining=view.next_rank.remaining,
            )
        )
    lines.append("")
    for achievement in view.achievements:
        mark = "✅" if achievement.is_unlocked else "🔒"
        lines.append(f"{mark} {achievement.title}: {achievement.description}")
    return "\n".join(lines)


def stats_message(sessions: Sequence[Session], lang: str = "en") -> str:
    if not sessions:
        return localize(lang, "No sessions yet. Use /pick and /go to start.", "Nenhuma sessão ainda. Use /pick e /go.")

    total = sum(s.duration for s in sessions)
    lines = [
        localize(lang, "📊 Statistics", "📊 Estatísticas"),
        localize(
            lang,
            "Total: {mins} in {count} sessions",
            "Total: {mins} em {count} sessões",
            mins=format_minutes_hm(total),
            count=len(sessions),
        ),
        "",
        localize(lang, "⏱ Time by subject:", "⏱ Tempo por matéria:"),
    ]
    for name, minutes in sorted(time_by_subject(sessions).items(), key=lambda item: item[1], reverse=True):
        lines.append(f"  {name}: {format_minutes_hm(minutes)}")

    questions = {name: q for name, q in questions_by_subject(sessions).items() if q.total > 0}
    if questions:
        lines.append("")
        lines.append(localize(lang, "❓ Questions by subject:", "❓ Questões por matéria:"))
        for name, totals in questions.items():
            lines.append(f"  {name}: {totals.correct}/{totals.total} ({totals.accuracy_percent}%)")
    return "\n".join(lines)


def calendar_message(days: Sequence[CalendarDay], lang: str = "en") -> str:
    if not days:
        return ""
    first = days[0].day
    lines = [f"📅 {first.strftime('%Y-%m')}", localize(lang, "Mo Tu We Th Fr Sa Su", "Se Te Qa Qi Sx Sa Do")]
    row = ["  "] * first.weekday()
    for day in days:
        row.append(STATUS_MARKS.get(day.status, STATUS_MARKS["empty"]))
        if len(row) == 7:
            lines.append(" ".join(row))
            row = []
    if row:
        lines.append(" ".join(row))

    studied = [d for d in days if d.minutes > 0]
    met = sum(1 for d in days if d.status == "met")
    lines.append("")
    lines.append(
        localize(
            lang,
            "Days studied: {days} | Goal met: {met}",
            "Dias estudados: {days} | Meta atingida: {met}",
            days=len(studied),
            met=met,
        )
    )
    return "\n".join(lines)


def subjects_message(subjects: Sequence[Subject], lang: str = "en") -> str:
    if not subjects:
        return localize(lang, "No subjects yet. Add one with /subject_add <name>.", "Nenhuma matéria. Use /subject_add <nome>.")
    lines = [localize(lang, "📚 Subjects", "📚 Matérias")]
    for subject in subjects:
        lines.append(f"• {subject.name} ({subject.color})")
        for chapter in subject.chapters:
            done = sum(1 for task in chapter.tasks if task.completed)
            lines.append(f"    {chapter.name} [{done}/{len(chapter.tasks)}]")
            for index, task in enumerate(chapter.tasks, start=1):
                mark = "☑" if task.completed else "☐"
                lines.append(f"      {index}. {mark} {task.name}")
    return "\n".join(lines)


def library_message(books: Sequence[Book], lang: str = "en") -> str:
    if not books:
        return localize(lang, "Your library is empty. Add a book with /book <title>.", "Sua biblioteca está vazia. Use /book <título>.")
    lines = [localize(lang, "📖 Library", "📖 Biblioteca")]
    for index, book in enumerate(books, start=1):
        mark = "✅" if book.completed else "📘"
        lines.append(f"{index}. {mark} {book.title} by {', '.join(book.authors)}")
    return "\n".join(lines)


def help_message(lang: str = "en") -> str:
    return localize(
        lang,
        "Study tracker commands:\n"
        "/subjects, /subject_add <name>, /subject_del <name>\n"
        "/chapter_add <subject> | <chapter>, /chapter_rename <subject> | <chapter> | <new name>\n"
        "/chapter_del <subject> | <chapter>, /task_add <subject> | <chapter> | <task>\n"
        "/task_done, /task_del <subject> | <chapter> | <n>, /task_rename <subject> | <chapter> | <n> | <new name>\n"
        "/pick <subject>, /study <min>, /break <min>\n"
        "/go, /pause, /stop, /timer, /questions <total> <correct>\n"
        "/streak, /achievements, /stats, /calendar [YYYY-MM], /goal <min>\n"
        "/library, /book <query>, /book_done <n>, /book_del <n>\n"
        "/volume <0-100>, /notify on|off, /color <#hex>, /colormode, /background <mode>\n"
        "/lang, /backup, /reset. Send a backup .json file to restore it.",
        "Comandos do study tracker:\n"
        "/subjects, /subject_add <nome>, /subject_del <nome>\n"
        "/chapter_add <matéria> | <capítulo>, /chapter_rename <matéria> | <capítulo> | <novo nome>\n"
        "/chapter_del <matéria> | <capítulo>, /task_add <matéria> | <capítulo> | <tarefa>\n"
        "/task_done, /task_del <matéria> | <capítulo> | <n>, /task_rename <matéria> | <capítulo> | <n> | <novo nome>\n"
        "/pick <matéria>, /study <min>, /break <min>\n"
        "/go, /pause, /stop, /timer, /questions <total> <certas>\n"
        "/streak, /achievements, /stats, /calendar [AAAA-MM], /goal <min>\n"
        "/library, /book <busca>, /book_done <n>, /book_del <n>\n"
        "/volume <0-100>, /notify on|off, /color <#hex>, /colormode, /background <modo>\n"
        "/lang, /backup, /reset. Envie um arquivo .json de backup para restaurar.",
    )
