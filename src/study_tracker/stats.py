from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo

from study_tracker.models import Session
from study_tracker.time_utils import local_day, month_days


@dataclass(frozen=True)
class QuestionTotals:
    total: int
    correct: int

    @property
    def accuracy_percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.correct / self.total * 100)


@dataclass
class SubjectDay:
    minutes: int = 0
    questions: int = 0
    correct: int = 0


@dataclass
class DayData:
    total_minutes: int = 0
    total_questions: int = 0
    total_correct: int = 0
    subjects: dict[str, SubjectDay] = field(default_factory=dict)


@dataclass(frozen=True)
class CalendarDay:
    day: date
    minutes: int
    status: str


@dataclass(frozen=True)
class GoalProgress:
    minutes: int
    goal: int

    @property
    def ratio(self) -> float:
        return min(1.0, self.minutes / self.goal) if self.goal > 0 else 0.0

    @property
    def remaining(self) -> int:
        return max(0, self.goal - self.minutes)

    @property
    def met(self) -> bool:
        return self.minutes >= self.goal


def time_by_subject(sessions: Iterable[Session]) -> dict[str, int]:
    result: dict[str, int] = {}
    for session in sessions:
        result[session.subject] = result.get(session.subject, 0) + session.duration
    return result


def questions_by_subject(sessions: Iterable[Session]) -> dict[str, QuestionTotals]:
    totals: dict[str, tuple[int, int]] = {}
    for session in sessions:
        total, correct = totals.get(session.subject, (0, 0))
        totals[session.subject] = (total + session.questions, correct + session.correct_questions)
    return {name: QuestionTotals(total=t, correct=c) for name, (t, c) in totals.items()}


def day_summaries(sessions: Iterable[Session], tz: tzinfo | None) -> dict[date, DayData]:
    grouped: dict[date, DayData] = {}
    for session in sessions:
        day = grouped.setdefault(local_day(session.date, tz), DayData())
        day.total_minutes += session.duration
        day.total_questions += session.questions
        day.total_correct += session.correct_questions
        per_subject = day.subjects.setdefault(session.subject, SubjectDay())
        per_subject.minutes += session.duration
        per_subject.questions += session.questions
        per_subject.correct += session.correct_questions
    return grouped


def goal_status(minutes: int, daily_goal: int) -> str:
    if minutes <= 0:
        return "empty"
    if minutes >= daily_goal:
        return "met"
    return "partial"


def month_view(
    sessions: Sequence[Session],
    year: int,
    month: int,
    daily_goal: int,
    tz: tzinfo | None,
) -> list[CalendarDay]:
    summaries = day_summaries(sessions, tz)
    days: list[CalendarDay] = []
    for day in month_days(year, month):
        minutes = summaries[day].total_minutes if day in summaries else 0
        days.append(CalendarDay(day=day, minutes=minutes, status=goal_status(minutes, daily_goal)))
    return days


def today_progress(sessions: Iterable[Session], now: datetime, daily_goal: int) -> GoalProgress:
    today = local_day(now, now.tzinfo)
    minutes = sum(s.duration for s in sessions if local_day(s.date, now.tzinfo) == today)
    return GoalProgress(minutes=minutes, goal=daily_goal)


def format_minutes_hm(minutes: int) -> str:
    sign = "-" if minutes < 0 else ""
    h, m = divmod(abs(minutes), 60)
    if h == 0:
        return f"{sign}{m}m"
    return f"{sign}{h}h {m}m"
