"""Achievement rules evaluated over session history.

``ACHIEVEMENT_RULES`` is the only place the thresholds live. Anything that
needs to know how many achievements are unlocked (the rank title included)
goes through :func:`evaluate`.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from study_tracker.i18n import normalize_language_code
from study_tracker.models import Achievement, Session, Subject


@dataclass(frozen=True)
class HistoryAggregates:
    session_count: int
    total_minutes: int
    distinct_subjects: int
    max_session_minutes: int
    catalog_subjects: int
    streak: int


@dataclass(frozen=True)
class AchievementRule:
    id: str
    is_unlocked: Callable[[HistoryAggregates], bool]


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule("first_step", lambda a: a.session_count >= 1),
    AchievementRule("iron_focus", lambda a: a.max_session_minutes >= 50),
    AchievementRule("marathon", lambda a: a.total_minutes >= 600),
    AchievementRule("dedication", lambda a: a.total_minutes >= 6000),
    AchievementRule("trinity", lambda a: a.streak >= 3),
    AchievementRule("golden_week", lambda a: a.streak >= 7),
    AchievementRule("monthly_master", lambda a: a.streak >= 30),
    AchievementRule("polymath", lambda a: a.distinct_subjects >= 3),
    AchievementRule("librarian", lambda a: a.catalog_subjects >= 5),
)

ACHIEVEMENT_LABELS: dict[str, dict[str, tuple[str, str]]] = {
    "en": {
        "first_step": ("First Step", "Complete your first study session."),
        "iron_focus": ("Iron Focus", "Complete a single session of 50 minutes or more."),
        "marathon": ("Marathon", "Accumulate 10 hours of study."),
        "dedication": ("Total Dedication", "Accumulate 100 hours of study."),
        "trinity": ("Trinity", "Keep a 3-day streak."),
        "golden_week": ("Golden Week", "Keep a 7-day streak."),
        "monthly_master": ("Monthly Master", "Keep a 30-day streak."),
        "polymath": ("Polymath", "Study at least 3 different subjects."),
        "librarian": ("Librarian", "Create at least 5 subjects."),
    },
    "pt": {
        "first_step": ("O Início", "Complete sua primeira sessão de estudos."),
        "iron_focus": ("Foco de Ferro", "Complete uma sessão única com 50 minutos ou mais."),
        "marathon": ("Maratona", "Acumule 10 horas totais de estudo."),
        "dedication": ("Dedicação Total", "Acumule 100 horas totais de estudo."),
        "trinity": ("Trindade", "Mantenha uma sequência de 3 dias seguidos."),
        "golden_week": ("Semana de Ouro", "Mantenha uma sequência de 7 dias seguidos."),
        "monthly_master": ("Mestre Mensal", "Mantenha uma sequência de 30 dias seguidos."),
        "polymath": ("Polímata", "Estude pelo menos 3 matérias diferentes."),
        "librarian": ("Bibliotecário", "Crie pelo menos 5 matérias."),
    },
}


def aggregate(sessions: Sequence[Session], subjects: Sequence[Subject], streak: int) -> HistoryAggregates:
    return HistoryAggregates(
        session_count=len(sessions),
        total_minutes=sum(s.duration for s in sessions),
        distinct_subjects=len({s.subject for s in sessions}),
        max_session_minutes=max((s.duration for s in sessions), default=0),
        catalog_subjects=len(subjects),
        streak=max(0, streak),
    )


def evaluate(
    sessions: Sequence[Session],
    subjects: Sequence[Subject],
    streak: int,
    lang: str = "en",
) -> list[Achievement]:
    stats = aggregate(sessions, subjects, streak)
    labels = ACHIEVEMENT_LABELS[normalize_language_code(lang)]
    result: list[Achievement] = []
    for rule in ACHIEVEMENT_RULES:
        title, description = labels[rule.id]
        result.append(
            Achievement(
                id=rule.id,
                title=title,
                description=description,
                is_unlocked=bool(rule.is_unlocked(stats)),
            )
        )
    return result


def unlocked_count(achievements: Sequence[Achievement]) -> int:
    return sum(1 for a in achievements if a.is_unlocked)
