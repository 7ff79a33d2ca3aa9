from __future__ import annotations

from dataclasses import dataclass

from study_tracker.i18n import normalize_language_code

# (minimum unlocked achievements, tier key), highest first
RANK_TIERS: tuple[tuple[int, str], ...] = (
    (8, "master"),
    (6, "scholar"),
    (4, "dedicated"),
    (2, "apprentice"),
    (0, "novice"),
)

RANK_TITLES = {
    "en": {
        "novice": "Novice",
        "apprentice": "Apprentice",
        "dedicated": "Dedicated Student",
        "scholar": "Scholar",
        "master": "Master of Knowledge",
    },
    "pt": {
        "novice": "Novato",
        "apprentice": "Aprendiz",
        "dedicated": "Estudante Dedicado",
        "scholar": "Erudito",
        "master": "Mestre do Conhecimento",
    },
}


@dataclass(frozen=True)
class NextRank:
    title: str
    needed: int
    remaining: int


def rank_key(unlocked_count: int) -> str:
    count = max(0, unlocked_count)
    for minimum, key in RANK_TIERS:
        if count >= minimum:
            return key
    return RANK_TIERS[-1][1]


def resolve_rank(unlocked_count: int, lang: str = "en") -> str:
    code = normalize_language_code(lang)
    return RANK_TITLES[code][rank_key(unlocked_count)]


def next_rank(unlocked_count: int, lang: str = "en") -> NextRank | None:
    """The tier after the current one, or ``None`` at the top tier."""
    count = max(0, unlocked_count)
    code = normalize_language_code(lang)
    for minimum, key in reversed(RANK_TIERS):
        if minimum > count:
            return NextRank(title=RANK_TITLES[code][key], needed=minimum, remaining=minimum - count)
    return None
