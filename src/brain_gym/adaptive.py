"""Skill classification, difficulty mapping and adaptive question selection."""

from __future__ import annotations

import math
import random
from collections.abc import Iterable, Sequence

from loguru import logger

from . import storage
from .mastery import round_half_up
from .models import SECTION_TYPES, Difficulty, Question, SectionType, SkillStats
from .question_pool import QuestionPool

WEAK_THRESHOLD = 40.0
STRONG_THRESHOLD = 75.0
LOSING_STREAK = 3
MEDIUM_BAND = (40.0, 70.0)

EASY_BELOW = 35.0
MEDIUM_BELOW = 65.0

WEAK_SHARE = 0.6
MIXED_SHARE = 0.25


# ── Classification ──────────────────────────────────────────────────────────


def is_weak(stats: SkillStats) -> bool:
    """Weak: mastery under 40, or the last three results were all wrong."""
    if stats.mastery_score < WEAK_THRESHOLD:
        return True
    recent = stats.recent_results
    return len(recent) >= LOSING_STREAK and not any(recent[-LOSING_STREAK:])


def is_strong(stats: SkillStats) -> bool:
    return stats.mastery_score > STRONG_THRESHOLD


def is_medium(stats: SkillStats) -> bool:
    low, high = MEDIUM_BAND
    return low <= stats.mastery_score <= high


def get_weak_skills(user_id: str) -> list[SkillStats]:
    return [s for s in storage.get_skill_stats(user_id) if is_weak(s)]


def get_strong_skills(user_id: str) -> list[SkillStats]:
    return [s for s in storage.get_skill_stats(user_id) if is_strong(s)]


def get_medium_skills(user_id: str) -> list[SkillStats]:
    return [s for s in storage.get_skill_stats(user_id) if is_medium(s)]


def difficulty_from_mastery(score: float) -> Difficulty:
    if score < EASY_BELOW:
        return "easy"
    if score < MEDIUM_BELOW:
        return "medium"
    return "hard"


def _sections_of(stats: Iterable[SkillStats], catalogue: Sequence[SectionType] = SECTION_TYPES) -> list[SectionType]:
    present = {s.section_type for s in stats}
    return [section for section in catalogue if section in present]


# ── Selection ───────────────────────────────────────────────────────────────


def select_adaptive_questions(
    user_id: str,
    total_count: int,
    *,
    pool: QuestionPool,
    rng: random.Random | None = None,
    sections: Sequence[SectionType] | None = None,
) -> list[Question]:
    """Assemble a weak-heavy mix of fresh questions.

    About 60 % target sections holding weak skills at a difficulty matching
    their weak-skill mastery, about 25 % are medium questions spread over all
    sections, and the rest are hard questions from strong sections (every
    section when nothing is strong yet). The result is shuffled and cut to
    ``total_count``; it can be shorter when the pool runs dry.

    ``sections`` restricts every tier to those sections, kept in catalogue order.
    """
    if total_count < 0:
        raise ValueError(f"total_count must be non-negative, got {total_count}")
    if total_count == 0:
        return []
    rng = rng or random.Random()
    catalogue = [s for s in SECTION_TYPES if sections is None or s in sections]
    if not catalogue:
        raise ValueError(f"No known sections to select from: {sections}")

    weak = get_weak_skills(user_id)
    strong = get_strong_skills(user_id)
    medium = get_medium_skills(user_id)

    weak_count = round_half_up(total_count * WEAK_SHARE)
    mixed_count = round_half_up(total_count * MIXED_SHARE)
    selected: list[Question] = []

    # Weak tier
    weak_sections = _sections_of(weak, catalogue)
    if weak_sections:
        per_section = max(1, math.ceil(weak_count / len(weak_sections)))
        for section in weak_sections:
            scores = [s.mastery_score for s in weak if s.section_type == section]
            difficulty = difficulty_from_mastery(sum(scores) / len(scores))
            selected.extend(pool.generate_fresh(section, difficulty, per_section))
    weak_selected = len(selected)

    # Mixed tier
    mixed_target = weak_count + mixed_count
    remaining = mixed_target - len(selected)
    if remaining > 0:
        per_section = max(1, math.ceil(remaining / len(catalogue)))
        mixed_sections = list(catalogue)
        rng.shuffle(mixed_sections)
        medium_sections = set(_sections_of(medium, catalogue))
        mixed_sections.sort(key=lambda section: section not in medium_sections)
        for section in mixed_sections:
            if len(selected) >= mixed_target:
                break
            selected.extend(pool.generate_fresh(section, "medium", per_section))
    mixed_selected = len(selected) - weak_selected

    # Strong tier
    remaining = total_count - len(selected)
    if remaining > 0:
        strong_sections = _sections_of(strong, catalogue) or list(catalogue)
        per_section = max(1, math.ceil(remaining / len(strong_sections)))
        rng.shuffle(strong_sections)
        for section in strong_sections:
            if len(selected) >= total_count:
                break
            selected.extend(pool.generate_fresh(section, "hard", per_section))
    strong_selected = len(selected) - weak_selected - mixed_selected

    seen: set[str] = set()
    unique: list[Question] = []
    for question in selected:
        if question.id not in seen:
            seen.add(question.id)
            unique.append(question)
    rng.shuffle(unique)
    result = unique[:total_count]

    logger.debug(
        "Adaptive selection for {}: weak={} mixed={} strong={} -> {} of {}",
        user_id,
        weak_selected,
        mixed_selected,
        strong_selected,
        len(result),
        total_count,
    )
    if len(result) < total_count:
        logger.warning("Adaptive selection for {} returned {} of {} questions", user_id, len(result), total_count)
    return result


__all__ = [
    "difficulty_from_mastery",
    "get_medium_skills",
    "get_strong_skills",
    "get_weak_skills",
    "is_medium",
    "is_strong",
    "is_weak",
    "MEDIUM_BAND",
    "MIXED_SHARE",
    "select_adaptive_questions",
    "STRONG_THRESHOLD",
    "WEAK_SHARE",
    "WEAK_THRESHOLD",
]
