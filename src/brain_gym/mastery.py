"""Mastery update engine: latency-weighted score changes per answered question."""

from __future__ import annotations

import math

from loguru import logger

from . import storage
from .db import now_iso
from .models import SkillStats, ensure_skill_tag, skill_stats_id

INITIAL_MASTERY = 50.0
MIN_MASTERY = 0.0
MAX_MASTERY = 100.0
RECENT_RESULTS_LIMIT = 10

# Correct: +5 (slow) .. +15 (fast)
CORRECT_BASE = 5.0
CORRECT_SPEED_BONUS = 10.0
# Wrong: -8 (slow, thoughtful) .. -15 (fast, careless)
WRONG_BASE = 8.0
WRONG_CARELESS_PENALTY = 7.0


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def time_ratio(time_spent_sec: float, recommended_time_sec: float) -> float:
    """Elapsed time over the recommended budget; 1.0 when there is no budget."""
    if recommended_time_sec <= 0:
        return 1.0
    return time_spent_sec / recommended_time_sec


def mastery_delta(is_correct: bool, ratio: float) -> float:
    """Score change for one answer given its time ratio.

    Correct: delta = 5 + clamp(1.5 - ratio, 0, 1) * 10
    Wrong:   delta = -(8 + clamp(1 - ratio * 0.5, 0, 1) * 7)
    """
    if is_correct:
        speed_bonus = clamp(1.5 - ratio, 0.0, 1.0)
        return CORRECT_BASE + speed_bonus * CORRECT_SPEED_BONUS
    careless_factor = clamp(1.0 - ratio * 0.5, 0.0, 1.0)
    return -(WRONG_BASE + careless_factor * WRONG_CARELESS_PENALTY)


def new_skill_stats(user_id: str, section_type: str, skill_tag: str) -> SkillStats:
    return SkillStats(
        id=skill_stats_id(user_id, section_type, skill_tag),
        user_id=user_id,
        section_type=section_type,  # type: ignore[arg-type]
        skill_tag=skill_tag,
        mastery_score=INITIAL_MASTERY,
        attempts=0,
        correct_count=0,
        avg_time_sec=0.0,
        last_updated=now_iso(),
        recent_results=[],
    )


def apply_answer(
    stats: SkillStats,
    is_correct: bool,
    time_spent_sec: float,
    recommended_time_sec: float,
) -> SkillStats:
    """Mutate stats in place for one answer and return them (no persistence)."""
    delta = mastery_delta(is_correct, time_ratio(time_spent_sec, recommended_time_sec))
    stats.mastery_score = clamp(stats.mastery_score + delta, MIN_MASTERY, MAX_MASTERY)

    stats.attempts += 1
    if is_correct:
        stats.correct_count += 1

    stats.avg_time_sec = (stats.avg_time_sec * (stats.attempts - 1) + time_spent_sec) / stats.attempts

    stats.recent_results.append(is_correct)
    if len(stats.recent_results) > RECENT_RESULTS_LIMIT:
        stats.recent_results = stats.recent_results[-RECENT_RESULTS_LIMIT:]

    stats.last_updated = now_iso()
    return stats


def update_mastery(
    user_id: str,
    section_type: str,
    skill_tag: str,
    is_correct: bool,
    time_spent_sec: float,
    recommended_time_sec: float,
) -> SkillStats:
    """Record one answer for (user, section, skill), persist and return the stats."""
    ensure_skill_tag(section_type, skill_tag)
    if not math.isfinite(time_spent_sec) or time_spent_sec < 0:
        raise ValueError(f"time_spent_sec must be a finite non-negative number, got {time_spent_sec}")
    if not math.isfinite(recommended_time_sec):
        raise ValueError(f"recommended_time_sec must be finite, got {recommended_time_sec}")

    stats = storage.get_skill_stat(user_id, section_type, skill_tag)
    if stats is None:
        stats = new_skill_stats(user_id, section_type, skill_tag)

    previous = stats.mastery_score
    apply_answer(stats, is_correct, time_spent_sec, recommended_time_sec)
    storage.save_skill_stats(stats)

    logger.debug(
        "Mastery {}/{} for {}: {:.1f} -> {:.1f} ({} in {:.0f}s)",
        section_type,
        skill_tag,
        user_id,
        previous,
        stats.mastery_score,
        "correct" if is_correct else "wrong",
        time_spent_sec,
    )
    return stats


__all__ = [
    "apply_answer",
    "clamp",
    "INITIAL_MASTERY",
    "mastery_delta",
    "new_skill_stats",
    "RECENT_RESULTS_LIMIT",
    "round_half_up",
    "time_ratio",
    "update_mastery",
]
