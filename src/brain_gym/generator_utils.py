"""Shared helpers for the procedural question generators."""

from __future__ import annotations

import random
import uuid
from typing import Sequence, TypeVar

from .models import CONCRETE_DIFFICULTIES, Difficulty, OPTIONS_PER_QUESTION

T = TypeVar("T")

NEAR_OFFSETS: tuple[int, ...] = (-3, -2, -1, 1, 2, 3, 4, 5, -4, 6, -5, 7)


def new_question_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def resolve_difficulty(difficulty: Difficulty, rng: random.Random) -> Difficulty:
    """'adaptive' picks a concrete level per question."""
    if difficulty == "adaptive":
        return rng.choice(CONCRETE_DIFFICULTIES)
    return difficulty


def timed(difficulty: Difficulty, easy: int, medium: int, hard: int) -> int:
    if difficulty == "easy":
        return easy
    if difficulty == "hard":
        return hard
    return medium


def spread_over(items: Sequence[T], count: int, rng: random.Random) -> list[T]:
    """Spread count picks evenly over items, fill the rest randomly, shuffle."""
    if count <= 0 or not items:
        return []
    per_item = max(1, count // len(items))
    picks: list[T] = []
    for item in items:
        picks.extend([item] * per_item)
    while len(picks) < count:
        picks.append(rng.choice(items))
    rng.shuffle(picks)
    return picks[:count]


def make_numeric_options(
    correct: int,
    partials: Sequence[int] = (),
    rng: random.Random | None = None,
) -> tuple[tuple[str, ...], int]:
    """Four distinct positive options: correct, common-mistake values, then near misses."""
    rng = rng or random.Random()
    values: list[int] = [correct]
    for partial in partials:
        if partial > 0 and partial not in values and len(values) < OPTIONS_PER_QUESTION:
            values.append(partial)
    offsets = list(NEAR_OFFSETS)
    rng.shuffle(offsets)
    for offset in offsets:
        if len(values) >= OPTIONS_PER_QUESTION:
            break
        candidate = correct + offset
        if candidate > 0 and candidate not in values:
            values.append(candidate)
    while len(values) < OPTIONS_PER_QUESTION:
        candidate = correct + rng.randint(1, 20)
        if candidate not in values:
            values.append(candidate)
    rng.shuffle(values)
    return tuple(str(v) for v in values), values.index(correct)


def make_text_options(
    correct: str,
    distractors: Sequence[str],
    rng: random.Random,
) -> tuple[tuple[str, ...], int]:
    """Shuffle the correct answer with the first three distinct distractors."""
    options: list[str] = [correct]
    for distractor in distractors:
        if distractor not in options:
            options.append(distractor)
        if len(options) == OPTIONS_PER_QUESTION:
            break
    if len(options) < OPTIONS_PER_QUESTION:
        raise ValueError(f"Not enough distinct distractors for '{correct}'")
    rng.shuffle(options)
    return tuple(options), options.index(correct)


__all__ = [
    "make_numeric_options",
    "make_text_options",
    "new_question_id",
    "resolve_difficulty",
    "spread_over",
    "timed",
]
