"""Shape puzzle generator.

Puzzles are described in words (shape kind, fill, size) so the stem and the
options can be printed in a terminal. Each template returns the stem, the
correct description and a list of distractor descriptions.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

from .generator_utils import make_text_options, new_question_id, resolve_difficulty, spread_over, timed
from .models import Difficulty, Question

SHAPE_KINDS = ("circle", "square", "triangle", "diamond", "star", "hexagon")
FILLS = ("empty", "solid", "striped")
OPTION_LABELS = ("A", "B", "C", "D")


@dataclass(slots=True, frozen=True)
class Shape:
    kind: str
    fill: str = "empty"
    small: bool = False

    def describe(self) -> str:
        size = "small " if self.small else ""
        return f"{size}{self.fill} {self.kind}"


@dataclass(slots=True)
class ShapePuzzle:
    skill: str
    stem: str
    answer: str
    distractors: list[str]
    explanation: str


def _other(values: tuple[str, ...], *exclude: str, rng: random.Random) -> str:
    return rng.choice([v for v in values if v not in exclude])


def _spare_shapes(correct: Shape, rng: random.Random) -> list[str]:
    """Extra distractors in case the template's own ones collide."""
    spares = [Shape(kind, correct.fill).describe() for kind in SHAPE_KINDS if kind != correct.kind]
    rng.shuffle(spares)
    return spares


def _listing(shapes: list[Shape]) -> str:
    return ", ".join(s.describe() for s in shapes)


# ── Analogies ───────────────────────────────────────────────────────────────


def _fill_analogy(rng: random.Random) -> ShapePuzzle:
    kind1 = rng.choice(SHAPE_KINDS)
    kind2 = _other(SHAPE_KINDS, kind1, rng=rng)
    fill1 = rng.choice(FILLS)
    fill2 = _other(FILLS, fill1, rng=rng)
    a, b, c = Shape(kind1, fill1), Shape(kind1, fill2), Shape(kind2, fill1)
    correct = Shape(kind2, fill2)
    wrong = [c, b, Shape(_other(SHAPE_KINDS, kind2, rng=rng), fill2)]
    return ShapePuzzle(
        skill="shape_analogy",
        stem=f"{a.describe()} is to {b.describe()} as {c.describe()} is to ?",
        answer=correct.describe(),
        distractors=[w.describe() for w in wrong] + _spare_shapes(correct, rng),
        explanation=(
            f"The rule: {fill1} becomes {fill2}, the kind stays the same.\n"
            f"So {c.describe()} becomes {correct.describe()}."
        ),
    )


def _scale_analogy(rng: random.Random) -> ShapePuzzle:
    kind1 = rng.choice(SHAPE_KINDS)
    kind2 = _other(SHAPE_KINDS, kind1, rng=rng)
    fill = rng.choice(FILLS)
    a, b, c = Shape(kind1, fill, small=True), Shape(kind1, fill), Shape(kind2, fill, small=True)
    correct = Shape(kind2, fill)
    wrong = [c, b, Shape(_other(SHAPE_KINDS, kind2, rng=rng), fill)]
    return ShapePuzzle(
        skill="shape_analogy",
        stem=f"{a.describe()} is to {b.describe()} as {c.describe()} is to ?",
        answer=correct.describe(),
        distractors=[w.describe() for w in wrong] + _spare_shapes(correct, rng),
        explanation=f"The rule: small becomes big.\nSo the small {kind2} becomes a big {kind2}.",
    )


# ── Transformation ──────────────────────────────────────────────────────────


def _transformation(rng: random.Random) -> ShapePuzzle:
    kind = rng.choice(SHAPE_KINDS)
    before = rng.choice(FILLS)
    after = _other(FILLS, before, rng=rng)
    answer = f"The fill changed from {before} to {after}"
    return ShapePuzzle(
        skill="transformation",
        stem=f"A {before} {kind} turned into a {after} {kind}. Which rule was applied?",
        answer=answer,
        distractors=[
            f"The fill changed from {after} to {before}",
            "The shape got smaller",
            "The shape was rotated",
            f"The {kind} became a different shape",
        ],
        explanation=f"The shape stayed a {kind}; only the fill changed: {before} to {after}.",
    )


# ── Series ──────────────────────────────────────────────────────────────────


def _alternating_series(rng: random.Random) -> ShapePuzzle:
    kind_a = rng.choice(SHAPE_KINDS)
    kind_b = _other(SHAPE_KINDS, kind_a, rng=rng)
    fill = rng.choice(FILLS)
    series = [Shape(kind_a, fill), Shape(kind_b, fill)] * 2 + [Shape(kind_a, fill)]
    correct = Shape(kind_b, fill)
    wrong = [
        Shape(kind_a, fill),
        Shape(_other(SHAPE_KINDS, kind_a, kind_b, rng=rng), fill),
        Shape(kind_b, _other(FILLS, fill, rng=rng)),
    ]
    return ShapePuzzle(
        skill="shape_sequence",
        stem=f"What comes next in the series? {_listing(series)}, ?",
        answer=correct.describe(),
        distractors=[w.describe() for w in wrong] + _spare_shapes(correct, rng),
        explanation=f"The series alternates: {kind_a}, {kind_b}, {kind_a}, {kind_b}...\nNext: {correct.describe()}.",
    )


def _fill_series(rng: random.Random) -> ShapePuzzle:
    kind = rng.choice(SHAPE_KINDS)
    cycle = ("empty", "striped", "solid")
    series = [Shape(kind, cycle[i % 3]) for i in range(5)]
    correct = Shape(kind, "solid")
    wrong = [Shape(kind, "empty"), Shape(kind, "striped"), Shape(_other(SHAPE_KINDS, kind, rng=rng), "solid")]
    return ShapePuzzle(
        skill="graphic_rule",
        stem=f"What comes next in the series? {_listing(series)}, ?",
        answer=correct.describe(),
        distractors=[w.describe() for w in wrong] + _spare_shapes(correct, rng),
        explanation=f"The rule: empty, striped, solid, then repeat.\nNext: {correct.describe()}.",
    )


# ── Odd one out ─────────────────────────────────────────────────────────────


def _odd_kind(rng: random.Random) -> ShapePuzzle:
    common = rng.choice(SHAPE_KINDS)
    odd = _other(SHAPE_KINDS, common, rng=rng)
    fill = rng.choice(FILLS)
    odd_index = rng.randrange(4)
    shapes = [Shape(odd if i == odd_index else common, fill) for i in range(4)]
    shown = "; ".join(f"{label}: {s.describe()}" for label, s in zip(OPTION_LABELS, shapes))
    return ShapePuzzle(
        skill="odd_one_out",
        stem=f"Which shape is different from the others? {shown}",
        answer=OPTION_LABELS[odd_index],
        distractors=[label for label in OPTION_LABELS if label != OPTION_LABELS[odd_index]],
        explanation=f"Three shapes are {common}s, but shape {OPTION_LABELS[odd_index]} is a {odd}.",
    )


def _odd_fill(rng: random.Random) -> ShapePuzzle:
    kind = rng.choice(SHAPE_KINDS)
    common = rng.choice(FILLS)
    odd = _other(FILLS, common, rng=rng)
    odd_index = rng.randrange(4)
    shapes = [Shape(kind, odd if i == odd_index else common) for i in range(4)]
    shown = "; ".join(f"{label}: {s.describe()}" for label, s in zip(OPTION_LABELS, shapes))
    return ShapePuzzle(
        skill="odd_one_out",
        stem=f"Which shape is different from the others? {shown}",
        answer=OPTION_LABELS[odd_index],
        distractors=[label for label in OPTION_LABELS if label != OPTION_LABELS[odd_index]],
        explanation=f"Three shapes are {common}, but shape {OPTION_LABELS[odd_index]} is {odd}.",
    )


# ── Grid frame ──────────────────────────────────────────────────────────────


def _grid_frame(rng: random.Random) -> ShapePuzzle:
    kind1 = rng.choice(SHAPE_KINDS)
    kind2 = _other(SHAPE_KINDS, kind1, rng=rng)
    fill1 = rng.choice(FILLS)
    fill2 = _other(FILLS, fill1, rng=rng)
    top = [Shape(kind1, fill1), Shape(kind1, fill2)]
    bottom_left = Shape(kind2, fill1)
    correct = Shape(kind2, fill2)
    wrong = [Shape(kind1, fill2), bottom_left, Shape(_other(SHAPE_KINDS, kind1, kind2, rng=rng), fill2)]
    return ShapePuzzle(
        skill="fill_frame",
        stem=(
            f"A 2x2 grid: the top row is {_listing(top)}; "
            f"the bottom row is {bottom_left.describe()}, ?. Which shape is missing?"
        ),
        answer=correct.describe(),
        distractors=[w.describe() for w in wrong] + _spare_shapes(correct, rng),
        explanation=(
            f"Each row keeps its shape: row 1 {kind1}, row 2 {kind2}.\n"
            f"Each column keeps its fill: column 1 {fill1}, column 2 {fill2}.\n"
            f"Missing: {correct.describe()}."
        ),
    )


TEMPLATES: list[Callable[[random.Random], ShapePuzzle]] = [
    _fill_analogy,
    _scale_analogy,
    _transformation,
    _alternating_series,
    _fill_series,
    _odd_kind,
    _odd_fill,
    _grid_frame,
]


def generate_shape_questions(difficulty: Difficulty, count: int, rng: random.Random) -> list[Question]:
    questions: list[Question] = []
    for template in spread_over(TEMPLATES, count, rng):
        puzzle = template(rng)
        level = resolve_difficulty(difficulty, rng)
        if puzzle.answer in OPTION_LABELS:
            options, correct_option = OPTION_LABELS, OPTION_LABELS.index(puzzle.answer)
        else:
            options, correct_option = make_text_options(puzzle.answer, puzzle.distractors, rng)
        questions.append(
            Question(
                id=new_question_id("gsh"),
                section_type="shapes",
                skill_tag=puzzle.skill,
                difficulty=level,
                stem=puzzle.stem,
                options=options,
                correct_option=correct_option,
                explanation=puzzle.explanation,
                recommended_time_sec=timed(level, 50, 60, 75),
                question_type="shape",
                quality_score=87,
            )
        )
    return questions


__all__ = ["generate_shape_questions", "Shape", "ShapePuzzle", "SHAPE_KINDS", "FILLS", "TEMPLATES"]
