"""Numbers-in-shapes generator: circles, pyramids, chains, grids and triangles with one hidden number."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

from .generator_utils import make_numeric_options, new_question_id, resolve_difficulty, spread_over, timed
from .models import Difficulty, Question

MISSING = "?"


@dataclass(slots=True)
class NumberPuzzle:
    stem: str
    answer: int
    partials: list[int]
    explanation: str


def _cell(value: int, hidden: bool) -> str:
    return MISSING if hidden else str(value)


def _divided_circle(d: Difficulty, rng: random.Random) -> NumberPuzzle:
    op = rng.choice(["multiply", "add", "divide"])
    hard = d == "hard"
    if op == "multiply":
        a1, b1 = rng.randint(2, 12 if hard else 8), rng.randint(2, 10 if hard else 6)
        a2, b2 = rng.randint(2, 12 if hard else 8), rng.randint(2, 10 if hard else 6)
        first, second, answer = [a1, b1, a1 * b1], [a2, b2], a2 * b2
        rule = f"first × second = third.\n{a2} × {b2} = {answer}."
    elif op == "add":
        a1, b1 = rng.randint(3, 20 if hard else 12), rng.randint(3, 20 if hard else 12)
        a2, b2 = rng.randint(3, 20 if hard else 12), rng.randint(3, 20 if hard else 12)
        first, second, answer = [a1, b1, a1 + b1], [a2, b2], a2 + b2
        rule = f"first + second = third.\n{a2} + {b2} = {answer}."
    else:
        c1, b1 = rng.randint(2, 10 if hard else 6), rng.randint(2, 8 if hard else 5)
        c2, b2 = rng.randint(2, 10 if hard else 6), rng.randint(2, 8 if hard else 5)
        first, second, answer = [c1 * b1, b1, c1], [c2 * b2, b2], c2
        rule = f"first ÷ second = third.\n{c2 * b2} ÷ {b2} = {answer}."
    stem = (
        f"A circle divided into 3 parts holds the numbers {', '.join(map(str, first))}. "
        f"A second circle holds {', '.join(map(str, second))}, ?. What is the missing number?"
    )
    return NumberPuzzle(stem, answer, second, f"The rule: {rule}")


def _pyramid(d: Difficulty, rng: random.Random) -> NumberPuzzle:
    base_len = 3 if d == "easy" else 4
    rows = [[rng.randint(1, 12 if d == "hard" else 8) for _ in range(base_len)]]
    while len(rows[-1]) > 1:
        below = rows[-1]
        rows.append([below[i] + below[i + 1] for i in range(len(below) - 1)])
    rows.reverse()

    hide_row = rng.randrange(len(rows))
    hide_col = rng.randrange(len(rows[hide_row]))
    answer = rows[hide_row][hide_col]
    shown = " / ".join(
        " ".join(_cell(v, r == hide_row and c == hide_col) for c, v in enumerate(row)) for r, row in enumerate(rows)
    )
    stem = (
        "In the number pyramid each number is the sum of the two numbers below it. "
        f"Rows from top to bottom: {shown}. What is the missing number?"
    )
    return NumberPuzzle(stem, answer, [], f"Each number = the sum of the two numbers below it.\nThe missing number: {answer}.")


def _flow(d: Difficulty, rng: random.Random) -> NumberPuzzle:
    steps = {"easy": 3, "hard": 5}.get(d, 4)
    nodes = [rng.randint(2, 10)]
    operations: list[str] = []
    for _ in range(1, steps):
        prev = nodes[-1]
        op = rng.choice(["add", "multiply", "subtract"] if prev > 1 else ["add", "multiply"])
        if op == "add":
            value = rng.randint(2, 15 if d == "hard" else 8)
            nodes.append(prev + value)
            operations.append(f"+{value}")
        elif op == "multiply":
            value = rng.randint(2, 4 if d == "hard" else 3)
            nodes.append(prev * value)
            operations.append(f"×{value}")
        else:
            value = rng.randint(1, prev - 1)
            nodes.append(prev - value)
            operations.append(f"-{value}")

    hide = rng.randint(1, len(nodes) - 1)
    answer = nodes[hide]
    chain = str(nodes[0])
    for i, op in enumerate(operations, start=1):
        chain += f" ({op}) → {_cell(nodes[i], i == hide)}"
    stem = f"In the number chain each number comes from the one before it: {chain}. What is the missing number?"
    return NumberPuzzle(stem, answer, [nodes[hide - 1]], f"{nodes[hide - 1]} {operations[hide - 1]} = {answer}.")


def _grid(d: Difficulty, rng: random.Random) -> NumberPuzzle:
    size = 3 if d == "easy" else 4
    cap = 12 if d == "hard" else 8
    if rng.random() < 0.5:
        target = rng.randint(max(10, size), 30 if d == "hard" else 20)
        grid: list[list[int]] = []
        for _ in range(size):
            row: list[int] = []
            remaining = target
            for c in range(size - 1):
                row.append(rng.randint(1, max(1, min(cap, remaining - (size - 1 - c)))))
                remaining -= row[-1]
            row.append(remaining)
            grid.append(row)
        rule = f"Every row adds up to {target}."
    else:
        steps = [rng.randint(1, 5) for _ in range(size)]
        grid = [[rng.randint(1, 8) for _ in range(size)]]
        for _ in range(1, size):
            grid.append([v + steps[c] for c, v in enumerate(grid[-1])])
        rule = "Each column grows by a fixed step."

    hide_row, hide_col = rng.randrange(size), rng.randrange(size)
    answer = grid[hide_row][hide_col]
    shown = " / ".join(
        " ".join(_cell(v, r == hide_row and c == hide_col) for c, v in enumerate(row)) for r, row in enumerate(grid)
    )
    stem = f"The number grid follows a hidden rule. Rows: {shown}. What is the missing number?"
    return NumberPuzzle(stem, answer, [], f"{rule}\nThe missing number: {answer}.")


def _triangle(d: Difficulty, rng: random.Random) -> NumberPuzzle:
    if rng.random() < 0.5:
        top, left, right = (rng.randint(2, 12 if d == "hard" else 8) for _ in range(3))
        center = top + left + right
        values = {"top": top, "bottom left": left, "bottom right": right, "center": center}
        hidden = rng.choice(list(values))
        rule = f"The three corners add up to the center.\n{top} + {left} + {right} = {center}."
        shown = ", ".join(f"{pos} {_cell(v, pos == hidden)}" for pos, v in values.items())
    else:
        top, left = rng.randint(2, 5), rng.randint(2, 5)
        right = top * left
        values = {"top": top, "bottom left": left, "bottom right": right}
        hidden = rng.choice(list(values))
        rule = f"top × bottom left = bottom right.\n{top} × {left} = {right}."
        shown = ", ".join(f"{pos} {_cell(v, pos == hidden)}" for pos, v in values.items())
    answer = values[hidden]
    stem = f"The number triangle follows a rule. Corners: {shown}. What is the missing number?"
    partials = [v for v in values.values() if v != answer]
    return NumberPuzzle(stem, answer, partials, f"The rule: {rule}\nThe missing number: {answer}.")


TEMPLATES: dict[str, Callable[[Difficulty, random.Random], NumberPuzzle]] = {
    "divided_circle": _divided_circle,
    "number_pyramid": _pyramid,
    "number_flow": _flow,
    "number_grid": _grid,
    "number_pattern": _triangle,
}


def generate_number_shape_questions(difficulty: Difficulty, count: int, rng: random.Random) -> list[Question]:
    questions: list[Question] = []
    for skill in spread_over(list(TEMPLATES), count, rng):
        level = resolve_difficulty(difficulty, rng)
        puzzle = TEMPLATES[skill](level, rng)
        options, correct_option = make_numeric_options(puzzle.answer, puzzle.partials, rng)
        questions.append(
            Question(
                id=new_question_id("gns"),
                section_type="numbers_in_shapes",
                skill_tag=skill,
                difficulty=level,
                stem=puzzle.stem,
                options=options,
                correct_option=correct_option,
                explanation=puzzle.explanation,
                recommended_time_sec=timed(level, 60, 70, 85),
            )
        )
    return questions


__all__ = ["generate_number_shape_questions", "NumberPuzzle", "TEMPLATES"]
