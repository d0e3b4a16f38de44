"""Math question generator: templated word problems, sequences, logic, clocks and money."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

from .generator_utils import make_numeric_options, make_text_options, new_question_id, resolve_difficulty, spread_over, timed
from .models import Difficulty, Question

BOYS = ["Sam", "Danny", "Leo", "Noah", "Omar", "Ethan", "Ryan", "Gil", "Tom", "Adam", "Jake", "Max"]
GIRLS = ["Noa", "Mia", "Dana", "Sarah", "Maya", "Emma", "Ruth", "Lily", "Abby", "Tamar", "Zoe", "Ella"]

ITEMS = [
    "books", "pencils", "balls", "stamps", "stickers", "marbles", "cookies",
    "candies", "apples", "balloons", "crayons", "notebooks", "flowers", "stones",
]
CONTAINERS = [("shelf", "shelves"), ("bag", "bags"), ("box", "boxes"), ("crate", "crates"), ("tray", "trays"), ("basket", "baskets")]
PLACES = ["In the shop", "In the library", "At school", "In the garden", "In the kitchen", "In the classroom"]
SHOP_ITEMS = [
    ("sticker", "stickers"), ("book", "books"), ("pen", "pens"), ("notebook", "notebooks"),
    ("chocolate bar", "chocolate bars"), ("ice pop", "ice pops"), ("toy car", "toy cars"), ("ball", "balls"),
]
ACTIVITIES = ["The movie", "The show", "The lesson", "The practice", "The game", "The trip"]


@dataclass(slots=True)
class _Generated:
    stem: str
    options: tuple[str, ...]
    correct_option: int
    explanation: str


Template = Callable[[Difficulty, random.Random], _Generated]


def _range(d: Difficulty) -> tuple[int, int]:
    if d == "easy":
        return 2, 9
    if d == "hard":
        return 5, 30
    return 3, 15


def _numeric(stem: str, answer: int, partials: list[int], explanation: str, rng: random.Random) -> _Generated:
    options, correct = make_numeric_options(answer, partials, rng)
    return _Generated(stem, options, correct, explanation)


# ── Word problems ───────────────────────────────────────────────────────────


def _wp_containers(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    name = rng.choice(BOYS)
    single, plural = rng.choice(CONTAINERS)
    item = rng.choice(ITEMS)
    n = rng.randint(lo, min(hi, 8))
    per = rng.randint(lo, hi)
    noise = rng.randint(2, 6)
    answer = n * per
    stem = (
        f"{rng.choice(PLACES)} there are {noise} empty {rng.choice(CONTAINERS)[1]}. "
        f"{name} has {n} {plural} with {per} {item} in each {single}. "
        f"How many {item} does {name} have altogether?"
    )
    explanation = f"{n} × {per} = {answer}. The {noise} empty containers are a distraction."
    return _numeric(stem, answer, [n + per, noise * n], explanation, rng)


def _wp_gave_away(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    name = rng.choice(GIRLS)
    item = rng.choice(ITEMS)
    bags = rng.randint(lo, min(hi, 6))
    per_bag = rng.randint(lo, hi)
    total = bags * per_bag
    low = max(1, int(total * 0.2))
    gave = rng.randint(low, max(low, int(total * 0.6)))
    answer = total - gave
    stem = (
        f"{name} has {bags} bags of {item} with {per_bag} in each bag. "
        f"She gave {gave} {item} to her friends. How many {item} does she have left?"
    )
    explanation = f"Total: {bags} × {per_bag} = {total}.\n{total} - {gave} = {answer}."
    return _numeric(stem, answer, [total, gave, total + gave], explanation, rng)


def _wp_bus(d: Difficulty, rng: random.Random) -> _Generated:
    _, hi = _range(d)
    start = rng.randint(15, 40)
    stops = {"easy": 2, "hard": 4}.get(d, 3)
    current = start
    events: list[str] = []
    steps: list[str] = [f"Start: {start}"]
    for stop in range(1, stops + 1):
        off = rng.randint(1, max(1, min(current - 1, hi)))
        on = rng.randint(1, hi)
        before = current
        current = current - off + on
        events.append(f"at stop {stop}, {off} got off and {on} got on")
        steps.append(f"Stop {stop}: {before} - {off} + {on} = {current}")
    stem = f"A bus had {start} passengers. " + "; ".join(events) + ". How many passengers are on the bus now?"
    explanation = "\n".join(steps)
    return _numeric(stem, current, [start, current + 2, current - 2], explanation, rng)


def _wp_leftover(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    name = rng.choice(BOYS + GIRLS)
    item = rng.choice(ITEMS)
    groups = rng.randint(max(2, lo), max(2, min(hi, 6)))
    per_group = rng.randint(lo, hi)
    leftover = rng.randint(1, groups - 1)
    had = groups * per_group + leftover
    stem = (
        f"{name} had {had} {item} and shared them equally between {groups} friends, "
        f"giving each friend as many as possible. How many {item} were left over?"
    )
    explanation = f"{had} ÷ {groups} = {per_group} remainder {leftover}."
    return _numeric(stem, leftover, [per_group, groups, groups * per_group], explanation, rng)


def _wp_doubling(d: Difficulty, rng: random.Random) -> _Generated:
    lo, _ = _range(d)
    name = rng.choice(BOYS)
    item = rng.choice(ITEMS)
    start = rng.randint(lo, max(lo, 5))
    days = {"easy": 3, "hard": 5}.get(d, 4)
    amounts = [start * 2**i for i in range(days)]
    answer = sum(amounts)
    stem = (
        f"{name} collected {item} for {days} days. On the first day he collected {start}, "
        f"and every day he collected twice as many as the day before. How many did he collect in total?"
    )
    explanation = " + ".join(str(a) for a in amounts) + f" = {answer}."
    return _numeric(stem, answer, [amounts[-1], answer - start, start * days], explanation, rng)


def _wp_reverse(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    parent = rng.choice(["Mom", "Dad", "Grandma", "Grandpa"])
    item = rng.choice(ITEMS)
    children = rng.randint(lo, max(lo, min(hi, 5)))
    per_child = rng.randint(lo, hi)
    leftover = rng.randint(2, 8)
    given = children * per_child
    answer = given + leftover
    stem = (
        f"{parent} handed out {item} to {children} children, {per_child} each. "
        f"Afterwards {leftover} were left. How many {item} were there at the start?"
    )
    explanation = f"Handed out: {children} × {per_child} = {given}.\n{given} + {leftover} = {answer}."
    return _numeric(stem, answer, [given, leftover * children, children + per_child + leftover], explanation, rng)


# ── Number sequences ────────────────────────────────────────────────────────


def _seq_arithmetic(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    step = rng.randint(lo, min(hi, 12))
    start = rng.randint(1, 20)
    length = 4 if d == "easy" else 5
    seq = [start + i * step for i in range(length)]
    answer = start + length * step
    stem = f"What number comes next? {', '.join(map(str, seq))}, ?"
    explanation = f"Each number is {step} more than the last.\n{seq[-1]} + {step} = {answer}."
    return _numeric(stem, answer, [answer + step, answer - step, seq[-1] * 2], explanation, rng)


def _seq_geometric(d: Difficulty, rng: random.Random) -> _Generated:
    ratio = 2 if d == "easy" else rng.choice([3, 4]) if d == "hard" else rng.choice([2, 3])
    start = rng.randint(1, 3) if d == "hard" else rng.randint(1, 5)
    length = 3 if d == "easy" else 4
    seq = [start * ratio**i for i in range(length)]
    answer = start * ratio**length
    stem = f"What number comes next? {', '.join(map(str, seq))}, ?"
    explanation = f"Each number is multiplied by {ratio}.\n{seq[-1]} × {ratio} = {answer}."
    return _numeric(stem, answer, [answer + ratio, seq[-1] + ratio, answer // 2], explanation, rng)


def _seq_growing(d: Difficulty, rng: random.Random) -> _Generated:
    inc = 1 if d == "easy" else rng.choice([2, 3]) if d == "hard" else rng.choice([1, 2])
    gap = rng.randint(1, 4)
    seq = [rng.randint(1, 10)]
    length = 5 if d == "easy" else 6
    for _ in range(1, length):
        seq.append(seq[-1] + gap)
        gap += inc
    answer = seq[-1] + gap
    gaps = [b - a for a, b in zip(seq, seq[1:])]
    stem = f"What number comes next? {', '.join(map(str, seq))}, ?"
    explanation = (
        f"The gaps are {', '.join(map(str, gaps))}; they grow by {inc}. "
        f"Next gap: {gap}.\n{seq[-1]} + {gap} = {answer}."
    )
    return _numeric(stem, answer, [answer + 1, answer - 1, seq[-1] + gaps[-1]], explanation, rng)


def _seq_fibonacci(d: Difficulty, rng: random.Random) -> _Generated:
    seq = [rng.randint(1, 5), rng.randint(1, 5)]
    length = 4 if d == "easy" else 5
    while len(seq) < length:
        seq.append(seq[-1] + seq[-2])
    answer = seq[-1] + seq[-2]
    stem = f"What number comes next? {', '.join(map(str, seq))}, ?"
    explanation = f"Each number is the sum of the two before it.\n{seq[-2]} + {seq[-1]} = {answer}."
    return _numeric(stem, answer, [answer + 1, seq[-1] * 2, answer - seq[0]], explanation, rng)


def _seq_missing(d: Difficulty, rng: random.Random) -> _Generated:
    step = rng.randint(2, {"easy": 5, "hard": 12}.get(d, 8))
    start = rng.randint(1, 20)
    seq = [start + i * step for i in range(5)]
    missing = rng.randint(1, 3)
    answer = seq[missing]
    shown = ", ".join("?" if i == missing else str(v) for i, v in enumerate(seq))
    stem = f"Which number is missing? {shown}"
    explanation = f"Each number is {step} more than the last.\n{seq[missing - 1]} + {step} = {answer}."
    return _numeric(stem, answer, [answer + step, answer - step, answer + 1], explanation, rng)


# ── Math logic ──────────────────────────────────────────────────────────────


def _ml_symbols(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    circle = rng.randint(lo, hi)
    k = rng.randint(1, 6)
    triangle = circle + k
    total = circle * 2 + triangle
    stem = f"If ○ + ○ + △ = {total} and △ = ○ + {k}, what is ○?"
    explanation = f"Replace △ with ○ + {k}: 3 × ○ + {k} = {total}.\n3 × ○ = {total - k}, so ○ = {circle}."
    return _numeric(stem, circle, [triangle, total - circle, k], explanation, rng)


def _ml_reverse(d: Difficulty, rng: random.Random) -> _Generated:
    answer = rng.randint(3, 15 if d == "hard" else 10)
    mult = rng.randint(2, 5 if d == "hard" else 3)
    add = rng.randint(2, 10)
    result = answer * mult + add
    stem = f"I thought of a number, multiplied it by {mult} and added {add}. I got {result}. What was my number?"
    explanation = f"Work backwards: {result} - {add} = {result - add}.\n{result - add} ÷ {mult} = {answer}."
    return _numeric(stem, answer, [answer + 1, answer - 1, mult + add], explanation, rng)


def _ml_two_equations(d: Difficulty, rng: random.Random) -> _Generated:
    top = 10 if d == "hard" else 7
    a = rng.randint(2, top)
    b = rng.randint(2, top)
    if a == b:
        b = a + 1
    bigger, smaller = max(a, b), min(a, b)
    stem = f"□ + ○ = {a + b} and □ - ○ = {bigger - smaller}. What is □?"
    explanation = f"Add the two equations: 2 × □ = {a + b + bigger - smaller}, so □ = {bigger}."
    return _numeric(stem, bigger, [a + b, bigger - smaller, smaller], explanation, rng)


def _ml_three_friends(d: Difficulty, rng: random.Random) -> _Generated:
    first, second, third = rng.sample(BOYS + GIRLS, 3)
    item = rng.choice(ITEMS)
    x = rng.randint(3, 12 if d == "hard" else 8)
    known = rng.randint(4, 10)
    multiplier = rng.randint(2, 3)
    total = multiplier * x + known + x
    word = "twice" if multiplier == 2 else "three times"
    stem = (
        f"{first}, {second} and {third} collected {total} {item} together. {second} has {known}. "
        f"{first} has {word} as many as {third}. How many {item} does {first} have?"
    )
    answer = multiplier * x
    explanation = (
        f"{first} and {third} together: {total} - {known} = {total - known}.\n"
        f"{third} = X, {first} = {multiplier}X, so {multiplier + 1}X = {total - known} and X = {x}.\n"
        f"{first} has {multiplier} × {x} = {answer}."
    )
    return _numeric(stem, answer, [x, total - known, known * multiplier], explanation, rng)


# ── Time and clock ──────────────────────────────────────────────────────────


def _fmt_time(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"


def _time_options(correct: int, wrong: list[int], rng: random.Random) -> tuple[tuple[str, ...], int]:
    distractors = [_fmt_time(w) for w in wrong if w != correct]
    extra = 1
    while len(set(distractors) - {_fmt_time(correct)}) < 3:
        distractors.append(_fmt_time(correct + 5 * (extra + 6)))
        extra += 1
    return make_text_options(_fmt_time(correct), distractors, rng)


def _tc_end_time(d: Difficulty, rng: random.Random) -> _Generated:
    activity = rng.choice(ACTIVITIES)
    start = rng.randint(7, 17) * 60 + rng.choice([0, 10, 15, 20, 30, 40, 45, 50])
    if d == "easy":
        duration = rng.choice([30, 45, 60])
    elif d == "hard":
        duration = rng.randint(55, 95)
    else:
        duration = rng.choice([35, 45, 50, 75])
    end = start + duration
    stem = f"{activity} starts at {_fmt_time(start)} and lasts {duration} minutes. What time does it end?"
    options, correct = _time_options(end, [end + 15, end - 15, end + 30], rng)
    return _Generated(stem, options, correct, f"{_fmt_time(start)} + {duration} minutes = {_fmt_time(end)}.")


def _tc_journey(d: Difficulty, rng: random.Random) -> _Generated:
    name = rng.choice(BOYS)
    start = rng.randint(7, 16) * 60 + rng.choice([0, 5, 10, 15, 20, 30, 40, 45, 50])
    walk = rng.randint(10, 30)
    wait = 0 if d == "easy" else rng.randint(5, 15)
    arrive = start + walk + wait
    if wait:
        stem = (
            f"{name} left home at {_fmt_time(start)}. The walk took {walk} minutes, "
            f"then he waited {wait} minutes for his friend. What time did they meet?"
        )
    else:
        stem = f"{name} left home at {_fmt_time(start)}. The walk to school took {walk} minutes. What time did he arrive?"
    options, correct = _time_options(arrive, [start + walk, arrive + 10, arrive + 20, arrive - 5], rng)
    explanation = f"{_fmt_time(start)} + {walk + wait} minutes = {_fmt_time(arrive)}."
    return _Generated(stem, options, correct, explanation)


# ── Money and change ────────────────────────────────────────────────────────


def _mc_change(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    name = rng.choice(BOYS + GIRLS)
    (_, plural1), (single2, _) = rng.sample(SHOP_ITEMS, 2)
    qty = rng.randint(2, max(2, min(hi, 6)))
    price1 = rng.randint(lo, hi)
    price2 = rng.randint(lo, hi)
    spent = qty * price1 + price2
    bill = next(b for b in (20, 50, 100, 200, 500) if b > spent)
    answer = bill - spent
    stem = (
        f"{name} bought {qty} {plural1} at ${price1} each and a {single2} for ${price2}, "
        f"paying with a ${bill} bill. How much change did {name} get?"
    )
    explanation = f"{qty} × {price1} = {qty * price1}.\n{qty * price1} + {price2} = {spent}.\n{bill} - {spent} = {answer}."
    return _numeric(stem, answer, [spent, bill - qty * price1, qty * price1], explanation, rng)


def _mc_discount(d: Difficulty, rng: random.Random) -> _Generated:
    single, plural = rng.choice(SHOP_ITEMS)
    qty = rng.randint(2, 5)
    price = rng.randint(3, 15)
    full = qty * price
    discount = rng.randint(2, min(full - 1, 10))
    answer = full - discount
    stem = (
        f"A shop sells a {single} for ${price}. Buying {qty} {plural} gives a ${discount} discount. "
        f"How much do {qty} {plural} cost after the discount?"
    )
    explanation = f"Full price: {qty} × {price} = {full}.\n{full} - {discount} = {answer}."
    return _numeric(stem, answer, [full, discount, price * (qty - 1)], explanation, rng)


# ── Arithmetic drills ───────────────────────────────────────────────────────


def _basic_arithmetic(d: Difficulty, rng: random.Random) -> _Generated:
    lo, hi = _range(d)
    a, b, c = rng.randint(lo, hi * 2), rng.randint(lo, hi), rng.randint(2, max(2, hi // 2))
    if d == "easy":
        answer = a + b
        return _numeric(f"What is {a} + {b}?", answer, [a + b + 10, abs(a - b)], f"{a} + {b} = {answer}.", rng)
    answer = a + b * c
    stem = f"What is {a} + {b} × {c}?"
    explanation = f"Multiply first: {b} × {c} = {b * c}.\n{a} + {b * c} = {answer}."
    return _numeric(stem, answer, [(a + b) * c, a + b + c], explanation, rng)


def _multiplication_division(d: Difficulty, rng: random.Random) -> _Generated:
    top = {"easy": 5, "hard": 12}.get(d, 9)
    a, b = rng.randint(2, top), rng.randint(2, top)
    if rng.random() < 0.5:
        answer = a * b
        return _numeric(f"What is {a} × {b}?", answer, [a + b, answer + a], f"{a} × {b} = {answer}.", rng)
    product = a * b
    stem = f"What is {product} ÷ {a}?"
    return _numeric(stem, b, [product - a, b + 1], f"{a} × {b} = {product}, so {product} ÷ {a} = {b}.", rng)


TEMPLATES: dict[str, list[Template]] = {
    "word_problems": [_wp_containers, _wp_gave_away, _wp_bus, _wp_leftover, _wp_doubling, _wp_reverse],
    "number_sequences": [_seq_arithmetic, _seq_geometric, _seq_growing, _seq_fibonacci, _seq_missing],
    "math_logic": [_ml_symbols, _ml_reverse, _ml_two_equations, _ml_three_friends],
    "time_clock": [_tc_end_time, _tc_journey],
    "money_change": [_mc_change, _mc_discount],
    "basic_arithmetic": [_basic_arithmetic],
    "multiplication_division": [_multiplication_division],
}


def generate_math_questions(difficulty: Difficulty, count: int, rng: random.Random) -> list[Question]:
    """Generate count math questions spread evenly over the math skills."""
    questions: list[Question] = []
    for skill in spread_over(list(TEMPLATES), count, rng):
        level = resolve_difficulty(difficulty, rng)
        generated = rng.choice(TEMPLATES[skill])(level, rng)
        questions.append(
            Question(
                id=new_question_id("gm"),
                section_type="math",
                skill_tag=skill,
                difficulty=level,
                stem=generated.stem,
                options=generated.options,
                correct_option=generated.correct_option,
                explanation=generated.explanation,
                recommended_time_sec=timed(level, 65, 75, 85),
            )
        )
    return questions


__all__ = ["generate_math_questions", "TEMPLATES"]
