"""Word relations generator.

Questions show a stem pair ("leaf : tree") and ask for the option pair that
shares the same relationship. The correct pair comes from the same relation
bank as the stem; the three distractors come from other banks.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .generator_utils import make_text_options, new_question_id, resolve_difficulty, spread_over, timed
from .models import Difficulty, Question, ensure_skill_tag
from .sections import CONTENT_DIR

WORD_RELATIONS_FILE = CONTENT_DIR / "word_relations.yaml"

Pair = tuple[str, str]


@dataclass(slots=True)
class RelationBank:
    skill: str
    label: str
    pairs: list[Pair] = field(default_factory=list)


_bank_cache: list[RelationBank] | None = None


def load_relation_banks(path: Path | None = None) -> list[RelationBank]:
    global _bank_cache
    if _bank_cache is not None and path is None:
        return _bank_cache

    with open(path or WORD_RELATIONS_FILE, encoding="utf-8") as f:
        raw: list[dict[str, Any]] = yaml.safe_load(f) or []

    banks: list[RelationBank] = []
    for entry in raw:
        skill = ensure_skill_tag("word_relations", str(entry["skill"]))
        pairs = [(str(p[0]), str(p[1])) for p in entry.get("pairs", [])]
        if len(pairs) < 2:
            raise ValueError(f"Relation bank '{skill}' needs at least 2 pairs")
        banks.append(RelationBank(skill=skill, label=str(entry.get("label", skill)), pairs=pairs))

    if path is None:
        _bank_cache = banks
    return banks


def clear_cache() -> None:
    global _bank_cache
    _bank_cache = None


def format_pair(pair: Pair) -> str:
    return f"{pair[0]} : {pair[1]}"


def _generate_one(bank: RelationBank, banks: list[RelationBank], difficulty: Difficulty, rng: random.Random) -> Question:
    stem_pair, correct_pair = rng.sample(bank.pairs, 2)

    other_banks = [b for b in banks if b.skill != bank.skill]
    rng.shuffle(other_banks)
    distractors = [format_pair(rng.choice(b.pairs)) for b in other_banks]
    options, correct_option = make_text_options(format_pair(correct_pair), distractors, rng)

    level = resolve_difficulty(difficulty, rng)
    return Question(
        id=new_question_id("gw"),
        section_type="word_relations",
        skill_tag=bank.skill,
        difficulty=level,
        stem=format_pair(stem_pair),
        options=options,
        correct_option=correct_option,
        explanation=(
            f"The relationship: {bank.label}.\n"
            f"{stem_pair[0]} ↔ {stem_pair[1]}.\n"
            f"Same relationship: {correct_pair[0]} ↔ {correct_pair[1]}."
        ),
        recommended_time_sec=timed(level, 40, 50, 60),
        quality_score=89,
    )


def generate_word_relation_questions(difficulty: Difficulty, count: int, rng: random.Random) -> list[Question]:
    banks = load_relation_banks()
    by_skill = {bank.skill: bank for bank in banks}
    return [_generate_one(by_skill[skill], banks, difficulty, rng) for skill in spread_over(list(by_skill), count, rng)]


__all__ = [
    "clear_cache",
    "format_pair",
    "generate_word_relation_questions",
    "load_relation_banks",
    "RelationBank",
    "WORD_RELATIONS_FILE",
]
