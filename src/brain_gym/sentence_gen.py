"""Sentence completion generator backed by the YAML sentence bank."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .generator_utils import make_text_options, new_question_id, resolve_difficulty, spread_over, timed
from .models import CONCRETE_DIFFICULTIES, Difficulty, Question, ensure_difficulty, ensure_skill_tag
from .sections import CONTENT_DIR

SENTENCES_FILE = CONTENT_DIR / "sentences.yaml"
BLANK = "____"


@dataclass(slots=True)
class SentenceItem:
    skill: str
    sentence: str
    answer: str
    distractors: list[str] = field(default_factory=list)
    level: Difficulty = "medium"

    def filled(self) -> str:
        return self.sentence.replace(BLANK, self.answer, 1)


_sentence_cache: dict[str, list[SentenceItem]] | None = None


def load_sentence_bank(path: Path | None = None) -> dict[str, list[SentenceItem]]:
    """Parse the sentence bank into items grouped by skill tag."""
    global _sentence_cache
    if _sentence_cache is not None and path is None:
        return _sentence_cache

    with open(path or SENTENCES_FILE, encoding="utf-8") as f:
        raw: dict[str, list[dict[str, Any]]] = yaml.safe_load(f) or {}

    bank: dict[str, list[SentenceItem]] = {}
    for skill, entries in raw.items():
        ensure_skill_tag("sentence_completion", skill)
        items: list[SentenceItem] = []
        for entry in entries or []:
            sentence = str(entry["sentence"])
            if BLANK not in sentence:
                raise ValueError(f"Sentence without a blank in '{skill}': {sentence}")
            level = ensure_difficulty(str(entry.get("level", "medium")))
            if level not in CONCRETE_DIFFICULTIES:
                raise ValueError(f"Sentence level must be easy, medium or hard: {sentence}")
            items.append(
                SentenceItem(
                    skill=skill,
                    sentence=sentence,
                    answer=str(entry["answer"]),
                    distractors=[str(d) for d in entry.get("distractors", [])],
                    level=level,
                )
            )
        if items:
            bank[skill] = items

    if path is None:
        _sentence_cache = bank
    return bank


def clear_cache() -> None:
    global _sentence_cache
    _sentence_cache = None


def _pick_item(items: list[SentenceItem], level: Difficulty, used: set[int], rng: random.Random) -> SentenceItem:
    """Prefer unused items at the level, then any unused item, then start over."""
    unused = [i for i in range(len(items)) if i not in used]
    if not unused:
        used.clear()
        unused = list(range(len(items)))
    at_level = [i for i in unused if items[i].level == level]
    index = rng.choice(at_level or unused)
    used.add(index)
    return items[index]


def generate_sentence_questions(difficulty: Difficulty, count: int, rng: random.Random) -> list[Question]:
    bank = load_sentence_bank()
    used: dict[str, set[int]] = {skill: set() for skill in bank}
    questions: list[Question] = []
    for skill in spread_over(list(bank), count, rng):
        level = resolve_difficulty(difficulty, rng)
        item = _pick_item(bank[skill], level, used[skill], rng)
        options, correct_option = make_text_options(item.answer, rng.sample(item.distractors, len(item.distractors)), rng)
        questions.append(
            Question(
                id=new_question_id("gs"),
                section_type="sentence_completion",
                skill_tag=skill,
                difficulty=item.level,
                stem=item.sentence,
                options=options,
                correct_option=correct_option,
                explanation=f"The complete sentence: {item.filled()}",
                recommended_time_sec=timed(item.level, 45, 55, 65),
            )
        )
    return questions


__all__ = [
    "BLANK",
    "clear_cache",
    "generate_sentence_questions",
    "load_sentence_bank",
    "SentenceItem",
    "SENTENCES_FILE",
]
