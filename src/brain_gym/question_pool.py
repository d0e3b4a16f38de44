"""In-memory question registry backed by the procedural generators."""

from __future__ import annotations

import random
from typing import Callable

from loguru import logger

from . import math_gen, number_shape_gen, sentence_gen, shape_gen, word_rel_gen
from .models import (
    OPTIONS_PER_QUESTION,
    Difficulty,
    Question,
    SectionType,
    ensure_difficulty,
    ensure_section_type,
    skill_belongs_to_section,
)

Generator = Callable[[Difficulty, int, random.Random], list[Question]]


class QuestionPool:
    """Registry of every question generated during one pool lifetime.

    ``open()`` loads the YAML content banks and binds a generator to each
    section. It runs once per instance; every public method calls it first.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self._initialized = False
        self._generators: dict[SectionType, Generator] = {}
        self._questions: dict[str, Question] = {}

    def open(self) -> None:
        if self._initialized:
            return
        sentence_gen.load_sentence_bank()
        word_rel_gen.load_relation_banks()
        self._generators = {
            "math": math_gen.generate_math_questions,
            "sentence_completion": sentence_gen.generate_sentence_questions,
            "word_relations": word_rel_gen.generate_word_relation_questions,
            "shapes": shape_gen.generate_shape_questions,
            "numbers_in_shapes": number_shape_gen.generate_number_shape_questions,
        }
        self._initialized = True
        logger.debug("Question pool opened with {} section generators", len(self._generators))

    @property
    def size(self) -> int:
        return len(self._questions)

    def generate_fresh(self, section_type: str, difficulty: str, count: int) -> list[Question]:
        """Generate, validate and register count new questions for a section."""
        self.open()
        section = ensure_section_type(section_type)
        level = ensure_difficulty(difficulty)
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        if count == 0:
            return []

        questions = self._generators[section](level, count, self.rng)
        batch_ids: set[str] = set()
        for question in questions:
            self._validate(section, question)
            if question.id in self._questions or question.id in batch_ids:
                raise ValueError(f"Question id already registered: {question.id}")
            batch_ids.add(question.id)
        # Register only once the whole batch is valid
        for question in questions:
            self._questions[question.id] = question

        if len(questions) < count:
            logger.warning("Generator for {} produced {} of {} questions", section, len(questions), count)
        return questions

    def get_by_id(self, question_id: str) -> Question | None:
        self.open()
        return self._questions.get(question_id)

    def get_all_for_section(self, section_type: str) -> list[Question]:
        self.open()
        section = ensure_section_type(section_type)
        return [q for q in self._questions.values() if q.section_type == section and q.is_active]

    @staticmethod
    def _validate(section: SectionType, question: Question) -> None:
        if question.section_type != section:
            raise ValueError(f"Question {question.id} belongs to {question.section_type}, expected {section}")
        if not skill_belongs_to_section(section, question.skill_tag):
            raise ValueError(f"Question {question.id} has skill '{question.skill_tag}' outside {section}")
        if len(question.options) != OPTIONS_PER_QUESTION or len(set(question.options)) != OPTIONS_PER_QUESTION:
            raise ValueError(f"Question {question.id} must have {OPTIONS_PER_QUESTION} distinct options")
        if not 0 <= question.correct_option < OPTIONS_PER_QUESTION:
            raise ValueError(f"Question {question.id} has correct option {question.correct_option} out of range")
        if question.recommended_time_sec <= 0:
            raise ValueError(f"Question {question.id} has a non-positive recommended time")


__all__ = ["Generator", "QuestionPool"]
