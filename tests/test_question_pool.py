"""Tests for question_pool.py: registration, validation and lookups."""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from brain_gym.models import SECTION_TYPES, Question
from brain_gym.question_pool import QuestionPool


def _question(**overrides) -> Question:
    base = Question(
        id="q_fixed",
        section_type="math",
        skill_tag="word_problems",
        difficulty="easy",
        stem="1 + 1?",
        options=("1", "2", "3", "4"),
        correct_option=1,
        explanation="1 + 1 = 2.",
        recommended_time_sec=65,
    )
    return replace(base, **overrides)


class TestOpen:
    def test_open_is_idempotent(self):
        pool = QuestionPool()
        pool.open()
        generators = pool._generators
        pool.open()
        assert pool._generators is generators

    def test_methods_open_implicitly(self):
        pool = QuestionPool()
        assert pool.get_by_id("missing") is None
        assert pool._initialized


class TestGenerateFresh:
    @pytest.mark.parametrize("section", SECTION_TYPES)
    def test_each_section_generates_requested_count(self, section):
        pool = QuestionPool(rng=random.Random(11))
        questions = pool.generate_fresh(section, "medium", 8)
        assert len(questions) == 8
        assert all(q.section_type == section for q in questions)
        assert pool.size == 8

    def test_ids_unique_across_calls(self):
        pool = QuestionPool(rng=random.Random(2))
        ids = [q.id for _ in range(5) for q in pool.generate_fresh("math", "hard", 10)]
        assert len(set(ids)) == 50

    def test_zero_count(self):
        pool = QuestionPool()
        assert pool.generate_fresh("shapes", "easy", 0) == []

    def test_negative_count(self):
        with pytest.raises(ValueError):
            QuestionPool().generate_fresh("shapes", "easy", -3)

    def test_unknown_section(self):
        with pytest.raises(ValueError):
            QuestionPool().generate_fresh("history", "easy", 3)

    def test_unknown_difficulty(self):
        with pytest.raises(ValueError):
            QuestionPool().generate_fresh("math", "impossible", 3)

    def test_adaptive_difficulty_resolves_to_concrete_levels(self):
        pool = QuestionPool(rng=random.Random(4))
        questions = pool.generate_fresh("numbers_in_shapes", "adaptive", 15)
        assert {q.difficulty for q in questions} <= {"easy", "medium", "hard"}


class TestValidation:
    def _pool_returning(self, questions):
        pool = QuestionPool()
        pool.open()
        pool._generators["math"] = lambda difficulty, count, rng: list(questions)
        return pool

    def test_duplicate_id_rejected(self):
        pool = self._pool_returning([_question()])
        pool.generate_fresh("math", "easy", 1)
        with pytest.raises(ValueError, match="already registered"):
            pool.generate_fresh("math", "easy", 1)

    def test_rejected_batch_registers_nothing(self):
        pool = self._pool_returning([_question(id="q_a"), _question(id="q_b"), _question(id="q_a")])
        with pytest.raises(ValueError, match="already registered"):
            pool.generate_fresh("math", "easy", 3)
        assert pool.size == 0
        assert pool.get_by_id("q_a") is None

    def test_invalid_question_late_in_batch_registers_nothing(self):
        pool = self._pool_returning([_question(id="q_a"), _question(id="q_b", correct_option=7)])
        with pytest.raises(ValueError):
            pool.generate_fresh("math", "easy", 2)
        assert pool.size == 0

    def test_foreign_skill_rejected(self):
        pool = self._pool_returning([_question(skill_tag="odd_one_out")])
        with pytest.raises(ValueError):
            pool.generate_fresh("math", "easy", 1)

    def test_duplicate_options_rejected(self):
        pool = self._pool_returning([_question(options=("1", "2", "2", "4"))])
        with pytest.raises(ValueError):
            pool.generate_fresh("math", "easy", 1)

    def test_correct_option_out_of_range(self):
        pool = self._pool_returning([_question(correct_option=4)])
        with pytest.raises(ValueError):
            pool.generate_fresh("math", "easy", 1)

    def test_non_positive_time_rejected(self):
        pool = self._pool_returning([_question(recommended_time_sec=0)])
        with pytest.raises(ValueError):
            pool.generate_fresh("math", "easy", 1)


class TestLookups:
    def test_get_by_id(self):
        pool = QuestionPool(rng=random.Random(8))
        question = pool.generate_fresh("word_relations", "easy", 3)[1]
        assert pool.get_by_id(question.id) is question

    def test_get_all_for_section_only_active(self):
        pool = QuestionPool()
        pool.open()
        pool._generators["math"] = lambda difficulty, count, rng: [
            _question(id="a"),
            _question(id="b", is_active=False),
        ]
        pool.generate_fresh("math", "easy", 2)
        pool.generate_fresh("shapes", "easy", 2)
        assert [q.id for q in pool.get_all_for_section("math")] == ["a"]
        assert len(pool.get_all_for_section("shapes")) == 2
