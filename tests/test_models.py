from __future__ import annotations

import pytest

from brain_gym.models import (
    Question,
    ensure_difficulty,
    ensure_section_type,
    ensure_session_mode,
    ensure_skill_tag,
    ensure_timer_mode,
    section_of_skill,
    skill_belongs_to_section,
    skill_stats_id,
)


def test_ensure_section_type_normalises():
    assert ensure_section_type(" Math ") == "math"
    with pytest.raises(ValueError):
        ensure_section_type("history")


def test_vocabulary_validators():
    assert ensure_difficulty("ADAPTIVE") == "adaptive"
    assert ensure_session_mode("full_exam") == "full_exam"
    assert ensure_timer_mode("per_section") == "per_section"
    with pytest.raises(ValueError):
        ensure_difficulty("extreme")
    with pytest.raises(ValueError):
        ensure_session_mode("marathon")
    with pytest.raises(ValueError):
        ensure_timer_mode("stopwatch")


def test_skill_membership():
    assert skill_belongs_to_section("shapes", "multi_rule_jump")
    assert not skill_belongs_to_section("math", "multi_rule_jump")
    assert not skill_belongs_to_section("history", "word_problems")
    assert ensure_skill_tag("math", "time_clock") == "time_clock"
    with pytest.raises(ValueError):
        ensure_skill_tag("math", "vocabulary")


def test_section_of_skill():
    assert section_of_skill("number_flow") == "numbers_in_shapes"
    with pytest.raises(ValueError):
        section_of_skill("juggling")


def test_skill_stats_id():
    assert skill_stats_id("kid", "math", "word_problems") == "kid_math_word_problems"


def test_question_correct_answer():
    question = Question(
        id="q1",
        section_type="math",
        skill_tag="basic_arithmetic",
        difficulty="easy",
        stem="2 + 2?",
        options=("3", "4", "5", "6"),
        correct_option=1,
        explanation="2 + 2 = 4.",
        recommended_time_sec=65,
    )
    assert question.correct_answer == "4"
    assert question.question_type == "text"
    assert question.is_active
