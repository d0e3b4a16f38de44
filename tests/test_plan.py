"""Tests for plan.py: weekly recommendations."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def fresh_db(tmp_path):
    """Use a temp file DB for each test."""
    from brain_gym import db
    db_path = tmp_path / "test.db"
    db.DB_PATH = db_path
    db.init_db()
    yield
    if db_path.exists():
        db_path.unlink()


from brain_gym import storage
from brain_gym.mastery import new_skill_stats
from brain_gym.plan import generate_weekly_plan, get_active_recommendations


def _seed(section, skill, score, user="kid"):
    stats = new_skill_stats(user, section, skill)
    stats.mastery_score = score
    stats.attempts = 3
    storage.save_skill_stats(stats)


class TestWeeklyPlan:
    def test_new_user_gets_default_plan_only(self):
        recs = generate_weekly_plan("kid")
        assert [r.type for r in recs] == ["practice_plan"]
        assert recs[0].payload.suggested_questions == 20
        assert recs[0].payload.suggested_minutes == 30

    def test_focus_area_per_weak_skill(self):
        _seed("math", "word_problems", 32.5)
        _seed("shapes", "odd_one_out", 12.0)
        _seed("math", "time_clock", 80.0)
        recs = generate_weekly_plan("kid")
        focus = [r for r in recs if r.type == "focus_area"]
        assert {r.payload.skill_tag for r in focus} == {"word_problems", "odd_one_out"}
        word_problems = next(r for r in focus if r.payload.skill_tag == "word_problems")
        assert "Word problems" in word_problems.payload.message
        assert "Math" in word_problems.payload.message
        assert word_problems.payload.message.endswith("33")
        assert word_problems.payload.suggested_questions == 10
        assert word_problems.payload.suggested_minutes == 15
        plan = recs[-1]
        assert plan.type == "practice_plan"
        assert plan.payload.suggested_questions == 20
        assert plan.payload.suggested_minutes == 30
        assert not any(r.type == "encouragement" for r in recs)

    def test_encouragement_when_nothing_weak(self):
        _seed("math", "word_problems", 60.0)
        recs = generate_weekly_plan("kid")
        assert [r.type for r in recs] == ["encouragement", "practice_plan"]
        assert recs[0].payload.suggested_questions == 5
        assert recs[0].payload.suggested_minutes == 10

    def test_recommendations_are_persisted(self):
        _seed("math", "word_problems", 10.0)
        recs = generate_weekly_plan("kid")
        stored = storage.get_recommendations("kid")
        assert {r.id for r in stored} == {r.id for r in recs}
        assert all(r.status == "active" for r in stored)

    def test_ids_unique_across_runs(self):
        generate_weekly_plan("kid")
        generate_weekly_plan("kid")
        assert len(storage.get_recommendations("kid")) == 2

    def test_active_filter(self):
        recs = generate_weekly_plan("kid")
        done = recs[0]
        done.status = "completed"
        storage.save_recommendation(done)
        generate_weekly_plan("kid")
        active = get_active_recommendations("kid")
        assert len(active) == 1
        assert done.id not in {r.id for r in active}
