"""Tests for report.py: session summaries and the dashboard."""

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
from brain_gym.models import Session, SessionConfig, SessionQuestion, SessionSection
from brain_gym.report import build_achievements, build_dashboard, score_message, summarize_session


def _answered(n: int, section: str, skill: str, correct: bool, seconds: float) -> SessionQuestion:
    return SessionQuestion(
        id=f"sq_{section}_{n}",
        question_id=f"q_{section}_{n}",
        section_type=section,
        skill_tag=skill,
        answered_at="2024-01-01T10:00:00+00:00",
        selected_option=0,
        is_correct=correct,
        time_spent_sec=seconds,
    )


def _session() -> Session:
    math_questions = [_answered(i, "math", "word_problems", i < 3, 30) for i in range(4)]
    shapes_questions = [
        _answered(0, "shapes", "odd_one_out", True, 20),
        _answered(1, "shapes", "odd_one_out", False, 5),
        _answered(2, "shapes", "odd_one_out", False, 40),
        SessionQuestion(id="sq_open", question_id="q_open", section_type="shapes", skill_tag="odd_one_out"),
    ]
    return Session(
        id="s1",
        user_id="kid",
        mode="mini_exam",
        started_at="2024-01-01T10:00:00+00:00",
        config=SessionConfig(sections=["math", "shapes"], questions_per_section=4),
        sections=[
            SessionSection(section_type="math", time_limit_sec=960, questions=math_questions),
            SessionSection(section_type="shapes", time_limit_sec=840, questions=shapes_questions),
        ],
        ended_at="2024-01-01T10:10:00+00:00",
        total_score=57,
        total_time_sec=185.0,
    )


class TestSummary:
    def test_section_results(self):
        summary = summarize_session(_session())
        assert summary.correct == 4
        assert summary.total == 8
        assert [(r.name, r.correct, r.total, r.percent) for r in summary.sections] == [
            ("Math", 3, 4, 75),
            ("Shapes", 1, 4, 25),
        ]
        assert summary.strong_sections == ["math"]
        assert summary.weak_sections == ["shapes"]
        assert summary.score == 57
        assert summary.message == score_message(57)

    @pytest.mark.parametrize(
        "score,fragment",
        [(95, "Amazing"), (90, "Amazing"), (75, "Well done"), (50, "Good work"), (10, "Don't give up")],
    )
    def test_score_message_bands(self, score, fragment):
        assert score_message(score).startswith(fragment)


class TestDashboard:
    def test_empty(self):
        dashboard = build_dashboard("kid")
        assert dashboard.sessions == 0
        assert dashboard.accuracy == 0
        assert dashboard.average_score == 0
        assert all(s.mean_mastery == 0 for s in dashboard.sections)

    def test_aggregates_sessions_and_stats(self):
        storage.save_session(_session())
        weak = new_skill_stats("kid", "shapes", "odd_one_out")
        weak.mastery_score = 30.0
        strong = new_skill_stats("kid", "math", "word_problems")
        strong.mastery_score = 80.0
        strong.avg_time_sec = 30.0
        storage.save_skill_stats(weak)
        storage.save_skill_stats(strong)

        dashboard = build_dashboard("kid")
        assert dashboard.sessions == 1
        assert dashboard.questions_answered == 7
        assert dashboard.accuracy == 57
        assert dashboard.average_score == 57
        assert dashboard.total_minutes == 3
        assert dashboard.careless_errors == 1
        assert dashboard.understanding_errors == 2
        math_row = next(s for s in dashboard.sections if s.section_type == "math")
        assert (math_row.mean_mastery, math_row.mean_time_sec, math_row.skills_seen) == (80, 30, 1)
        assert dashboard.weak_skills == ["Odd one out"]
        assert dashboard.strong_skills == ["Word problems"]


def _store_session(
    session_id: str,
    sections: tuple[str, ...] = ("math",),
    score: int = 0,
    seconds: float = 0.0,
    correct: int = 0,
) -> None:
    questions = [_answered(i, sections[0], "word_problems", True, 10) for i in range(correct)]
    storage.save_session(
        Session(
            id=session_id,
            user_id="kid",
            mode="practice",
            started_at="2024-01-01T10:00:00+00:00",
            config=SessionConfig(sections=list(sections), questions_per_section=len(questions)),
            sections=[
                SessionSection(section_type=s, time_limit_sec=600, questions=questions if s == sections[0] else [])
                for s in sections
            ],
            ended_at="2024-01-01T10:10:00+00:00",
            total_score=score,
            total_time_sec=seconds,
        )
    )


def _unlocked(key: str) -> bool:
    board = build_achievements("kid")
    return next(a for a in board.achievements if a.key == key).unlocked


class TestAchievements:
    def test_empty(self):
        board = build_achievements("kid")
        assert (board.sessions, board.questions, board.correct, board.total_minutes) == (0, 0, 0, 0)
        assert len(board.achievements) == 8
        assert board.unlocked == []

    @pytest.mark.parametrize(
        "sessions,expected",
        [
            (1, {"first_step"}),
            (4, {"first_step"}),
            (5, {"first_step", "on_a_roll"}),
            (9, {"first_step", "on_a_roll"}),
            (10, {"first_step", "on_a_roll", "dedicated"}),
        ],
    )
    def test_session_count_badges(self, sessions, expected):
        for n in range(sessions):
            _store_session(f"s{n}")
        board = build_achievements("kid")
        assert board.sessions == sessions
        assert {a.key for a in board.unlocked} == expected

    def test_correct_answers(self):
        _store_session("s1", correct=49)
        assert not _unlocked("sharp_eye")
        _store_session("s2", correct=1)
        assert build_achievements("kid").correct == 50
        assert _unlocked("sharp_eye")

    def test_high_score(self):
        _store_session("s1", score=89)
        assert not _unlocked("champion")
        _store_session("s2", score=90)
        assert _unlocked("champion")

    def test_practice_minutes_round_half_up(self):
        _store_session("s1", seconds=29 * 60 + 29)
        assert build_achievements("kid").total_minutes == 29
        assert not _unlocked("lightning")
        _store_session("s1", seconds=29 * 60 + 30)
        assert build_achievements("kid").total_minutes == 30
        assert _unlocked("lightning")

    def test_mastered_skills(self):
        for skill, score in (("word_problems", 80.0), ("time_clock", 95.0), ("money_change", 79.9)):
            stats = new_skill_stats("kid", "math", skill)
            stats.mastery_score = score
            storage.save_skill_stats(stats)
        assert not _unlocked("mastermind")
        stats = new_skill_stats("kid", "shapes", "odd_one_out")
        stats.mastery_score = 80.0
        storage.save_skill_stats(stats)
        assert _unlocked("mastermind")

    def test_every_section_practised(self):
        _store_session("s1", sections=("math", "sentence_completion", "word_relations"))
        _store_session("s2", sections=("shapes",))
        assert not _unlocked("all_rounder")
        _store_session("s3", sections=("numbers_in_shapes",))
        assert _unlocked("all_rounder")
