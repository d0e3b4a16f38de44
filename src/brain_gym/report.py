"""Session summaries, the learner dashboard and achievement badges."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import storage
from .adaptive import get_strong_skills, get_weak_skills
from .mastery import round_half_up
from .models import SECTION_TYPES, Session, SectionType
from .sections import section_display_name, skill_display_name

STRONG_SECTION_PCT = 70
CARELESS_ERROR_SEC = 15
MASTERED_SKILL_SCORE = 80


@dataclass(slots=True)
class SectionResult:
    section_type: SectionType
    name: str
    correct: int
    total: int
    percent: int


@dataclass(slots=True)
class SessionSummary:
    session_id: str
    score: int
    correct: int
    total: int
    total_time_sec: float
    sections: list[SectionResult] = field(default_factory=list)
    strong_sections: list[SectionType] = field(default_factory=list)
    weak_sections: list[SectionType] = field(default_factory=list)
    message: str = ""


@dataclass(slots=True)
class SectionMastery:
    section_type: SectionType
    name: str
    mean_mastery: int
    mean_time_sec: int
    skills_seen: int


@dataclass(slots=True)
class Dashboard:
    user_id: str
    sessions: int
    questions_answered: int
    accuracy: int
    average_score: int
    total_minutes: int
    careless_errors: int
    understanding_errors: int
    sections: list[SectionMastery] = field(default_factory=list)
    weak_skills: list[str] = field(default_factory=list)
    strong_skills: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Achievement:
    key: str
    icon: str
    title: str
    description: str
    unlocked: bool


@dataclass(slots=True)
class AchievementBoard:
    user_id: str
    sessions: int
    questions: int
    correct: int
    total_minutes: int
    achievements: list[Achievement] = field(default_factory=list)

    @property
    def unlocked(self) -> list[Achievement]:
        return [a for a in self.achievements if a.unlocked]


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def score_message(score: int) -> str:
    if score >= 90:
        return "Amazing! Excellent work!"
    if score >= 70:
        return "Well done! Great progress!"
    if score >= 50:
        return "Good work! Let's keep practising!"
    return "Don't give up! Every practice makes you stronger!"


def summarize_session(session: Session) -> SessionSummary:
    results: list[SectionResult] = []
    for section in session.sections:
        correct = sum(1 for q in section.questions if q.is_correct)
        total = len(section.questions)
        results.append(
            SectionResult(
                section_type=section.section_type,
                name=section_display_name(section.section_type),
                correct=correct,
                total=total,
                percent=_percent(correct, total),
            )
        )

    score = session.total_score or 0
    return SessionSummary(
        session_id=session.id,
        score=score,
        correct=sum(r.correct for r in results),
        total=sum(r.total for r in results),
        total_time_sec=session.total_time_sec or 0.0,
        sections=results,
        strong_sections=[r.section_type for r in results if r.percent >= STRONG_SECTION_PCT],
        weak_sections=[r.section_type for r in results if r.percent < STRONG_SECTION_PCT],
        message=score_message(score),
    )


def build_dashboard(user_id: str) -> Dashboard:
    """Aggregate a learner's stored sessions and skill stats."""
    sessions = storage.get_sessions(user_id)
    stats = storage.get_skill_stats(user_id)

    answered = [q for s in sessions for sec in s.sections for q in sec.questions if q.answered_at is not None]
    correct = sum(1 for q in answered if q.is_correct)
    wrong = [q for q in answered if q.is_correct is False]

    sections: list[SectionMastery] = []
    for section_type in SECTION_TYPES:
        section_stats = [s for s in stats if s.section_type == section_type]
        count = len(section_stats)
        sections.append(
            SectionMastery(
                section_type=section_type,
                name=section_display_name(section_type),
                mean_mastery=round_half_up(sum(s.mastery_score for s in section_stats) / count) if count else 0,
                mean_time_sec=round_half_up(sum(s.avg_time_sec for s in section_stats) / count) if count else 0,
                skills_seen=count,
            )
        )

    return Dashboard(
        user_id=user_id,
        sessions=len(sessions),
        questions_answered=len(answered),
        accuracy=_percent(correct, len(answered)),
        average_score=round_half_up(sum(s.total_score or 0 for s in sessions) / len(sessions)) if sessions else 0,
        total_minutes=round_half_up(sum(s.total_time_sec or 0.0 for s in sessions) / 60),
        careless_errors=sum(1 for q in wrong if (q.time_spent_sec or 0) < CARELESS_ERROR_SEC),
        understanding_errors=sum(1 for q in wrong if (q.time_spent_sec or 0) >= CARELESS_ERROR_SEC),
        sections=sections,
        weak_skills=[skill_display_name(s.skill_tag) for s in get_weak_skills(user_id)],
        strong_skills=[skill_display_name(s.skill_tag) for s in get_strong_skills(user_id)],
    )



def build_achievements(user_id: str) -> AchievementBoard:
    """Practice totals and the badge list, each marked unlocked or not."""
    sessions = storage.get_sessions(user_id)
    stats = storage.get_skill_stats(user_id)

    questions = [q for s in sessions for sec in s.sections for q in sec.questions]
    correct = sum(1 for q in questions if q.is_correct)
    minutes = round_half_up(sum(s.total_time_sec or 0.0 for s in sessions) / 60)
    practised = {sec.section_type for s in sessions for sec in s.sections}
    mastered = sum(1 for s in stats if s.mastery_score >= MASTERED_SKILL_SCORE)

    badges = [
        ("first_step", "🌟", "First step", "Complete your first practice", len(sessions) >= 1),
        ("on_a_roll", "🔥", "On a roll", "Complete 5 practices", len(sessions) >= 5),
        ("dedicated", "💎", "Dedicated", "Complete 10 practices", len(sessions) >= 10),
        ("sharp_eye", "🎯", "Sharp eye", "Answer 50 questions correctly", correct >= 50),
        ("champion", "🏆", "Champion", "Score 90% or more in a session", any((s.total_score or 0) >= 90 for s in sessions)),
        ("lightning", "⚡", "Lightning", "Practise for 30 minutes in total", minutes >= 30),
        ("mastermind", "🧠", "Mastermind", "Master 3 skills", mastered >= 3),
        ("all_rounder", "🌈", "All-rounder", "Practise all 5 sections", all(s in practised for s in SECTION_TYPES)),
    ]
    return AchievementBoard(
        user_id=user_id,
        sessions=len(sessions),
        questions=len(questions),
        correct=correct,
        total_minutes=minutes,
        achievements=[Achievement(*badge) for badge in badges],
    )


__all__ = [
    "Achievement",
    "AchievementBoard",
    "build_achievements",
    "build_dashboard",
    "Dashboard",
    "score_message",
    "SectionMastery",
    "SectionResult",
    "SessionSummary",
    "summarize_session",
]
