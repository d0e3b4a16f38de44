"""Brain Gym: adaptive practice engine for reasoning exam preparation."""

from .adaptive import (
    difficulty_from_mastery,
    get_strong_skills,
    get_weak_skills,
    select_adaptive_questions,
)
from .db import init_db
from .mastery import update_mastery
from .plan import generate_weekly_plan
from .question_pool import QuestionPool
from .session import SessionManager, SessionStateError

__all__ = [
    "difficulty_from_mastery",
    "generate_weekly_plan",
    "get_strong_skills",
    "get_weak_skills",
    "init_db",
    "QuestionPool",
    "select_adaptive_questions",
    "SessionManager",
    "SessionStateError",
    "update_mastery",
]
