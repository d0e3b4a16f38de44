"""Weekly practice plan recommendations."""

from __future__ import annotations

import uuid

from loguru import logger

from . import storage
from .adaptive import get_weak_skills
from .db import now_iso
from .mastery import round_half_up
from .models import Recommendation, RecommendationPayload, RecommendationType
from .sections import section_display_name, skill_display_name

FOCUS_QUESTIONS = 10
FOCUS_MINUTES = 15
ENCOURAGEMENT_QUESTIONS = 5
ENCOURAGEMENT_MINUTES = 10
MAINTENANCE_QUESTIONS = 20
MAINTENANCE_MINUTES = 30


def _recommendation(user_id: str, rec_type: RecommendationType, payload: RecommendationPayload, suffix: str) -> Recommendation:
    return Recommendation(
        id=f"rec_{uuid.uuid4().hex[:12]}_{suffix}",
        user_id=user_id,
        created_at=now_iso(),
        type=rec_type,
        payload=payload,
    )


def generate_weekly_plan(user_id: str) -> list[Recommendation]:
    """Build and persist this week's recommendations for a learner."""
    weak = get_weak_skills(user_id)
    has_history = bool(storage.get_skill_stats(user_id))
    recommendations: list[Recommendation] = []

    for stats in weak:
        message = (
            f"Practise {skill_display_name(stats.skill_tag)} "
            f"({section_display_name(stats.section_type)}): current score {round_half_up(stats.mastery_score)}"
        )
        payload = RecommendationPayload(
            message=message,
            section_type=stats.section_type,
            skill_tag=stats.skill_tag,
            suggested_questions=FOCUS_QUESTIONS,
            suggested_minutes=FOCUS_MINUTES,
        )
        recommendations.append(_recommendation(user_id, "focus_area", payload, stats.skill_tag))

    if not weak and has_history:
        payload = RecommendationPayload(
            message="Well done! Every topic is in good shape. Keep practising to stay sharp!",
            suggested_questions=ENCOURAGEMENT_QUESTIONS,
            suggested_minutes=ENCOURAGEMENT_MINUTES,
        )
        recommendations.append(_recommendation(user_id, "encouragement", payload, "encouragement"))

    if weak:
        summary = f"Weekly plan: {len(weak)} topic{'s' if len(weak) != 1 else ''} to strengthen"
        questions, minutes = len(weak) * FOCUS_QUESTIONS, len(weak) * FOCUS_MINUTES
    else:
        summary = "Weekly plan: maintenance practice"
        questions, minutes = MAINTENANCE_QUESTIONS, MAINTENANCE_MINUTES
    payload = RecommendationPayload(message=summary, suggested_questions=questions, suggested_minutes=minutes)
    recommendations.append(_recommendation(user_id, "practice_plan", payload, "weekly"))

    for recommendation in recommendations:
        storage.save_recommendation(recommendation)
    logger.info("Weekly plan for {}: {} recommendations ({} weak skills)", user_id, len(recommendations), len(weak))
    return recommendations


def get_active_recommendations(user_id: str) -> list[Recommendation]:
    return [r for r in storage.get_recommendations(user_id) if r.status == "active"]


__all__ = ["generate_weekly_plan", "get_active_recommendations"]
