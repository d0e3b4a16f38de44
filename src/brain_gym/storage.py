"""Collection-level persistence for sessions, skill stats, recommendations and settings."""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Callable, TypeVar

from .db import persist_get, persist_set
from .models import (
    AppSettings,
    Recommendation,
    Session,
    SessionConfig,
    SessionQuestion,
    SessionSection,
    SkillStats,
    payload_from_dict,
)

KEY_SESSIONS = "sessions"
KEY_SKILL_STATS = "skill_stats"
KEY_RECOMMENDATIONS = "recommendations"
KEY_SETTINGS = "settings"

T = TypeVar("T")


# ── Generic helpers ───────────────────────────────────────────────────────────


def _load(key: str, convert: Callable[[dict[str, Any]], T]) -> list[T]:
    raw = persist_get(key, [])
    if not isinstance(raw, list):
        return []
    return [convert(item) for item in raw if isinstance(item, dict)]


def _upsert(key: str, record: dict[str, Any]) -> None:
    """Replace the entry with the same id, or append it."""
    all_records = persist_get(key, [])
    if not isinstance(all_records, list):
        all_records = []
    for index, existing in enumerate(all_records):
        if isinstance(existing, dict) and existing.get("id") == record["id"]:
            all_records[index] = record
            break
    else:
        all_records.append(record)
    persist_set(key, all_records)


# ── Skill stats ───────────────────────────────────────────────────────────────


def get_skill_stats(user_id: str) -> list[SkillStats]:
    return [s for s in _load(KEY_SKILL_STATS, _dict_to_stats) if s.user_id == user_id]


def get_skill_stat(user_id: str, section_type: str, skill_tag: str) -> SkillStats | None:
    for stats in _load(KEY_SKILL_STATS, _dict_to_stats):
        if (
            stats.user_id == user_id
            and stats.section_type == section_type
            and stats.skill_tag == skill_tag
        ):
            return stats
    return None


def save_skill_stats(stats: SkillStats) -> None:
    _upsert(KEY_SKILL_STATS, asdict(stats))


def _dict_to_stats(data: dict[str, Any]) -> SkillStats:
    return SkillStats(
        id=str(data["id"]),
        user_id=str(data["user_id"]),
        section_type=data["section_type"],
        skill_tag=str(data["skill_tag"]),
        mastery_score=float(data.get("mastery_score", 50.0)),
        attempts=int(data.get("attempts", 0)),
        correct_count=int(data.get("correct_count", 0)),
        avg_time_sec=float(data.get("avg_time_sec", 0.0)),
        last_updated=str(data.get("last_updated", "")),
        recent_results=[bool(r) for r in data.get("recent_results", [])],
    )


# ── Sessions ──────────────────────────────────────────────────────────────────


def get_sessions(user_id: str) -> list[Session]:
    return [s for s in _load(KEY_SESSIONS, _dict_to_session) if s.user_id == user_id]


def get_session(session_id: str) -> Session | None:
    for session in _load(KEY_SESSIONS, _dict_to_session):
        if session.id == session_id:
            return session
    return None


def save_session(session: Session) -> None:
    _upsert(KEY_SESSIONS, asdict(session))


def _dict_to_session(data: dict[str, Any]) -> Session:
    config = data.get("config") or {}
    return Session(
        id=str(data["id"]),
        user_id=str(data["user_id"]),
        mode=data["mode"],
        started_at=str(data["started_at"]),
        config=SessionConfig(
            sections=list(config.get("sections", [])),
            questions_per_section=int(config.get("questions_per_section", 0)),
            difficulty=config.get("difficulty", "medium"),
            timer_mode=config.get("timer_mode", "none"),
            time_limit_sec=config.get("time_limit_sec"),
        ),
        sections=[_dict_to_section(s) for s in data.get("sections", [])],
        ended_at=data.get("ended_at"),
        total_score=data.get("total_score"),
        total_time_sec=data.get("total_time_sec"),
    )


_SESSION_QUESTION_FIELDS = {f.name for f in fields(SessionQuestion)}


def _dict_to_session_question(data: dict[str, Any]) -> SessionQuestion:
    # Keys from older records without a matching field are dropped
    return SessionQuestion(**{k: v for k, v in data.items() if k in _SESSION_QUESTION_FIELDS})


def _dict_to_section(data: dict[str, Any]) -> SessionSection:
    return SessionSection(
        section_type=data["section_type"],
        time_limit_sec=int(data.get("time_limit_sec", 0)),
        questions=[_dict_to_session_question(q) for q in data.get("questions", [])],
        started_at=data.get("started_at"),
        ended_at=data.get("ended_at"),
    )


# ── Recommendations ───────────────────────────────────────────────────────────


def get_recommendations(user_id: str) -> list[Recommendation]:
    return [r for r in _load(KEY_RECOMMENDATIONS, _dict_to_recommendation) if r.user_id == user_id]


def save_recommendation(recommendation: Recommendation) -> None:
    _upsert(KEY_RECOMMENDATIONS, asdict(recommendation))


def _dict_to_recommendation(data: dict[str, Any]) -> Recommendation:
    return Recommendation(
        id=str(data["id"]),
        user_id=str(data["user_id"]),
        created_at=str(data.get("created_at", "")),
        type=data["type"],
        payload=payload_from_dict(data.get("payload") or {}),
        status=data.get("status", "active"),
    )


# ── Settings ──────────────────────────────────────────────────────────────────


def get_settings() -> AppSettings:
    raw = persist_get(KEY_SETTINGS, None)
    if not isinstance(raw, dict):
        return AppSettings()
    defaults = AppSettings()
    return AppSettings(
        child_name=str(raw.get("child_name", defaults.child_name)),
        default_user_id=str(raw.get("default_user_id", defaults.default_user_id)),
    )


def save_settings(settings: AppSettings) -> None:
    persist_set(KEY_SETTINGS, asdict(settings))


__all__ = [
    "get_recommendations",
    "get_session",
    "get_sessions",
    "get_settings",
    "get_skill_stat",
    "get_skill_stats",
    "KEY_RECOMMENDATIONS",
    "KEY_SESSIONS",
    "KEY_SETTINGS",
    "KEY_SKILL_STATS",
    "save_recommendation",
    "save_session",
    "save_settings",
    "save_skill_stats",
]
