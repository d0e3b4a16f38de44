from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, cast

SectionType = Literal["math", "sentence_completion", "word_relations", "shapes", "numbers_in_shapes"]
Difficulty = Literal["easy", "medium", "hard", "adaptive"]
QuestionType = Literal["text", "shape"]
SessionMode = Literal["practice", "adaptive", "mini_exam", "full_exam"]
TimerMode = Literal["none", "per_question", "per_section"]
RecommendationType = Literal["practice_plan", "focus_area", "encouragement"]
RecommendationStatus = Literal["active", "completed", "dismissed"]

MathSkill = Literal[
    "basic_arithmetic",
    "word_problems",
    "time_clock",
    "money_change",
    "multiplication_division",
    "number_sequences",
    "math_logic",
]
SentenceSkill = Literal[
    "vocabulary",
    "logical_connection",
    "semantic_context",
    "contrast_completion",
    "general_knowledge",
    "idioms_proverbs",
]
WordRelationSkill = Literal[
    "synonyms_antonyms",
    "part_whole",
    "tool_use",
    "material_product",
    "category_item",
    "cause_effect",
    "verbal_analogy",
]
ShapeSkill = Literal[
    "shape_analogy",
    "transformation",
    "graphic_pattern",
    "odd_one_out",
    "fill_frame",
    "shape_sequence",
    "graphic_rule",
    "rotation_position_count",
    "fill_frame_direction",
    "multi_rule_jump",
]
NumbersInShapesSkill = Literal[
    "divided_circle",
    "number_pyramid",
    "number_flow",
    "number_grid",
    "number_pattern",
]
SkillTag = MathSkill | SentenceSkill | WordRelationSkill | ShapeSkill | NumbersInShapesSkill

SECTION_TYPES: tuple[SectionType, ...] = (
    "math",
    "sentence_completion",
    "word_relations",
    "shapes",
    "numbers_in_shapes",
)
DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "medium", "hard", "adaptive")
CONCRETE_DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "medium", "hard")
SESSION_MODES: tuple[SessionMode, ...] = ("practice", "adaptive", "mini_exam", "full_exam")
TIMER_MODES: tuple[TimerMode, ...] = ("none", "per_question", "per_section")

SECTION_SKILLS: dict[SectionType, tuple[str, ...]] = {
    "math": (
        "basic_arithmetic",
        "word_problems",
        "time_clock",
        "money_change",
        "multiplication_division",
        "number_sequences",
        "math_logic",
    ),
    "sentence_completion": (
        "vocabulary",
        "logical_connection",
        "semantic_context",
        "contrast_completion",
        "general_knowledge",
        "idioms_proverbs",
    ),
    "word_relations": (
        "synonyms_antonyms",
        "part_whole",
        "tool_use",
        "material_product",
        "category_item",
        "cause_effect",
        "verbal_analogy",
    ),
    "shapes": (
        "shape_analogy",
        "transformation",
        "graphic_pattern",
        "odd_one_out",
        "fill_frame",
        "shape_sequence",
        "graphic_rule",
        "rotation_position_count",
        "fill_frame_direction",
        "multi_rule_jump",
    ),
    "numbers_in_shapes": (
        "divided_circle",
        "number_pyramid",
        "number_flow",
        "number_grid",
        "number_pattern",
    ),
}

OPTIONS_PER_QUESTION = 4


@dataclass(slots=True, frozen=True)
class Question:
    """A self-describing multiple choice question. Immutable once generated."""

    id: str
    section_type: SectionType
    skill_tag: str
    difficulty: Difficulty
    stem: str
    options: tuple[str, ...]
    correct_option: int
    explanation: str
    recommended_time_sec: int
    question_type: QuestionType = "text"
    generator_source: Literal["generated", "manual"] = "generated"
    quality_score: int = 88
    is_active: bool = True

    @property
    def correct_answer(self) -> str:
        return self.options[self.correct_option]


@dataclass(slots=True)
class SkillStats:
    id: str
    user_id: str
    section_type: SectionType
    skill_tag: str
    mastery_score: float
    attempts: int
    correct_count: int
    avg_time_sec: float
    last_updated: str
    recent_results: list[bool] = field(default_factory=list)


@dataclass(slots=True)
class RecommendationPayload:
    message: str
    section_type: SectionType | None = None
    skill_tag: str | None = None
    suggested_questions: int | None = None
    suggested_minutes: int | None = None


@dataclass(slots=True)
class Recommendation:
    id: str
    user_id: str
    created_at: str
    type: RecommendationType
    payload: RecommendationPayload
    status: RecommendationStatus = "active"


@dataclass(slots=True)
class SessionConfig:
    sections: list[SectionType]
    questions_per_section: int
    difficulty: Difficulty = "medium"
    timer_mode: TimerMode = "none"
    time_limit_sec: int | None = None


@dataclass(slots=True)
class SessionQuestion:
    id: str
    question_id: str
    section_type: SectionType
    skill_tag: str
    shown_at: str | None = None
    answered_at: str | None = None
    selected_option: int | None = None
    is_correct: bool | None = None
    time_spent_sec: float | None = None


@dataclass(slots=True)
class SessionSection:
    section_type: SectionType
    time_limit_sec: int
    questions: list[SessionQuestion] = field(default_factory=list)
    started_at: str | None = None
    ended_at: str | None = None


@dataclass(slots=True)
class Session:
    id: str
    user_id: str
    mode: SessionMode
    started_at: str
    config: SessionConfig
    sections: list[SessionSection] = field(default_factory=list)
    ended_at: str | None = None
    total_score: int | None = None
    total_time_sec: float | None = None


@dataclass(slots=True)
class AppSettings:
    child_name: str = "Learner"
    default_user_id: str = "child"


def _ensure_member(value: str, allowed: tuple[str, ...], label: str) -> str:
    normalized = value.strip().lower()
    if normalized not in allowed:
        raise ValueError(f"Unsupported {label}: {value}")
    return normalized


def ensure_section_type(value: str) -> SectionType:
    """Normalise and validate a section type string."""

    return cast(SectionType, _ensure_member(value, SECTION_TYPES, "section type"))


def ensure_difficulty(value: str) -> Difficulty:
    return cast(Difficulty, _ensure_member(value, DIFFICULTIES, "difficulty"))


def ensure_session_mode(value: str) -> SessionMode:
    return cast(SessionMode, _ensure_member(value, SESSION_MODES, "session mode"))


def ensure_timer_mode(value: str) -> TimerMode:
    return cast(TimerMode, _ensure_member(value, TIMER_MODES, "timer mode"))


def skill_belongs_to_section(section_type: str, skill_tag: str) -> bool:
    """Return True when the skill tag is one of the section's skills."""

    return skill_tag in SECTION_SKILLS.get(cast(SectionType, section_type), ())


def ensure_skill_tag(section_type: str, skill_tag: str) -> str:
    section = ensure_section_type(section_type)
    if not skill_belongs_to_section(section, skill_tag):
        raise ValueError(f"Skill '{skill_tag}' does not belong to section '{section}'")
    return skill_tag


def section_of_skill(skill_tag: str) -> SectionType:
    for section, skills in SECTION_SKILLS.items():
        if skill_tag in skills:
            return section
    raise ValueError(f"Unknown skill tag: {skill_tag}")


def skill_stats_id(user_id: str, section_type: str, skill_tag: str) -> str:
    return f"{user_id}_{section_type}_{skill_tag}"


def payload_from_dict(data: dict[str, Any]) -> RecommendationPayload:
    return RecommendationPayload(
        message=str(data.get("message", "")),
        section_type=data.get("section_type"),
        skill_tag=data.get("skill_tag"),
        suggested_questions=data.get("suggested_questions"),
        suggested_minutes=data.get("suggested_minutes"),
    )


__all__ = [
    "AppSettings",
    "CONCRETE_DIFFICULTIES",
    "DIFFICULTIES",
    "Difficulty",
    "ensure_difficulty",
    "ensure_section_type",
    "ensure_session_mode",
    "ensure_skill_tag",
    "ensure_timer_mode",
    "MathSkill",
    "NumbersInShapesSkill",
    "OPTIONS_PER_QUESTION",
    "payload_from_dict",
    "Question",
    "QuestionType",
    "Recommendation",
    "RecommendationPayload",
    "RecommendationStatus",
    "RecommendationType",
    "SECTION_SKILLS",
    "SECTION_TYPES",
    "section_of_skill",
    "SectionType",
    "SentenceSkill",
    "Session",
    "SESSION_MODES",
    "SessionConfig",
    "SessionMode",
    "SessionQuestion",
    "SessionSection",
    "ShapeSkill",
    "skill_belongs_to_section",
    "skill_stats_id",
    "SkillStats",
    "SkillTag",
    "TIMER_MODES",
    "TimerMode",
    "WordRelationSkill",
]
