"""Section catalogue: YAML loader and lookups for display names and defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .models import OPTIONS_PER_QUESTION, SECTION_SKILLS, SECTION_TYPES, SectionType, ensure_section_type

PACKAGE_ROOT = Path(__file__).resolve().parent
CONTENT_DIR = PACKAGE_ROOT / "content"
SECTIONS_FILE = CONTENT_DIR / "sections.yaml"

ALL_SECTIONS: tuple[SectionType, ...] = SECTION_TYPES

# Exam rules: seconds left in a section when the timer turns amber, then red
WARNING_TIME_SEC = 60
CRITICAL_TIME_SEC = 30


@dataclass(slots=True)
class SkillInfo:
    tag: str
    name: str


@dataclass(slots=True)
class SectionConfig:
    type: SectionType
    name: str
    icon: str
    default_time_sec: int
    default_question_count: int
    skills: list[SkillInfo] = field(default_factory=list)


_section_cache: dict[str, SectionConfig] | None = None


def load_sections(path: Path | None = None) -> dict[str, SectionConfig]:
    """Parse the section catalogue. Cached in memory when reading the default file."""
    global _section_cache
    if _section_cache is not None and path is None:
        return _section_cache

    file_path = path or SECTIONS_FILE
    with open(file_path, encoding="utf-8") as f:
        raw: list[dict[str, Any]] = yaml.safe_load(f) or []

    sections: dict[str, SectionConfig] = {}
    for entry in raw:
        section_type = ensure_section_type(str(entry["type"]))
        skills = [SkillInfo(tag=str(s["tag"]), name=str(s["name"])) for s in entry.get("skills", [])]
        expected = set(SECTION_SKILLS[section_type])
        declared = {s.tag for s in skills}
        if declared != expected:
            raise ValueError(
                f"Section '{section_type}' skills do not match the known skill set: "
                f"missing={sorted(expected - declared)} unknown={sorted(declared - expected)}"
            )
        sections[section_type] = SectionConfig(
            type=section_type,
            name=str(entry.get("name", section_type)),
            icon=str(entry.get("icon", "")),
            default_time_sec=int(entry.get("default_time_sec", 600)),
            default_question_count=int(entry.get("default_question_count", 10)),
            skills=skills,
        )

    if path is None:
        _section_cache = sections
    return sections


def time_alert(seconds_left: float) -> str | None:
    if seconds_left <= CRITICAL_TIME_SEC:
        return "critical"
    if seconds_left <= WARNING_TIME_SEC:
        return "warning"
    return None


def clear_cache() -> None:
    """Clear the in-memory section cache."""
    global _section_cache
    _section_cache = None


def get_section_config(section_type: str) -> SectionConfig:
    config = load_sections().get(section_type)
    if config is None:
        raise ValueError(f"Unknown section type: {section_type}")
    return config


def section_display_name(section_type: str) -> str:
    config = load_sections().get(section_type)
    return config.name if config else section_type


def skill_display_name(skill_tag: str) -> str:
    """Human-readable skill name, falling back to the raw tag."""
    for config in load_sections().values():
        for skill in config.skills:
            if skill.tag == skill_tag:
                return skill.name
    return skill_tag


__all__ = [
    "ALL_SECTIONS",
    "clear_cache",
    "CRITICAL_TIME_SEC",
    "get_section_config",
    "load_sections",
    "OPTIONS_PER_QUESTION",
    "section_display_name",
    "SectionConfig",
    "SECTIONS_FILE",
    "skill_display_name",
    "SkillInfo",
    "time_alert",
    "WARNING_TIME_SEC",
]
