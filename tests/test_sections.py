from __future__ import annotations

import pytest

from brain_gym import sections
from brain_gym.models import SECTION_SKILLS, SECTION_TYPES


@pytest.fixture(autouse=True)
def clear_section_cache():
    sections.clear_cache()
    yield
    sections.clear_cache()


def test_catalogue_covers_every_section_in_order():
    loaded = sections.load_sections()
    assert tuple(loaded) == sections.ALL_SECTIONS == SECTION_TYPES
    for section_type, config in loaded.items():
        assert [s.tag for s in config.skills] == list(SECTION_SKILLS[section_type])
        assert config.default_time_sec > 0
        assert config.default_question_count > 0


def test_load_is_cached():
    assert sections.load_sections() is sections.load_sections()


def test_get_section_config():
    config = sections.get_section_config("word_relations")
    assert config.name == "Word relations"
    assert config.default_time_sec == 600


def test_unknown_section_raises():
    with pytest.raises(ValueError):
        sections.get_section_config("history")


def test_display_names():
    assert sections.skill_display_name("rotation_position_count") == "Rotation, position and count"
    assert sections.skill_display_name("mystery") == "mystery"
    assert sections.section_display_name("numbers_in_shapes") == "Numbers in shapes"


def test_mismatched_skills_rejected(tmp_path):
    path = tmp_path / "sections.yaml"
    path.write_text(
        "- type: math\n  name: Math\n  skills:\n    - {tag: word_problems, name: Word problems}\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="missing"):
        sections.load_sections(path)


@pytest.mark.parametrize("seconds,alert", [(300, None), (61, None), (60, "warning"), (31, "warning"), (30, "critical"), (0, "critical")])
def test_time_alert(seconds, alert):
    assert sections.time_alert(seconds) == alert
