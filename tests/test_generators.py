"""Tests for the procedural generators and their shared helpers."""

from __future__ import annotations

import random
import re
from collections import Counter

import pytest

from brain_gym import math_gen, number_shape_gen, sentence_gen, shape_gen, word_rel_gen
from brain_gym.generator_utils import make_numeric_options, make_text_options, resolve_difficulty, spread_over, timed
from brain_gym.models import SECTION_SKILLS

GENERATORS = [
    ("math", math_gen.generate_math_questions, (65, 75, 85)),
    ("sentence_completion", sentence_gen.generate_sentence_questions, (45, 55, 65)),
    ("word_relations", word_rel_gen.generate_word_relation_questions, (40, 50, 60)),
    ("shapes", shape_gen.generate_shape_questions, (50, 60, 75)),
    ("numbers_in_shapes", number_shape_gen.generate_number_shape_questions, (60, 70, 85)),
]


class TestHelpers:
    def test_spread_over_covers_every_item(self):
        picks = spread_over(["a", "b", "c"], 7, random.Random(0))
        counts = Counter(picks)
        assert len(picks) == 7
        assert all(counts[item] >= 2 for item in "abc")

    def test_spread_over_fewer_than_items(self):
        assert len(spread_over(list("abcdef"), 2, random.Random(0))) == 2

    def test_spread_over_empty(self):
        assert spread_over([], 5, random.Random(0)) == []
        assert spread_over(["a"], 0, random.Random(0)) == []

    def test_numeric_options(self):
        for seed in range(30):
            options, index = make_numeric_options(7, [7, 0, -2, 12], random.Random(seed))
            assert len(set(options)) == 4
            assert options[index] == "7"
            assert all(int(o) > 0 for o in options)
            assert "12" in options

    def test_text_options_need_three_distinct_distractors(self):
        with pytest.raises(ValueError):
            make_text_options("a", ["b", "b", "a"], random.Random(0))
        options, index = make_text_options("a", ["b", "c", "c", "d", "e"], random.Random(0))
        assert sorted(options) == ["a", "b", "c", "d"]
        assert options[index] == "a"

    def test_resolve_difficulty(self):
        assert resolve_difficulty("hard", random.Random(0)) == "hard"
        assert resolve_difficulty("adaptive", random.Random(0)) in {"easy", "medium", "hard"}

    def test_timed(self):
        assert [timed(d, 1, 2, 3) for d in ("easy", "medium", "hard")] == [1, 2, 3]


class TestAllGenerators:
    @pytest.mark.parametrize("section,generate,times", GENERATORS)
    @pytest.mark.parametrize("difficulty", ["easy", "medium", "hard", "adaptive"])
    def test_question_invariants(self, section, generate, times, difficulty):
        for seed in range(8):
            questions = generate(difficulty, 12, random.Random(seed))
            assert len(questions) == 12
            for q in questions:
                assert q.section_type == section
                assert q.skill_tag in SECTION_SKILLS[section]
                assert q.difficulty in ("easy", "medium", "hard")
                if difficulty != "adaptive" and section != "sentence_completion":
                    assert q.difficulty == difficulty
                assert len(q.options) == 4
                assert len(set(q.options)) == 4
                assert 0 <= q.correct_option < 4
                assert q.recommended_time_sec == dict(zip(("easy", "medium", "hard"), times))[q.difficulty]
                assert q.stem
                assert q.explanation

    @pytest.mark.parametrize("section,generate,times", GENERATORS)
    def test_ids_have_section_prefix_and_are_unique(self, section, generate, times):
        questions = generate("medium", 30, random.Random(1))
        assert len({q.id for q in questions}) == 30
        assert len({q.id.split("_")[0] for q in questions}) == 1


class TestMath:
    def test_every_skill_covered(self):
        questions = math_gen.generate_math_questions("medium", 14, random.Random(3))
        assert {q.skill_tag for q in questions} == set(SECTION_SKILLS["math"])

    def test_multiplication_division_answers(self):
        for seed in range(40):
            generated = math_gen._multiplication_division("hard", random.Random(seed))
            a, op, b = re.match(r"What is (\d+) (.) (\d+)\?", generated.stem).groups()
            expected = int(a) * int(b) if op == "×" else int(a) // int(b)
            assert generated.options[generated.correct_option] == str(expected)

    def test_arithmetic_sequence_answer(self):
        for seed in range(40):
            generated = math_gen._seq_arithmetic("medium", random.Random(seed))
            numbers = [int(n) for n in re.findall(r"\d+", generated.stem)]
            step = numbers[1] - numbers[0]
            assert generated.options[generated.correct_option] == str(numbers[-1] + step)

    def test_end_time_format(self):
        generated = math_gen._tc_end_time("easy", random.Random(5))
        assert all(re.fullmatch(r"\d{1,2}:\d{2}", o) for o in generated.options)


class TestSentences:
    def test_bank_loads_every_skill(self):
        bank = sentence_gen.load_sentence_bank()
        assert set(bank) == set(SECTION_SKILLS["sentence_completion"])
        assert all(sentence_gen.BLANK in item.sentence for items in bank.values() for item in items)

    def test_correct_option_is_the_answer(self):
        bank = sentence_gen.load_sentence_bank()
        answers = {item.sentence: item.answer for items in bank.values() for item in items}
        for q in sentence_gen.generate_sentence_questions("medium", 12, random.Random(2)):
            assert q.options[q.correct_option] == answers[q.stem]

    def test_no_repeats_until_bank_exhausted(self):
        bank = sentence_gen.load_sentence_bank()
        total = sum(len(items) for items in bank.values())
        questions = sentence_gen.generate_sentence_questions("medium", total, random.Random(6))
        assert len({q.stem for q in questions}) == total

    def test_level_filter(self):
        questions = sentence_gen.generate_sentence_questions("easy", 12, random.Random(7))
        assert {q.difficulty for q in questions} == {"easy"}


class TestWordRelations:
    def test_correct_pair_shares_the_stem_relation(self):
        banks = {b.skill: {word_rel_gen.format_pair(p) for p in b.pairs} for b in word_rel_gen.load_relation_banks()}
        for q in word_rel_gen.generate_word_relation_questions("medium", 21, random.Random(8)):
            assert q.stem in banks[q.skill_tag]
            assert q.options[q.correct_option] in banks[q.skill_tag]
            wrong = [o for i, o in enumerate(q.options) if i != q.correct_option]
            assert not any(o in banks[q.skill_tag] for o in wrong)

    def test_every_relation_has_a_bank(self):
        skills = {b.skill for b in word_rel_gen.load_relation_banks()}
        assert skills == set(SECTION_SKILLS["word_relations"])


class TestShapes:
    def test_marked_as_shape_questions(self):
        questions = shape_gen.generate_shape_questions("medium", 16, random.Random(9))
        assert all(q.question_type == "shape" for q in questions)

    def test_odd_one_out_uses_letters(self):
        for seed in range(10):
            puzzle = shape_gen._odd_kind(random.Random(seed))
            assert puzzle.answer in shape_gen.OPTION_LABELS
            assert f"{puzzle.answer}: " in puzzle.stem

    def test_grid_frame_answer(self):
        puzzle = shape_gen._grid_frame(random.Random(1))
        assert puzzle.answer not in puzzle.distractors[:3]
        assert puzzle.answer.split()[-1] in puzzle.stem


class TestNumberShapes:
    def test_pyramid_has_one_hidden_cell(self):
        for seed in range(30):
            puzzle = number_shape_gen._pyramid("hard", random.Random(seed))
            rows_text = puzzle.stem.split("Rows from top to bottom: ")[1].split(". What")[0]
            rows = [row.split() for row in rows_text.split(" / ")]
            assert len(rows[-1]) == 4
            assert sum(row.count("?") for row in rows) == 1

    def test_flow_values_stay_positive(self):
        for seed in range(60):
            puzzle = number_shape_gen._flow("hard", random.Random(seed))
            assert puzzle.answer > 0

    def test_grid_row_sums(self):
        for seed in range(60):
            rng = random.Random(seed)
            puzzle = number_shape_gen._grid("medium", rng)
            if "adds up to" not in puzzle.explanation:
                continue
            target = int(re.search(r"adds up to (\d+)", puzzle.explanation).group(1))
            rows = puzzle.stem.split("Rows: ")[1].split(". What")[0].split(" / ")
            for row in rows:
                cells = row.split()
                if "?" in cells:
                    known = sum(int(c) for c in cells if c != "?")
                    assert target - known == puzzle.answer
                else:
                    assert sum(int(c) for c in cells) == target
