"""Session lifecycle: build a session, walk its questions, grade answers and persist the result."""

from __future__ import annotations

import random
import time
import uuid
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from . import storage
from .adaptive import select_adaptive_questions
from .db import now_iso
from .mastery import round_half_up, update_mastery
from .models import (
    OPTIONS_PER_QUESTION,
    Question,
    Session,
    SessionConfig,
    SessionQuestion,
    SessionSection,
    SectionType,
    ensure_difficulty,
    ensure_section_type,
    ensure_session_mode,
)
from .question_pool import QuestionPool
from .sections import get_section_config


class SessionStateError(RuntimeError):
    """Raised when a session operation needs a session that was never started."""


@dataclass(slots=True)
class AnswerResult:
    is_correct: bool
    correct_option: int
    explanation: str
    time_spent_sec: float
    mastery_score: float


@dataclass(slots=True)
class SessionProgress:
    section: int
    question: int
    total_questions: int
    total_sections: int


def _new_session_question(question: Question) -> SessionQuestion:
    return SessionQuestion(
        id=f"sq_{uuid.uuid4().hex[:12]}",
        question_id=question.id,
        section_type=question.section_type,
        skill_tag=question.skill_tag,
    )


class SessionManager:
    """Drives one learner's session at a time.

    The clock is a monotonic seconds source used to measure answer time when
    the caller does not report it.
    """

    def __init__(
        self,
        user_id: str,
        pool: QuestionPool,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.user_id = user_id
        self.pool = pool
        self.rng = rng or pool.rng
        self.clock = clock or time.monotonic
        self.session: Session | None = None
        self.section_index = 0
        self.question_index = 0
        self._shown_at_clock: float | None = None
        self._section_started_clock: float | None = None

    # ── Setup ────────────────────────────────────────────────────────────────

    def start_session(self, mode: str, config: SessionConfig) -> Session:
        session_mode = ensure_session_mode(mode)
        section_types = [ensure_section_type(s) for s in config.sections]
        difficulty = ensure_difficulty(config.difficulty or "medium")
        if config.questions_per_section < 0:
            raise ValueError(f"questions_per_section must be non-negative, got {config.questions_per_section}")

        counts = {s: config.questions_per_section or get_section_config(s).default_question_count for s in section_types}

        if session_mode == "adaptive":
            picked = select_adaptive_questions(
                self.user_id, sum(counts.values()), pool=self.pool, rng=self.rng, sections=section_types
            )
            grouped: dict[SectionType, list[Question]] = {}
            for question in picked:
                grouped.setdefault(question.section_type, []).append(question)
        else:
            grouped = {s: self.pool.generate_fresh(s, difficulty, counts[s]) for s in section_types}

        sections = [
            SessionSection(
                section_type=s,
                time_limit_sec=config.time_limit_sec or get_section_config(s).default_time_sec,
                questions=[_new_session_question(q) for q in grouped.get(s, [])],
            )
            for s in section_types
        ]

        self.session = Session(
            id=f"session_{uuid.uuid4().hex[:12]}",
            user_id=self.user_id,
            mode=session_mode,
            started_at=now_iso(),
            config=config,
            sections=sections,
        )
        self.section_index = 0
        self.question_index = 0
        if sections:
            sections[0].started_at = now_iso()
            self._section_started_clock = self.clock()
            self._mark_shown()

        logger.info(
            "Started {} session {} for {}: {} questions in {} sections",
            session_mode,
            self.session.id,
            self.user_id,
            sum(len(s.questions) for s in sections),
            len(sections),
        )
        return self.session

    # ── Navigation ───────────────────────────────────────────────────────────

    def _section(self) -> SessionSection | None:
        if self.session is None or self.section_index >= len(self.session.sections):
            return None
        return self.session.sections[self.section_index]

    def _session_question(self) -> SessionQuestion | None:
        section = self._section()
        if section is None or self.question_index >= len(section.questions):
            return None
        return section.questions[self.question_index]

    def _mark_shown(self) -> None:
        sq = self._session_question()
        if sq is not None:
            sq.shown_at = now_iso()
            self._shown_at_clock = self.clock()

    def current_question(self) -> Question | None:
        sq = self._session_question()
        return self.pool.get_by_id(sq.question_id) if sq else None

    def next_question(self) -> bool:
        """Advance within the section. False when the section has no more questions."""
        section = self._section()
        if section is None or self.question_index + 1 >= len(section.questions):
            return False
        self.question_index += 1
        self._mark_shown()
        return True

    def next_section(self) -> bool:
        """Close the current section and open the next. False when the session is over."""
        section = self._section()
        if section is None or self.session is None:
            return False
        section.ended_at = now_iso()
        if self.section_index + 1 >= len(self.session.sections):
            return False
        self.section_index += 1
        self.question_index = 0
        self.session.sections[self.section_index].started_at = now_iso()
        self._section_started_clock = self.clock()
        self._mark_shown()
        return True

    def get_progress(self) -> SessionProgress:
        if self.session is None:
            return SessionProgress(section=0, question=0, total_questions=0, total_sections=0)
        section = self._section()
        return SessionProgress(
            section=self.section_index + 1,
            question=self.question_index + 1,
            total_questions=len(section.questions) if section else 0,
            total_sections=len(self.session.sections),
        )

    def section_time_left(self) -> float | None:
        """Seconds left in the open section, or None when the session is not timed per section."""
        section = self._section()
        if section is None or self.session is None or self.session.config.timer_mode != "per_section":
            return None
        started = self._section_started_clock if self._section_started_clock is not None else self.clock()
        return max(0.0, section.time_limit_sec - (self.clock() - started))

    # ── Answers ──────────────────────────────────────────────────────────────

    def answer_question(self, selected_option: int, time_spent_sec: float | None = None) -> AnswerResult | None:
        """Grade the current question and feed the result into the mastery store.

        Returns None when there is nothing to answer: no session, an empty
        section, an unknown question id or a question already answered.
        """
        sq = self._session_question()
        if sq is None or sq.answered_at is not None:
            return None
        question = self.pool.get_by_id(sq.question_id)
        if question is None:
            logger.warning("Question {} is not in the pool", sq.question_id)
            return None
        if not 0 <= selected_option < OPTIONS_PER_QUESTION:
            raise ValueError(f"selected_option must be between 0 and {OPTIONS_PER_QUESTION - 1}, got {selected_option}")

        if time_spent_sec is None:
            started = self._shown_at_clock if self._shown_at_clock is not None else self.clock()
            time_spent_sec = float(round_half_up(max(0.0, self.clock() - started)))

        is_correct = selected_option == question.correct_option
        stats = update_mastery(
            self.user_id,
            question.section_type,
            question.skill_tag,
            is_correct,
            time_spent_sec,
            question.recommended_time_sec,
        )

        sq.answered_at = now_iso()
        sq.selected_option = selected_option
        sq.is_correct = is_correct
        sq.time_spent_sec = time_spent_sec
        return AnswerResult(
            is_correct=is_correct,
            correct_option=question.correct_option,
            explanation=question.explanation,
            time_spent_sec=time_spent_sec,
            mastery_score=stats.mastery_score,
        )

    # ── Teardown ─────────────────────────────────────────────────────────────

    def end_session(self) -> Session:
        if self.session is None:
            raise SessionStateError("No active session to end")

        now = now_iso()
        section = self._section()
        if section is not None and section.ended_at is None:
            section.ended_at = now

        answered = [q for s in self.session.sections for q in s.questions if q.answered_at is not None]
        correct = sum(1 for q in answered if q.is_correct)
        self.session.ended_at = now
        self.session.total_score = round_half_up(correct / len(answered) * 100) if answered else 0
        self.session.total_time_sec = sum(q.time_spent_sec or 0.0 for q in answered)

        storage.save_session(self.session)
        logger.info(
            "Ended session {}: {}% ({} of {} correct)",
            self.session.id,
            self.session.total_score,
            correct,
            len(answered),
        )
        return self.session


__all__ = ["AnswerResult", "SessionManager", "SessionProgress", "SessionStateError"]
