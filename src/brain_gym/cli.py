"""Command line front end: play sessions in the terminal and inspect progress."""

from __future__ import annotations

import argparse
import os
import random
import sys
from typing import Callable, Sequence

from loguru import logger

from . import storage
from .models import CONCRETE_DIFFICULTIES, SECTION_TYPES, SessionConfig
from .plan import generate_weekly_plan
from .question_pool import QuestionPool
from .report import build_achievements, build_dashboard, summarize_session
from .sections import section_display_name, time_alert
from .session import SessionManager

InputFn = Callable[[str], str]

QUIT_WORDS = {"q", "quit", "exit"}


def configure_logging(verbose: bool = False) -> None:
    level = "DEBUG" if verbose else os.environ.get("BRAIN_GYM_LOG_LEVEL", "WARNING").upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="brain-gym", description="Adaptive practice for reasoning exams")
    parser.add_argument("--user", help="Learner id (defaults to the saved default user)")
    parser.add_argument("--seed", type=int, help="Seed for reproducible question generation")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    practice = commands.add_parser("practice", help="Practise one section")
    practice.add_argument("section", choices=SECTION_TYPES)
    practice.add_argument("--difficulty", choices=(*CONCRETE_DIFFICULTIES, "adaptive"), default="medium")
    practice.add_argument("--count", type=int, default=10, help="Number of questions")

    adaptive = commands.add_parser("adaptive", help="Adaptive session weighted towards weak skills")
    adaptive.add_argument("--sections", nargs="+", choices=SECTION_TYPES, default=list(SECTION_TYPES))
    adaptive.add_argument("--per-section", type=int, default=4)

    exam = commands.add_parser("exam", help="Timed exam; no sections means a full exam")
    exam.add_argument("--sections", nargs="+", choices=SECTION_TYPES)
    exam.add_argument("--per-section", type=int, default=0, help="Questions per section (0 = section default)")

    commands.add_parser("stats", help="Show the learner dashboard")
    commands.add_parser("achievements", help="Show practice totals and badges")
    commands.add_parser("plan", help="Generate this week's practice plan")

    settings = commands.add_parser("settings", help="Show or change settings")
    settings.add_argument("--child-name")
    settings.add_argument("--default-user")
    return parser


def _ask_option(question_text: str, input_fn: InputFn) -> int | None:
    """Prompt until the answer is 1-4. None means the learner quit."""
    while True:
        try:
            raw = input_fn(question_text).strip().lower()
        except EOFError:
            return None
        if raw in QUIT_WORDS:
            return None
        if raw.isdigit() and 1 <= int(raw) <= 4:
            return int(raw) - 1
        print("Please answer with a number from 1 to 4 (or q to stop).")


def play_session(manager: SessionManager, input_fn: InputFn) -> None:
    """Run the started session interactively, then end and summarise it."""
    session = manager.session
    if session is None:
        return
    quit_requested = False
    while not quit_requested:
        progress = manager.get_progress()
        time_left = manager.section_time_left()
        if time_left is not None and time_left <= 0:
            print("Time is up for this section.")
            question = None
        else:
            question = manager.current_question()
        if question is not None:
            alert = time_alert(time_left) if time_left is not None else None
            if alert is not None:
                print(f"{'Hurry' if alert == 'critical' else 'Heads up'}: {time_left:.0f}s left in this section.")
            section = session.sections[manager.section_index]
            print(
                f"\n[{section_display_name(section.section_type)} "
                f"{progress.question}/{progress.total_questions}] {question.stem}"
            )
            for number, option in enumerate(question.options, start=1):
                print(f"  {number}. {option}")
            selected = _ask_option("Your answer: ", input_fn)
            if selected is None:
                quit_requested = True
                continue
            result = manager.answer_question(selected)
            if result is not None:
                verdict = "Correct!" if result.is_correct else f"Not quite. The answer is {result.correct_option + 1}."
                print(f"{verdict}\n{result.explanation}")
            if manager.next_question():
                continue
        if not manager.next_section():
            break

    finished = manager.end_session()
    summary = summarize_session(finished)
    print(f"\nScore: {summary.score}% ({summary.correct}/{summary.total}) in {summary.total_time_sec:.0f}s")
    for result in summary.sections:
        print(f"  {result.name}: {result.correct}/{result.total} ({result.percent}%)")
    print(summary.message)


def _print_stats(user_id: str) -> None:
    dashboard = build_dashboard(user_id)
    print(f"Learner: {user_id}")
    print(f"Sessions: {dashboard.sessions}, answered: {dashboard.questions_answered}, accuracy: {dashboard.accuracy}%")
    print(f"Average score: {dashboard.average_score}%, practice time: {dashboard.total_minutes} min")
    print(f"Careless errors: {dashboard.careless_errors}, understanding errors: {dashboard.understanding_errors}")
    for section in dashboard.sections:
        print(f"  {section.name}: mastery {section.mean_mastery} ({section.skills_seen} skills practised)")
    if dashboard.weak_skills:
        print("Needs work: " + ", ".join(dashboard.weak_skills))
    if dashboard.strong_skills:
        print("Strong: " + ", ".join(dashboard.strong_skills))


def _print_achievements(user_id: str) -> None:
    board = build_achievements(user_id)
    print(f"Learner: {user_id}")
    print(f"Sessions: {board.sessions}, correct answers: {board.correct}, practice time: {board.total_minutes} min")
    print(f"Badges: {len(board.unlocked)}/{len(board.achievements)}")
    for achievement in board.achievements:
        mark = "x" if achievement.unlocked else " "
        print(f"  [{mark}] {achievement.icon} {achievement.title}: {achievement.description}")


def main(argv: Sequence[str] | None = None, input_fn: InputFn = input) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    settings = storage.get_settings()
    user_id: str = args.user or settings.default_user_id
    rng = random.Random(args.seed)

    try:
        if args.command == "stats":
            _print_stats(user_id)
            return
        if args.command == "achievements":
            _print_achievements(user_id)
            return
        if args.command == "plan":
            for recommendation in generate_weekly_plan(user_id):
                print(f"- {recommendation.payload.message}")
            return
        if args.command == "settings":
            if args.child_name:
                settings.child_name = args.child_name
            if args.default_user:
                settings.default_user_id = args.default_user
            if args.child_name or args.default_user:
                storage.save_settings(settings)
            print(f"Child name: {settings.child_name}\nDefault user: {settings.default_user_id}")
            return

        manager = SessionManager(user_id, QuestionPool(rng=rng), rng=rng)
        if args.command == "practice":
            if args.count <= 0:
                parser.error("--count must be positive")
            config = SessionConfig(sections=[args.section], questions_per_section=args.count, difficulty=args.difficulty)
            manager.start_session("practice", config)
        elif args.command == "adaptive":
            if args.per_section <= 0:
                parser.error("--per-section must be positive")
            config = SessionConfig(sections=list(args.sections), questions_per_section=args.per_section, difficulty="adaptive")
            manager.start_session("adaptive", config)
        else:
            sections = list(args.sections or SECTION_TYPES)
            mode = "mini_exam" if args.sections else "full_exam"
            config = SessionConfig(sections=sections, questions_per_section=args.per_section, timer_mode="per_section")
            manager.start_session(mode, config)

        print(f"Hi {settings.child_name}! Answer with 1-4, or q to stop.")
        play_session(manager, input_fn)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
