"""
Terminal front end for the profile quiz.

Examples:
    python -m quiz.cli --credential "$GOOGLE_ID_TOKEN"
    python -m quiz.cli            # resume with the stored credential
    python -m quiz.cli --logout
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional, TextIO

from quiz.config import QuizSettings, get_quiz_settings
from quiz.persistence import (
    JsonFileKeyValueStore,
    KeyValueStore,
    PersistenceClient,
    RedisKeyValueStore,
)
from quiz.phone import PhoneVerification, VerificationStep
from quiz.remote import SubmissionApiClient
from quiz.session import InvalidCredential, QuizSession, SessionView
from quiz.status import build_status_view
from shared.types import AnswerValue, Question, QuestionType

logger = logging.getLogger(__name__)

BACK_COMMANDS = {"b", "back"}
QUIT_COMMANDS = {"q", "quit"}
SKIP_COMMANDS = {"s", "skip"}


class InvalidChoice(ValueError):
    pass


def build_store(settings: QuizSettings, store_path: Optional[str] = None) -> KeyValueStore:
    if settings.redis_url and not store_path:
        return RedisKeyValueStore(url=settings.redis_url, namespace=settings.redis_namespace)
    return JsonFileKeyValueStore(store_path or settings.store_path)


def parse_answer(question: Question, raw: str) -> AnswerValue:
    """Turns a typed line into the answer value for ``question``."""
    if question.type == QuestionType.SELECT:
        if not raw:
            return ""
        return _pick_option(question, raw)
    if question.type == QuestionType.MULTI_SELECT:
        picks = [part.strip() for part in raw.split(",") if part.strip()]
        selected: list[str] = []
        for pick in picks:
            option = _pick_option(question, pick)
            if option not in selected:
                selected.append(option)
        return selected
    return raw


def _pick_option(question: Question, raw: str) -> str:
    if raw.isdigit():
        index = int(raw) - 1
        if 0 <= index < len(question.options):
            return question.options[index]
    for option in question.options:
        if option.lower() == raw.lower():
            return option
    raise InvalidChoice(f"'{raw}' is not one of the listed options")


def _print_question(question: Question, step: int, total: int, progress: float, out: TextIO) -> None:
    print(f"\nQuestion {step + 1} of {total} ({round(progress)}% Complete)", file=out)
    print(question.prompt, file=out)
    for i, option in enumerate(question.options, start=1):
        print(f"  {i}. {option}", file=out)
    if question.type == QuestionType.MULTI_SELECT:
        print("(comma-separated numbers)", file=out)


def _run_verification(
    verification: PhoneVerification,
    read: Callable[[str], str],
    out: TextIO,
) -> bool:
    """Drives one verification step. Returns False when the user quits."""
    if verification.step == VerificationStep.INPUT:
        print("\nVerify Your Phone Number", file=out)
        print("We'll send a verification code to your phone number.", file=out)
        raw = read(f"Phone [{verification.phone_number}] (or 'skip'): ").strip()
        if raw.lower() in QUIT_COMMANDS:
            return False
        if raw.lower() in SKIP_COMMANDS:
            verification.skip()
            return True
        verification.send_code(raw or None)
        print("Sending...", file=out)
    elif verification.step == VerificationStep.CODE:
        raw = read("Enter the 6-digit code sent to your phone (or 'skip'): ").strip()
        if raw.lower() in QUIT_COMMANDS:
            return False
        if raw.lower() in SKIP_COMMANDS:
            verification.skip()
            return True
        try:
            verification.verify_code(raw)
        except ValueError as exc:
            print(str(exc), file=out)
            return True
        print("Verifying...", file=out)
    verification.wait()
    return True


def run_quiz(
    session: QuizSession,
    read: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
) -> bool:
    """Asks questions until the wizard completes. Returns False on quit."""
    wizard = session.wizard
    while not wizard.is_complete:
        if wizard.awaiting_verification:
            if not _run_verification(session.phone_verification, read, out):
                return False
            if session.phone_verification.is_complete:
                wizard.advance()
            continue

        question = wizard.current_question
        _print_question(
            question, wizard.current_step, wizard.total_steps, wizard.progress_percent, out
        )
        raw = read("> ").strip()
        if raw.lower() in QUIT_COMMANDS:
            return False
        if raw.lower() in BACK_COMMANDS:
            wizard.retreat()
            continue

        try:
            value = parse_answer(question, raw)
        except InvalidChoice as exc:
            print(str(exc), file=out)
            continue

        step = wizard.current_step
        wizard.set_answer(question.id, value)
        pending = wizard.pending_auto_advance
        if pending is not None:
            pending.wait()
        elif wizard.current_step == step and not wizard.is_complete:
            # An auto-advance may already have fired on the timer thread.
            wizard.advance()

        if wizard.current_error is not None:
            print(wizard.current_error.message, file=out)
        if wizard.submit_error:
            print(wizard.submit_error, file=out)

    print("\nQuiz submitted successfully! We'll be in touch soon.", file=out)
    return True


def print_status(session: QuizSession, out: TextIO = sys.stdout) -> None:
    view = build_status_view(session.user, session.catalog)
    print(f"\n{view.name} <{view.email}>", file=out)
    if view.phone_number:
        print(view.phone_number, file=out)
    print(f"Status: {view.status.value}", file=out)
    print(view.message, file=out)
    if view.submitted_on:
        print(f"Submitted on: {view.submitted_on}", file=out)
    print("\nYour Answers", file=out)
    for answer in view.answers:
        print(f"- {answer.prompt}\n  {answer.value}", file=out)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Blindl profile quiz")
    parser.add_argument(
        "--credential",
        type=str,
        default=None,
        help="Google ID token to sign in with",
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Path of the local JSON store (overrides QUIZ_STORE_PATH)",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Submission backend base URL (overrides QUIZ_API_BASE_URL)",
    )
    parser.add_argument(
        "--no-phone-verification",
        action="store_true",
        help="Do not ask to verify the phone number",
    )
    parser.add_argument(
        "--logout",
        action="store_true",
        help="Forget the stored credential and exit",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_quiz_settings()
    persistence = PersistenceClient(build_store(settings, args.store))
    api_url = args.api_url or settings.api_base_url
    api_client = (
        SubmissionApiClient(api_url, timeout=settings.request_timeout_seconds)
        if api_url
        else None
    )
    session = QuizSession(
        persistence,
        api_client=api_client,
        auto_advance_delay=settings.auto_advance_delay_seconds,
        verify_phone=not args.no_phone_verification,
        verification_delay=settings.verification_delay_seconds,
    )

    if args.logout:
        session.logout()
        print("Logged out.")
        return 0

    try:
        if args.credential:
            session.sign_in(args.credential)
        elif not session.restore():
            print("Not signed in. Pass --credential with a Google ID token.")
            return 1
    except InvalidCredential:
        logger.exception("Google login error")
        print("Login failed. Please try again.")
        return 1

    try:
        if session.view == SessionView.QUIZ and not run_quiz(session):
            return 1
        print_status(session)
        return 0
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
