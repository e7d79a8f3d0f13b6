"""
Step-by-step quiz wizard.

The wizard shows one question per step. Advancing validates the current
answer; the last successful advance hands the answers to a submit callback
and moves to the terminal ``Completed`` state.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from quiz.persistence import PersistenceError
from quiz.phone import PhoneVerification
from quiz.scheduler import ScheduledTask, Scheduler, ThreadingScheduler
from shared.questions import PHONE_QUESTION_ID, QuestionCatalog
from shared.types import AnswerSet, Question, QuestionType, ValidationError
from shared.validation import is_empty, validate, validate_answers

logger = logging.getLogger(__name__)

AUTO_ADVANCE_DELAY = 0.3  # seconds
SUBMIT_ERROR_MESSAGE = (
    "There was an error submitting your quiz. "
    "Please try again or contact support."
)

SubmitCallback = Callable[[AnswerSet], None]


class WizardState:
    """
    Navigation and validation state of the quiz.

    All mutating methods hold a re-entrant lock, so auto-advance callbacks
    fired from scheduler threads never interleave with user actions.
    """

    def __init__(
        self,
        catalog: Optional[QuestionCatalog] = None,
        *,
        on_complete: Optional[SubmitCallback] = None,
        scheduler: Optional[Scheduler] = None,
        auto_advance_delay: float = AUTO_ADVANCE_DELAY,
        phone_verification: Optional[PhoneVerification] = None,
        initial_answers: Optional[AnswerSet] = None,
    ):
        self.catalog = catalog or QuestionCatalog()
        self.on_complete = on_complete
        self.scheduler = scheduler or ThreadingScheduler()
        self.auto_advance_delay = auto_advance_delay
        self.phone_verification = phone_verification

        self.current_step = 0
        self.answers: AnswerSet = dict(initial_answers or {})
        self.errors: Dict[str, ValidationError] = {}
        self.submit_error: Optional[str] = None
        self.is_submitting = False
        # Persisted answers mean the quiz was already submitted.
        self.completed = bool(self.answers)

        self._lock = threading.RLock()
        self._pending_auto_advance: Optional[ScheduledTask] = None
        self._auto_advance_generation = 0
        self._verification_answer: Any = None

    # Derived state

    @property
    def total_steps(self) -> int:
        return len(self.catalog)

    @property
    def is_complete(self) -> bool:
        return self.completed

    @property
    def current_question(self) -> Optional[Question]:
        if self.completed:
            return None
        return self.catalog[self.current_step]

    @property
    def current_error(self) -> Optional[ValidationError]:
        question = self.current_question
        if question is None:
            return None
        return self.errors.get(question.id)

    @property
    def progress_percent(self) -> float:
        if self.completed:
            return 100.0
        return (self.current_step + 1) / self.total_steps * 100

    @property
    def can_proceed(self) -> bool:
        question = self.current_question
        if question is None:
            return False
        if question.required and is_empty(self.answers.get(question.id)):
            return False
        return self.current_error is None

    @property
    def pending_auto_advance(self) -> Optional[ScheduledTask]:
        return self._pending_auto_advance

    @property
    def awaiting_verification(self) -> bool:
        """True while the phone step is blocked on verification."""
        question = self.current_question
        return (
            self.phone_verification is not None
            and question is not None
            and question.id == PHONE_QUESTION_ID
            and self._verification_answer is not None
            and not self.phone_verification.is_complete
        )

    # Transitions

    def set_answer(self, question_id: str, value: Any) -> None:
        """
        Records an answer for any question, not only the current one.

        The question's validation error is dropped; it is recomputed on the
        next advance. Valid single-choice answers on the current step schedule
        an automatic advance.
        """
        with self._lock:
            question = self.catalog.get(question_id)
            if question is None:
                raise KeyError(question_id)
            self.answers[question_id] = value
            self.errors.pop(question_id, None)
            self.submit_error = None
            self._cancel_auto_advance()

            if (
                question.type == QuestionType.SELECT
                and not self.completed
                and question is self.current_question
                and validate(question, value) is None
            ):
                self._schedule_auto_advance()

    def advance(self) -> bool:
        """
        Validates the current answer and moves forward.

        Returns:
            bool: True if the wizard moved to the next step or completed.
        """
        with self._lock:
            self._cancel_auto_advance()
            question = self.current_question
            if question is None:
                return False

            message = validate(question, self.answers.get(question.id))
            if message is not None:
                self.errors = {
                    question.id: ValidationError(field=question.id, message=message)
                }
                return False

            if self._verification_required(question):
                return False

            if self.current_step < self.total_steps - 1:
                self.errors = {}
                self.current_step += 1
                return True
            return self._complete()

    def retreat(self) -> bool:
        with self._lock:
            if self.completed or self.current_step == 0:
                return False
            self._cancel_auto_advance()
            self._close_verification()
            self.current_step -= 1
            self.errors = {}
            return True

    def reset(self) -> None:
        with self._lock:
            self._cancel_auto_advance()
            self._close_verification()
            self.current_step = 0
            self.answers = {}
            self.errors = {}
            self.submit_error = None
            self.completed = False
            self._verification_answer = None

    def close(self) -> None:
        """Cancels every pending timer; call when the wizard is torn down."""
        with self._lock:
            self._cancel_auto_advance()
            self._close_verification()

    # Internals

    def _schedule_auto_advance(self) -> None:
        self._auto_advance_generation += 1
        generation = self._auto_advance_generation
        step = self.current_step

        def fire() -> None:
            with self._lock:
                if (
                    generation != self._auto_advance_generation
                    or step != self.current_step
                    or self.completed
                ):
                    return
                self._pending_auto_advance = None
                self.advance()

        self._pending_auto_advance = self.scheduler.call_later(
            self.auto_advance_delay, fire
        )

    def _cancel_auto_advance(self) -> None:
        self._auto_advance_generation += 1
        if self._pending_auto_advance is not None:
            self._pending_auto_advance.cancel()
            self._pending_auto_advance = None

    def _verification_required(self, question: Question) -> bool:
        verification = self.phone_verification
        if verification is None or question.id != PHONE_QUESTION_ID:
            return False
        answer = self.answers.get(question.id)
        if verification.is_complete and self._verification_answer == answer:
            return False
        if self._verification_answer != answer:
            self._verification_answer = answer
            verification.start(str(answer))
        return True

    def _close_verification(self) -> None:
        if self.phone_verification is not None and not self.phone_verification.is_complete:
            self.phone_verification.cancel()
            self._verification_answer = None

    def _complete(self) -> bool:
        missing = validate_answers(self.catalog, self.answers)
        if missing:
            first_id = next(q.id for q in self.catalog if q.id in missing)
            self.current_step = next(
                i for i, q in enumerate(self.catalog) if q.id == first_id
            )
            self.errors = {first_id: missing[first_id]}
            return False

        self.is_submitting = True
        try:
            if self.on_complete is not None:
                self.on_complete(dict(self.answers))
        except PersistenceError:
            logger.exception("Quiz submission failed")
            self.submit_error = SUBMIT_ERROR_MESSAGE
            return False
        finally:
            self.is_submitting = False

        self.errors = {}
        self.submit_error = None
        self.completed = True
        logger.info("Quiz completed with %d answers", len(self.answers))
        return True
