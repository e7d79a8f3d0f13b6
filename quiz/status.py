"""
View model for the page shown after the quiz has been submitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from shared.questions import QuestionCatalog
from shared.types import AnswerValue, ProfileStatus, UserProfile

STATUS_MESSAGES = {
    ProfileStatus.PENDING: (
        "We're reviewing your profile and finding compatible matches."
    ),
    ProfileStatus.MATCHED: (
        "Great news! We've found some potential matches for you."
    ),
    ProfileStatus.CONTACTED: (
        "We've reached out with your matches. Check your email!"
    ),
}


@dataclass
class AnsweredQuestion:
    question_id: str
    prompt: str
    value: str


@dataclass
class StatusView:
    name: str
    email: str
    picture: str
    phone_number: Optional[str]
    status: ProfileStatus
    message: str
    submitted_on: Optional[str] = None
    answers: List[AnsweredQuestion] = field(default_factory=list)


def format_answer(value: AnswerValue) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _submitted_on(submitted_at: Optional[str]) -> Optional[str]:
    if not submitted_at:
        return None
    try:
        return datetime.fromisoformat(submitted_at).date().isoformat()
    except ValueError:
        return submitted_at


def build_status_view(
    profile: UserProfile, catalog: Optional[QuestionCatalog] = None
) -> StatusView:
    """Answers are listed in catalog order; ids the catalog no longer has are skipped."""
    catalog = catalog or QuestionCatalog()
    answers = profile.answers or {}
    answered = [
        AnsweredQuestion(
            question_id=question.id,
            prompt=question.prompt,
            value=format_answer(answers[question.id]),
        )
        for question in catalog
        if question.id in answers
    ]
    return StatusView(
        name=profile.name,
        email=profile.email,
        picture=profile.picture,
        phone_number=profile.phone_number,
        status=profile.status,
        message=STATUS_MESSAGES[profile.status],
        submitted_on=_submitted_on(profile.submitted_at),
        answers=answered,
    )
