"""
Signed-in session around the quiz wizard.

Decides whether the user sees the sign-in prompt, the wizard, or the status
page, and owns the wizard and phone verification for the signed-in user.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import StrEnum
from typing import Callable, Optional

import jwt

from quiz.persistence import PersistenceClient, PersistenceError
from quiz.phone import SIMULATED_DELAY_SECONDS, PhoneVerification
from quiz.remote import SubmissionApiClient, SubmissionApiError
from quiz.scheduler import Scheduler, ThreadingScheduler
from quiz.wizard import AUTO_ADVANCE_DELAY, WizardState
from shared.questions import QuestionCatalog
from shared.types import AnswerSet, IdentityClaims, ProfileStatus, UserProfile

logger = logging.getLogger(__name__)


class InvalidCredential(Exception):
    """The stored or supplied Google credential could not be decoded."""


class SessionView(StrEnum):
    SIGNED_OUT = "signed_out"
    QUIZ = "quiz"
    STATUS = "status"


def decode_credential(credential: str) -> IdentityClaims:
    """
    Reads the identity claims of a Google ID token.

    The signature is not checked: the token is only used to identify which
    stored profile to show.
    """
    try:
        claims = jwt.decode(credential, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        raise InvalidCredential(str(exc)) from exc
    if not claims.get("email") or not claims.get("sub"):
        raise InvalidCredential("Credential is missing the sub or email claim")
    return IdentityClaims(
        sub=str(claims["sub"]),
        email=claims["email"],
        name=claims.get("name", ""),
        picture=claims.get("picture", ""),
    )


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class QuizSession:
    def __init__(
        self,
        persistence: PersistenceClient,
        *,
        catalog: Optional[QuestionCatalog] = None,
        scheduler: Optional[Scheduler] = None,
        api_client: Optional[SubmissionApiClient] = None,
        auto_advance_delay: float = AUTO_ADVANCE_DELAY,
        verify_phone: bool = True,
        verification_delay: float = SIMULATED_DELAY_SECONDS,
        clock: Callable[[], str] = _utc_timestamp,
    ):
        self.persistence = persistence
        self.catalog = catalog or QuestionCatalog()
        self.scheduler = scheduler or ThreadingScheduler()
        self.api_client = api_client
        self.auto_advance_delay = auto_advance_delay
        self.verify_phone = verify_phone
        self.verification_delay = verification_delay
        self.clock = clock

        self.user: Optional[UserProfile] = None
        self.wizard: Optional[WizardState] = None
        self.phone_verification: Optional[PhoneVerification] = None

    @property
    def view(self) -> SessionView:
        if self.user is None:
            return SessionView.SIGNED_OUT
        if self.user.has_submitted:
            return SessionView.STATUS
        return SessionView.QUIZ

    def restore(self) -> bool:
        """Signs in again from the stored credential, if there is one."""
        try:
            token = self.persistence.load_token()
            if not token:
                return False
            self._open(decode_credential(token))
            return True
        except (InvalidCredential, PersistenceError) as exc:
            logger.error("Error checking user session: %s", exc)
            try:
                self.persistence.clear_token()
            except PersistenceError:
                logger.exception("Failed to clear stored credential")
            self.user = None
            return False

    def sign_in(self, credential: str) -> UserProfile:
        claims = decode_credential(credential)
        self.persistence.save_token(credential)
        return self._open(claims)

    def logout(self) -> None:
        self.persistence.clear_token()
        self._teardown()
        self.user = None

    def close(self) -> None:
        self._teardown()

    def _open(self, claims: IdentityClaims) -> UserProfile:
        self._teardown()
        existing = self.persistence.load(claims.email)
        if existing is not None:
            self.user = existing
        else:
            self.user = UserProfile(
                id=claims.sub,
                email=claims.email,
                name=claims.name,
                picture=claims.picture,
                status=ProfileStatus.PENDING,
            )

        if self.verify_phone:
            self.phone_verification = PhoneVerification(
                self.scheduler,
                delay=self.verification_delay,
                on_verified=self._phone_verified,
            )
        self.wizard = WizardState(
            self.catalog,
            on_complete=self._submit,
            scheduler=self.scheduler,
            auto_advance_delay=self.auto_advance_delay,
            phone_verification=self.phone_verification,
            initial_answers=self.user.answers,
        )
        logger.info("Signed in as %s (%s)", self.user.email, self.view)
        return self.user

    def _teardown(self) -> None:
        if self.wizard is not None:
            self.wizard.close()
            self.wizard = None
        if self.phone_verification is not None:
            self.phone_verification.cancel()
            self.phone_verification = None

    def _phone_verified(self, number: str) -> None:
        if self.user is not None:
            self.user.phone_number = number

    def _submit(self, answers: AnswerSet) -> None:
        if self.user is None:
            raise PersistenceError("No signed-in user")
        profile = UserProfile(
            id=self.user.id,
            email=self.user.email,
            name=self.user.name,
            picture=self.user.picture,
            phone_number=self.user.phone_number,
            answers=answers,
            status=ProfileStatus.PENDING,
            submitted_at=self.clock(),
        )
        if self.api_client is not None:
            token = self.persistence.load_token()
            if not token:
                raise PersistenceError("No stored credential to authorize submission")
            try:
                self.api_client.submit_quiz(profile, token)
            except SubmissionApiError as exc:
                raise PersistenceError(str(exc)) from exc
        self.persistence.save(profile)
        self.user = profile
