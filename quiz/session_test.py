import unittest
from unittest.mock import MagicMock

import jwt

from quiz.persistence import (
    TOKEN_KEY,
    InMemoryKeyValueStore,
    PersistenceClient,
)
from quiz.remote import SubmissionApiClient, SubmissionApiError
from quiz.scheduler import ManualScheduler
from quiz.session import InvalidCredential, QuizSession, SessionView, decode_credential
from quiz.status import STATUS_MESSAGES, build_status_view
from quiz.wizard import SUBMIT_ERROR_MESSAGE
from quiz.wizard_test import VALID_ANSWERS
from shared.types import ProfileStatus, UserProfile

SUBMITTED_AT = "2025-06-01T12:00:00.000Z"


def make_credential(**claims) -> str:
    payload = {
        "sub": "google-1234",
        "email": "sam@example.com",
        "name": "Sam Lee",
        "picture": "https://example.test/sam.png",
    }
    payload.update(claims)
    return jwt.encode(payload, "not-verified", algorithm="HS256")


def complete_quiz(session: QuizSession) -> None:
    wizard = session.wizard
    while not wizard.is_complete:
        question = wizard.current_question
        wizard.set_answer(question.id, VALID_ANSWERS[question.id])
        if not wizard.advance():
            raise AssertionError(wizard.errors or wizard.submit_error)


class DecodeCredentialTests(unittest.TestCase):
    def test_reads_identity_claims(self):
        claims = decode_credential(make_credential())
        self.assertEqual(claims.sub, "google-1234")
        self.assertEqual(claims.email, "sam@example.com")
        self.assertEqual(claims.name, "Sam Lee")

    def test_garbage_is_rejected(self):
        with self.assertRaises(InvalidCredential):
            decode_credential("not-a-jwt")

    def test_missing_email_is_rejected(self):
        with self.assertRaises(InvalidCredential):
            decode_credential(make_credential(email=None))


class QuizSessionTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKeyValueStore()
        self.persistence = PersistenceClient(self.store)
        self.scheduler = ManualScheduler()
        self.session = self._new_session()

    def _new_session(self, **kwargs) -> QuizSession:
        kwargs.setdefault("verify_phone", False)
        return QuizSession(
            self.persistence,
            scheduler=self.scheduler,
            clock=lambda: SUBMITTED_AT,
            **kwargs,
        )

    def test_signed_out_without_token(self):
        self.assertFalse(self.session.restore())
        self.assertEqual(self.session.view, SessionView.SIGNED_OUT)

    def test_first_sign_in_creates_pending_profile(self):
        user = self.session.sign_in(make_credential())
        self.assertEqual(user.id, "google-1234")
        self.assertEqual(user.status, ProfileStatus.PENDING)
        self.assertIsNone(user.answers)
        self.assertEqual(self.session.view, SessionView.QUIZ)
        self.assertEqual(self.store.items[TOKEN_KEY], make_credential())
        self.assertEqual(self.session.wizard.current_step, 0)

    def test_completing_quiz_saves_profile(self):
        self.session.sign_in(make_credential())
        complete_quiz(self.session)

        self.assertEqual(self.session.view, SessionView.STATUS)
        saved = self.persistence.load("sam@example.com")
        self.assertEqual(saved.answers, VALID_ANSWERS)
        self.assertEqual(saved.status, ProfileStatus.PENDING)
        self.assertEqual(saved.submitted_at, SUBMITTED_AT)
        self.assertEqual(saved, self.session.user)

    def test_restore_with_submitted_profile_shows_status(self):
        self.session.sign_in(make_credential())
        complete_quiz(self.session)
        self.session.close()

        restored = self._new_session()
        self.assertTrue(restored.restore())
        self.assertEqual(restored.view, SessionView.STATUS)
        self.assertTrue(restored.wizard.is_complete)

    def test_restore_with_malformed_token_clears_it(self):
        self.store.set_item(TOKEN_KEY, "garbage")
        self.assertFalse(self.session.restore())
        self.assertNotIn(TOKEN_KEY, self.store.items)
        self.assertEqual(self.session.view, SessionView.SIGNED_OUT)

    def test_logout_keeps_saved_profile(self):
        self.session.sign_in(make_credential())
        self.session.wizard.set_answer("gender", "Male")
        self.session.logout()

        self.assertEqual(self.session.view, SessionView.SIGNED_OUT)
        self.assertIsNone(self.session.wizard)
        self.assertNotIn(TOKEN_KEY, self.store.items)
        self.assertEqual(self.scheduler.pending, [])

    def test_relay_failure_leaves_wizard_on_last_step(self):
        api_client = MagicMock()
        api_client.submit_quiz.side_effect = SubmissionApiError("Failed to save quiz", 500)
        session = self._new_session(api_client=api_client)
        session.sign_in(make_credential())

        with self.assertRaises(AssertionError):
            complete_quiz(session)
        self.assertFalse(session.wizard.is_complete)
        self.assertEqual(session.wizard.current_question.id, "howDidYouFind")
        self.assertIsNotNone(session.wizard.submit_error)
        self.assertIsNone(self.persistence.load("sam@example.com"))

    def test_relay_sends_token(self):
        api_client = MagicMock()
        session = self._new_session(api_client=api_client)
        session.sign_in(make_credential())
        complete_quiz(session)

        profile, token = api_client.submit_quiz.call_args.args
        self.assertEqual(token, make_credential())
        self.assertEqual(profile.answers, VALID_ANSWERS)

    def test_verified_phone_is_submitted(self):
        session = self._new_session(verify_phone=True, verification_delay=1.0)
        session.sign_in(make_credential())
        wizard = session.wizard
        while wizard.current_question.id != "phone":
            wizard.set_answer(wizard.current_question.id, VALID_ANSWERS[wizard.current_question.id])
            wizard.advance()
        wizard.set_answer("phone", "555-123-4567")
        self.assertFalse(wizard.advance())

        session.phone_verification.send_code()
        self.scheduler.advance(1.0)
        session.phone_verification.verify_code("123456")
        self.scheduler.advance(1.0)
        complete_quiz(session)

        saved = self.persistence.load("sam@example.com")
        self.assertEqual(saved.phone_number, "555-123-4567")

    def test_local_save_failure_surfaces_on_wizard(self):
        store = MagicMock()
        store.get_item.return_value = None
        session = QuizSession(
            PersistenceClient(store), scheduler=self.scheduler, verify_phone=False
        )
        session.sign_in(make_credential())
        store.set_item.side_effect = OSError("disk full")

        with self.assertRaises(AssertionError):
            complete_quiz(session)
        self.assertFalse(session.wizard.is_complete)
        self.assertEqual(session.view, SessionView.QUIZ)


    def test_unexpected_backend_reply_is_retryable(self):
        http = MagicMock()
        reply = MagicMock(status_code=200, ok=True)
        reply.json.return_value = {"success": True}
        http.post.return_value = reply
        api_client = SubmissionApiClient("http://backend.test", session=http)
        session = self._new_session(api_client=api_client)
        session.sign_in(make_credential())

        with self.assertRaises(AssertionError):
            complete_quiz(session)
        self.assertEqual(session.wizard.current_question.id, "howDidYouFind")
        self.assertEqual(session.wizard.submit_error, SUBMIT_ERROR_MESSAGE)
        self.assertIsNone(self.persistence.load("sam@example.com"))

    def test_restore_survives_failing_store(self):
        store = MagicMock()
        store.get_item.side_effect = OSError("unreadable")
        store.remove_item.side_effect = OSError("unreadable")
        session = QuizSession(PersistenceClient(store), scheduler=self.scheduler)

        self.assertFalse(session.restore())
        self.assertEqual(session.view, SessionView.SIGNED_OUT)
        store.remove_item.assert_called_once_with(TOKEN_KEY)

class StatusViewTests(unittest.TestCase):
    def test_lists_answers_in_catalog_order(self):
        profile = UserProfile(
            id="1",
            email="sam@example.com",
            name="Sam Lee",
            answers={
                "availableDates": ["Weekend evenings", "Weekday lunches"],
                "gender": "Female",
                "retiredQuestion": "ignored",
            },
            status=ProfileStatus.MATCHED,
            submitted_at=SUBMITTED_AT,
        )
        view = build_status_view(profile)
        self.assertEqual(view.message, STATUS_MESSAGES[ProfileStatus.MATCHED])
        self.assertEqual(view.submitted_on, "2025-06-01")
        self.assertEqual(
            [(a.question_id, a.value) for a in view.answers],
            [("gender", "Female"), ("availableDates", "Weekend evenings, Weekday lunches")],
        )


if __name__ == "__main__":
    unittest.main()
